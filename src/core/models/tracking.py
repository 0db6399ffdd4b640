"""Tracking record persistence: one row per logged task entry.

Rows are namespaced by ``user_id``; every query in the record store is
filtered on it. ``created_at`` gives the snapshot order, ``updated_at``
the ordering marker used inside aggregated groups.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database import Base


class TrackingRecordRow(Base):
    """A stored daily task-tracking entry."""

    __tablename__ = "tracking_records"
    __table_args__ = (
        Index("ix_tracking_records_user_id", "user_id"),
        Index("ix_tracking_records_user_created", "user_id", "created_at"),
        CheckConstraint("total_pages >= 0", name="ck_tracking_records_total_pages"),
        CheckConstraint("errors_found >= 0", name="ck_tracking_records_errors_found"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    date: Mapped[str] = mapped_column(String(10), nullable=False)
    time_slot: Mapped[str] = mapped_column(String(5), server_default="", default="", nullable=False)
    task_batch: Mapped[str] = mapped_column(String(255), server_default="", default="", nullable=False)
    asset_name: Mapped[str] = mapped_column(String(255), server_default="", default="", nullable=False)
    task_type: Mapped[str] = mapped_column(String(32), server_default="", default="", nullable=False)
    total_pages: Mapped[int] = mapped_column(Integer, server_default="0", default=0, nullable=False)
    errors_found: Mapped[int] = mapped_column(Integer, server_default="0", default=0, nullable=False)
    notes_challenges: Mapped[str] = mapped_column(Text, server_default="", default="", nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<TrackingRecordRow(id={self.id}, user_id='{self.user_id}', date='{self.date}', batch='{self.task_batch}')>"
