"""Pydantic schemas for tracking records, summaries and the task type catalogue."""

from __future__ import annotations

import datetime as dt
import math
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.tracker.aggregation.records import coerce_timestamp
from src.tracker.task_types import get_task_type_catalog

TIME_SLOT_PATTERN = r"^$|^([01]\d|2[0-3]):[0-5]\d$"


def _form_count(value: Any) -> Any:
    """Blank or unreadable counts become 0; negatives pass through to be rejected."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else 0
    return 0


class RecordInput(BaseModel):
    """Create/update payload submitted by the entry form."""

    date: dt.date
    time_slot: str = Field("", pattern=TIME_SLOT_PATTERN)
    task_batch: str = Field("", max_length=255)
    asset_name: str = Field("", max_length=255)
    task_type: str = Field("", max_length=32)
    total_pages: int = Field(0, ge=0)
    errors_found: int = Field(0, ge=0)
    notes_challenges: str = ""

    @field_validator("time_slot", "task_batch", "asset_name", "task_type", "notes_challenges", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("total_pages", "errors_found", mode="before")
    @classmethod
    def coerce_counts(cls, v: Any) -> Any:
        return _form_count(v)

    @field_validator("task_type")
    @classmethod
    def known_task_type(cls, v: str) -> str:
        if not get_task_type_catalog().is_valid(v):
            raise ValueError(f"Unknown task type: {v}")
        return v

    def to_fields(self) -> dict[str, Any]:
        """Column values for the record store."""
        data = self.model_dump()
        data["date"] = self.date.isoformat()
        return data


class RecordResponse(BaseModel):
    """A stored record."""

    model_config = {"from_attributes": True}

    id: UUID
    date: str
    time_slot: str
    task_batch: str
    asset_name: str
    task_type: str
    total_pages: int
    errors_found: int
    notes_challenges: str
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None


class SummaryEntry(BaseModel):
    """A record as it appears inside an aggregated group."""

    model_config = {"from_attributes": True}

    id: str
    date: str
    time_slot: str
    task_batch: str
    asset_name: str
    task_type: str
    total_pages: int
    errors_found: int
    notes_challenges: str
    timestamp: float

    @field_validator("timestamp", mode="before")
    @classmethod
    def coerce_ts(cls, v: Any) -> float:
        return coerce_timestamp(v)


class BatchGroupResponse(BaseModel):
    model_config = {"from_attributes": True}

    batch_name: str
    total_pages: int
    errors_found: int
    entries: list[SummaryEntry]


class DailyGroupResponse(BaseModel):
    model_config = {"from_attributes": True}

    date: str
    daily_total_pages: int
    daily_errors_found: int
    entries: list[SummaryEntry]
    batches: list[BatchGroupResponse]


class SummaryResponse(BaseModel):
    """Grouped daily/batch view with overall totals."""

    model_config = {"from_attributes": True}

    days: list[DailyGroupResponse]
    total_pages: int
    errors_found: int
    record_count: int


class TaskTypeResponse(BaseModel):
    model_config = {"from_attributes": True}

    code: str
    label: str
