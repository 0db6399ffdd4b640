"""Create tracking_records table.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "tracking_records",
        sa.Column("id", sa.UUID(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("time_slot", sa.String(5), nullable=False, server_default=""),
        sa.Column("task_batch", sa.String(255), nullable=False, server_default=""),
        sa.Column("asset_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("task_type", sa.String(32), nullable=False, server_default=""),
        sa.Column("total_pages", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("errors_found", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("notes_challenges", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("total_pages >= 0", name="ck_tracking_records_total_pages"),
        sa.CheckConstraint("errors_found >= 0", name="ck_tracking_records_errors_found"),
    )

    op.create_index("ix_tracking_records_user_id", "tracking_records", ["user_id"])
    op.create_index("ix_tracking_records_user_created", "tracking_records", ["user_id", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_tracking_records_user_created", table_name="tracking_records")
    op.drop_index("ix_tracking_records_user_id", table_name="tracking_records")
    op.drop_table("tracking_records")
