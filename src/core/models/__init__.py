"""SQLAlchemy models for the Daily Task Tracker.

Re-exports all models so that ``from src.core.models import X`` works and
Alembic sees every table on ``Base.metadata``.
"""

from src.core.models.tracking import TrackingRecordRow

__all__ = ["TrackingRecordRow"]
