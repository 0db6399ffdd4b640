"""Task type catalogue endpoint for populating the entry form."""

from __future__ import annotations

from fastapi import APIRouter

from src.api.schemas.tracking import TaskTypeResponse
from src.tracker.task_types import TaskType, get_task_type_catalog

router = APIRouter(prefix="/api/v1/task-types", tags=["task-types"])


@router.get("", response_model=list[TaskTypeResponse])
async def list_task_types() -> list[TaskType]:
    """List the task type codes a record may carry."""
    return list(get_task_type_catalog())
