"""Task type catalogue: short codes stored on records and their display labels.

The built-in catalogue covers the standard document and report categories.
A deployment can replace it with a YAML file of the form::

    task_types:
      - code: LLP
        label: Life Limited Parts Status
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import yaml

from src.core.config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskType:
    """A catalogue entry."""

    code: str
    label: str


_DEFAULT_TASK_TYPES = [
    TaskType(code="LLP", label="Life Limited Parts Status"),
    TaskType(code="F12", label="Folio 12"),
    TaskType(code="ADS", label="Airworthiness Directives Status"),
    TaskType(code="SBS", label="Service Bulletin Status"),
    TaskType(code="MOD", label="Modification Status"),
    TaskType(code="CMP", label="Component History"),
    TaskType(code="LOG", label="Logbook Review"),
]


class TaskTypeCatalog:
    """Fixed lookup of task type codes."""

    def __init__(self, task_types: list[TaskType] | None = None) -> None:
        self._by_code = {t.code: t for t in (task_types or _DEFAULT_TASK_TYPES)}

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> TaskTypeCatalog:
        """Load the catalogue from a YAML file."""
        path = Path(config_path)
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        task_types = [
            TaskType(code=str(entry["code"]), label=str(entry["label"]))
            for entry in data.get("task_types", [])
        ]
        logger.info("Loaded %d task types from %s", len(task_types), path)
        return cls(task_types=task_types)

    def __iter__(self) -> Iterator[TaskType]:
        return iter(self._by_code.values())

    def __len__(self) -> int:
        return len(self._by_code)

    def __contains__(self, code: object) -> bool:
        return code in self._by_code

    def is_valid(self, code: str | None) -> bool:
        """Empty is allowed; anything else must be a known code."""
        return not code or code in self._by_code

    def label_for(self, code: str | None) -> str:
        """Return the display label, or the raw code when it is not catalogued."""
        if not code:
            return ""
        task_type = self._by_code.get(code)
        return task_type.label if task_type else code


@functools.lru_cache
def get_task_type_catalog() -> TaskTypeCatalog:
    """Return the configured catalogue, cached for the process lifetime."""
    settings = get_settings()
    if settings.task_types_path:
        return TaskTypeCatalog.from_yaml(settings.task_types_path)
    return TaskTypeCatalog()
