"""Errors raised by the task tracking domain."""

from __future__ import annotations


class RecordValidationError(ValueError):
    """Raised when aggregator input is not a collection of well-formed records."""


class RecordNotFoundError(LookupError):
    """Raised when a record id does not exist in the caller's namespace."""

    def __init__(self, record_id: str) -> None:
        super().__init__(f"Tracking record {record_id} not found")
        self.record_id = record_id
