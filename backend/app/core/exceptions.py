"""Error taxonomy for the wellness backend.

The analytics computations themselves never raise for well-formed input;
these conditions come from the edges: the record store, the assistant
provider and the write boundary.
"""

from typing import Optional


class WellnessError(Exception):
    """Base class for application errors that map to a degraded state."""


class StorageUnavailable(WellnessError):
    """The record store could not be reached or failed mid-operation."""

    def __init__(self, source: str, message: Optional[str] = None):
        self.source = source
        super().__init__(message or f"{source} storage is unavailable")


class GenerationFailed(WellnessError):
    """The assistant call failed, timed out, returned nothing, or was safety-blocked."""

    ERROR = "error"
    BLOCKED = "blocked"
    EMPTY = "empty"

    def __init__(self, reason: str, message: Optional[str] = None, category: Optional[str] = None):
        self.reason = reason
        self.category = category
        super().__init__(message or f"Assistant generation failed ({reason})")


class EntryValidationError(WellnessError):
    """A mood entry was rejected before reaching the store."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)
