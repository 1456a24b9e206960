"""Typed results for remote writes.

Writes report failure as a value so callers can show a retry prompt while the
optimistic local state stays in place.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class WriteResult(Generic[T]):
    """Outcome of a create/update call."""

    data: T | None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.data is not None


@dataclass
class DeleteResult:
    """Outcome of a delete call."""

    success: bool
    error: str | None = None


@dataclass
class SaveResult:
    """Outcome of an upsert with no returned row."""

    success: bool
    error: str | None = None
