"""Guard for a day that was added only to hold a new trip."""

import logging

from backend.planner.core.days import DayScheduleStore
from backend.planner.errors import InvalidOperationError

logger = logging.getLogger(__name__)


class PendingDayGuard:
    """Tracks the uncommitted day created when the add-trip form opens.

    Saving the form commits the day; abandoning it rolls the day back. Trips
    created on the day while it was pending are dropped from view with it.
    """

    def __init__(self, store: DayScheduleStore) -> None:
        self._store = store
        self._pending_day: int | None = None

    @property
    def pending_day(self) -> int | None:
        return self._pending_day

    def begin_pending_day(self, day_number: int) -> None:
        if self._pending_day is not None:
            raise InvalidOperationError(f"day {self._pending_day} is already pending")
        self._pending_day = day_number

    def commit(self) -> None:
        if self._pending_day is not None:
            logger.info("Committed pending day %d", self._pending_day)
        self._pending_day = None

    def rollback(self) -> int | None:
        """Remove the pending day and return its number, or None if nothing was pending.

        Recomputes from the pending day number rather than a snapshot, so any
        days added or removed in between are discarded too.
        """
        day = self._pending_day
        if day is None:
            return None
        self._store.truncate_before(day)
        self._pending_day = None
        logger.info("Rolled back pending day %d", day)
        return day
