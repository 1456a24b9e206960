"""Day schedule store - trip length, per-day themes and the start date anchor."""

import logging
from datetime import date

from backend.planner.core.dates import day_to_date, start_for_day
from backend.planner.errors import InvalidOperationError, LimitExceededError, NotFoundError
from backend.planner.models.common import DaySchedule, SiteSettings

logger = logging.getLogger(__name__)


class DayScheduleStore:
    """In-memory day schedule with the one-schedule-per-day invariant.

    For ``total_days == N`` there is exactly one DaySchedule for each day in
    ``[1, N]``. Days are only ever added or removed at the tail, so trips never
    need renumbering; a trip on a removed day stays in the trip store and shows
    up again when the day is re-added.
    """

    def __init__(
        self,
        trip_start_date: date,
        total_days: int,
        day_schedules: list[DaySchedule] | None = None,
        *,
        max_days: int,
    ) -> None:
        self.max_days = max_days
        self._load(trip_start_date, total_days, day_schedules or [])

    @classmethod
    def from_settings(cls, settings: SiteSettings, *, max_days: int) -> "DayScheduleStore":
        return cls(
            settings.trip_start_date,
            settings.total_days,
            settings.day_schedules,
            max_days=max_days,
        )

    def load(self, settings: SiteSettings) -> None:
        """Replace the state in place with a fresh settings snapshot."""
        self._load(settings.trip_start_date, settings.total_days, settings.day_schedules)

    def apply_to(self, settings: SiteSettings) -> SiteSettings:
        """Copy of ``settings`` carrying this store's day fields."""
        return settings.model_copy(
            update={
                "trip_start_date": self.trip_start_date,
                "total_days": self._total_days,
                "day_schedules": self.day_schedules,
            }
        )

    @property
    def total_days(self) -> int:
        return self._total_days

    @property
    def day_schedules(self) -> list[DaySchedule]:
        return [self._schedules[n] for n in sorted(self._schedules)]

    def schedule(self, day_number: int) -> DaySchedule:
        self._check_exists(day_number)
        return self._schedules[day_number]

    def dates(self) -> list[tuple[int, date]]:
        """(day number, calendar date) for every day of the trip."""
        return [(n, day_to_date(self.trip_start_date, n)) for n in range(1, self._total_days + 1)]

    def add_day(self, max_days: int | None = None) -> int:
        """Append a day with the default theme and return its number.

        Args:
            max_days: Limit for this call; defaults to the store's ``max_days``

        Raises:
            LimitExceededError: If the trip is already at the limit
        """
        limit = max_days if max_days is not None else self.max_days
        if self._total_days >= limit:
            raise LimitExceededError(f"at most {limit} days allowed")
        self._total_days += 1
        self._schedules[self._total_days] = DaySchedule(
            day_number=self._total_days, theme=f"Day {self._total_days}"
        )
        logger.info("Added day %d", self._total_days)
        return self._total_days

    def remove_last_day(self) -> int:
        """Drop the last day and return its number. Trips are not touched.

        Raises:
            InvalidOperationError: If only one day is left
        """
        if self._total_days <= 1:
            raise InvalidOperationError("cannot remove the only remaining day")
        removed = self._total_days
        self._schedules.pop(removed, None)
        self._total_days -= 1
        logger.info("Removed day %d", removed)
        return removed

    def truncate_before(self, day_number: int) -> None:
        """Make ``day_number - 1`` the last day, whatever the current length.

        Drops every schedule at or after ``day_number``; if days were removed
        in the meantime the gap is refilled with default themes.
        """
        if day_number < 2:
            raise InvalidOperationError("cannot truncate below one day")
        for n in [n for n in self._schedules if n >= day_number]:
            del self._schedules[n]
        self._total_days = day_number - 1
        self._fill_missing()

    def rename_day_theme(self, day_number: int, theme: str) -> DaySchedule:
        self._check_exists(day_number)
        current = self._schedules[day_number]
        self._schedules[day_number] = current.model_copy(update={"theme": theme})
        return self._schedules[day_number]

    def set_day_image(self, day_number: int, url: str | None) -> DaySchedule:
        self._check_exists(day_number)
        current = self._schedules[day_number]
        self._schedules[day_number] = current.model_copy(update={"image_url": url})
        return self._schedules[day_number]

    def set_trip_start_date(self, new_start: date) -> None:
        """Re-anchor the calendar. Trip rows are left alone, so every trip's
        day membership shifts implicitly."""
        self.trip_start_date = new_start

    def set_day_date(self, day_number: int, new_date: date) -> date:
        """Move the calendar so ``day_number`` falls on ``new_date``."""
        self._check_exists(day_number)
        self.set_trip_start_date(start_for_day(day_number, new_date))
        return self.trip_start_date

    def _load(self, trip_start_date: date, total_days: int, day_schedules: list[DaySchedule]) -> None:
        if total_days < 1:
            raise InvalidOperationError("a trip has at least one day")
        self.trip_start_date = trip_start_date
        self._total_days = total_days
        self._schedules: dict[int, DaySchedule] = {}
        for schedule in day_schedules:
            if schedule.day_number <= total_days:
                self._schedules[schedule.day_number] = schedule
        self._fill_missing()

    def _check_exists(self, day_number: int) -> None:
        if day_number < 1 or day_number > self._total_days:
            raise NotFoundError(f"day {day_number} does not exist")

    def _fill_missing(self) -> None:
        for n in range(1, self._total_days + 1):
            if n not in self._schedules:
                self._schedules[n] = DaySchedule(day_number=n, theme=f"Day {n}")
