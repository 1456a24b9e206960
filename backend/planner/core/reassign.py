"""Day reorder by swapping the trips of two days."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date

from backend.planner.core.dates import day_to_date
from backend.planner.db.repositories import TripStore
from backend.planner.errors import PartialFailureError, RemoteUnavailableError
from backend.planner.models.trip import Trip

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Assignment:
    """Move one trip to an absolute date. Applying it twice is harmless."""

    trip_id: int
    from_date: date
    to_date: date


@dataclass
class ReorderReport:
    """Per-trip outcome of a reorder. Nothing is rolled back."""

    from_day: int
    to_day: int
    moved: list[Assignment] = field(default_factory=list)
    failed: list[tuple[Assignment, str]] = field(default_factory=list)
    skipped: list[Assignment] = field(default_factory=list)

    @property
    def partial_failure(self) -> bool:
        return bool(self.moved) and bool(self.failed)

    def raise_for_failures(self) -> None:
        if self.failed:
            ids = [a.trip_id for a, _ in self.failed]
            raise PartialFailureError(
                f"reorder {self.from_day}->{self.to_day}: {len(ids)} trip update(s) failed",
                failed_ids=ids,
            )


def plan_swap(trips: list[Trip], from_date: date, to_date: date) -> list[Assignment]:
    """Assignments that trade the trips of two dates. Other trips are untouched."""
    plan: list[Assignment] = []
    for trip in trips:
        if trip.date == from_date:
            plan.append(Assignment(trip.id, from_date, to_date))
        elif trip.date == to_date:
            plan.append(Assignment(trip.id, to_date, from_date))
    return plan


class TripReassigner:
    """Swaps the trips of two days through the remote trip store.

    Each trip update is an independent remote write; a partial failure leaves
    the store half-swapped. Callers re-fetch the trip list afterwards and may
    retry ``report.failed`` with ``apply``.
    """

    def __init__(self, store: TripStore) -> None:
        self._store = store

    async def reorder_days(self, trip_start: date, from_day: int, to_day: int) -> ReorderReport:
        """Swap the trips on ``from_day`` with those on ``to_day``.

        Raises:
            RemoteUnavailableError: If the current trip list cannot be fetched
        """
        report = ReorderReport(from_day=from_day, to_day=to_day)
        if from_day == to_day:
            return report

        from_date = day_to_date(trip_start, from_day)
        to_date = day_to_date(trip_start, to_day)
        trips = await self._store.list_trips()
        plan = plan_swap(trips, from_date, to_date)
        await self._apply_into(plan, trips, report)

        logger.info(
            "Reordered day %d <-> %d: %d moved, %d failed",
            from_day,
            to_day,
            len(report.moved),
            len(report.failed),
        )
        return report

    async def apply(self, assignments: list[Assignment]) -> ReorderReport:
        """Re-run a set of assignments, e.g. the failures of an earlier reorder.

        Trips already on their target date are skipped.

        Raises:
            RemoteUnavailableError: If the current trip list cannot be fetched
        """
        report = ReorderReport(from_day=0, to_day=0)
        await self._apply_into(assignments, await self._store.list_trips(), report)
        return report

    async def _apply_into(
        self, assignments: list[Assignment], trips: list[Trip], report: ReorderReport
    ) -> None:
        current = {t.id: t.date for t in trips}
        todo: list[Assignment] = []
        for assignment in assignments:
            if current.get(assignment.trip_id) == assignment.to_date:
                report.skipped.append(assignment)
            else:
                todo.append(assignment)

        outcomes = await asyncio.gather(*(self._update(a) for a in todo))
        for assignment, error in zip(todo, outcomes, strict=True):
            if error is None:
                report.moved.append(assignment)
            else:
                report.failed.append((assignment, error))

    async def _update(self, assignment: Assignment) -> str | None:
        try:
            result = await self._store.update_trip(
                assignment.trip_id, {"date": assignment.to_date}
            )
        except RemoteUnavailableError as e:
            result_error: str | None = str(e) or "remote unavailable"
        else:
            result_error = None if result.ok else (result.error or "update returned no row")
        if result_error:
            logger.warning("Trip %d reassignment failed: %s", assignment.trip_id, result_error)
        return result_error
