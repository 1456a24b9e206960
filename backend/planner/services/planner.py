"""Trip planner service - day scheduling, trips, checklist and wishlist flows.

Every flow mutates the in-memory model first and then persists through a
cache-synced resource, so callers see their change before the remote write
completes. Validation errors are raised before any remote call.
"""

import asyncio
import logging
from datetime import date
from typing import Any

from backend.planner.config import Settings
from backend.planner.core.checklist import ESSENTIAL, PREPARATION, ChecklistMerger, notice_item_key
from backend.planner.core.dates import current_day, date_to_day, trips_for_day
from backend.planner.core.days import DayScheduleStore
from backend.planner.core.pending import PendingDayGuard
from backend.planner.core.reassign import ReorderReport, TripReassigner
from backend.planner.db.repositories import SettingsStore, TripStore, WishlistStore
from backend.planner.errors import InvalidOperationError, RemoteUnavailableError
from backend.planner.models.checklist import CheckedBy, ChecklistState
from backend.planner.models.common import (
    DaySchedule,
    SiteSettings,
    TravelNoticeItem,
    default_day_schedules,
)
from backend.planner.models.results import SaveResult, WriteResult
from backend.planner.models.trip import Trip, TripFields
from backend.planner.models.wishlist import AddedToTrip, WishlistFields, WishlistItem, sort_wishlist
from backend.planner.sync.cache import WISHLIST_CACHE_KEY, LocalCache
from backend.planner.sync.resource import CacheSyncedResource, SyncLogger, SyncMetrics

logger = logging.getLogger(__name__)


def _day_fields(settings: SiteSettings) -> dict[str, Any]:
    data = settings.model_dump(mode="json")
    return {k: data[k] for k in ("trip_start_date", "total_days", "day_schedules")}


def _replace_state(states: list[ChecklistState], state: ChecklistState) -> list[ChecklistState]:
    return [s for s in states if s.id != state.id] + [state]


class TripPlanner:
    """Shared itinerary planner for one session."""

    def __init__(
        self,
        *,
        trip_store: TripStore,
        settings_store: SettingsStore,
        wishlist_store: WishlistStore,
        cache: LocalCache,
        config: Settings,
        admin: bool = False,
        metrics: SyncMetrics | None = None,
        sync_logger: SyncLogger | None = None,
    ) -> None:
        self._trip_store = trip_store
        self._settings_store = settings_store
        self._wishlist_store = wishlist_store
        self.config = config
        self.max_days = config.max_days_admin if admin else config.max_days_user

        common: dict[str, Any] = {"cache": cache, "metrics": metrics, "sync_logger": sync_logger}
        self.settings: CacheSyncedResource[SiteSettings] = CacheSyncedResource(
            "site_settings",
            fetch=settings_store.get_settings,
            value_type=SiteSettings,
            default=self._default_settings,
            max_age_seconds=config.settings_cache_max_age_seconds,
            **common,
        )
        self.trips: CacheSyncedResource[list[Trip]] = CacheSyncedResource(
            "trips",
            fetch=trip_store.list_trips,
            value_type=list[Trip],
            default=list,
            max_age_seconds=config.trips_cache_max_age_seconds,
            **common,
        )
        self.checklist: CacheSyncedResource[list[ChecklistState]] = CacheSyncedResource(
            "checklist_states",
            fetch=self._fetch_checklist_states,
            value_type=list[ChecklistState],
            default=list,
            max_age_seconds=config.checklist_cache_max_age_seconds,
            **common,
        )
        self.wishlist: CacheSyncedResource[list[WishlistItem]] = CacheSyncedResource(
            "wishlist",
            cache_key=WISHLIST_CACHE_KEY,
            fetch=wishlist_store.list_items,
            value_type=list[WishlistItem],
            default=list,
            max_age_seconds=config.wishlist_cache_max_age_seconds,
            **common,
        )

        self.days = DayScheduleStore.from_settings(self._default_settings(), max_days=self.max_days)
        self.pending = PendingDayGuard(self.days)
        self.reassigner = TripReassigner(trip_store)
        self.merger = ChecklistMerger()

        self.settings.subscribe(self.days.load)
        self.checklist.subscribe(self.merger.load)

    def _default_settings(self) -> SiteSettings:
        total = self.config.default_total_days
        return SiteSettings(total_days=total, day_schedules=default_day_schedules(total))

    # -------------------------
    # Lifecycle
    # -------------------------
    async def init(self) -> None:
        """Hydrate every resource (local cache first) and start trip polling."""
        settings, _, states, _ = await asyncio.gather(
            self.settings.init(),
            self.trips.init(),
            self.checklist.init(),
            self.wishlist.init(),
        )
        self.days.load(settings)
        self.merger.load(states)
        self.trips.start(self.config.trips_refresh_interval_seconds)

    async def dispose(self) -> None:
        await asyncio.gather(
            self.settings.dispose(),
            self.trips.dispose(),
            self.checklist.dispose(),
            self.wishlist.dispose(),
        )

    async def remote_status(self) -> str:
        """Probe the remote trip store."""
        try:
            await self._trip_store.list_trips()
        except RemoteUnavailableError as e:
            return f"error: {e}"
        return "ok"

    # -------------------------
    # Days
    # -------------------------
    def today_day(self, today: date) -> int | None:
        """Day to preselect: today's day number if the trip is under way."""
        return current_day(self.days.trip_start_date, today, self.days.total_days)

    async def add_day(self, *, pending: bool = False) -> tuple[int, SaveResult]:
        """Append a day. With ``pending`` the day is held until a trip is saved on it.

        Raises:
            LimitExceededError: If the trip is already at the day limit
            InvalidOperationError: If another day is already pending
        """
        if pending and self.pending.pending_day is not None:
            raise InvalidOperationError(f"day {self.pending.pending_day} is already pending")
        day = self.days.add_day()
        if pending:
            self.pending.begin_pending_day(day)
        return day, await self._persist_days()

    async def remove_last_day(self) -> tuple[int, SaveResult]:
        """Drop the last day; its trips stay stored but hidden.

        Raises:
            InvalidOperationError: If only one day is left
        """
        day = self.days.remove_last_day()
        return day, await self._persist_days()

    async def rename_day_theme(self, day_number: int, theme: str) -> tuple[DaySchedule, SaveResult]:
        schedule = self.days.rename_day_theme(day_number, theme)
        return schedule, await self._persist_days()

    async def set_day_image(self, day_number: int, url: str | None) -> tuple[DaySchedule, SaveResult]:
        schedule = self.days.set_day_image(day_number, url)
        return schedule, await self._persist_days()

    async def set_trip_start_date(self, new_start: date) -> SaveResult:
        self.days.set_trip_start_date(new_start)
        return await self._persist_days()

    async def set_day_date(self, day_number: int, new_date: date) -> tuple[date, SaveResult]:
        start = self.days.set_day_date(day_number, new_date)
        return start, await self._persist_days()

    async def reorder_days(self, from_day: int, to_day: int) -> ReorderReport:
        """Swap the trips of two days, then re-fetch the real trip list.

        Raises:
            NotFoundError: If either day does not exist
            RemoteUnavailableError: If the trip list cannot be fetched
        """
        self.days.schedule(from_day)
        self.days.schedule(to_day)
        report = await self.reassigner.reorder_days(self.days.trip_start_date, from_day, to_day)
        if from_day != to_day:
            await self.trips.refresh()
        return report

    async def _persist_days(self) -> SaveResult:
        return await self.settings.mutate(
            self.days.apply_to,
            lambda s: self._settings_store.save_settings(_day_fields(s)),
        )

    # -------------------------
    # Trips
    # -------------------------
    def trips_on_day(self, day_number: int) -> list[Trip]:
        """Trips of one day from the local copy, ordered by start time."""
        self.days.schedule(day_number)
        trips = trips_for_day(self.trips.peek_or_default(), self.days.trip_start_date, day_number)
        return sorted(trips, key=lambda t: (t.time_start or "", t.id))

    def visible_trips(self) -> list[Trip]:
        """Trips whose date falls on an existing day."""
        start, total = self.days.trip_start_date, self.days.total_days
        return [t for t in self.trips.peek_or_default() if 1 <= date_to_day(start, t.date) <= total]

    async def create_trip(self, fields: TripFields) -> WriteResult[Trip]:
        """Create a trip; success commits any pending day."""
        result = await self._trip_store.create_trip(fields)
        if result.ok:
            self.pending.commit()
            await self.trips.refresh()
        return result

    async def update_trip(self, trip_id: int, fields: dict[str, Any]) -> SaveResult:
        """Update a trip optimistically; success commits any pending day."""

        def apply(trips: list[Trip]) -> list[Trip]:
            return [
                t.model_copy(update=TripFields.model_validate({**t.model_dump(), **fields}).model_dump())
                if t.id == trip_id
                else t
                for t in trips
            ]

        result = await self.trips.mutate(
            apply, lambda _: self._trip_store.update_trip(trip_id, fields)
        )
        if result.success:
            self.pending.commit()
        return result

    async def delete_trip(self, trip_id: int) -> SaveResult:
        return await self.trips.mutate(
            lambda trips: [t for t in trips if t.id != trip_id],
            lambda _: self._trip_store.delete_trip(trip_id),
        )

    async def abandon_trip_form(self) -> tuple[int | None, SaveResult | None]:
        """Roll back the pending day, if any, when the form is closed unsaved."""
        day = self.pending.rollback()
        if day is None:
            return None, None
        return day, await self._persist_days()

    # -------------------------
    # Checklist
    # -------------------------
    def notice_items(self) -> list[tuple[str, TravelNoticeItem]]:
        """(checklist key, item) for every travel notice item."""
        settings = self.settings.peek_or_default()
        return [(notice_item_key(ESSENTIAL, i), i) for i in settings.travel_essentials] + [
            (notice_item_key(PREPARATION, i), i) for i in settings.travel_preparations
        ]

    def toggle_check(self, item_key: str, user: CheckedBy) -> asyncio.Task[SaveResult]:
        """Toggle ``user`` on an item. The remote write runs in the background."""
        self.merger.toggle(item_key, user)
        state = self.merger.state(item_key)
        return self.checklist.mutate_nowait(
            lambda states: _replace_state(states, state),
            lambda _: self._settings_store.save_checklist_state(state),
        )

    async def _fetch_checklist_states(self) -> list[ChecklistState]:
        # An empty remote table with local check marks means the remote store
        # was reset or never populated: push the local marks up.
        remote = await self._settings_store.get_checklist_states()
        local = [s for s in self.checklist.peek() or [] if s.checked_by]
        if remote or not local:
            return remote

        logger.info("Migrating %d local checklist states to the remote store", len(local))
        for state in local:
            result = await self._settings_store.save_checklist_state(state)
            if not result.success:
                logger.warning("Checklist migration of %s failed: %s", state.id, result.error)
        return local

    # -------------------------
    # Wishlist
    # -------------------------
    async def add_wishlist_item(self, fields: WishlistFields) -> WriteResult[WishlistItem]:
        result = await self._wishlist_store.create_item(fields)
        if result.ok:
            await self.wishlist.refresh()
        return result

    async def toggle_favorite(self, item_id: int) -> SaveResult:
        current = next((i for i in self.wishlist.peek_or_default() if i.id == item_id), None)
        if current is None:
            return SaveResult(success=False, error=f"wishlist item {item_id} not found")
        favorite = not current.is_favorite
        return await self._update_wishlist_item(item_id, {"is_favorite": favorite})

    async def add_to_trip(self, item_id: int, day_number: int, time: str = "") -> SaveResult:
        """Mark a wishlist item as scheduled on a day.

        Raises:
            NotFoundError: If the day does not exist
        """
        self.days.schedule(day_number)
        slot = AddedToTrip(day=day_number, time=time)
        return await self._update_wishlist_item(item_id, {"added_to_trip": slot.model_dump()})

    async def delete_wishlist_item(self, item_id: int) -> SaveResult:
        return await self.wishlist.mutate(
            lambda items: [i for i in items if i.id != item_id],
            lambda _: self._wishlist_store.delete_item(item_id),
        )

    async def _update_wishlist_item(self, item_id: int, fields: dict[str, Any]) -> SaveResult:
        def apply(items: list[WishlistItem]) -> list[WishlistItem]:
            return sort_wishlist(
                [
                    WishlistItem.model_validate({**i.model_dump(), **fields}) if i.id == item_id else i
                    for i in items
                ]
            )

        return await self.wishlist.mutate(
            apply, lambda _: self._wishlist_store.update_item(item_id, fields)
        )

