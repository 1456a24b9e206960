"""In-memory implementations of remote store interfaces."""

from datetime import datetime, timezone
from typing import Any

from backend.planner.models.checklist import ChecklistState
from backend.planner.models.common import SiteSettings
from backend.planner.models.results import DeleteResult, SaveResult, WriteResult
from backend.planner.models.trip import Trip, TripFields
from backend.planner.models.wishlist import WishlistFields, WishlistItem, sort_wishlist


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryTripStore:
    """In-memory implementation of TripStore."""

    def __init__(self, trips: list[Trip] | None = None) -> None:
        self._trips: dict[int, Trip] = {t.id: t for t in trips or []}
        self._next_id = max(self._trips, default=0) + 1

    async def list_trips(self) -> list[Trip]:
        return sorted(self._trips.values(), key=lambda t: t.date, reverse=True)

    async def create_trip(self, fields: TripFields) -> WriteResult[Trip]:
        now = _now()
        trip = Trip(id=self._next_id, created_at=now, updated_at=now, **fields.model_dump())
        self._trips[trip.id] = trip
        self._next_id += 1
        return WriteResult(data=trip)

    async def update_trip(self, trip_id: int, fields: dict[str, Any]) -> WriteResult[Trip]:
        current = self._trips.get(trip_id)
        if current is None:
            return WriteResult(data=None, error=f"trip {trip_id} not found")

        unknown = set(fields) - set(TripFields.model_fields)
        if unknown:
            return WriteResult(data=None, error=f"unknown trip fields: {sorted(unknown)}")

        data = current.model_dump()
        data.update(fields)
        data["updated_at"] = _now()
        trip = Trip.model_validate(data)
        self._trips[trip_id] = trip
        return WriteResult(data=trip)

    async def delete_trip(self, trip_id: int) -> DeleteResult:
        self._trips.pop(trip_id, None)
        return DeleteResult(success=True)


class InMemorySettingsStore:
    """In-memory implementation of SettingsStore."""

    def __init__(
        self,
        settings: SiteSettings | None = None,
        checklist_states: list[ChecklistState] | None = None,
    ) -> None:
        self._settings = settings
        self._states: dict[str, ChecklistState] = {s.id: s for s in checklist_states or []}

    async def get_settings(self) -> SiteSettings | None:
        return self._settings

    async def save_settings(self, partial: dict[str, Any]) -> SaveResult:
        base = self._settings or SiteSettings()
        self._settings = base.merged(partial)
        return SaveResult(success=True)

    async def get_checklist_states(self) -> list[ChecklistState]:
        return list(self._states.values())

    async def save_checklist_state(self, state: ChecklistState) -> SaveResult:
        self._states[state.id] = state.model_copy(update={"updated_at": _now()})
        return SaveResult(success=True)


class InMemoryWishlistStore:
    """In-memory implementation of WishlistStore."""

    def __init__(self, items: list[WishlistItem] | None = None) -> None:
        self._items: dict[int, WishlistItem] = {i.id: i for i in items or []}
        self._next_id = max(self._items, default=0) + 1

    async def list_items(self) -> list[WishlistItem]:
        return sort_wishlist(list(self._items.values()))

    async def create_item(self, fields: WishlistFields) -> WriteResult[WishlistItem]:
        item = WishlistItem(id=self._next_id, created_at=_now(), **fields.model_dump())
        self._items[item.id] = item
        self._next_id += 1
        return WriteResult(data=item)

    async def update_item(self, item_id: int, fields: dict[str, Any]) -> WriteResult[WishlistItem]:
        current = self._items.get(item_id)
        if current is None:
            return WriteResult(data=None, error=f"wishlist item {item_id} not found")
        data = current.model_dump()
        data.update(fields)
        item = WishlistItem.model_validate(data)
        self._items[item_id] = item
        return WriteResult(data=item)

    async def delete_item(self, item_id: int) -> DeleteResult:
        self._items.pop(item_id, None)
        return DeleteResult(success=True)
