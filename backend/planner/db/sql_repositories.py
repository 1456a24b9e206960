"""SQL implementations of remote store interfaces."""

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.planner.db.models import ChecklistStateRow, SiteSettingsRow, TripRow, WishlistItemRow
from backend.planner.errors import RemoteUnavailableError
from backend.planner.models.checklist import ChecklistState
from backend.planner.models.common import SiteSettings
from backend.planner.models.results import DeleteResult, SaveResult, WriteResult
from backend.planner.models.trip import Trip, TripFields
from backend.planner.models.wishlist import WishlistFields, WishlistItem

logger = logging.getLogger(__name__)

SETTINGS_ROW_ID = 1


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _to_trip(row: TripRow) -> Trip:
    return Trip.model_validate(row, from_attributes=True)


def _to_wishlist_item(row: WishlistItemRow) -> WishlistItem:
    return WishlistItem.model_validate(row, from_attributes=True)


class SqlTripStore:
    """SQL implementation of TripStore."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_trips(self) -> list[Trip]:
        """List all trips, newest date first."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(TripRow).order_by(TripRow.date.desc(), TripRow.id)
                )
                return [_to_trip(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise RemoteUnavailableError(f"listing trips failed: {type(e).__name__}") from e

    async def create_trip(self, fields: TripFields) -> WriteResult[Trip]:
        """Insert a trip."""
        try:
            async with self._session_factory() as session:
                now = _now()
                row = TripRow(**fields.model_dump(), created_at=now, updated_at=now)
                session.add(row)
                await session.commit()
                return WriteResult(data=_to_trip(row))
        except SQLAlchemyError as e:
            logger.error("Error creating trip: %s", e)
            return WriteResult(data=None, error=str(e))

    async def update_trip(self, trip_id: int, fields: dict[str, Any]) -> WriteResult[Trip]:
        """Update some fields of a trip."""
        unknown = set(fields) - set(TripFields.model_fields)
        if unknown:
            return WriteResult(data=None, error=f"unknown trip fields: {sorted(unknown)}")

        try:
            async with self._session_factory() as session:
                row = await session.get(TripRow, trip_id)
                if row is None:
                    return WriteResult(data=None, error=f"trip {trip_id} not found")

                validated = Trip.model_validate({**_to_trip(row).model_dump(), **fields})
                for name in fields:
                    setattr(row, name, getattr(validated, name))
                row.updated_at = _now()

                await session.commit()
                return WriteResult(data=_to_trip(row))
        except SQLAlchemyError as e:
            logger.error("Error updating trip %d: %s", trip_id, e)
            return WriteResult(data=None, error=str(e))

    async def delete_trip(self, trip_id: int) -> DeleteResult:
        """Delete a trip."""
        try:
            async with self._session_factory() as session:
                row = await session.get(TripRow, trip_id)
                if row is not None:
                    await session.delete(row)
                    await session.commit()
                return DeleteResult(success=True)
        except SQLAlchemyError as e:
            logger.error("Error deleting trip %d: %s", trip_id, e)
            return DeleteResult(success=False, error=str(e))


class SqlSettingsStore:
    """SQL implementation of SettingsStore."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @staticmethod
    def _to_settings(row: SiteSettingsRow) -> SiteSettings:
        data: dict[str, Any] = {"title": row.title, "total_days": row.total_days}
        optional = {
            "home_location": row.home_location,
            "trip_start_date": row.trip_start_date,
            "day_schedules": row.day_schedules,
            "travel_essentials": row.travel_essentials,
            "travel_preparations": row.travel_preparations,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return SiteSettings.model_validate(data)

    async def get_settings(self) -> SiteSettings | None:
        """Get settings, or None if missing or unreadable."""
        try:
            async with self._session_factory() as session:
                row = await session.get(SiteSettingsRow, SETTINGS_ROW_ID)
                return self._to_settings(row) if row is not None else None
        except SQLAlchemyError as e:
            logger.error("Error fetching site settings: %s", e)
            return None

    async def save_settings(self, partial: dict[str, Any]) -> SaveResult:
        """Merge ``partial`` over the stored row, creating it if needed."""
        try:
            async with self._session_factory() as session:
                row = await session.get(SiteSettingsRow, SETTINGS_ROW_ID)
                base = self._to_settings(row) if row is not None else SiteSettings()
                merged = base.merged(partial)

                if row is None:
                    row = SiteSettingsRow(id=SETTINGS_ROW_ID)
                    session.add(row)

                row.title = merged.title
                row.home_location = (
                    merged.home_location.model_dump(mode="json") if merged.home_location else None
                )
                row.trip_start_date = merged.trip_start_date
                row.total_days = merged.total_days
                row.day_schedules = [d.model_dump(mode="json") for d in merged.day_schedules]
                row.travel_essentials = [i.model_dump(mode="json") for i in merged.travel_essentials]
                row.travel_preparations = [
                    i.model_dump(mode="json") for i in merged.travel_preparations
                ]
                row.updated_at = _now()

                await session.commit()
                return SaveResult(success=True)
        except SQLAlchemyError as e:
            logger.error("Error saving site settings: %s", e)
            return SaveResult(success=False, error=str(e))

    async def get_checklist_states(self) -> list[ChecklistState]:
        """List every checklist item state."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(ChecklistStateRow))
                return [
                    ChecklistState.model_validate(row, from_attributes=True)
                    for row in result.scalars().all()
                ]
        except SQLAlchemyError as e:
            raise RemoteUnavailableError(
                f"listing checklist states failed: {type(e).__name__}"
            ) from e

    async def save_checklist_state(self, state: ChecklistState) -> SaveResult:
        """Upsert one item's checked-by list."""
        try:
            async with self._session_factory() as session:
                await session.merge(
                    ChecklistStateRow(
                        id=state.id,
                        checked_by=[u.model_dump(mode="json") for u in state.checked_by],
                        updated_at=_now(),
                    )
                )
                await session.commit()
                return SaveResult(success=True)
        except SQLAlchemyError as e:
            logger.error("Error saving checklist state %s: %s", state.id, e)
            return SaveResult(success=False, error=str(e))


class SqlWishlistStore:
    """SQL implementation of WishlistStore."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_items(self) -> list[WishlistItem]:
        """List items, favorites first then newest."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(WishlistItemRow).order_by(
                        WishlistItemRow.is_favorite.desc(), WishlistItemRow.created_at.desc()
                    )
                )
                return [_to_wishlist_item(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise RemoteUnavailableError(f"listing wishlist failed: {type(e).__name__}") from e

    async def create_item(self, fields: WishlistFields) -> WriteResult[WishlistItem]:
        try:
            async with self._session_factory() as session:
                row = WishlistItemRow(**fields.model_dump(mode="json"), created_at=_now())
                session.add(row)
                await session.commit()
                return WriteResult(data=_to_wishlist_item(row))
        except SQLAlchemyError as e:
            logger.error("Error creating wishlist item: %s", e)
            return WriteResult(data=None, error=str(e))

    async def update_item(self, item_id: int, fields: dict[str, Any]) -> WriteResult[WishlistItem]:
        unknown = set(fields) - set(WishlistFields.model_fields)
        if unknown:
            return WriteResult(data=None, error=f"unknown wishlist fields: {sorted(unknown)}")

        try:
            async with self._session_factory() as session:
                row = await session.get(WishlistItemRow, item_id)
                if row is None:
                    return WriteResult(data=None, error=f"wishlist item {item_id} not found")
                validated = WishlistItem.model_validate(
                    {**_to_wishlist_item(row).model_dump(), **fields}
                ).model_dump(mode="json")
                for name in fields:
                    setattr(row, name, validated[name])
                await session.commit()
                return WriteResult(data=_to_wishlist_item(row))
        except SQLAlchemyError as e:
            logger.error("Error updating wishlist item %d: %s", item_id, e)
            return WriteResult(data=None, error=str(e))

    async def delete_item(self, item_id: int) -> DeleteResult:
        try:
            async with self._session_factory() as session:
                row = await session.get(WishlistItemRow, item_id)
                if row is not None:
                    await session.delete(row)
                    await session.commit()
                return DeleteResult(success=True)
        except SQLAlchemyError as e:
            logger.error("Error deleting wishlist item %d: %s", item_id, e)
            return DeleteResult(success=False, error=str(e))
