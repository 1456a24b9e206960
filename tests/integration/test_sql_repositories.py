"""Integration tests for SQL remote stores on in-memory sqlite."""

from datetime import date

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.planner.db.sql_repositories import SqlSettingsStore, SqlTripStore, SqlWishlistStore
from backend.planner.models.checklist import CheckedBy, ChecklistState
from backend.planner.models.trip import TripFields
from backend.planner.models.wishlist import WishlistFields

SessionFactory = async_sessionmaker[AsyncSession]


class TestSqlTripStore:
    """Test trip persistence."""

    @pytest.mark.asyncio
    async def test_create_list_update_delete(self, sql_session_factory: SessionFactory) -> None:
        store = SqlTripStore(sql_session_factory)

        created = await store.create_trip(
            TripFields(title="Fushimi Inari", date=date(2024, 4, 2), lat=34.967, lng=135.772)
        )
        assert created.ok and created.data is not None
        trip_id = created.data.id

        updated = await store.update_trip(trip_id, {"date": "2024-04-03", "title": "Inari"})
        assert updated.ok and updated.data is not None
        assert updated.data.date == date(2024, 4, 3)

        [listed] = await store.list_trips()
        assert listed.title == "Inari"
        assert listed.lat == pytest.approx(34.967)

        assert (await store.delete_trip(trip_id)).success
        assert await store.list_trips() == []

    @pytest.mark.asyncio
    async def test_list_newest_date_first(self, sql_session_factory: SessionFactory) -> None:
        store = SqlTripStore(sql_session_factory)
        await store.create_trip(TripFields(title="early", date=date(2024, 4, 1)))
        await store.create_trip(TripFields(title="late", date=date(2024, 4, 3)))

        assert [t.title for t in await store.list_trips()] == ["late", "early"]

    @pytest.mark.asyncio
    async def test_update_missing_trip(self, sql_session_factory: SessionFactory) -> None:
        result = await SqlTripStore(sql_session_factory).update_trip(99, {"title": "x"})
        assert not result.ok
        assert "not found" in (result.error or "")

    @pytest.mark.asyncio
    async def test_update_unknown_field(self, sql_session_factory: SessionFactory) -> None:
        store = SqlTripStore(sql_session_factory)
        created = await store.create_trip(TripFields(title="t", date=date(2024, 4, 1)))
        assert created.data is not None

        result = await store.update_trip(created.data.id, {"owner": "alice"})

        assert not result.ok
        assert "unknown" in (result.error or "")

    @pytest.mark.asyncio
    async def test_delete_missing_trip_succeeds(self, sql_session_factory: SessionFactory) -> None:
        assert (await SqlTripStore(sql_session_factory).delete_trip(99)).success


class TestSqlSettingsStore:
    """Test the single settings row and checklist states."""

    @pytest.mark.asyncio
    async def test_missing_settings_row(self, sql_session_factory: SessionFactory) -> None:
        assert await SqlSettingsStore(sql_session_factory).get_settings() is None

    @pytest.mark.asyncio
    async def test_partial_saves_merge(self, sql_session_factory: SessionFactory) -> None:
        store = SqlSettingsStore(sql_session_factory)

        assert (await store.save_settings({"title": "Kansai", "trip_start_date": "2024-04-01"})).success
        assert (await store.save_settings({"total_days": 4})).success

        settings = await store.get_settings()
        assert settings is not None
        assert settings.title == "Kansai"
        assert settings.trip_start_date == date(2024, 4, 1)
        assert settings.total_days == 4
        assert len(settings.travel_essentials) == 6

    @pytest.mark.asyncio
    async def test_checklist_state_upsert(self, sql_session_factory: SessionFactory) -> None:
        store = SqlSettingsStore(sql_session_factory)
        alice = CheckedBy(username="alice", display_name="Alice")
        bob = CheckedBy(username="bob", display_name="Bob")

        await store.save_checklist_state(ChecklistState(id="prep_🏨_Hotel", checked_by=[alice]))
        await store.save_checklist_state(ChecklistState(id="prep_🏨_Hotel", checked_by=[alice, bob]))

        [state] = await store.get_checklist_states()
        assert state.id == "prep_🏨_Hotel"
        assert [u.username for u in state.checked_by] == ["alice", "bob"]


class TestSqlWishlistStore:
    """Test wishlist persistence."""

    @pytest.mark.asyncio
    async def test_create_update_delete(self, sql_session_factory: SessionFactory) -> None:
        store = SqlWishlistStore(sql_session_factory)
        first = await store.create_item(WishlistFields(category="food", name="Okonomiyaki"))
        second = await store.create_item(WishlistFields(category="shop", name="Don Quijote"))
        assert first.data is not None and second.data is not None

        updated = await store.update_item(
            first.data.id, {"is_favorite": True, "added_to_trip": {"day": 2, "time": "18:00"}}
        )
        assert updated.ok and updated.data is not None
        assert updated.data.added_to_trip is not None
        assert updated.data.added_to_trip.day == 2

        assert [i.name for i in await store.list_items()] == ["Okonomiyaki", "Don Quijote"]

        assert (await store.delete_item(second.data.id)).success
        assert [i.id for i in await store.list_items()] == [first.data.id]

    @pytest.mark.asyncio
    async def test_update_missing_item(self, sql_session_factory: SessionFactory) -> None:
        result = await SqlWishlistStore(sql_session_factory).update_item(5, {"note": "x"})
        assert not result.ok
