"""Shared pytest fixtures for all test suites."""

import asyncio
from collections.abc import AsyncGenerator
from datetime import date
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.planner.config import Settings
from backend.planner.db.engine import (
    create_async_engine_from_settings,
    create_session_factory,
    create_tables,
)
from backend.planner.db.inmemory import (
    InMemorySettingsStore,
    InMemoryTripStore,
    InMemoryWishlistStore,
)
from backend.planner.errors import RemoteUnavailableError
from backend.planner.models.checklist import ChecklistState
from backend.planner.models.common import SiteSettings, default_day_schedules
from backend.planner.models.results import SaveResult, WriteResult
from backend.planner.models.trip import Trip
from backend.planner.services.planner import TripPlanner
from backend.planner.sync.cache import InMemoryLocalCache

TRIP_START = date(2024, 4, 1)


class FlakyTripStore(InMemoryTripStore):
    """Trip store that can go down or reject updates of chosen trips."""

    def __init__(self, trips: list[Trip] | None = None) -> None:
        super().__init__(trips)
        self.down = False
        self.fail_update_ids: set[int] = set()
        self.update_calls: list[tuple[int, dict[str, Any]]] = []

    async def list_trips(self) -> list[Trip]:
        if self.down:
            raise RemoteUnavailableError("trip store is down")
        return await super().list_trips()

    async def update_trip(self, trip_id: int, fields: dict[str, Any]) -> WriteResult[Trip]:
        self.update_calls.append((trip_id, fields))
        if self.down or trip_id in self.fail_update_ids:
            return WriteResult(data=None, error=f"update of trip {trip_id} rejected")
        return await super().update_trip(trip_id, fields)


class FlakySettingsStore(InMemorySettingsStore):
    """Settings store that can go down or hold reads until released."""

    def __init__(
        self,
        settings: SiteSettings | None = None,
        checklist_states: list[ChecklistState] | None = None,
    ) -> None:
        super().__init__(settings, checklist_states)
        self.down = False
        self.saved_states: list[ChecklistState] = []
        self.gate: asyncio.Event | None = None

    async def get_settings(self) -> SiteSettings | None:
        settings = None if self.down else await super().get_settings()
        if self.gate is not None:
            await self.gate.wait()
        return settings

    async def save_settings(self, partial: dict[str, Any]) -> SaveResult:
        if self.down:
            return SaveResult(success=False, error="settings store is down")
        return await super().save_settings(partial)

    async def get_checklist_states(self) -> list[ChecklistState]:
        if self.down:
            raise RemoteUnavailableError("settings store is down")
        return await super().get_checklist_states()

    async def save_checklist_state(self, state: ChecklistState) -> SaveResult:
        if self.down:
            return SaveResult(success=False, error="settings store is down")
        self.saved_states.append(state)
        return await super().save_checklist_state(state)


@pytest.fixture
def config() -> Settings:
    """Test settings: no background polling within a test's lifetime."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        redis_url=None,
        trips_refresh_interval_seconds=3600,
        known_users=["alice", "bob"],
    )


@pytest.fixture
def site_settings() -> SiteSettings:
    return SiteSettings(
        trip_start_date=TRIP_START,
        total_days=3,
        day_schedules=default_day_schedules(3),
    )


@pytest.fixture
def trip_store() -> FlakyTripStore:
    return FlakyTripStore()


@pytest.fixture
def settings_store(site_settings: SiteSettings) -> FlakySettingsStore:
    return FlakySettingsStore(site_settings)


@pytest.fixture
def wishlist_store() -> InMemoryWishlistStore:
    return InMemoryWishlistStore()


@pytest.fixture
def local_cache() -> InMemoryLocalCache:
    return InMemoryLocalCache()


@pytest.fixture
def make_planner(
    trip_store: FlakyTripStore,
    settings_store: FlakySettingsStore,
    wishlist_store: InMemoryWishlistStore,
    local_cache: InMemoryLocalCache,
    config: Settings,
) -> Any:
    """Factory for an uninitialized planner over the shared in-memory stores."""

    def _make(admin: bool = False) -> TripPlanner:
        return TripPlanner(
            trip_store=trip_store,
            settings_store=settings_store,
            wishlist_store=wishlist_store,
            cache=local_cache,
            config=config,
            admin=admin,
        )

    return _make


@pytest_asyncio.fixture
async def planner(make_planner: Any) -> AsyncGenerator[TripPlanner, None]:
    """Initialized planner, disposed after the test."""
    instance = make_planner()
    await instance.init()
    yield instance
    await instance.dispose()


@pytest_asyncio.fixture
async def sql_session_factory(
    config: Settings,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session factory over a fresh in-memory sqlite database."""
    engine = create_async_engine_from_settings(config)
    await create_tables(engine)
    yield create_session_factory(engine)
    await engine.dispose()
