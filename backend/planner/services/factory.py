"""Wire a TripPlanner from settings."""

from sqlalchemy.ext.asyncio import AsyncEngine

from backend.planner.config import Settings
from backend.planner.db.engine import (
    create_async_engine_from_settings,
    create_session_factory,
    create_tables,
)
from backend.planner.db.sql_repositories import SqlSettingsStore, SqlTripStore, SqlWishlistStore
from backend.planner.services.planner import TripPlanner
from backend.planner.sync.cache import InMemoryLocalCache, LocalCache, RedisLocalCache
from backend.planner.utils.logging import StructuredSyncLogger
from backend.planner.utils.metrics import PrometheusSyncMetrics


def create_local_cache(settings: Settings) -> LocalCache:
    """Redis when configured, otherwise a process-local cache."""
    if settings.redis_url:
        return RedisLocalCache.from_url(settings.redis_url, prefix=settings.cache_key_prefix)
    return InMemoryLocalCache()


async def build_planner(
    settings: Settings, *, admin: bool = False
) -> tuple[TripPlanner, AsyncEngine]:
    """Create SQL-backed stores and an uninitialized planner.

    Returns the engine too; the caller disposes it after the planner.
    """
    engine = create_async_engine_from_settings(settings)
    await create_tables(engine)
    session_factory = create_session_factory(engine)

    planner = TripPlanner(
        trip_store=SqlTripStore(session_factory),
        settings_store=SqlSettingsStore(session_factory),
        wishlist_store=SqlWishlistStore(session_factory),
        cache=create_local_cache(settings),
        config=settings,
        admin=admin,
        metrics=PrometheusSyncMetrics(),
        sync_logger=StructuredSyncLogger(),
    )
    return planner, engine
