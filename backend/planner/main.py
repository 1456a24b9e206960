"""FastAPI application."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from backend.planner.api.routes.checklist import router as checklist_router
from backend.planner.api.routes.days import router as days_router
from backend.planner.api.routes.health import router as health_router
from backend.planner.api.routes.metrics import router as metrics_router
from backend.planner.api.routes.trips import router as trips_router
from backend.planner.api.routes.wishlist import router as wishlist_router
from backend.planner.config import get_settings
from backend.planner.services.factory import build_planner
from backend.planner.services.planner import TripPlanner


def create_app(planner: TripPlanner | None = None) -> FastAPI:
    """Build the app around ``planner``, or a SQL-backed one from settings.

    The lifespan initializes the planner on startup and disposes it on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        engine: AsyncEngine | None = None
        if planner is None:
            owned, engine = await build_planner(get_settings())
        else:
            owned = planner
        await owned.init()
        app.state.planner = owned
        try:
            yield
        finally:
            await owned.dispose()
            if engine is not None:
                await engine.dispose()

    app = FastAPI(title="Trip Planner API", version="0.1.0", lifespan=lifespan)

    # Register routes
    app.include_router(health_router, tags=["health"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(days_router)
    app.include_router(trips_router)
    app.include_router(checklist_router)
    app.include_router(wishlist_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {"message": "Trip Planner API", "version": "0.1.0"}

    return app


app = create_app()
