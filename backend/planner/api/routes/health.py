"""Health check endpoints.

The planner keeps serving cached data when the remote store is down, so a
failing remote is reported as "degraded" rather than taking the service out.
"""

from typing import Annotated, Any

import redis
from fastapi import APIRouter, Depends

from backend.planner.api.deps import get_planner
from backend.planner.config import Settings
from backend.planner.services.planner import TripPlanner

router = APIRouter()


async def check_remote(planner: TripPlanner) -> tuple[bool, str]:
    """Check remote store connectivity.

    Returns:
        (is_ok, status_message)
    """
    status = await planner.remote_status()
    return (status == "ok", status)


async def check_redis(settings: Settings) -> tuple[bool, str]:
    """Check Redis connectivity.

    Returns:
        (is_ok, status_message)
    """
    if not settings.redis_url:
        return (True, "not_configured")

    try:
        client = redis.from_url(settings.redis_url, decode_responses=True)  # type: ignore[no-untyped-call]
        client.ping()
        return (True, "ok")
    except redis.RedisError as e:
        return (False, f"error: {type(e).__name__}")


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple liveness check."""
    return {"status": "ok"}


@router.get("/healthz")
async def healthz(
    planner: Annotated[TripPlanner, Depends(get_planner)],
) -> dict[str, Any]:
    """Component status. Always 200: reads keep working from the cache."""
    remote_ok, remote_status = await check_remote(planner)
    cache_ok, cache_status = await check_redis(planner.config)

    return {
        "status": "ok" if remote_ok and cache_ok else "degraded",
        "components": {
            "remote": remote_status,
            "cache": cache_status,
        },
    }
