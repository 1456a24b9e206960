"""Shared route dependencies and error mapping."""

from typing import NoReturn

from fastapi import HTTPException, Request, status

from backend.planner.errors import (
    InvalidOperationError,
    LimitExceededError,
    NotFoundError,
    PartialFailureError,
    PlannerError,
    RemoteUnavailableError,
)
from backend.planner.models.results import SaveResult
from backend.planner.services.planner import TripPlanner


def get_planner(request: Request) -> TripPlanner:
    """Planner created by the application lifespan."""
    planner: TripPlanner = request.app.state.planner
    return planner


def raise_http(error: PlannerError) -> NoReturn:
    """Translate a planner error into an HTTP error."""
    if isinstance(error, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, (LimitExceededError, InvalidOperationError)):
        code = status.HTTP_409_CONFLICT
    elif isinstance(error, (RemoteUnavailableError, PartialFailureError)):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    raise HTTPException(status_code=code, detail=str(error)) from error


def sync_error(result: SaveResult | None) -> str | None:
    """Error string to show as a retry banner, if the remote write failed."""
    if result is None or result.success:
        return None
    return result.error
