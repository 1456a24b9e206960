"""Trip endpoints - per-day listing, CRUD and the pending-day form flow."""

import datetime as dt
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, field_validator

from backend.planner.api.deps import get_planner, raise_http, sync_error
from backend.planner.errors import PlannerError
from backend.planner.models.trip import Trip, TripFields
from backend.planner.services.planner import TripPlanner

router = APIRouter(prefix="/trips", tags=["trips"])


class TripUpdateRequest(BaseModel):
    """Request body for PATCH /trips/{trip_id}. Only sent fields are written."""

    title: str | None = Field(None, min_length=1)
    date: dt.date | None = None
    time_start: str | None = None
    time_end: str | None = None
    description: str | None = None
    location: str | None = None
    lat: float | None = Field(None, ge=-90, le=90)
    lng: float | None = Field(None, ge=-180, le=180)
    image_url: str | None = None

    @field_validator("title", "date", "description", "location", "lat", "lng")
    @classmethod
    def reject_null(cls, value: object) -> object:
        """Only time and image fields may be cleared; the rest are required on a trip."""
        if value is None:
            raise ValueError("field cannot be null")
        return value


class SyncResponse(BaseModel):
    """Local change applied; remote error, if any, for a retry banner."""

    sync_error: str | None = None


class AbandonResponse(BaseModel):
    """Response for POST /trips/form/abandon."""

    rolled_back_day: int | None
    total_days: int
    sync_error: str | None = None


@router.get("", response_model=list[Trip])
async def list_trips(
    planner: Annotated[TripPlanner, Depends(get_planner)],
    day: Annotated[int | None, Query(ge=1)] = None,
) -> list[Trip]:
    """Trips of one day, or every trip on an existing day."""
    await planner.trips.read()
    if day is None:
        return planner.visible_trips()
    try:
        return planner.trips_on_day(day)
    except PlannerError as e:
        raise_http(e)


@router.post("", response_model=Trip, status_code=status.HTTP_201_CREATED)
async def create_trip(
    request: TripFields,
    planner: Annotated[TripPlanner, Depends(get_planner)],
) -> Trip:
    """Create a trip. Saving commits a pending day."""
    result = await planner.create_trip(request)
    if result.data is None:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=result.error or "trip was not created",
        )
    return result.data


@router.patch("/{trip_id}", response_model=SyncResponse)
async def update_trip(
    trip_id: int,
    request: TripUpdateRequest,
    planner: Annotated[TripPlanner, Depends(get_planner)],
) -> SyncResponse:
    """Update a trip; the local copy changes even if the remote write fails."""
    fields = request.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="no fields")
    result = await planner.update_trip(trip_id, fields)
    return SyncResponse(sync_error=sync_error(result))


@router.delete("/{trip_id}", response_model=SyncResponse)
async def delete_trip(
    trip_id: int,
    planner: Annotated[TripPlanner, Depends(get_planner)],
) -> SyncResponse:
    result = await planner.delete_trip(trip_id)
    return SyncResponse(sync_error=sync_error(result))


@router.post("/form/abandon", response_model=AbandonResponse)
async def abandon_form(planner: Annotated[TripPlanner, Depends(get_planner)]) -> AbandonResponse:
    """Close the add-trip form unsaved, removing the pending day if there is one."""
    day, result = await planner.abandon_trip_form()
    return AbandonResponse(
        rolled_back_day=day,
        total_days=planner.days.total_days,
        sync_error=sync_error(result),
    )
