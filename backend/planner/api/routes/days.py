"""Day schedule endpoints - list, add/remove, themes, dates and reorder."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from backend.planner.api.deps import get_planner, raise_http, sync_error
from backend.planner.core.dates import day_to_date
from backend.planner.errors import PlannerError
from backend.planner.services.planner import TripPlanner

router = APIRouter(prefix="/days", tags=["days"])


class DayView(BaseModel):
    """One day tab."""

    day_number: int
    date: date
    theme: str
    image_url: str | None


class DaysResponse(BaseModel):
    """Response for GET /days and every day mutation."""

    trip_start_date: date
    total_days: int
    max_days: int
    pending_day: int | None
    today_day: int | None
    days: list[DayView]
    sync_error: str | None = None


class AddDayRequest(BaseModel):
    """Request body for POST /days."""

    pending: bool = Field(False, description="Hold the day until a trip is saved on it")


class UpdateDayRequest(BaseModel):
    """Request body for PATCH /days/{day_number}."""

    theme: str | None = Field(None, min_length=1, max_length=100)
    image_url: str | None = None


class StartDateRequest(BaseModel):
    """Request body for PUT /days/start-date."""

    trip_start_date: date


class DayDateRequest(BaseModel):
    """Request body for PUT /days/{day_number}/date."""

    date: date


class ReorderRequest(BaseModel):
    """Request body for POST /days/reorder."""

    from_day: int = Field(..., ge=1)
    to_day: int = Field(..., ge=1)


class FailedMove(BaseModel):
    trip_id: int
    error: str


class ReorderResponse(BaseModel):
    """Per-trip outcome of a reorder."""

    from_day: int
    to_day: int
    moved_trip_ids: list[int]
    failed: list[FailedMove]
    partial_failure: bool


def _days_response(planner: TripPlanner, error: str | None = None) -> DaysResponse:
    store = planner.days
    return DaysResponse(
        trip_start_date=store.trip_start_date,
        total_days=store.total_days,
        max_days=store.max_days,
        pending_day=planner.pending.pending_day,
        today_day=planner.today_day(date.today()),
        days=[
            DayView(
                day_number=d.day_number,
                date=day_to_date(store.trip_start_date, d.day_number),
                theme=d.theme,
                image_url=d.image_url,
            )
            for d in store.day_schedules
        ],
        sync_error=error,
    )


@router.get("", response_model=DaysResponse)
async def list_days(planner: Annotated[TripPlanner, Depends(get_planner)]) -> DaysResponse:
    """List day tabs, served from the local copy."""
    await planner.settings.read()
    return _days_response(planner)


@router.post("", response_model=DaysResponse, status_code=status.HTTP_201_CREATED)
async def add_day(
    request: AddDayRequest,
    planner: Annotated[TripPlanner, Depends(get_planner)],
) -> DaysResponse:
    """Append a day (optionally pending until a trip is saved on it)."""
    try:
        _, result = await planner.add_day(pending=request.pending)
    except PlannerError as e:
        raise_http(e)
    return _days_response(planner, sync_error(result))


@router.delete("/last", response_model=DaysResponse)
async def remove_last_day(planner: Annotated[TripPlanner, Depends(get_planner)]) -> DaysResponse:
    """Remove the last day. Its trips are hidden, not deleted."""
    try:
        _, result = await planner.remove_last_day()
    except PlannerError as e:
        raise_http(e)
    return _days_response(planner, sync_error(result))


@router.put("/start-date", response_model=DaysResponse)
async def set_start_date(
    request: StartDateRequest,
    planner: Annotated[TripPlanner, Depends(get_planner)],
) -> DaysResponse:
    """Re-anchor the trip calendar."""
    result = await planner.set_trip_start_date(request.trip_start_date)
    return _days_response(planner, sync_error(result))


@router.post("/reorder", response_model=ReorderResponse)
async def reorder_days(
    request: ReorderRequest,
    planner: Annotated[TripPlanner, Depends(get_planner)],
    strict: Annotated[bool, Query(description="Fail with 502 if any trip could not be moved")] = False,
) -> ReorderResponse:
    """Swap the trips of two days.

    Failed trip moves are reported, not rolled back. With ``strict`` they are
    returned as an error instead.
    """
    try:
        report = await planner.reorder_days(request.from_day, request.to_day)
        if strict:
            report.raise_for_failures()
    except PlannerError as e:
        raise_http(e)
    return ReorderResponse(
        from_day=report.from_day,
        to_day=report.to_day,
        moved_trip_ids=[a.trip_id for a in report.moved],
        failed=[FailedMove(trip_id=a.trip_id, error=err) for a, err in report.failed],
        partial_failure=report.partial_failure,
    )


@router.patch("/{day_number}", response_model=DaysResponse)
async def update_day(
    day_number: int,
    request: UpdateDayRequest,
    planner: Annotated[TripPlanner, Depends(get_planner)],
) -> DaysResponse:
    """Rename a day's theme and/or set its cover image."""
    error = None
    try:
        if request.theme is not None:
            _, result = await planner.rename_day_theme(day_number, request.theme)
            error = sync_error(result)
        if "image_url" in request.model_fields_set:
            _, result = await planner.set_day_image(day_number, request.image_url)
            error = error or sync_error(result)
    except PlannerError as e:
        raise_http(e)
    return _days_response(planner, error)


@router.put("/{day_number}/date", response_model=DaysResponse)
async def set_day_date(
    day_number: int,
    request: DayDateRequest,
    planner: Annotated[TripPlanner, Depends(get_planner)],
) -> DaysResponse:
    """Move the calendar so this day falls on the given date."""
    try:
        _, result = await planner.set_day_date(day_number, request.date)
    except PlannerError as e:
        raise_http(e)
    return _days_response(planner, sync_error(result))
