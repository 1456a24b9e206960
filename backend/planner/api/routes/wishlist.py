"""Wishlist endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from backend.planner.api.deps import get_planner, raise_http, sync_error
from backend.planner.errors import PlannerError
from backend.planner.models.wishlist import WishlistFields, WishlistItem
from backend.planner.services.planner import TripPlanner

router = APIRouter(prefix="/wishlist", tags=["wishlist"])


class ScheduleRequest(BaseModel):
    """Request body for POST /wishlist/{item_id}/schedule."""

    day: int = Field(..., ge=1)
    time: str = ""


class SyncResponse(BaseModel):
    sync_error: str | None = None


@router.get("", response_model=list[WishlistItem])
async def list_wishlist(planner: Annotated[TripPlanner, Depends(get_planner)]) -> list[WishlistItem]:
    return await planner.wishlist.read()


@router.post("", response_model=WishlistItem, status_code=status.HTTP_201_CREATED)
async def add_item(
    request: WishlistFields,
    planner: Annotated[TripPlanner, Depends(get_planner)],
) -> WishlistItem:
    result = await planner.add_wishlist_item(request)
    if result.data is None:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=result.error or "wishlist item was not created",
        )
    return result.data


@router.post("/{item_id}/favorite", response_model=SyncResponse)
async def toggle_favorite(
    item_id: int,
    planner: Annotated[TripPlanner, Depends(get_planner)],
) -> SyncResponse:
    result = await planner.toggle_favorite(item_id)
    return SyncResponse(sync_error=sync_error(result))


@router.post("/{item_id}/schedule", response_model=SyncResponse)
async def schedule_item(
    item_id: int,
    request: ScheduleRequest,
    planner: Annotated[TripPlanner, Depends(get_planner)],
) -> SyncResponse:
    """Attach a wishlist item to a day of the trip."""
    try:
        result = await planner.add_to_trip(item_id, request.day, request.time)
    except PlannerError as e:
        raise_http(e)
    return SyncResponse(sync_error=sync_error(result))


@router.delete("/{item_id}", response_model=SyncResponse)
async def delete_item(
    item_id: int,
    planner: Annotated[TripPlanner, Depends(get_planner)],
) -> SyncResponse:
    result = await planner.delete_wishlist_item(item_id)
    return SyncResponse(sync_error=sync_error(result))
