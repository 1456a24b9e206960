"""Shared travel notice checklist endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from backend.planner.api.auth import get_current_user
from backend.planner.api.deps import get_planner
from backend.planner.models.checklist import CheckedBy
from backend.planner.services.planner import TripPlanner

router = APIRouter(prefix="/checklist", tags=["checklist"])


class ChecklistItemView(BaseModel):
    """One travel notice item with who has checked it."""

    key: str
    icon: str
    text: str
    checked_by: list[CheckedBy]
    all_checked: bool


class ToggleRequest(BaseModel):
    """Request body for POST /checklist/toggle."""

    item_key: str


class ToggleResponse(BaseModel):
    """Local state after the toggle; the remote write runs in the background."""

    item_key: str
    checked: bool
    checked_by: list[CheckedBy]


@router.get("", response_model=list[ChecklistItemView])
async def get_checklist(
    planner: Annotated[TripPlanner, Depends(get_planner)],
) -> list[ChecklistItemView]:
    await planner.checklist.read()
    merger = planner.merger
    known_users = planner.config.known_users
    return [
        ChecklistItemView(
            key=key,
            icon=item.icon,
            text=item.text,
            checked_by=merger.checked_by(key),
            all_checked=merger.is_checked_by_all(key, known_users),
        )
        for key, item in planner.notice_items()
    ]


@router.post("/toggle", response_model=ToggleResponse)
async def toggle_item(
    request: ToggleRequest,
    planner: Annotated[TripPlanner, Depends(get_planner)],
    user: Annotated[CheckedBy, Depends(get_current_user)],
) -> ToggleResponse:
    """Check or uncheck an item for the current user."""
    if request.item_key not in {key for key, _ in planner.notice_items()}:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="unknown checklist item")

    planner.toggle_check(request.item_key, user)
    return ToggleResponse(
        item_key=request.item_key,
        checked=planner.merger.is_checked_by_user(request.item_key, user.username),
        checked_by=planner.merger.checked_by(request.item_key),
    )
