"""Shared checklist models."""

from datetime import datetime

from pydantic import BaseModel, Field


class CheckedBy(BaseModel):
    """A user who has checked an item."""

    username: str
    display_name: str = ""
    avatar_url: str | None = None


class ChecklistState(BaseModel):
    """Remote row: the users who have checked one item."""

    id: str
    checked_by: list[CheckedBy] = Field(default_factory=list)
    updated_at: datetime | None = None
