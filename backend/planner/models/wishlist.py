"""Wishlist models."""

from datetime import datetime

from pydantic import BaseModel, Field


class AddedToTrip(BaseModel):
    """Slot a wishlist item was scheduled into."""

    day: int = Field(..., ge=1)
    time: str = ""


class WishlistFields(BaseModel):
    """Writable wishlist item fields."""

    category: str
    name: str
    note: str | None = None
    image_url: str | None = None
    map_link: str | None = None
    link: str | None = None
    added_to_trip: AddedToTrip | None = None
    is_favorite: bool = False


class WishlistItem(WishlistFields):
    """Stored wishlist item."""

    id: int
    created_at: datetime


def sort_wishlist(items: list[WishlistItem]) -> list[WishlistItem]:
    """Favorites first, then newest first."""
    return sorted(items, key=lambda i: (not i.is_favorite, -i.created_at.timestamp()))
