"""Remote store protocol interfaces.

Reads raise ``RemoteUnavailableError`` on any backend failure (settings reads
fail soft and return None instead). Writes never raise for backend failures;
they return a result carrying the error string.
"""

from typing import Any, Protocol

from backend.planner.models.checklist import ChecklistState
from backend.planner.models.common import SiteSettings
from backend.planner.models.results import DeleteResult, SaveResult, WriteResult
from backend.planner.models.trip import Trip, TripFields
from backend.planner.models.wishlist import WishlistFields, WishlistItem


class TripStore(Protocol):
    """Remote trip rows."""

    async def list_trips(self) -> list[Trip]:
        """List all trips, newest date first.

        Raises:
            RemoteUnavailableError: If the store cannot be read
        """
        ...

    async def create_trip(self, fields: TripFields) -> WriteResult[Trip]:
        """Insert a trip and return the stored row."""
        ...

    async def update_trip(self, trip_id: int, fields: dict[str, Any]) -> WriteResult[Trip]:
        """Update some fields of a trip and return the stored row.

        Args:
            trip_id: Trip ID
            fields: Partial trip fields (keys of ``TripFields``)
        """
        ...

    async def delete_trip(self, trip_id: int) -> DeleteResult:
        """Delete a trip."""
        ...


class SettingsStore(Protocol):
    """Remote site settings and checklist state."""

    async def get_settings(self) -> SiteSettings | None:
        """Get settings, or None if missing or unreadable."""
        ...

    async def save_settings(self, partial: dict[str, Any]) -> SaveResult:
        """Merge ``partial`` over the stored settings (upsert)."""
        ...

    async def get_checklist_states(self) -> list[ChecklistState]:
        """List every checklist item state.

        Raises:
            RemoteUnavailableError: If the store cannot be read
        """
        ...

    async def save_checklist_state(self, state: ChecklistState) -> SaveResult:
        """Upsert the full checked-by list of one item."""
        ...


class WishlistStore(Protocol):
    """Remote wishlist items."""

    async def list_items(self) -> list[WishlistItem]:
        """List items, favorites first then newest.

        Raises:
            RemoteUnavailableError: If the store cannot be read
        """
        ...

    async def create_item(self, fields: WishlistFields) -> WriteResult[WishlistItem]:
        ...

    async def update_item(self, item_id: int, fields: dict[str, Any]) -> WriteResult[WishlistItem]:
        ...

    async def delete_item(self, item_id: int) -> DeleteResult:
        ...
