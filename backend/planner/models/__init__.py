"""Models package - re-exports for convenience."""

from backend.planner.models.checklist import CheckedBy, ChecklistState
from backend.planner.models.common import (
    DEFAULT_TRAVEL_ESSENTIALS,
    DEFAULT_TRAVEL_PREPARATIONS,
    DaySchedule,
    HomeLocation,
    SiteSettings,
    TravelNoticeItem,
    default_day_schedules,
)
from backend.planner.models.results import DeleteResult, SaveResult, WriteResult
from backend.planner.models.trip import ScheduleItem, Trip, TripFields
from backend.planner.models.wishlist import AddedToTrip, WishlistFields, WishlistItem

__all__ = [
    "AddedToTrip",
    "CheckedBy",
    "ChecklistState",
    "DEFAULT_TRAVEL_ESSENTIALS",
    "DEFAULT_TRAVEL_PREPARATIONS",
    "DaySchedule",
    "DeleteResult",
    "HomeLocation",
    "SaveResult",
    "ScheduleItem",
    "SiteSettings",
    "TravelNoticeItem",
    "Trip",
    "TripFields",
    "WishlistFields",
    "WishlistItem",
    "WriteResult",
    "default_day_schedules",
]
