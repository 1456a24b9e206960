"""Site settings and day schedule models."""

from datetime import date

from pydantic import BaseModel, Field


class DaySchedule(BaseModel):
    """Theme and cover image for one day of the trip."""

    day_number: int = Field(..., ge=1)
    theme: str
    image_url: str | None = None


class HomeLocation(BaseModel):
    """Where the travellers are staying."""

    name: str
    address: str
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    image_url: str | None = None


class TravelNoticeItem(BaseModel):
    """Single entry of the shared travel notice checklist."""

    id: str
    icon: str
    text: str


DEFAULT_TRAVEL_ESSENTIALS: list[TravelNoticeItem] = [
    TravelNoticeItem(id="passport", icon="🛂", text="Passport and visa documents"),
    TravelNoticeItem(id="money", icon="💴", text="Yen cash and credit cards"),
    TravelNoticeItem(id="sim", icon="📱", text="SIM card or pocket WiFi"),
    TravelNoticeItem(id="adapter", icon="🔌", text="Japanese plug adapter"),
    TravelNoticeItem(id="medicine", icon="💊", text="Everyday medicine"),
    TravelNoticeItem(id="luggage", icon="🧳", text="Light luggage"),
]

DEFAULT_TRAVEL_PREPARATIONS: list[TravelNoticeItem] = [
    TravelNoticeItem(id="jrpass", icon="🚃", text="Buy a JR Pass or transit card"),
    TravelNoticeItem(id="hotel", icon="🏨", text="Confirm hotel booking"),
    TravelNoticeItem(id="map", icon="📋", text="Download offline maps"),
    TravelNoticeItem(id="weather", icon="🌡️", text="Check the weather forecast"),
]


def default_day_schedules(total_days: int) -> list[DaySchedule]:
    """Build one default-themed schedule per day."""
    return [DaySchedule(day_number=n, theme=f"Day {n}") for n in range(1, total_days + 1)]


class SiteSettings(BaseModel):
    """Shared trip configuration persisted in the remote settings store."""

    title: str = "Japan Trip"
    home_location: HomeLocation | None = None
    trip_start_date: date = Field(default_factory=date.today)
    total_days: int = Field(3, ge=1)
    day_schedules: list[DaySchedule] = Field(default_factory=lambda: default_day_schedules(3))
    travel_essentials: list[TravelNoticeItem] = Field(
        default_factory=lambda: list(DEFAULT_TRAVEL_ESSENTIALS)
    )
    travel_preparations: list[TravelNoticeItem] = Field(
        default_factory=lambda: list(DEFAULT_TRAVEL_PREPARATIONS)
    )

    def merged(self, partial: dict) -> "SiteSettings":
        """Return a copy with the given fields overlaid, validated."""
        data = self.model_dump(mode="json")
        data.update(partial)
        return SiteSettings.model_validate(data)
