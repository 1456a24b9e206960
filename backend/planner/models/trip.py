"""Trip models - rows owned by the remote trip store."""

import json
import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field


class ScheduleItem(BaseModel):
    """One timed entry inside a trip's description."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    time_start: str = ""
    time_end: str = ""
    content: str = ""


class TripFields(BaseModel):
    """Writable trip fields."""

    title: str
    date: date
    time_start: str | None = None
    time_end: str | None = None
    description: str = ""
    location: str = ""
    lat: float = Field(0.0, ge=-90, le=90)
    lng: float = Field(0.0, ge=-180, le=180)
    image_url: str | None = None


class Trip(TripFields):
    """Stored trip record.

    The date is the only link back to a day number; see ``core.dates``.
    """

    id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def schedule_items(self) -> list[ScheduleItem]:
        """Parse the serialized schedule list stored in ``description``.

        Legacy rows hold plain text, which becomes a single item.
        """
        if not self.description:
            return []
        try:
            parsed = json.loads(self.description)
        except ValueError:
            return [ScheduleItem(content=self.description)]
        if not isinstance(parsed, list):
            return [ScheduleItem(content=self.description)]
        return [ScheduleItem.model_validate(item) for item in parsed if isinstance(item, dict)]

    def image_urls(self) -> list[str]:
        """Parse the serialized image list stored in ``image_url``."""
        if not self.image_url:
            return []
        try:
            parsed = json.loads(self.image_url)
        except ValueError:
            return [self.image_url] if self.image_url.strip() else []
        if isinstance(parsed, list):
            return [str(url) for url in parsed]
        return [self.image_url]


def serialize_schedule_items(items: list[ScheduleItem]) -> str:
    """Serialize schedule items for the ``description`` field, dropping empty rows."""
    kept = [item.model_dump() for item in items if item.content.strip() or item.time_start]
    return json.dumps(kept, ensure_ascii=False)


def serialize_image_urls(urls: list[str]) -> str | None:
    """Serialize image URLs for the ``image_url`` field."""
    return json.dumps(urls) if urls else None
