"""Activity record - stored independently and referenced by day entries."""

import uuid
from datetime import datetime
from datetime import time as TimeOfDay

from pydantic import BaseModel, Field

from backend.trips.models.common import ActivityType, Geo


class Activity(BaseModel):
    """Single scheduled activity owned by exactly one itinerary day."""

    activity_id: uuid.UUID
    trip_id: uuid.UUID
    type: ActivityType
    name: str
    description: str = ""
    rating: float | None = Field(None, ge=0, le=5)
    location: str = ""
    geo: Geo | None = None
    time: TimeOfDay | None = None
    photo_url: str = ""
    place_id: str = ""
    created_at: datetime
