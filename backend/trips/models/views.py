"""Read models returned by the trip service."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from backend.trips.models.activity import Activity
from backend.trips.models.trip import ActivityNote, BucketItem, Checklist


class ActivityView(BaseModel):
    """Activity with its notes and checklists attached."""

    activity: Activity
    notes: list[ActivityNote]
    checklists: list[Checklist]


class ItineraryDayView(BaseModel):
    """Itinerary day with activity references resolved."""

    day: int
    date: str
    name: str
    activities: list[ActivityView]


class OptimizedDayView(ItineraryDayView):
    """Day returned by route optimization with before/after distances."""

    distance_before_km: float
    distance_after_km: float


class TripView(BaseModel):
    """Trip with every day resolved."""

    trip_id: uuid.UUID
    owner_id: uuid.UUID
    name: str
    destination: str
    dates: list[str]
    budget: float | None
    itinerary: list[ItineraryDayView]
    bucket_list: list[BucketItem]
    is_shared: bool
    share_token: str | None
    created_at: datetime
    updated_at: datetime


class SharedTripView(BaseModel):
    """Read-only trip exposed through a share token."""

    model_config = ConfigDict(frozen=True)

    trip_id: uuid.UUID
    name: str
    destination: str
    dates: list[str]
    itinerary: list[ItineraryDayView]
    bucket_list: list[BucketItem]
    updated_at: datetime


class TripSummary(BaseModel):
    """Trip listing entry."""

    trip_id: uuid.UUID
    name: str
    destination: str
    dates: list[str]
    budget: float | None
    is_shared: bool
    created_at: datetime
    updated_at: datetime


class PlaceResult(BaseModel):
    """Place suggestion returned by the location provider."""

    name: str
    description: str = ""
    address: str = ""
    photo_url: str = ""
    rating: float = 0.0
    place_id: str = ""
    lat: float | None = None
    lon: float | None = None
