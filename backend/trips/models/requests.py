"""Typed request structs accepted by the trip service.

These only fix the shape of each payload. Domain rules (non-empty names,
day bounds, allowed activity kinds) are enforced by the aggregate so that
every violation surfaces as the same typed ValidationError.
"""

from datetime import date

from pydantic import BaseModel, Field


class CreateTripRequest(BaseModel):
    """Request body for trip creation.

    Either `dates` or a `start_date`/`end_date` pair must be given; a range
    is expanded to every date from start to end inclusive.
    """

    name: str
    destination: str
    dates: list[str] = Field(default_factory=list)
    start_date: date | None = None
    end_date: date | None = None
    budget: float | None = None


class CreateAITripRequest(BaseModel):
    """Request body for a generated trip.

    Without dates the trip runs seven days starting thirty days from today.
    """

    name: str
    destination: str
    dates: list[str] = Field(default_factory=list)
    budget: float | None = None
    interests: list[str] = Field(default_factory=list)
    special_requests: str = ""


class UpdateTripRequest(BaseModel):
    """Partial trip update - only provided fields are merged."""

    name: str | None = None
    destination: str | None = None
    dates: list[str] | None = None
    budget: float | None = None


class ActivityFields(BaseModel):
    """Fields for a new itinerary activity."""

    type: str
    name: str
    description: str = ""
    rating: float | None = None
    location: str = ""
    lat: float | None = None
    lon: float | None = None
    time: str | None = Field(None, description="Clock time, HH:MM or HH:MM:SS")


class AddItineraryItemRequest(BaseModel):
    """Request body for adding an activity to a day."""

    day: int
    activity: ActivityFields


class AddBucketItemRequest(BaseModel):
    """Request body for adding a bucket list item."""

    name: str
    description: str = ""
    photo_url: str = ""
    address: str = ""


class ConfirmBucketItemRequest(BaseModel):
    """Request body for toggling a bucket item's confirmed flag."""

    confirmed: bool


class MoveBucketItemRequest(BaseModel):
    """Request body for promoting a bucket item into a day."""

    day: int
    activity_type: str = "activity"


class AddNoteRequest(BaseModel):
    """Request body for attaching a note to an activity."""

    title: str
    content: str


class AddChecklistItemsRequest(BaseModel):
    """Request body for appending checklist items."""

    title: str
    texts: list[str]


class UpdateChecklistItemRequest(BaseModel):
    """Request body for toggling a checklist item."""

    checklist_title: str
    completed: bool


class SearchLocationsRequest(BaseModel):
    """Request body for free-text place search."""

    query: str
    limit: int = 5


class AutoFillLocationRequest(BaseModel):
    """Request body for filling an activity's location from a search."""

    day: int
    query: str
