"""Trip aggregate document - one record per trip."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class ChecklistItem(BaseModel):
    """Single checklist entry."""

    item_id: uuid.UUID
    text: str
    completed: bool = False


class Checklist(BaseModel):
    """Titled checklist attached to one activity."""

    checklist_id: uuid.UUID
    activity_id: uuid.UUID
    title: str
    items: list[ChecklistItem] = Field(default_factory=list)


class ActivityNote(BaseModel):
    """Titled note attached to one activity."""

    activity_id: uuid.UUID
    title: str
    content: str
    created_at: datetime
    updated_at: datetime


class ItineraryDay(BaseModel):
    """One day of the itinerary.

    `activities` holds ordered references into the activity store. Notes and
    checklists are keyed by activity id and live with the day that owns the
    activity.
    """

    day: int
    date: str
    name: str = ""
    activities: list[uuid.UUID] = Field(default_factory=list)
    notes: list[ActivityNote] = Field(default_factory=list)
    checklists: list[Checklist] = Field(default_factory=list)


class BucketItem(BaseModel):
    """Unscheduled activity candidate."""

    item_id: uuid.UUID
    name: str
    description: str = ""
    confirmed: bool = False
    photo_url: str = ""
    address: str = ""


class Trip(BaseModel):
    """Root aggregate grouping itinerary, bucket list and sharing state."""

    trip_id: uuid.UUID
    owner_id: uuid.UUID
    name: str
    destination: str
    dates: list[str]
    budget: float | None = None
    itinerary: list[ItineraryDay] = Field(default_factory=list)
    bucket_list: list[BucketItem] = Field(default_factory=list)
    is_shared: bool = False
    share_token: str | None = None
    created_at: datetime
    updated_at: datetime
