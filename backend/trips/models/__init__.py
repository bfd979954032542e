"""Models package - re-exports for convenience."""

from backend.trips.models.activity import Activity
from backend.trips.models.common import ActivityType, Geo, parse_geo
from backend.trips.models.generation import (
    GeneratedActivity,
    GeneratedBucketItem,
    GeneratedDay,
    GeneratedPlan,
)
from backend.trips.models.requests import (
    ActivityFields,
    AddBucketItemRequest,
    AddChecklistItemsRequest,
    AddItineraryItemRequest,
    AddNoteRequest,
    AutoFillLocationRequest,
    ConfirmBucketItemRequest,
    CreateAITripRequest,
    CreateTripRequest,
    MoveBucketItemRequest,
    SearchLocationsRequest,
    UpdateChecklistItemRequest,
    UpdateTripRequest,
)
from backend.trips.models.trip import (
    ActivityNote,
    BucketItem,
    Checklist,
    ChecklistItem,
    ItineraryDay,
    Trip,
)
from backend.trips.models.views import (
    ActivityView,
    ItineraryDayView,
    OptimizedDayView,
    PlaceResult,
    SharedTripView,
    TripSummary,
    TripView,
)

__all__ = [
    # Common
    "Geo",
    "ActivityType",
    "parse_geo",
    # Records
    "Activity",
    "Trip",
    "ItineraryDay",
    "BucketItem",
    "ActivityNote",
    "Checklist",
    "ChecklistItem",
    # Requests
    "CreateTripRequest",
    "CreateAITripRequest",
    "UpdateTripRequest",
    "ActivityFields",
    "AddItineraryItemRequest",
    "AddBucketItemRequest",
    "ConfirmBucketItemRequest",
    "MoveBucketItemRequest",
    "AddNoteRequest",
    "AddChecklistItemsRequest",
    "UpdateChecklistItemRequest",
    "SearchLocationsRequest",
    "AutoFillLocationRequest",
    # Generated plans
    "GeneratedPlan",
    "GeneratedDay",
    "GeneratedActivity",
    "GeneratedBucketItem",
    # Views
    "ActivityView",
    "ItineraryDayView",
    "OptimizedDayView",
    "TripView",
    "SharedTripView",
    "TripSummary",
    "PlaceResult",
]
