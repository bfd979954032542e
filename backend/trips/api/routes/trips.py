"""Trip endpoints - lifecycle, itinerary, bucket list, annotations, sharing, search."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from backend.trips.api.auth import get_current_context
from backend.trips.api.dependencies import get_trip_service
from backend.trips.db.context import RequestContext
from backend.trips.models.requests import (
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
from backend.trips.models.trip import ActivityNote, BucketItem, Checklist, ChecklistItem
from backend.trips.models.views import (
    ActivityView,
    ItineraryDayView,
    OptimizedDayView,
    PlaceResult,
    TripSummary,
    TripView,
)
from backend.trips.services.trip_service import TripService

router = APIRouter(prefix="/trips", tags=["trips"])

Context = Annotated[RequestContext, Depends(get_current_context)]
Service = Annotated[TripService, Depends(get_trip_service)]


class ShareResponse(BaseModel):
    """Response for POST /trips/{trip_id}/share."""

    share_token: str


# Lifecycle


@router.post("", response_model=TripView, status_code=status.HTTP_201_CREATED)
def create_trip(request: CreateTripRequest, ctx: Context, service: Service) -> TripView:
    """Create a trip owned by the caller."""
    return service.create_trip(ctx, request)


@router.post("/ai", response_model=TripView, status_code=status.HTTP_201_CREATED)
async def create_ai_trip(request: CreateAITripRequest, ctx: Context, service: Service) -> TripView:
    """Create a trip filled from a generated plan for the given interests."""
    return await service.create_ai_trip(ctx, request)


@router.get("", response_model=list[TripSummary])
def list_trips(ctx: Context, service: Service) -> list[TripSummary]:
    """List the caller's trips, newest first."""
    return service.list_trips(ctx)


@router.get("/{trip_id}", response_model=TripView)
def get_trip(trip_id: uuid.UUID, ctx: Context, service: Service) -> TripView:
    """Get one of the caller's trips with every day resolved."""
    return service.get_trip(trip_id, ctx)


@router.patch("/{trip_id}", response_model=TripView)
def update_trip(
    trip_id: uuid.UUID, request: UpdateTripRequest, ctx: Context, service: Service
) -> TripView:
    """Merge the provided fields into the trip."""
    return service.update_trip(ctx, trip_id, request)


@router.delete("/{trip_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_trip(trip_id: uuid.UUID, ctx: Context, service: Service) -> Response:
    """Delete a trip and its activities."""
    service.delete_trip(ctx, trip_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Itinerary


@router.post(
    "/{trip_id}/itinerary",
    response_model=ItineraryDayView,
    status_code=status.HTTP_201_CREATED,
)
def add_itinerary_item(
    trip_id: uuid.UUID, request: AddItineraryItemRequest, ctx: Context, service: Service
) -> ItineraryDayView:
    """Add an activity to a day; returns the updated day."""
    return service.add_itinerary_item(ctx, trip_id, request.day, request.activity)


@router.delete(
    "/{trip_id}/itinerary/{day}/activities/{activity_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def remove_itinerary_item(
    trip_id: uuid.UUID, day: int, activity_id: uuid.UUID, ctx: Context, service: Service
) -> Response:
    service.remove_itinerary_item(ctx, trip_id, day, activity_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{trip_id}/itinerary/{day}/optimize", response_model=OptimizedDayView)
def optimize_day(trip_id: uuid.UUID, day: int, ctx: Context, service: Service) -> OptimizedDayView:
    """Reorder a day's activities by proximity."""
    return service.optimize_day(ctx, trip_id, day)


# Bucket list


@router.post(
    "/{trip_id}/bucket-list", response_model=BucketItem, status_code=status.HTTP_201_CREATED
)
def add_bucket_item(
    trip_id: uuid.UUID, request: AddBucketItemRequest, ctx: Context, service: Service
) -> BucketItem:
    return service.add_bucket_item(ctx, trip_id, request)


@router.delete("/{trip_id}/bucket-list/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_bucket_item(
    trip_id: uuid.UUID, item_id: uuid.UUID, ctx: Context, service: Service
) -> Response:
    service.remove_bucket_item(ctx, trip_id, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{trip_id}/bucket-list/{item_id}", response_model=BucketItem)
def confirm_bucket_item(
    trip_id: uuid.UUID,
    item_id: uuid.UUID,
    request: ConfirmBucketItemRequest,
    ctx: Context,
    service: Service,
) -> BucketItem:
    return service.confirm_bucket_item(ctx, trip_id, item_id, request.confirmed)


@router.post(
    "/{trip_id}/bucket-list/{item_id}/move",
    response_model=ActivityView,
    status_code=status.HTTP_201_CREATED,
)
def move_bucket_to_itinerary(
    trip_id: uuid.UUID,
    item_id: uuid.UUID,
    request: MoveBucketItemRequest,
    ctx: Context,
    service: Service,
) -> ActivityView:
    """Promote a bucket item into an activity on the given day."""
    return service.move_bucket_to_itinerary(
        ctx, trip_id, item_id, request.day, request.activity_type
    )


# Notes and checklists


@router.post(
    "/{trip_id}/activities/{activity_id}/notes",
    response_model=ActivityNote,
    status_code=status.HTTP_201_CREATED,
)
def add_note(
    trip_id: uuid.UUID,
    activity_id: uuid.UUID,
    request: AddNoteRequest,
    ctx: Context,
    service: Service,
) -> ActivityNote:
    return service.add_note(ctx, trip_id, activity_id, request.title, request.content)


@router.post(
    "/{trip_id}/activities/{activity_id}/checklists",
    response_model=Checklist,
    status_code=status.HTTP_201_CREATED,
)
def add_checklist_items(
    trip_id: uuid.UUID,
    activity_id: uuid.UUID,
    request: AddChecklistItemsRequest,
    ctx: Context,
    service: Service,
) -> Checklist:
    return service.add_checklist_items(ctx, trip_id, activity_id, request.title, request.texts)


@router.patch(
    "/{trip_id}/activities/{activity_id}/checklists/items/{item_id}",
    response_model=ChecklistItem,
)
def update_checklist_item(
    trip_id: uuid.UUID,
    activity_id: uuid.UUID,
    item_id: uuid.UUID,
    request: UpdateChecklistItemRequest,
    ctx: Context,
    service: Service,
) -> ChecklistItem:
    return service.update_checklist_item(
        ctx, trip_id, activity_id, request.checklist_title, item_id, request.completed
    )


# Sharing


@router.post("/{trip_id}/share", response_model=ShareResponse)
def share_trip(trip_id: uuid.UUID, ctx: Context, service: Service) -> ShareResponse:
    """Share a trip read-only; repeated calls return the same token."""
    return ShareResponse(share_token=service.share_trip(ctx, trip_id))


@router.delete("/{trip_id}/share", status_code=status.HTTP_204_NO_CONTENT)
def unshare_trip(trip_id: uuid.UUID, ctx: Context, service: Service) -> Response:
    service.unshare_trip(ctx, trip_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Location search


@router.post("/{trip_id}/locations/search", response_model=list[PlaceResult])
async def search_locations(
    trip_id: uuid.UUID, request: SearchLocationsRequest, ctx: Context, service: Service
) -> list[PlaceResult]:
    """Search places near the trip's destination."""
    return await service.search_locations(ctx, trip_id, request.query, request.limit)


@router.post("/{trip_id}/activities/{activity_id}/autofill", response_model=ActivityView)
async def auto_fill_location(
    trip_id: uuid.UUID,
    activity_id: uuid.UUID,
    request: AutoFillLocationRequest,
    ctx: Context,
    service: Service,
) -> ActivityView:
    """Fill an activity's location from the best search match."""
    return await service.auto_fill_location(ctx, trip_id, request.day, activity_id, request.query)
