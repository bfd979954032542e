"""Read-only access to shared trips by share token."""

from typing import Annotated

from fastapi import APIRouter, Depends

from backend.trips.api.dependencies import get_trip_service
from backend.trips.models.views import SharedTripView
from backend.trips.services.trip_service import TripService

# GET only: no mutation is reachable through a share token
router = APIRouter(prefix="/shared", tags=["shared"])


@router.get("/{token}", response_model=SharedTripView)
def get_shared_trip(
    token: str, service: Annotated[TripService, Depends(get_trip_service)]
) -> SharedTripView:
    """Return a shared trip regardless of caller identity."""
    return service.get_shared_trip(token)
