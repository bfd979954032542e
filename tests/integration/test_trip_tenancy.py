"""Tests for owner scoping of trip lookups."""

import uuid
from datetime import UTC, datetime

import pytest

from backend.trips.db.context import RequestContext
from backend.trips.db.inmemory import InMemoryTripRepository
from backend.trips.errors import NotFoundError
from backend.trips.models import ActivityFields, AddBucketItemRequest, CreateTripRequest, Trip
from backend.trips.services.trip_service import TripService


def make_trip(owner_id: uuid.UUID, name: str = "Trip") -> Trip:
    now = datetime.now(UTC)
    return Trip(
        trip_id=uuid.uuid4(),
        owner_id=owner_id,
        name=name,
        destination="Galle",
        dates=["2025-12-01"],
        created_at=now,
        updated_at=now,
    )


def test_trip_repository_tenancy_isolation() -> None:
    """Test that TripRepository scopes every owned lookup to the caller."""
    repo = InMemoryTripRepository()
    ctx_a = RequestContext(user_id=uuid.uuid4())
    ctx_b = RequestContext(user_id=uuid.uuid4())

    trip_a = make_trip(ctx_a.user_id, "A")
    trip_b = make_trip(ctx_b.user_id, "B")
    repo.add(trip_a)
    repo.add(trip_b)

    # Each user sees only their own trip
    assert repo.get_owned(trip_a.trip_id, ctx_a) == trip_a
    assert repo.get_owned(trip_b.trip_id, ctx_a) is None
    assert repo.get_owned(trip_a.trip_id, ctx_b) is None

    assert [t.trip_id for t in repo.list_by_owner(ctx_a)] == [trip_a.trip_id]
    assert [t.trip_id for t in repo.list_by_owner(ctx_b)] == [trip_b.trip_id]

    # Cross-tenant delete is refused
    assert repo.delete(trip_a.trip_id, ctx_b) is False
    assert repo.get(trip_a.trip_id) is not None


def test_repository_returns_copies() -> None:
    repo = InMemoryTripRepository()
    ctx = RequestContext(user_id=uuid.uuid4())
    trip = make_trip(ctx.user_id)
    repo.add(trip)

    loaded = repo.get_owned(trip.trip_id, ctx)
    assert loaded is not None
    loaded.name = "Mutated"

    stored = repo.get_owned(trip.trip_id, ctx)
    assert stored is not None
    assert stored.name == "Trip"


def test_service_mutations_on_foreign_trip_are_not_found(
    service: TripService, ctx: RequestContext, other_ctx: RequestContext
) -> None:
    trip_id = service.create_trip(
        ctx, CreateTripRequest(name="Mine", destination="Galle", dates=["2025-12-01"])
    ).trip_id
    day = service.add_itinerary_item(ctx, trip_id, 1, ActivityFields(type="place", name="Fort"))
    activity_id = day.activities[0].activity.activity_id

    attempts = [
        lambda: service.get_trip(trip_id, other_ctx),
        lambda: service.add_itinerary_item(
            other_ctx, trip_id, 1, ActivityFields(type="place", name="Intruder")
        ),
        lambda: service.remove_itinerary_item(other_ctx, trip_id, 1, activity_id),
        lambda: service.add_bucket_item(other_ctx, trip_id, AddBucketItemRequest(name="x")),
        lambda: service.add_note(other_ctx, trip_id, activity_id, "t", "c"),
        lambda: service.share_trip(other_ctx, trip_id),
        lambda: service.optimize_day(other_ctx, trip_id, 1),
        lambda: service.delete_trip(other_ctx, trip_id),
    ]

    for attempt in attempts:
        with pytest.raises(NotFoundError):
            attempt()

    trip = service.get_trip(trip_id, ctx)
    assert [a.activity.name for a in trip.itinerary[0].activities] == ["Fort"]
    assert trip.is_shared is False
