"""Integration tests for location search and autofill through TripService."""

import uuid

import httpx
import pytest

from backend.trips.db.context import RequestContext
from backend.trips.errors import DependencyError, NotFoundError, ValidationError
from backend.trips.models import ActivityFields, CreateTripRequest
from backend.trips.services.trip_service import TripService


def create_trip_with_activity(service: TripService, ctx: RequestContext) -> tuple[uuid.UUID, uuid.UUID]:
    trip_id = service.create_trip(
        ctx, CreateTripRequest(name="Coast Run", destination="Galle", dates=["2025-12-01"])
    ).trip_id
    day = service.add_itinerary_item(ctx, trip_id, 1, ActivityFields(type="place", name="Fort"))
    return trip_id, day.activities[0].activity.activity_id


@pytest.mark.asyncio
async def test_search_scopes_query_to_destination(
    service: TripService, ctx: RequestContext, resolver
) -> None:
    trip_id, _ = create_trip_with_activity(service, ctx)

    results = await service.search_locations(ctx, trip_id, "  fort ", 3)

    assert [r.name for r in results] == ["Galle Fort"]
    assert resolver.calls == [("fort in Galle", 3)]


@pytest.mark.asyncio
@pytest.mark.parametrize("query,limit", [("", 5), ("   ", 5), ("fort", 0), ("fort", 11)])
async def test_search_rejects_bad_input(
    service: TripService, ctx: RequestContext, resolver, query: str, limit: int
) -> None:
    trip_id, _ = create_trip_with_activity(service, ctx)

    with pytest.raises(ValidationError):
        await service.search_locations(ctx, trip_id, query, limit)

    assert resolver.calls == []


@pytest.mark.asyncio
async def test_search_on_foreign_trip_is_not_found(
    service: TripService, ctx: RequestContext, other_ctx: RequestContext, resolver
) -> None:
    trip_id, _ = create_trip_with_activity(service, ctx)

    with pytest.raises(NotFoundError):
        await service.search_locations(other_ctx, trip_id, "fort", 5)

    assert resolver.calls == []


@pytest.mark.asyncio
async def test_search_timeout_is_dependency_error(
    make_service, fake_resolver, ctx: RequestContext
) -> None:
    service = make_service(fake_resolver(delay_s=1.0))
    trip_id, _ = create_trip_with_activity(service, ctx)

    with pytest.raises(DependencyError):
        await service.search_locations(ctx, trip_id, "fort", 5)


@pytest.mark.asyncio
async def test_search_http_failure_is_dependency_error(
    make_service, fake_resolver, ctx: RequestContext
) -> None:
    service = make_service(fake_resolver(error=httpx.ConnectError("refused")))
    trip_id, _ = create_trip_with_activity(service, ctx)

    with pytest.raises(DependencyError):
        await service.search_locations(ctx, trip_id, "fort", 5)


@pytest.mark.asyncio
async def test_search_without_provider_is_dependency_error(make_service, ctx: RequestContext) -> None:
    service = make_service(None)
    trip_id, _ = create_trip_with_activity(service, ctx)

    with pytest.raises(DependencyError):
        await service.search_locations(ctx, trip_id, "fort", 5)


@pytest.mark.asyncio
async def test_autofill_writes_best_match(service: TripService, ctx: RequestContext, resolver) -> None:
    trip_id, activity_id = create_trip_with_activity(service, ctx)

    view = await service.auto_fill_location(ctx, trip_id, 1, activity_id, "fort")

    assert resolver.calls == [("fort near Galle", 1)]
    assert view.activity.location == "Church St, Galle 80000, Sri Lanka"
    assert view.activity.geo is not None
    assert view.activity.geo.lat == 6.0267
    assert view.activity.place_id == "ChIJgalle"

    stored = service.get_trip(trip_id, ctx).itinerary[0].activities[0].activity
    assert stored.geo == view.activity.geo


@pytest.mark.asyncio
async def test_autofill_no_results_is_not_found(
    make_service, fake_resolver, ctx: RequestContext
) -> None:
    service = make_service(fake_resolver(results=[]))
    trip_id, activity_id = create_trip_with_activity(service, ctx)

    with pytest.raises(NotFoundError):
        await service.auto_fill_location(ctx, trip_id, 1, activity_id, "nowhere")

    stored = service.get_trip(trip_id, ctx).itinerary[0].activities[0].activity
    assert stored.location == ""


@pytest.mark.asyncio
async def test_autofill_unknown_activity_skips_lookup(
    service: TripService, ctx: RequestContext, resolver
) -> None:
    trip_id, _ = create_trip_with_activity(service, ctx)

    with pytest.raises(NotFoundError):
        await service.auto_fill_location(ctx, trip_id, 1, uuid.uuid4(), "fort")

    assert resolver.calls == []
