"""Integration tests for the SQL unit of work over SQLite."""

import uuid

import pytest
from sqlalchemy import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from backend.trips.config import Settings
from backend.trips.db.context import RequestContext
from backend.trips.db.engine import create_engine_from_settings, create_session_factory
from backend.trips.db.models import ActivityRow, TripRow
from backend.trips.db.sql_repositories import SqlUnitOfWork
from backend.trips.errors import ConflictError, DependencyError, NotFoundError
from backend.trips.models import (
    ActivityFields,
    AddBucketItemRequest,
    CreateAITripRequest,
    CreateTripRequest,
)
from backend.trips.services.trip_service import TripService


@pytest.fixture
def sql_service(session_factory: sessionmaker[Session]) -> TripService:
    return TripService(
        lambda: SqlUnitOfWork(session_factory),
        Settings(storage_backend="sql", database_url="sqlite:///:memory:"),
    )


def count_rows(session_factory: sessionmaker[Session], model: type) -> int:
    with session_factory() as session:
        return session.query(model).count()


def test_full_trip_lifecycle(sql_service: TripService, session_factory, ctx: RequestContext) -> None:
    trip_id = sql_service.create_trip(
        ctx,
        CreateTripRequest(name="Coast Run", destination="Galle", dates=["2025-12-01", "2025-12-02"]),
    ).trip_id
    sql_service.add_itinerary_item(
        ctx,
        trip_id,
        1,
        ActivityFields(type="place", name="Unawatuna Beach", location="6.0076,80.2476", time="09:00"),
    )
    day = sql_service.add_itinerary_item(
        ctx, trip_id, 1, ActivityFields(type="food", name="Beach Cafe", location="6.0100,80.2500")
    )
    activity_id = day.activities[0].activity.activity_id
    sql_service.add_note(ctx, trip_id, activity_id, "Tickets", "Free entry")
    item = sql_service.add_bucket_item(ctx, trip_id, AddBucketItemRequest(name="Jungle Beach"))
    sql_service.move_bucket_to_itinerary(ctx, trip_id, item.item_id, 2)

    trip = sql_service.get_trip(trip_id, ctx)

    assert [d.day for d in trip.itinerary] == [1, 2]
    assert [a.activity.name for a in trip.itinerary[0].activities] == ["Unawatuna Beach", "Beach Cafe"]
    assert trip.itinerary[0].activities[0].activity.time is not None
    assert trip.itinerary[0].activities[0].notes[0].content == "Free entry"
    assert trip.bucket_list == []
    assert count_rows(session_factory, ActivityRow) == 3

    optimized = sql_service.optimize_day(ctx, trip_id, 1)
    assert len(optimized.activities) == 2

    sql_service.delete_trip(ctx, trip_id)

    assert count_rows(session_factory, TripRow) == 0
    assert count_rows(session_factory, ActivityRow) == 0


def test_owner_scoping(sql_service: TripService, ctx: RequestContext, other_ctx: RequestContext) -> None:
    trip_id = sql_service.create_trip(
        ctx, CreateTripRequest(name="Mine", destination="Galle", dates=["2025-12-01"])
    ).trip_id

    with pytest.raises(NotFoundError):
        sql_service.get_trip(trip_id, other_ctx)
    with pytest.raises(NotFoundError):
        sql_service.delete_trip(other_ctx, trip_id)

    assert sql_service.list_trips(other_ctx) == []
    assert [t.trip_id for t in sql_service.list_trips(ctx)] == [trip_id]


def test_share_lookup(sql_service: TripService, ctx: RequestContext) -> None:
    trip_id = sql_service.create_trip(
        ctx, CreateTripRequest(name="Mine", destination="Galle", dates=["2025-12-01"])
    ).trip_id

    token = sql_service.share_trip(ctx, trip_id)

    assert sql_service.share_trip(ctx, trip_id) == token
    assert sql_service.get_shared_trip(token).trip_id == trip_id

    sql_service.unshare_trip(ctx, trip_id)
    with pytest.raises(NotFoundError):
        sql_service.get_shared_trip(token)


def test_uncommitted_writes_are_discarded(session_factory, ctx: RequestContext) -> None:
    service = TripService(
        lambda: SqlUnitOfWork(session_factory),
        Settings(storage_backend="sql", database_url="sqlite:///:memory:"),
    )
    trip_id = service.create_trip(
        ctx, CreateTripRequest(name="Mine", destination="Galle", dates=["2025-12-01"])
    ).trip_id

    with SqlUnitOfWork(session_factory) as uow:
        trip = uow.trips.get_owned(trip_id, ctx)
        assert trip is not None
        trip.name = "Never saved"
        uow.trips.save(trip)
        # no commit

    assert service.get_trip(trip_id, ctx).name == "Mine"


def test_duplicate_share_token_is_conflict(session_factory, ctx: RequestContext) -> None:
    service = TripService(
        lambda: SqlUnitOfWork(session_factory),
        Settings(storage_backend="sql", database_url="sqlite:///:memory:"),
    )
    first = service.create_trip(ctx, CreateTripRequest(name="A", destination="Galle", dates=["2025-12-01"]))
    second = service.create_trip(ctx, CreateTripRequest(name="B", destination="Galle", dates=["2025-12-01"]))
    token = service.share_trip(ctx, first.trip_id)

    with pytest.raises(ConflictError):
        with SqlUnitOfWork(session_factory) as uow:
            trip = uow.trips.get_owned(second.trip_id, ctx)
            assert trip is not None
            trip.is_shared = True
            trip.share_token = token
            uow.trips.save(trip)
            uow.commit()


@pytest.mark.asyncio
async def test_generated_trip_writes_trip_and_activities_together(
    sql_service: TripService, session_factory, ctx: RequestContext
) -> None:
    view = await sql_service.create_ai_trip(
        ctx,
        CreateAITripRequest(
            name="Food Tour",
            destination="Galle",
            dates=["2025-12-01", "2025-12-02"],
            interests=["food"],
        ),
    )

    assert count_rows(session_factory, TripRow) == 1
    assert count_rows(session_factory, ActivityRow) == 6

    stored = sql_service.get_trip(view.trip_id, ctx)
    assert [len(d.activities) for d in stored.itinerary] == [3, 3]
    assert [b.name for b in stored.bucket_list] == ["Food in Galle"]


def test_missing_tables_surface_as_dependency_error(ctx: RequestContext) -> None:
    engine: Engine = create_engine_from_settings(
        Settings(storage_backend="sql", database_url="sqlite:///:memory:")
    )
    service = TripService(
        lambda: SqlUnitOfWork(create_session_factory(engine)),
        Settings(storage_backend="sql", database_url="sqlite:///:memory:"),
    )

    with pytest.raises(DependencyError) as exc_info:
        service.get_trip(uuid.uuid4(), ctx)

    assert isinstance(exc_info.value.__cause__, OperationalError)
    engine.dispose()
