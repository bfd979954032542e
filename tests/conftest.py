"""Shared pytest fixtures for all test suites."""

import asyncio
import os
import uuid
from collections.abc import Generator

import pytest
from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from backend.trips.config import Settings
from backend.trips.db.context import RequestContext
from backend.trips.db.engine import create_engine_from_settings, create_session_factory
from backend.trips.db.inmemory import (
    InMemoryActivityStore,
    InMemoryTripRepository,
    InMemoryUnitOfWork,
)
from backend.trips.db.models import Base
from backend.trips.models.views import PlaceResult
from backend.trips.services.trip_service import TripService

GALLE_FORT = PlaceResult(
    name="Galle Fort",
    description="17th-century Dutch fortifications",
    address="Church St, Galle 80000, Sri Lanka",
    rating=4.7,
    place_id="ChIJgalle",
    lat=6.0267,
    lon=80.2170,
)


class FakeResolver:
    """LocationResolver double recording every query it receives."""

    def __init__(
        self,
        results: list[PlaceResult] | None = None,
        error: Exception | None = None,
        delay_s: float = 0.0,
    ) -> None:
        self.results = results if results is not None else [GALLE_FORT]
        self.error = error
        self.delay_s = delay_s
        self.calls: list[tuple[str, int]] = []

    async def search(self, query: str, limit: int) -> list[PlaceResult]:
        self.calls.append((query, limit))
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.error is not None:
            raise self.error
        return self.results[:limit]


@pytest.fixture
def settings() -> Settings:
    """Memory-backed settings with a short location timeout."""
    return Settings(storage_backend="memory", google_maps_api_key="", location_timeout_ms=200)


@pytest.fixture
def ctx() -> RequestContext:
    return RequestContext(user_id=uuid.uuid4())


@pytest.fixture
def other_ctx() -> RequestContext:
    return RequestContext(user_id=uuid.uuid4())


@pytest.fixture
def trip_store() -> InMemoryTripRepository:
    return InMemoryTripRepository()


@pytest.fixture
def activity_store() -> InMemoryActivityStore:
    return InMemoryActivityStore()


@pytest.fixture
def resolver() -> FakeResolver:
    return FakeResolver()


@pytest.fixture
def service(
    settings: Settings,
    trip_store: InMemoryTripRepository,
    activity_store: InMemoryActivityStore,
    resolver: FakeResolver,
) -> TripService:
    """TripService over shared in-memory stores."""
    return TripService(
        lambda: InMemoryUnitOfWork(trip_store, activity_store),
        settings,
        resolver=resolver,
    )


@pytest.fixture
def sqlite_engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine with the schema created."""
    engine = create_engine_from_settings(
        Settings(storage_backend="sql", database_url="sqlite:///:memory:")
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(sqlite_engine)


@pytest.fixture
def postgres_engine() -> Generator[Engine, None, None]:
    """Engine for PostgreSQL integration tests.

    Requires DATABASE_URL to be set to a real PostgreSQL connection string.
    Tests using this fixture should be marked with @pytest.mark.postgres.
    """
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        pytest.skip("DATABASE_URL not set - skipping postgres test")

    if not database_url.startswith("postgresql"):
        pytest.skip(f"DATABASE_URL is not PostgreSQL: {database_url}")

    engine = create_engine_from_settings(Settings(storage_backend="sql", database_url=database_url))
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def fake_resolver() -> type[FakeResolver]:
    """The FakeResolver class, for tests that need a custom provider."""
    return FakeResolver


@pytest.fixture
def make_service(
    settings: Settings,
    trip_store: InMemoryTripRepository,
    activity_store: InMemoryActivityStore,
):
    """Build a TripService over the shared stores with a chosen resolver."""

    def _make(resolver: FakeResolver | None = None, **overrides: object) -> TripService:
        return TripService(
            lambda: InMemoryUnitOfWork(trip_store, activity_store),
            settings.model_copy(update=overrides),
            resolver=resolver,
        )

    return _make
