"""Service wiring for the HTTP layer."""

from functools import lru_cache

from backend.trips.adapters.locations import GooglePlacesResolver
from backend.trips.config import Settings, get_settings
from backend.trips.db.engine import create_engine_from_settings, create_session_factory
from backend.trips.db.inmemory import (
    InMemoryActivityStore,
    InMemoryTripRepository,
    InMemoryUnitOfWork,
)
from backend.trips.db.sql_repositories import SqlUnitOfWork
from backend.trips.llm.client import get_trip_generator
from backend.trips.services.trip_service import TripService


def build_trip_service(settings: Settings) -> TripService:
    """Build a TripService for the configured storage backend."""
    resolver = None
    if settings.google_maps_api_key:
        resolver = GooglePlacesResolver(
            api_key=settings.google_maps_api_key,
            base_url=settings.places_base_url,
            timeout_s=settings.location_timeout_ms / 1000,
        )
    generator = get_trip_generator(settings)

    if settings.storage_backend == "sql":
        session_factory = create_session_factory(create_engine_from_settings(settings))
        return TripService(
            lambda: SqlUnitOfWork(session_factory), settings, resolver=resolver, generator=generator
        )

    trips = InMemoryTripRepository()
    activities = InMemoryActivityStore()
    return TripService(
        lambda: InMemoryUnitOfWork(trips, activities),
        settings,
        resolver=resolver,
        generator=generator,
    )


@lru_cache
def get_trip_service() -> TripService:
    """FastAPI dependency returning the process-wide TripService."""
    return build_trip_service(get_settings())
