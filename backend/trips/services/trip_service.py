"""Trip service - the façade a transport layer calls into.

Each operation is one unit of work: load the trip through an owner-scoped
filter, apply an invariant-checked mutation on the aggregate, save, commit.
Location lookups and plan generation run outside the transaction and under
a timeout.
"""

import asyncio
import logging
import time
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta

import httpx
import openai

from backend.trips.adapters.locations import LocationResolver
from backend.trips.config import Settings
from backend.trips.db.context import RequestContext
from backend.trips.db.repositories import UnitOfWork
from backend.trips.domain.aggregate import TripAggregate, new_trip, utcnow
from backend.trips.domain.share_tokens import ShareTokenIssuer
from backend.trips.errors import DependencyError, NotFoundError, TripPlanError, ValidationError
from backend.trips.llm.client import DeterministicStubGenerator, TripPlanGenerator
from backend.trips.models.generation import GeneratedPlan
from backend.trips.models.requests import (
    ActivityFields,
    AddBucketItemRequest,
    CreateAITripRequest,
    CreateTripRequest,
    UpdateTripRequest,
)
from backend.trips.models.trip import ActivityNote, BucketItem, Checklist, ChecklistItem, Trip
from backend.trips.models.views import (
    ActivityView,
    ItineraryDayView,
    OptimizedDayView,
    PlaceResult,
    SharedTripView,
    TripSummary,
    TripView,
)
from backend.trips.utils.logging import StructuredTripLogger
from backend.trips.utils.metrics import PrometheusTripMetrics

logger = logging.getLogger(__name__)

DEFAULT_TRIP_DAYS = 7
DEFAULT_TRIP_LEAD_DAYS = 30


class TripService:
    """Orchestrates trip storage, the aggregate and external collaborators."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        settings: Settings,
        resolver: LocationResolver | None = None,
        generator: TripPlanGenerator | None = None,
        issuer: ShareTokenIssuer | None = None,
        metrics: PrometheusTripMetrics | None = None,
        op_logger: StructuredTripLogger | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._settings = settings
        self._resolver = resolver
        self._generator = generator or DeterministicStubGenerator()
        self._issuer = issuer or ShareTokenIssuer(
            token_bytes=settings.share_token_bytes,
            max_attempts=settings.share_token_max_attempts,
        )
        self._metrics = metrics or PrometheusTripMetrics()
        self._op_logger = op_logger or StructuredTripLogger()
        self._clock = clock

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    @contextmanager
    def _track(
        self, operation: str, ctx: RequestContext | None, trip_id: uuid.UUID | None = None
    ) -> Iterator[None]:
        """Record latency, outcome metrics and a structured log line."""
        start = time.perf_counter()
        outcome = "success"
        error_reason: str | None = None
        try:
            yield
        except TripPlanError as e:
            outcome = e.kind
            error_reason = e.message
            raise
        except Exception as e:
            outcome = "error"
            error_reason = type(e).__name__
            raise
        finally:
            latency_ms = (time.perf_counter() - start) * 1000
            self._metrics.record_operation(operation, outcome, latency_ms)
            self._op_logger.log_operation(
                operation,
                ctx.user_id if ctx else None,
                trip_id,
                outcome,
                latency_ms,
                error_reason,
            )

    def _load_owned(
        self, uow: UnitOfWork, ctx: RequestContext, trip_id: uuid.UUID
    ) -> TripAggregate:
        trip = uow.trips.get_owned(trip_id, ctx)
        if trip is None:
            raise NotFoundError("Trip not found")
        return TripAggregate(trip, uow.activities, self._clock)

    async def _lookup(self, query: str, limit: int) -> list[PlaceResult]:
        """Call the location provider under the configured timeout."""
        if self._resolver is None:
            raise DependencyError("No location provider configured")

        timeout_s = self._settings.location_timeout_ms / 1000
        start = time.perf_counter()
        outcome = "success"
        try:
            return await asyncio.wait_for(self._resolver.search(query, limit), timeout=timeout_s)
        except TimeoutError as e:
            outcome = "timeout"
            raise DependencyError(
                f"Location provider timed out after {self._settings.location_timeout_ms}ms"
            ) from e
        except httpx.HTTPError as e:
            outcome = "error"
            raise DependencyError(f"Location provider failed: {type(e).__name__}") from e
        except (KeyError, TypeError, ValueError) as e:
            outcome = "error"
            raise DependencyError("Location provider returned a malformed response") from e
        finally:
            self._metrics.record_location_lookup(outcome, (time.perf_counter() - start) * 1000)

    async def _generate(
        self, trip: Trip, interests: list[str], special_requests: str
    ) -> GeneratedPlan:
        """Call the plan generator under the configured timeout."""
        timeout_s = self._settings.generation_timeout_ms / 1000
        start = time.perf_counter()
        outcome = "success"
        try:
            return await asyncio.wait_for(
                self._generator.generate_plan(
                    name=trip.name,
                    destination=trip.destination,
                    num_days=len(trip.dates),
                    budget=trip.budget,
                    interests=interests,
                    special_requests=special_requests,
                ),
                timeout=timeout_s,
            )
        except TimeoutError as e:
            outcome = "timeout"
            raise DependencyError(
                f"Plan generator timed out after {self._settings.generation_timeout_ms}ms"
            ) from e
        except openai.OpenAIError as e:
            outcome = "error"
            raise DependencyError(f"Plan generator failed: {type(e).__name__}") from e
        except (KeyError, TypeError, ValueError) as e:
            outcome = "error"
            raise DependencyError("Plan generator returned a malformed plan") from e
        finally:
            self._metrics.record_generation(outcome, (time.perf_counter() - start) * 1000)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create_trip(self, ctx: RequestContext, request: CreateTripRequest) -> TripView:
        with self._track("create_trip", ctx):
            with self._uow_factory() as uow:
                aggregate = TripAggregate.create(ctx.user_id, request, uow.activities, self._clock)
                uow.trips.add(aggregate.trip)
                uow.commit()
                return aggregate.to_view()

    async def create_ai_trip(self, ctx: RequestContext, request: CreateAITripRequest) -> TripView:
        """Create a trip and fill it from a generated plan.

        The request is validated before the generator is called, and the plan is
        generated outside the transaction. The trip, its bucket items and its
        activities are then written in one unit of work.
        """
        with self._track("create_ai_trip", ctx):
            interests = [i.strip() for i in request.interests if i.strip()]
            if not interests:
                raise ValidationError("At least one interest is required")

            dates = request.dates or self._default_trip_dates()
            trip = new_trip(
                ctx.user_id,
                CreateTripRequest(
                    name=request.name,
                    destination=request.destination,
                    dates=dates,
                    budget=request.budget,
                ),
                self._clock,
            )

            plan = await self._generate(trip, interests, request.special_requests.strip())

            with self._uow_factory() as uow:
                uow.trips.add(trip)
                aggregate = TripAggregate(trip, uow.activities, self._clock)
                skipped = aggregate.apply_generated_plan(plan)
                uow.trips.save(aggregate.trip)
                uow.commit()
                view = aggregate.to_view()

            logger.info(
                "Generated trip created",
                extra={"structured": {"trip_id": str(trip.trip_id), "suggestions_skipped": skipped}},
            )
            return view

    def _default_trip_dates(self) -> list[str]:
        start = self._clock().date() + timedelta(days=DEFAULT_TRIP_LEAD_DAYS)
        return [
            (start + timedelta(days=offset)).isoformat() for offset in range(DEFAULT_TRIP_DAYS)
        ]

    def update_trip(
        self, ctx: RequestContext, trip_id: uuid.UUID, request: UpdateTripRequest
    ) -> TripView:
        with self._track("update_trip", ctx, trip_id):
            with self._uow_factory() as uow:
                aggregate = self._load_owned(uow, ctx, trip_id)
                aggregate.update(request)
                uow.trips.save(aggregate.trip)
                uow.commit()
                return aggregate.to_view()

    def get_trip(self, trip_id: uuid.UUID, ctx: RequestContext | None = None) -> TripView:
        """Get a trip with activities resolved.

        With a context the lookup is scoped to the caller's trips.
        """
        with self._track("get_trip", ctx, trip_id):
            with self._uow_factory() as uow:
                if ctx is not None:
                    aggregate = self._load_owned(uow, ctx, trip_id)
                else:
                    trip = uow.trips.get(trip_id)
                    if trip is None:
                        raise NotFoundError("Trip not found")
                    aggregate = TripAggregate(trip, uow.activities, self._clock)
                return aggregate.to_view()

    def list_trips(self, ctx: RequestContext) -> list[TripSummary]:
        with self._track("list_trips", ctx):
            with self._uow_factory() as uow:
                return [
                    TripAggregate(trip, uow.activities, self._clock).to_summary()
                    for trip in uow.trips.list_by_owner(ctx)
                ]

    def delete_trip(self, ctx: RequestContext, trip_id: uuid.UUID) -> None:
        """Delete a trip and every activity its days reference."""
        with self._track("delete_trip", ctx, trip_id):
            with self._uow_factory() as uow:
                aggregate = self._load_owned(uow, ctx, trip_id)
                deleted = aggregate.delete_all_activities()
                if not uow.trips.delete(trip_id, ctx):
                    raise NotFoundError("Trip not found")
                uow.commit()
                logger.info(
                    "Trip deleted",
                    extra={"structured": {"trip_id": str(trip_id), "activities_deleted": deleted}},
                )

    # ------------------------------------------------------------------
    # Itinerary
    # ------------------------------------------------------------------

    def add_itinerary_item(
        self, ctx: RequestContext, trip_id: uuid.UUID, day: int, fields: ActivityFields
    ) -> ItineraryDayView:
        with self._track("add_itinerary_item", ctx, trip_id):
            with self._uow_factory() as uow:
                aggregate = self._load_owned(uow, ctx, trip_id)
                aggregate.add_activity(day, fields)
                uow.trips.save(aggregate.trip)
                view = aggregate.day_view(day)
                uow.commit()
                return view

    def remove_itinerary_item(
        self, ctx: RequestContext, trip_id: uuid.UUID, day: int, activity_id: uuid.UUID
    ) -> None:
        with self._track("remove_itinerary_item", ctx, trip_id):
            with self._uow_factory() as uow:
                aggregate = self._load_owned(uow, ctx, trip_id)
                aggregate.remove_activity(day, activity_id)
                uow.trips.save(aggregate.trip)
                uow.commit()

    def optimize_day(self, ctx: RequestContext, trip_id: uuid.UUID, day: int) -> OptimizedDayView:
        """Reorder a day's activities by proximity and persist the new order."""
        with self._track("optimize_day", ctx, trip_id):
            with self._uow_factory() as uow:
                aggregate = self._load_owned(uow, ctx, trip_id)
                before, after = aggregate.optimize_day(day)
                uow.trips.save(aggregate.trip)
                view = aggregate.day_view(day)
                uow.commit()

        return OptimizedDayView(
            **view.model_dump(),
            distance_before_km=round(before, 3),
            distance_after_km=round(after, 3),
        )

    # ------------------------------------------------------------------
    # Bucket list
    # ------------------------------------------------------------------

    def add_bucket_item(
        self, ctx: RequestContext, trip_id: uuid.UUID, request: AddBucketItemRequest
    ) -> BucketItem:
        with self._track("add_bucket_item", ctx, trip_id):
            with self._uow_factory() as uow:
                aggregate = self._load_owned(uow, ctx, trip_id)
                item = aggregate.add_bucket_item(request)
                uow.trips.save(aggregate.trip)
                uow.commit()
                return item

    def remove_bucket_item(self, ctx: RequestContext, trip_id: uuid.UUID, item_id: uuid.UUID) -> None:
        with self._track("remove_bucket_item", ctx, trip_id):
            with self._uow_factory() as uow:
                aggregate = self._load_owned(uow, ctx, trip_id)
                aggregate.remove_bucket_item(item_id)
                uow.trips.save(aggregate.trip)
                uow.commit()

    def confirm_bucket_item(
        self, ctx: RequestContext, trip_id: uuid.UUID, item_id: uuid.UUID, confirmed: bool
    ) -> BucketItem:
        with self._track("confirm_bucket_item", ctx, trip_id):
            with self._uow_factory() as uow:
                aggregate = self._load_owned(uow, ctx, trip_id)
                item = aggregate.confirm_bucket_item(item_id, confirmed)
                uow.trips.save(aggregate.trip)
                uow.commit()
                return item

    def move_bucket_to_itinerary(
        self,
        ctx: RequestContext,
        trip_id: uuid.UUID,
        item_id: uuid.UUID,
        day: int,
        activity_type: str = "activity",
    ) -> ActivityView:
        """Promote a bucket item into an activity on the given day."""
        with self._track("move_bucket_to_itinerary", ctx, trip_id):
            with self._uow_factory() as uow:
                aggregate = self._load_owned(uow, ctx, trip_id)
                activity = aggregate.move_bucket_item(item_id, day, activity_type)
                uow.trips.save(aggregate.trip)
                view = aggregate.activity_view(activity.activity_id)
                uow.commit()
                return view

    # ------------------------------------------------------------------
    # Notes and checklists
    # ------------------------------------------------------------------

    def add_note(
        self,
        ctx: RequestContext,
        trip_id: uuid.UUID,
        activity_id: uuid.UUID,
        title: str,
        content: str,
    ) -> ActivityNote:
        with self._track("add_note", ctx, trip_id):
            with self._uow_factory() as uow:
                aggregate = self._load_owned(uow, ctx, trip_id)
                note = aggregate.add_note(activity_id, title, content)
                uow.trips.save(aggregate.trip)
                uow.commit()
                return note

    def add_checklist_items(
        self,
        ctx: RequestContext,
        trip_id: uuid.UUID,
        activity_id: uuid.UUID,
        title: str,
        texts: list[str],
    ) -> Checklist:
        with self._track("add_checklist_items", ctx, trip_id):
            with self._uow_factory() as uow:
                aggregate = self._load_owned(uow, ctx, trip_id)
                checklist = aggregate.add_checklist_items(activity_id, title, texts)
                uow.trips.save(aggregate.trip)
                uow.commit()
                return checklist

    def update_checklist_item(
        self,
        ctx: RequestContext,
        trip_id: uuid.UUID,
        activity_id: uuid.UUID,
        checklist_title: str,
        item_id: uuid.UUID,
        completed: bool,
    ) -> ChecklistItem:
        with self._track("update_checklist_item", ctx, trip_id):
            with self._uow_factory() as uow:
                aggregate = self._load_owned(uow, ctx, trip_id)
                item = aggregate.update_checklist_item(activity_id, checklist_title, item_id, completed)
                uow.trips.save(aggregate.trip)
                uow.commit()
                return item

    # ------------------------------------------------------------------
    # Sharing
    # ------------------------------------------------------------------

    def share_trip(self, ctx: RequestContext, trip_id: uuid.UUID) -> str:
        """Share a trip read-only; calling again returns the same token."""
        with self._track("share_trip", ctx, trip_id):
            with self._uow_factory() as uow:
                aggregate = self._load_owned(uow, ctx, trip_id)
                token = aggregate.share(self._issuer, uow.trips.share_token_exists)
                uow.trips.save(aggregate.trip)
                uow.commit()
                return token

    def unshare_trip(self, ctx: RequestContext, trip_id: uuid.UUID) -> None:
        with self._track("unshare_trip", ctx, trip_id):
            with self._uow_factory() as uow:
                aggregate = self._load_owned(uow, ctx, trip_id)
                aggregate.unshare()
                uow.trips.save(aggregate.trip)
                uow.commit()

    def get_shared_trip(self, token: str) -> SharedTripView:
        """Read-only trip for a share token, independent of caller identity."""
        with self._track("get_shared_trip", None):
            if not token or not token.strip():
                raise NotFoundError("Shared trip not found")
            with self._uow_factory() as uow:
                trip = uow.trips.get_by_share_token(token.strip())
                if trip is None:
                    raise NotFoundError("Shared trip not found")
                return TripAggregate(trip, uow.activities, self._clock).to_shared_view()

    # ------------------------------------------------------------------
    # Location search
    # ------------------------------------------------------------------

    async def search_locations(
        self, ctx: RequestContext, trip_id: uuid.UUID, query: str, limit: int = 5
    ) -> list[PlaceResult]:
        """Search places near the trip's destination."""
        with self._track("search_locations", ctx, trip_id):
            if not query or not query.strip():
                raise ValidationError("Query is required")
            if isinstance(limit, bool) or not 1 <= limit <= self._settings.search_limit_max:
                raise ValidationError(
                    f"Limit must be between 1 and {self._settings.search_limit_max}"
                )

            with self._uow_factory() as uow:
                destination = self._load_owned(uow, ctx, trip_id).trip.destination

            return await self._lookup(f"{query.strip()} in {destination}", limit)

    async def auto_fill_location(
        self,
        ctx: RequestContext,
        trip_id: uuid.UUID,
        day: int,
        activity_id: uuid.UUID,
        query: str,
    ) -> ActivityView:
        """Fill an activity's address and coordinates from the best search match."""
        with self._track("auto_fill_location", ctx, trip_id):
            if not query or not query.strip():
                raise ValidationError("Query is required")

            with self._uow_factory() as uow:
                aggregate = self._load_owned(uow, ctx, trip_id)
                if activity_id not in aggregate.require_day(day).activities:
                    raise NotFoundError("Activity not found in itinerary day")
                destination = aggregate.trip.destination

            results = await self._lookup(f"{query.strip()} near {destination}", 1)
            if not results:
                raise NotFoundError("No location suggestions found")

            with self._uow_factory() as uow:
                aggregate = self._load_owned(uow, ctx, trip_id)
                aggregate.apply_place(day, activity_id, results[0])
                uow.trips.save(aggregate.trip)
                view = aggregate.activity_view(activity_id)
                uow.commit()
                return view
