"""Trip aggregate - invariant-checked mutations over one trip document.

The aggregate owns the trip document and writes activity records through the
activity store it was loaded with. It never commits: the caller's unit of work
decides whether the trip save and the activity writes land together.

Invariants kept after every mutation:
- day numbers are unique and within [1, len(dates)]
- every activity id referenced by a day exists in the activity store and is
  referenced by exactly one day
- share_token is set if and only if is_shared
"""

import logging
import math
import uuid
from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta
from datetime import time as TimeOfDay

from backend.trips.db.repositories import ActivityStore
from backend.trips.domain.route_optimizer import RouteStop, optimize_order, route_distance_km
from backend.trips.domain.share_tokens import ShareTokenIssuer
from backend.trips.errors import NotFoundError, ValidationError
from backend.trips.models.activity import Activity
from backend.trips.models.common import ActivityType, Geo, parse_geo
from backend.trips.models.generation import GeneratedPlan
from backend.trips.models.requests import (
    ActivityFields,
    AddBucketItemRequest,
    CreateTripRequest,
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
    PlaceResult,
    SharedTripView,
    TripSummary,
    TripView,
)

logger = logging.getLogger(__name__)

ACTIVITY_TYPES = {t.value for t in ActivityType}


def utcnow() -> datetime:
    return datetime.now(UTC)


def _require_text(value: str | None, field: str) -> str:
    """Trim a required string field, rejecting blanks."""
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


def _validate_budget(budget: float | None) -> float | None:
    if budget is None:
        return None
    if not math.isfinite(budget) or budget < 0:
        raise ValidationError("Budget must be a non-negative number")
    return float(budget)


def validate_dates(dates: list[str] | None) -> list[str]:
    """Check a trip's date list is non-empty and made of YYYY-MM-DD strings."""
    if not dates:
        raise ValidationError("Dates array cannot be empty")

    for value in dates:
        try:
            parsed = date.fromisoformat(value)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD") from e
        if parsed.isoformat() != value:
            raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD")

    return list(dates)


def expand_date_range(start: date, end: date) -> list[str]:
    """Every date from start to end inclusive, as ISO strings."""
    if start > end:
        raise ValidationError("Start date must be before or equal to end date")

    return [(start + timedelta(days=offset)).isoformat() for offset in range((end - start).days + 1)]


def _validate_activity_type(value: str) -> ActivityType:
    if value not in ACTIVITY_TYPES:
        raise ValidationError(
            f"Invalid activity type '{value}', expected one of {sorted(ACTIVITY_TYPES)}"
        )
    return ActivityType(value)


def _parse_clock_time(value: str | None) -> TimeOfDay | None:
    if value is None or not value.strip():
        return None
    try:
        return TimeOfDay.fromisoformat(value.strip())
    except ValueError as e:
        raise ValidationError(f"Invalid time format '{value}', expected HH:MM or HH:MM:SS") from e


def _resolve_geo(fields: ActivityFields) -> Geo | None:
    if fields.lat is None and fields.lon is None:
        return parse_geo(fields.location)
    if fields.lat is None or fields.lon is None:
        raise ValidationError("Both lat and lon are required when giving coordinates")
    if not (-90 <= fields.lat <= 90 and -180 <= fields.lon <= 180):
        raise ValidationError("Coordinates out of range")
    return Geo(lat=fields.lat, lon=fields.lon)


def new_trip(
    owner_id: uuid.UUID,
    request: CreateTripRequest,
    clock: Callable[[], datetime] = utcnow,
) -> Trip:
    """Validate a creation request and build the trip document it describes."""
    name = _require_text(request.name, "Trip name")
    destination = _require_text(request.destination, "Destination")

    if request.dates:
        dates = validate_dates(request.dates)
    elif request.start_date is not None and request.end_date is not None:
        dates = expand_date_range(request.start_date, request.end_date)
    else:
        raise ValidationError("Dates array cannot be empty")

    now = clock()
    return Trip(
        trip_id=uuid.uuid4(),
        owner_id=owner_id,
        name=name,
        destination=destination,
        dates=dates,
        budget=_validate_budget(request.budget),
        created_at=now,
        updated_at=now,
    )


class TripAggregate:
    """One trip plus the operations that mutate it."""

    def __init__(
        self,
        trip: Trip,
        activities: ActivityStore,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.trip = trip
        self._activities = activities
        self._clock = clock

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        owner_id: uuid.UUID,
        request: CreateTripRequest,
        activities: ActivityStore,
        clock: Callable[[], datetime] = utcnow,
    ) -> "TripAggregate":
        """Build a new trip with an empty itinerary and bucket list."""
        return cls(new_trip(owner_id, request, clock), activities, clock)

    def update(self, request: UpdateTripRequest) -> None:
        """Merge the provided fields; omitted fields are left alone.

        Existing day date snapshots are not re-synced when dates change.
        """
        changes: dict[str, object] = {}

        if request.name is not None:
            changes["name"] = _require_text(request.name, "Trip name")
        if request.destination is not None:
            changes["destination"] = _require_text(request.destination, "Destination")
        if request.dates is not None:
            dates = validate_dates(request.dates)
            last_day = max((d.day for d in self.trip.itinerary), default=0)
            if last_day > len(dates):
                raise ValidationError(
                    f"Itinerary has entries for day {last_day}; dates cannot shrink below it"
                )
            changes["dates"] = dates
        if request.budget is not None:
            changes["budget"] = _validate_budget(request.budget)

        # All checks pass before anything is applied
        for field, value in changes.items():
            setattr(self.trip, field, value)
        self._touch()

    def delete_all_activities(self) -> int:
        """Delete every activity record referenced by this trip's days."""
        deleted = 0
        for itinerary_day in self.trip.itinerary:
            for activity_id in itinerary_day.activities:
                if self._activities.delete(activity_id):
                    deleted += 1
        return deleted

    def apply_generated_plan(self, plan: GeneratedPlan, max_bucket_items: int = 5) -> int:
        """Add a generated plan's bucket items and activities to this trip.

        Only the first `max_bucket_items` bucket suggestions are kept. Days outside
        the trip's range and suggestions that fail validation are skipped.

        Returns:
            Number of suggestions skipped
        """
        skipped = 0

        for suggestion in plan.bucket_list[:max_bucket_items]:
            try:
                self.add_bucket_item(
                    AddBucketItemRequest(name=suggestion.name, description=suggestion.description)
                )
            except ValidationError as e:
                skipped += 1
                logger.warning(f"Skipping generated bucket item: {e.message}")

        for generated_day in plan.itinerary:
            if not 1 <= generated_day.day <= len(self.trip.dates):
                skipped += len(generated_day.activities)
                logger.warning(f"Skipping generated day {generated_day.day}: outside trip dates")
                continue

            for suggestion in generated_day.activities:
                fields = ActivityFields(
                    type=suggestion.type,
                    name=suggestion.name,
                    description=suggestion.description,
                    location=suggestion.location,
                    time=suggestion.time,
                )
                try:
                    self.add_activity(generated_day.day, fields)
                except ValidationError as e:
                    skipped += 1
                    logger.warning(f"Skipping generated activity '{suggestion.name}': {e.message}")

        return skipped

    # ------------------------------------------------------------------
    # Itinerary days
    # ------------------------------------------------------------------

    def _validate_day(self, day: int) -> int:
        if isinstance(day, bool) or not isinstance(day, int) or day < 1:
            raise ValidationError("Day must be a positive integer")
        if day > len(self.trip.dates):
            raise ValidationError(
                f"Day {day} exceeds trip dates ({len(self.trip.dates)} days)"
            )
        return day

    def find_day(self, day: int) -> ItineraryDay | None:
        for itinerary_day in self.trip.itinerary:
            if itinerary_day.day == day:
                return itinerary_day
        return None

    def require_day(self, day: int) -> ItineraryDay:
        itinerary_day = self.find_day(day)
        if itinerary_day is None:
            raise NotFoundError(f"Itinerary day {day} not found")
        return itinerary_day

    def _day_for_activity(self, activity_id: uuid.UUID) -> ItineraryDay:
        for itinerary_day in self.trip.itinerary:
            if activity_id in itinerary_day.activities:
                return itinerary_day
        raise NotFoundError("Activity not found in trip")

    def _get_or_create_day(self, day: int) -> ItineraryDay:
        itinerary_day = self.find_day(day)
        if itinerary_day is not None:
            return itinerary_day

        itinerary_day = ItineraryDay(
            day=day,
            date=self.trip.dates[day - 1],
            name=f"Day {day}: {self.trip.destination}",
        )
        self.trip.itinerary.append(itinerary_day)
        self.trip.itinerary.sort(key=lambda d: d.day)
        return itinerary_day

    def _attach(self, day: int, activity: Activity) -> None:
        self._activities.create(activity)
        self._get_or_create_day(day).activities.append(activity.activity_id)
        self._touch()

    def add_activity(self, day: int, fields: ActivityFields) -> Activity:
        """Create an activity record and append it to the given day."""
        self._validate_day(day)
        activity_type = _validate_activity_type(fields.type)
        name = _require_text(fields.name, "Activity name")

        if fields.rating is not None and not 0 <= fields.rating <= 5:
            raise ValidationError("Rating must be between 0 and 5")

        activity = Activity(
            activity_id=uuid.uuid4(),
            trip_id=self.trip.trip_id,
            type=activity_type,
            name=name,
            description=fields.description.strip(),
            rating=fields.rating,
            location=fields.location.strip(),
            geo=_resolve_geo(fields),
            time=_parse_clock_time(fields.time),
            created_at=self._clock(),
        )
        self._attach(day, activity)
        return activity

    def remove_activity(self, day: int, activity_id: uuid.UUID) -> None:
        """Detach an activity from its day and delete the record and its annotations."""
        itinerary_day = self.require_day(day)

        if activity_id not in itinerary_day.activities:
            raise NotFoundError("Activity not found in itinerary day")

        itinerary_day.activities.remove(activity_id)
        itinerary_day.notes = [n for n in itinerary_day.notes if n.activity_id != activity_id]
        itinerary_day.checklists = [
            c for c in itinerary_day.checklists if c.activity_id != activity_id
        ]
        self._activities.delete(activity_id)
        self._touch()

    def optimize_day(self, day: int) -> tuple[float, float]:
        """Reorder a day's activities by proximity.

        Returns:
            Total route distance in km before and after reordering
        """
        itinerary_day = self.require_day(day)
        records = self._activities.get_many(itinerary_day.activities)

        stops = [
            RouteStop(
                activity_id=activity_id,
                geo=records[activity_id].geo if activity_id in records else None,
            )
            for activity_id in itinerary_day.activities
        ]
        new_order = optimize_order(stops)
        by_id = {s.activity_id: s for s in stops}

        before = route_distance_km(stops)
        after = route_distance_km([by_id[activity_id] for activity_id in new_order])

        itinerary_day.activities = new_order
        self._touch()
        return before, after

    def apply_place(self, day: int, activity_id: uuid.UUID, place: PlaceResult) -> Activity:
        """Write a place suggestion's address and coordinates onto an activity."""
        itinerary_day = self.require_day(day)
        if activity_id not in itinerary_day.activities:
            raise NotFoundError("Activity not found in itinerary day")

        activity = self._activities.get(activity_id)
        if activity is None:
            raise NotFoundError("Activity record not found")

        activity.location = place.address or place.name
        if place.lat is not None and place.lon is not None:
            activity.geo = Geo(lat=place.lat, lon=place.lon)
        if place.place_id:
            activity.place_id = place.place_id
        if place.photo_url:
            activity.photo_url = place.photo_url
        if not activity.description:
            activity.description = place.name

        self._activities.save(activity)
        self._touch()
        return activity

    # ------------------------------------------------------------------
    # Bucket list
    # ------------------------------------------------------------------

    def _find_bucket_index(self, item_id: uuid.UUID) -> int:
        for index, item in enumerate(self.trip.bucket_list):
            if item.item_id == item_id:
                return index
        raise NotFoundError("Bucket item not found")

    def add_bucket_item(self, request: AddBucketItemRequest) -> BucketItem:
        item = BucketItem(
            item_id=uuid.uuid4(),
            name=_require_text(request.name, "Bucket item name"),
            description=request.description.strip(),
            photo_url=request.photo_url.strip(),
            address=request.address.strip(),
        )
        self.trip.bucket_list.append(item)
        self._touch()
        return item

    def remove_bucket_item(self, item_id: uuid.UUID) -> None:
        del self.trip.bucket_list[self._find_bucket_index(item_id)]
        self._touch()

    def confirm_bucket_item(self, item_id: uuid.UUID, confirmed: bool) -> BucketItem:
        item = self.trip.bucket_list[self._find_bucket_index(item_id)]
        item.confirmed = confirmed
        self._touch()
        return item

    def move_bucket_item(
        self, item_id: uuid.UUID, day: int, activity_type: str = "activity"
    ) -> Activity:
        """Promote a bucket item into an activity on the given day.

        Every check runs before the bucket list or activity store is touched.
        """
        index = self._find_bucket_index(item_id)
        self._validate_day(day)
        kind = _validate_activity_type(activity_type)

        item = self.trip.bucket_list[index]
        activity = Activity(
            activity_id=uuid.uuid4(),
            trip_id=self.trip.trip_id,
            type=kind,
            name=item.name,
            description=item.description,
            location=item.address,
            geo=parse_geo(item.address),
            photo_url=item.photo_url,
            created_at=self._clock(),
        )
        self._attach(day, activity)
        del self.trip.bucket_list[index]
        return activity

    # ------------------------------------------------------------------
    # Notes and checklists
    # ------------------------------------------------------------------

    def add_note(self, activity_id: uuid.UUID, title: str, content: str) -> ActivityNote:
        """Attach a titled note to an activity, replacing one with the same title."""
        itinerary_day = self._day_for_activity(activity_id)
        title = _require_text(title, "Note title")
        content = _require_text(content, "Note content")
        now = self._clock()

        for note in itinerary_day.notes:
            if note.activity_id == activity_id and note.title == title:
                note.content = content
                note.updated_at = now
                self._touch()
                return note

        note = ActivityNote(
            activity_id=activity_id, title=title, content=content, created_at=now, updated_at=now
        )
        itinerary_day.notes.append(note)
        self._touch()
        return note

    def add_checklist_items(
        self, activity_id: uuid.UUID, title: str, texts: list[str]
    ) -> Checklist:
        """Append unchecked items to an activity's checklist, creating it if needed."""
        itinerary_day = self._day_for_activity(activity_id)
        title = _require_text(title, "Checklist title")
        cleaned = [t.strip() for t in texts if t and t.strip()]
        if not cleaned:
            raise ValidationError("At least one valid checklist item text is required")

        checklist = self._find_checklist(itinerary_day, activity_id, title)
        if checklist is None:
            checklist = Checklist(checklist_id=uuid.uuid4(), activity_id=activity_id, title=title)
            itinerary_day.checklists.append(checklist)

        checklist.items.extend(ChecklistItem(item_id=uuid.uuid4(), text=text) for text in cleaned)
        self._touch()
        return checklist

    def update_checklist_item(
        self, activity_id: uuid.UUID, checklist_title: str, item_id: uuid.UUID, completed: bool
    ) -> ChecklistItem:
        itinerary_day = self._day_for_activity(activity_id)
        title = _require_text(checklist_title, "Checklist title")

        checklist = self._find_checklist(itinerary_day, activity_id, title)
        if checklist is None:
            raise NotFoundError(f"Checklist '{title}' not found")

        for item in checklist.items:
            if item.item_id == item_id:
                item.completed = completed
                self._touch()
                return item

        raise NotFoundError("Checklist item not found")

    @staticmethod
    def _find_checklist(
        itinerary_day: ItineraryDay, activity_id: uuid.UUID, title: str
    ) -> Checklist | None:
        for checklist in itinerary_day.checklists:
            if checklist.activity_id == activity_id and checklist.title == title:
                return checklist
        return None

    # ------------------------------------------------------------------
    # Sharing
    # ------------------------------------------------------------------

    def share(self, issuer: ShareTokenIssuer, is_taken: Callable[[str], bool]) -> str:
        """Mark the trip shared; an existing token is returned unchanged."""
        if self.trip.is_shared and self.trip.share_token:
            return self.trip.share_token

        self.trip.share_token = issuer.issue(is_taken)
        self.trip.is_shared = True
        self._touch()
        return self.trip.share_token

    def unshare(self) -> None:
        self.trip.is_shared = False
        self.trip.share_token = None
        self._touch()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def _touch(self) -> None:
        self.trip.updated_at = self._clock()

    def _resolve(
        self, itinerary_day: ItineraryDay, records: dict[uuid.UUID, Activity]
    ) -> ItineraryDayView:
        views = []
        for activity_id in itinerary_day.activities:
            record = records.get(activity_id)
            if record is None:
                logger.warning(
                    "Dangling activity reference",
                    extra={"structured": {"trip_id": str(self.trip.trip_id), "activity_id": str(activity_id)}},
                )
                continue
            views.append(self._activity_view(itinerary_day, record))

        return ItineraryDayView(
            day=itinerary_day.day,
            date=itinerary_day.date,
            name=itinerary_day.name,
            activities=views,
        )

    @staticmethod
    def _activity_view(itinerary_day: ItineraryDay, record: Activity) -> ActivityView:
        return ActivityView(
            activity=record,
            notes=[n for n in itinerary_day.notes if n.activity_id == record.activity_id],
            checklists=[c for c in itinerary_day.checklists if c.activity_id == record.activity_id],
        )

    def activity_view(self, activity_id: uuid.UUID) -> ActivityView:
        itinerary_day = self._day_for_activity(activity_id)
        record = self._activities.get(activity_id)
        if record is None:
            raise NotFoundError("Activity record not found")
        return self._activity_view(itinerary_day, record)

    def day_view(self, day: int) -> ItineraryDayView:
        itinerary_day = self.require_day(day)
        return self._resolve(itinerary_day, self._activities.get_many(itinerary_day.activities))

    def _resolved_days(self) -> list[ItineraryDayView]:
        all_ids = [a for d in self.trip.itinerary for a in d.activities]
        records = self._activities.get_many(all_ids)
        return [self._resolve(d, records) for d in self.trip.itinerary]

    def to_view(self) -> TripView:
        trip = self.trip
        return TripView(
            trip_id=trip.trip_id,
            owner_id=trip.owner_id,
            name=trip.name,
            destination=trip.destination,
            dates=list(trip.dates),
            budget=trip.budget,
            itinerary=self._resolved_days(),
            bucket_list=[item.model_copy() for item in trip.bucket_list],
            is_shared=trip.is_shared,
            share_token=trip.share_token,
            created_at=trip.created_at,
            updated_at=trip.updated_at,
        )

    def to_shared_view(self) -> SharedTripView:
        trip = self.trip
        return SharedTripView(
            trip_id=trip.trip_id,
            name=trip.name,
            destination=trip.destination,
            dates=list(trip.dates),
            itinerary=self._resolved_days(),
            bucket_list=[item.model_copy() for item in trip.bucket_list],
            updated_at=trip.updated_at,
        )

    def to_summary(self) -> TripSummary:
        trip = self.trip
        return TripSummary(
            trip_id=trip.trip_id,
            name=trip.name,
            destination=trip.destination,
            dates=list(trip.dates),
            budget=trip.budget,
            is_shared=trip.is_shared,
            created_at=trip.created_at,
            updated_at=trip.updated_at,
        )
