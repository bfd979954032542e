"""In-memory implementations of repository interfaces.

A unit of work forks private copies of the shared stores, runs against them,
and merges only the records it wrote back into the shared stores on commit.
Stored records are never mutated in place, so copies of the record dicts
are enough and a changed record is detected by identity.
"""

import copy
import threading
import uuid
from types import TracebackType

from backend.trips.db.context import RequestContext
from backend.trips.models.activity import Activity
from backend.trips.models.trip import Trip


class InMemoryActivityStore:
    """In-memory implementation of ActivityStore."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._activities: dict[uuid.UUID, Activity] = {}
        self._origin: dict[uuid.UUID, Activity] = {}

    def create(self, activity: Activity) -> uuid.UUID:
        """Persist a new activity."""
        with self.lock:
            self._activities[activity.activity_id] = activity.model_copy(deep=True)
        return activity.activity_id

    def get(self, activity_id: uuid.UUID) -> Activity | None:
        """Get activity by ID."""
        with self.lock:
            record = self._activities.get(activity_id)
        return record.model_copy(deep=True) if record is not None else None

    def get_many(self, activity_ids: list[uuid.UUID]) -> dict[uuid.UUID, Activity]:
        """Get several activities at once."""
        with self.lock:
            found = {a: self._activities[a] for a in activity_ids if a in self._activities}
        return {activity_id: record.model_copy(deep=True) for activity_id, record in found.items()}

    def save(self, activity: Activity) -> None:
        """Overwrite an existing activity record."""
        with self.lock:
            self._activities[activity.activity_id] = activity.model_copy(deep=True)

    def delete(self, activity_id: uuid.UUID) -> bool:
        """Delete an activity."""
        with self.lock:
            return self._activities.pop(activity_id, None) is not None

    def all_ids(self) -> set[uuid.UUID]:
        """IDs of every stored activity."""
        with self.lock:
            return set(self._activities)

    def fork(self) -> "InMemoryActivityStore":
        """Private working copy whose writes are tracked against this store."""
        with self.lock:
            child = copy.copy(self)
            child.lock = threading.RLock()
            child._activities = dict(self._activities)
            child._origin = dict(self._activities)
        return child

    def pending_changes(self) -> tuple[dict[uuid.UUID, Activity], set[uuid.UUID]]:
        """Records written and ids deleted since this copy was forked."""
        with self.lock:
            upserts = {k: v for k, v in self._activities.items() if self._origin.get(k) is not v}
            deletes = set(self._origin) - set(self._activities)
        return upserts, deletes

    def mark_clean(self) -> None:
        with self.lock:
            self._origin = dict(self._activities)

    def discard_changes(self) -> None:
        with self.lock:
            self._activities = dict(self._origin)

    def apply(self, upserts: dict[uuid.UUID, Activity], deletes: set[uuid.UUID]) -> None:
        """Merge a working copy's changes; other records are left alone."""
        with self.lock:
            for activity_id in deletes:
                self._activities.pop(activity_id, None)
            self._activities.update(upserts)


class InMemoryTripRepository:
    """In-memory implementation of TripRepository."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._trips: dict[uuid.UUID, Trip] = {}
        self._origin: dict[uuid.UUID, Trip] = {}
        # Insertion order breaks created_at ties when listing
        self._sequence: dict[uuid.UUID, int] = {}
        self._counter = 0

    def add(self, trip: Trip) -> None:
        """Persist a new trip."""
        with self.lock:
            self._counter += 1
            self._sequence[trip.trip_id] = self._counter
            self._trips[trip.trip_id] = trip.model_copy(deep=True)

    def get(self, trip_id: uuid.UUID) -> Trip | None:
        """Get trip by ID without ownership scoping."""
        with self.lock:
            record = self._trips.get(trip_id)
        return record.model_copy(deep=True) if record is not None else None

    def get_owned(self, trip_id: uuid.UUID, ctx: RequestContext) -> Trip | None:
        """Get trip by ID and owner."""
        with self.lock:
            record = self._trips.get(trip_id)

        if record is None or record.owner_id != ctx.user_id:
            return None

        return record.model_copy(deep=True)

    def get_by_share_token(self, token: str) -> Trip | None:
        """Get a shared trip by its share token."""
        with self.lock:
            records = list(self._trips.values())
        for record in records:
            if record.is_shared and record.share_token == token:
                return record.model_copy(deep=True)
        return None

    def share_token_exists(self, token: str) -> bool:
        """Check whether any trip holds the given share token."""
        with self.lock:
            return any(record.share_token == token for record in self._trips.values())

    def list_by_owner(self, ctx: RequestContext) -> list[Trip]:
        """List the caller's trips, most recently created first."""
        with self.lock:
            owned = [
                (record, self._sequence.get(record.trip_id, 0))
                for record in self._trips.values()
                if record.owner_id == ctx.user_id
            ]
        owned.sort(key=lambda pair: (pair[0].created_at, pair[1]), reverse=True)
        return [record.model_copy(deep=True) for record, _ in owned]

    def save(self, trip: Trip) -> None:
        """Overwrite an existing trip document."""
        with self.lock:
            if trip.trip_id not in self._trips:
                self.add(trip)
                return
            self._trips[trip.trip_id] = trip.model_copy(deep=True)

    def delete(self, trip_id: uuid.UUID, ctx: RequestContext) -> bool:
        """Delete a trip owned by the caller."""
        with self.lock:
            record = self._trips.get(trip_id)

            if record is None or record.owner_id != ctx.user_id:
                return False

            del self._trips[trip_id]
            self._sequence.pop(trip_id, None)
            return True

    def fork(self) -> "InMemoryTripRepository":
        """Private working copy whose writes are tracked against this repository."""
        with self.lock:
            child = copy.copy(self)
            child.lock = threading.RLock()
            child._trips = dict(self._trips)
            child._origin = dict(self._trips)
            child._sequence = dict(self._sequence)
        return child

    def pending_changes(self) -> tuple[dict[uuid.UUID, Trip], set[uuid.UUID]]:
        """Trips written and ids deleted since this copy was forked."""
        with self.lock:
            upserts = {k: v for k, v in self._trips.items() if self._origin.get(k) is not v}
            deletes = set(self._origin) - set(self._trips)
        return upserts, deletes

    def mark_clean(self) -> None:
        with self.lock:
            self._origin = dict(self._trips)

    def discard_changes(self) -> None:
        with self.lock:
            self._trips = dict(self._origin)

    def apply(self, upserts: dict[uuid.UUID, Trip], deletes: set[uuid.UUID]) -> None:
        """Merge a working copy's changes; other trips are left alone."""
        with self.lock:
            for trip_id in deletes:
                self._trips.pop(trip_id, None)
                self._sequence.pop(trip_id, None)
            for trip_id, trip in upserts.items():
                if trip_id not in self._sequence:
                    self._counter += 1
                    self._sequence[trip_id] = self._counter
                self._trips[trip_id] = trip


class InMemoryUnitOfWork:
    """In-memory implementation of UnitOfWork.

    `trips` and `activities` are private working copies forked on entry.
    commit() merges only the records this block wrote into the shared stores,
    holding both store locks so the trip and activity writes land together.
    Leaving without commit discards the copies and never touches shared state.
    """

    def __init__(
        self,
        trips: InMemoryTripRepository | None = None,
        activities: InMemoryActivityStore | None = None,
    ) -> None:
        self._shared_trips = trips if trips is not None else InMemoryTripRepository()
        self._shared_activities = (
            activities if activities is not None else InMemoryActivityStore()
        )
        self.trips = self._shared_trips
        self.activities = self._shared_activities
        self._entered = False

    def __enter__(self) -> "InMemoryUnitOfWork":
        # Lock order: trips, then activities
        with self._shared_trips.lock, self._shared_activities.lock:
            self.trips = self._shared_trips.fork()
            self.activities = self._shared_activities.fork()
        self._entered = True
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        # No-op after commit(), which marks the copies clean
        self.rollback()

    def commit(self) -> None:
        """Make all writes in this scope durable."""
        if not self._entered:
            return
        trip_changes = self.trips.pending_changes()
        activity_changes = self.activities.pending_changes()

        with self._shared_trips.lock, self._shared_activities.lock:
            self._shared_trips.apply(*trip_changes)
            self._shared_activities.apply(*activity_changes)

        self.trips.mark_clean()
        self.activities.mark_clean()

    def rollback(self) -> None:
        """Discard all writes in this scope."""
        if not self._entered:
            return
        self.trips.discard_changes()
        self.activities.discard_changes()
