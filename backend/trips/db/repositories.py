"""Repository protocol interfaces for data access."""

from types import TracebackType
from typing import Protocol
from uuid import UUID

from backend.trips.db.context import RequestContext
from backend.trips.models.activity import Activity
from backend.trips.models.trip import Trip


class ActivityStore(Protocol):
    """Store for independently persisted activity records."""

    def create(self, activity: Activity) -> UUID:
        """Persist a new activity.

        Args:
            activity: Activity record

        Returns:
            Activity ID
        """
        ...

    def get(self, activity_id: UUID) -> Activity | None:
        """Get activity by ID.

        Args:
            activity_id: Activity ID

        Returns:
            Activity or None if not found
        """
        ...

    def get_many(self, activity_ids: list[UUID]) -> dict[UUID, Activity]:
        """Get several activities at once; missing IDs are omitted."""
        ...

    def save(self, activity: Activity) -> None:
        """Overwrite an existing activity record."""
        ...

    def delete(self, activity_id: UUID) -> bool:
        """Delete an activity.

        Args:
            activity_id: Activity ID

        Returns:
            True if a record was deleted
        """
        ...


class TripRepository(Protocol):
    """Repository for trip documents."""

    def add(self, trip: Trip) -> None:
        """Persist a new trip."""
        ...

    def get(self, trip_id: UUID) -> Trip | None:
        """Get trip by ID without ownership scoping.

        Args:
            trip_id: Trip ID

        Returns:
            Trip or None if not found
        """
        ...

    def get_owned(self, trip_id: UUID, ctx: RequestContext) -> Trip | None:
        """Get trip by ID and owner in a single filter.

        Args:
            trip_id: Trip ID
            ctx: Request context (enforces ownership)

        Returns:
            Trip or None if not found or not owned by the caller
        """
        ...

    def get_by_share_token(self, token: str) -> Trip | None:
        """Get a shared trip by its share token."""
        ...

    def share_token_exists(self, token: str) -> bool:
        """Check whether any trip holds the given share token."""
        ...

    def list_by_owner(self, ctx: RequestContext) -> list[Trip]:
        """List the caller's trips, most recently created first."""
        ...

    def save(self, trip: Trip) -> None:
        """Overwrite an existing trip document."""
        ...

    def delete(self, trip_id: UUID, ctx: RequestContext) -> bool:
        """Delete a trip owned by the caller.

        Returns:
            True if a trip was deleted
        """
        ...


class UnitOfWork(Protocol):
    """Transaction scope spanning trip and activity writes.

    Leaving the context without calling commit() rolls back every write made
    inside it.
    """

    trips: TripRepository
    activities: ActivityStore

    def __enter__(self) -> "UnitOfWork": ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...

    def commit(self) -> None:
        """Make all writes in this scope durable."""
        ...

    def rollback(self) -> None:
        """Discard all writes in this scope."""
        ...
