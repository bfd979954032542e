"""SQL implementations of repository interfaces.

Repositories never commit on their own; the unit of work owns the session and
commits once per service operation so that trip and activity writes land
together or not at all.
"""

import logging
import uuid
from types import TracebackType

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from backend.trips.db.context import RequestContext
from backend.trips.db.models import ActivityRow, TripRow
from backend.trips.db.queries import query_owned_trips, query_shared_trips
from backend.trips.errors import ConflictError, DependencyError
from backend.trips.models.activity import Activity
from backend.trips.models.trip import Trip

logger = logging.getLogger(__name__)


class SqlActivityStore:
    """SQL implementation of ActivityStore."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, activity: Activity) -> uuid.UUID:
        """Persist a new activity."""
        row = ActivityRow(
            activity_id=activity.activity_id,
            trip_id=activity.trip_id,
            document=activity.model_dump(mode="json"),
            created_at=activity.created_at,
        )

        self._session.add(row)
        return activity.activity_id

    def get(self, activity_id: uuid.UUID) -> Activity | None:
        """Get activity by ID."""
        row = self._session.get(ActivityRow, activity_id)

        if row is None:
            return None

        return Activity.model_validate(row.document)

    def get_many(self, activity_ids: list[uuid.UUID]) -> dict[uuid.UUID, Activity]:
        """Get several activities at once."""
        if not activity_ids:
            return {}

        rows = (
            self._session.query(ActivityRow)
            .filter(ActivityRow.activity_id.in_(activity_ids))
            .all()
        )

        return {row.activity_id: Activity.model_validate(row.document) for row in rows}

    def save(self, activity: Activity) -> None:
        """Overwrite an existing activity record."""
        row = self._session.get(ActivityRow, activity.activity_id)

        if row is None:
            self.create(activity)
            return

        row.document = activity.model_dump(mode="json")

    def delete(self, activity_id: uuid.UUID) -> bool:
        """Delete an activity."""
        deleted = (
            self._session.query(ActivityRow)
            .filter(ActivityRow.activity_id == activity_id)
            .delete(synchronize_session="fetch")
        )
        return deleted > 0


class SqlTripRepository:
    """SQL implementation of TripRepository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    @staticmethod
    def _to_row_fields(trip: Trip) -> dict:
        return {
            "owner_id": trip.owner_id,
            "is_shared": trip.is_shared,
            "share_token": trip.share_token,
            "document": trip.model_dump(mode="json"),
            "created_at": trip.created_at,
            "updated_at": trip.updated_at,
        }

    def add(self, trip: Trip) -> None:
        """Persist a new trip."""
        self._session.add(TripRow(trip_id=trip.trip_id, **self._to_row_fields(trip)))
        # Activity rows added later in the same unit of work reference this row
        self._session.flush()

    def get(self, trip_id: uuid.UUID) -> Trip | None:
        """Get trip by ID without ownership scoping."""
        row = self._session.get(TripRow, trip_id)

        if row is None:
            return None

        return Trip.model_validate(row.document)

    def get_owned(self, trip_id: uuid.UUID, ctx: RequestContext) -> Trip | None:
        """Get trip by ID and owner."""
        row = query_owned_trips(self._session, ctx).filter(TripRow.trip_id == trip_id).first()

        if row is None:
            return None

        return Trip.model_validate(row.document)

    def get_by_share_token(self, token: str) -> Trip | None:
        """Get a shared trip by its share token."""
        row = query_shared_trips(self._session, token).first()

        if row is None:
            return None

        return Trip.model_validate(row.document)

    def share_token_exists(self, token: str) -> bool:
        """Check whether any trip holds the given share token."""
        return (
            self._session.query(TripRow.trip_id).filter(TripRow.share_token == token).first()
            is not None
        )

    def list_by_owner(self, ctx: RequestContext) -> list[Trip]:
        """List the caller's trips, most recently created first."""
        rows = query_owned_trips(self._session, ctx).order_by(TripRow.created_at.desc()).all()
        return [Trip.model_validate(row.document) for row in rows]

    def save(self, trip: Trip) -> None:
        """Overwrite an existing trip document."""
        ctx = RequestContext(user_id=trip.owner_id)
        row = query_owned_trips(self._session, ctx).filter(TripRow.trip_id == trip.trip_id).first()

        if row is None:
            self.add(trip)
            return

        for field, value in self._to_row_fields(trip).items():
            setattr(row, field, value)

    def delete(self, trip_id: uuid.UUID, ctx: RequestContext) -> bool:
        """Delete a trip owned by the caller."""
        deleted = (
            query_owned_trips(self._session, ctx)
            .filter(TripRow.trip_id == trip_id)
            .delete(synchronize_session="fetch")
        )
        return deleted > 0


class SqlUnitOfWork:
    """SQL implementation of UnitOfWork - one session, one commit."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        self._session: Session | None = None

    def __enter__(self) -> "SqlUnitOfWork":
        self._session = self._session_factory()
        self.trips = SqlTripRepository(self._session)
        self.activities = SqlActivityStore(self._session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            self.rollback()
        finally:
            if self._session is not None:
                self._session.close()
                self._session = None

        if isinstance(exc, SQLAlchemyError):
            logger.error("Persistence failure", extra={"structured": {"error": type(exc).__name__}})
            raise DependencyError(f"Trip store unavailable: {type(exc).__name__}") from exc

    def commit(self) -> None:
        """Make all writes in this scope durable."""
        if self._session is None:
            raise RuntimeError("Unit of work is not active")

        try:
            self._session.commit()
        except IntegrityError as e:
            self._session.rollback()
            raise ConflictError("Trip store rejected a conflicting write") from e
        except SQLAlchemyError as e:
            self._session.rollback()
            raise DependencyError(f"Trip store unavailable: {type(e).__name__}") from e

    def rollback(self) -> None:
        """Discard all writes in this scope."""
        if self._session is not None:
            self._session.rollback()
