"""Ownership-safe query helpers."""

from sqlalchemy.orm import Query, Session

from backend.trips.db.context import RequestContext
from backend.trips.db.models import TripRow


def query_owned_trips(session: Session, ctx: RequestContext) -> Query:
    """Query trip table with owner scoping enforced.

    Args:
        session: SQLAlchemy session
        ctx: Request context with user_id

    Returns:
        Query filtered by owner_id
    """
    return session.query(TripRow).filter(TripRow.owner_id == ctx.user_id)


def query_shared_trips(session: Session, token: str) -> Query:
    """Query trips exposed through the given share token.

    Args:
        session: SQLAlchemy session
        token: Share token

    Returns:
        Query filtered by share_token and is_shared
    """
    return session.query(TripRow).filter(
        TripRow.share_token == token, TripRow.is_shared.is_(True)
    )
