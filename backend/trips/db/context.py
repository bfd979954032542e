"""Request context for ownership enforcement."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class RequestContext:
    """Request context containing the authenticated caller identity.

    Used to scope every trip lookup to its owner in all database operations.
    """

    user_id: UUID
