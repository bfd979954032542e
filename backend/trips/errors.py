"""Typed failures surfaced by the trip core.

The transport layer maps each kind to a protocol status; nothing below the
service ever leaks a raw persistence or HTTP client exception.
"""


class TripPlanError(Exception):
    """Base class for all trip core failures."""

    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TripPlanError):
    """Malformed or out-of-range input."""

    kind = "validation_error"


class NotFoundError(TripPlanError):
    """Trip, day, activity, bucket item or checklist entry absent or not owned."""

    kind = "not_found"


class DependencyError(TripPlanError):
    """Location provider or persistence layer unreachable or timed out."""

    kind = "dependency_error"


class ConflictError(TripPlanError):
    """Share token collision retries exhausted."""

    kind = "conflict"
