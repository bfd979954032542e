"""Share token issuance for read-only trip links."""

import logging
import secrets
from collections.abc import Callable

from backend.trips.errors import ConflictError, ValidationError

logger = logging.getLogger(__name__)

MIN_TOKEN_BYTES = 16


class ShareTokenIssuer:
    """Issues unguessable hex tokens unique among active share tokens."""

    def __init__(self, token_bytes: int = 16, max_attempts: int = 5) -> None:
        """Initialize issuer.

        Args:
            token_bytes: Random bytes per token (at least 16, i.e. 128 bits)
            max_attempts: Collision retries before giving up
        """
        if token_bytes < MIN_TOKEN_BYTES:
            raise ValidationError(f"Share tokens need at least {MIN_TOKEN_BYTES} random bytes")
        if max_attempts < 1:
            raise ValidationError("max_attempts must be positive")

        self._token_bytes = token_bytes
        self._max_attempts = max_attempts

    def _generate(self) -> str:
        return secrets.token_hex(self._token_bytes)

    def issue(self, is_taken: Callable[[str], bool]) -> str:
        """Generate a token not currently in use.

        Args:
            is_taken: Returns True if a token is already held by some trip

        Returns:
            Hex-encoded token

        Raises:
            ConflictError: If every attempt collided
        """
        for attempt in range(1, self._max_attempts + 1):
            token = self._generate()
            if not is_taken(token):
                return token
            logger.warning("Share token collision", extra={"structured": {"attempt": attempt}})

        raise ConflictError(f"Could not issue a unique share token after {self._max_attempts} attempts")
