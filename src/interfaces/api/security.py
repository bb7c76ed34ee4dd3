# src/interfaces/api/security.py
"""Access control for the read endpoints: optional API key and rate limiting.

Both are built from the engine's Settings when the app is created. The
result webhook stays unauthenticated; StackStorm's chatops post action
does not send custom headers.
"""

import logging
import secrets
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader
from slowapi import Limiter
from slowapi.util import get_remote_address

from src.config import Settings

logger = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

# Reported by the dependency when no key is configured
AUTH_DISABLED = "auth_disabled"


class ApiKeyVerifier:
    """FastAPI dependency comparing X-API-Key with API_AUTH_KEY.

    An empty configured key turns the check off.
    """

    def __init__(self, expected_key: str) -> None:
        self._expected_key = expected_key

    @property
    def enabled(self) -> bool:
        return bool(self._expected_key)

    def __call__(
        self, api_key: Annotated[str | None, Depends(api_key_header)]
    ) -> str:
        if not self.enabled:
            return AUTH_DISABLED

        if not api_key:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Missing API key. Include X-API-Key header.",
            )

        if not secrets.compare_digest(api_key, self._expected_key):
            logger.warning("Rejected request with an invalid API key")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid API key.",
            )

        return api_key


def rate_limit_for(settings: Settings) -> str:
    """Per-client rate limit in slowapi notation, e.g. "60/minute"."""
    return f"{settings.api_rate_limit}/minute"


def build_limiter() -> Limiter:
    """Limiter keyed on the client address, one per app instance."""
    return Limiter(key_func=get_remote_address)
