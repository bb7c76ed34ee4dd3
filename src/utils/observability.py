"""Observability configuration with Pydantic Logfire."""

import logging

from src.config import settings

logger = logging.getLogger(__name__)


def setup_logfire() -> bool:
    """Configure Logfire and instrument httpx.

    Only activates if LOGFIRE_TOKEN environment variable is set.
    Call this at application startup before the engine creates its client.

    Returns:
        True if Logfire was configured.
    """
    if not settings.logfire_token:
        return False

    try:
        import logfire

        logfire.configure(
            token=settings.logfire_token, send_to_logfire="if-token-present"
        )
        logfire.instrument_httpx()
    except Exception as e:
        # Log but don't fail - observability is optional
        logger.warning("Failed to configure Logfire: %s", str(e))
        return False
    return True


def instrument_app(app: object) -> None:
    """Trace requests to the webhook app. Requires setup_logfire() first."""
    try:
        import logfire

        logfire.instrument_fastapi(app)
    except Exception as e:
        logger.warning("Failed to instrument FastAPI app: %s", str(e))
