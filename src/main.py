# src/main.py
"""Process entry point: Slack bot, result webhook and alias reloads.

Runs everything on one event loop: the Slack Socket Mode connection, the
uvicorn server for the result webhook, and the scheduler reloading aliases.

Entry point: python -m src.main
"""

import asyncio
import logging
import sys

import uvicorn
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from src.config import settings  # noqa: E402
from src.core.aliases.errors import AuthenticationError  # noqa: E402
from src.core.engine import ChatOpsEngine  # noqa: E402
from src.core.notification import SlackChatSender  # noqa: E402
from src.interfaces.api.main import create_app  # noqa: E402
from src.interfaces.slack.bot import create_bot  # noqa: E402
from src.utils.logging import configure_logging  # noqa: E402
from src.utils.observability import instrument_app, setup_logfire  # noqa: E402

logger = logging.getLogger(__name__)

# Exit status when the configured credentials are rejected
AUTH_FAILURE_EXIT_CODE = 2


async def run() -> None:
    """Start the engine, then serve chat and webhook traffic until cancelled."""
    tracing = setup_logfire()
    engine = ChatOpsEngine(settings)
    await engine.start()

    slack_app, handler = create_bot(engine)
    web_app = create_app(engine, SlackChatSender(slack_app.client))
    if tracing:
        instrument_app(web_app)

    server = uvicorn.Server(
        uvicorn.Config(
            web_app,
            host=settings.webhook_host,
            port=settings.webhook_port,
            log_config=None,
        )
    )

    logger.info("Starting Slack bot with Socket Mode...")
    try:
        await asyncio.gather(handler.start_async(), server.serve())
    except asyncio.CancelledError:
        logger.info("Received shutdown signal")
    finally:
        await engine.shutdown()
        await handler.close_async()
        logger.info("ChatOps bot stopped")


def main() -> None:
    """Entry point with graceful shutdown handling."""
    configure_logging(log_format=settings.log_format)

    try:
        asyncio.run(run())
    except AuthenticationError:
        sys.exit(AUTH_FAILURE_EXIT_CODE)
    except KeyboardInterrupt:
        logger.info("Shutdown complete")


if __name__ == "__main__":
    main()
