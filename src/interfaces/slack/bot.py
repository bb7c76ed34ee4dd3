# src/interfaces/slack/bot.py
"""Slack bot implementation with AsyncApp and AsyncSocketModeHandler.

Provides event handlers for:
- @mentions (app_mention event)
- Direct messages (message event, channel_type="im")

Uses lazy listener pattern to ack within 3s and dispatch in background.
"""

import logging

from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.async_app import AsyncApp

from src.config import settings
from src.core.engine import ChatOpsEngine
from src.interfaces.slack.handlers import SlackCommandHandlers

logger = logging.getLogger(__name__)


def register_handlers(app: AsyncApp, engine: ChatOpsEngine) -> SlackCommandHandlers:
    """Register the alias engine's event handlers on a Slack app.

    Args:
        app: Slack AsyncApp.
        engine: Engine resolving and dispatching commands.

    Returns:
        The handler object bound to the engine.
    """
    handlers = SlackCommandHandlers(engine)
    app.event("app_mention")(ack=handlers.ack_mention, lazy=[handlers.process_mention])
    app.event("message")(handlers.handle_message)
    return handlers


def create_bot(
    engine: ChatOpsEngine,
    bot_token: str | None = None,
    app_token: str | None = None,
) -> tuple[AsyncApp, AsyncSocketModeHandler]:
    """Create and configure the Slack bot.

    Args:
        engine: Engine resolving and dispatching commands.
        bot_token: Slack bot token (xoxb-*). Defaults to SLACK_BOT_TOKEN env var.
        app_token: Slack app token (xapp-*). Defaults to SLACK_APP_TOKEN env var.

    Returns:
        Tuple of (AsyncApp instance, AsyncSocketModeHandler instance).
    """
    app = AsyncApp(token=bot_token or settings.slack_bot_token)
    register_handlers(app, engine)

    handler = AsyncSocketModeHandler(app, app_token or settings.slack_app_token)
    return app, handler
