# src/interfaces/slack/handlers.py
"""Event handlers for Slack bot.

Provides handlers for:
- @mentions (app_mention event)
- Direct messages (message event, channel_type="im")

Every message addressed to the bot is offered to the alias engine. Text
that matches no alias is ignored, except a bare "help" which lists the
loaded commands. Uses lazy listener pattern to ack within 3s and dispatch
in background.
"""

import logging
import re
from collections.abc import Callable
from typing import Any

from src.core.engine import ChatOpsEngine
from src.core.notification import SlackChatSender
from src.utils.logging import set_request_id

logger = logging.getLogger(__name__)

HELP_COMMAND = "help"

# Leading mention of the bot, e.g. "<@U123456> "
MENTION_RE = re.compile(r"^\s*<@[A-Z0-9]+>\s*")


def _extract_user_message(text: str) -> str:
    """Remove the leading bot mention and surrounding whitespace.

    Mentions later in the text are part of the command and are kept.

    Args:
        text: Raw message text including @mention.

    Returns:
        Command text without the leading mention.
    """
    return MENTION_RE.sub("", text, count=1).strip()


class SlackCommandHandlers:
    """Slack event handlers bound to one alias engine.

    Attributes:
        engine: Engine resolving and dispatching commands.
    """

    def __init__(self, engine: ChatOpsEngine) -> None:
        self.engine = engine

    async def _process_command(
        self,
        text: str,
        user_id: str,
        channel: str,
        thread_ts: str | None,
        event_ts: str,
        client: Any,
        event_type: str,
    ) -> None:
        """Resolve and dispatch one command, replying in the source channel.

        Args:
            text: Command text with the mention removed.
            user_id: Slack user ID of the sender.
            channel: Channel ID the message came from.
            thread_ts: Thread to reply in, None for a top-level reply.
            event_ts: Event timestamp, used as correlation ID.
            client: Slack client for API calls.
            event_type: Type of event for logging ("mention", "DM").
        """
        set_request_id(event_ts)
        sender = SlackChatSender(client)

        async def reply(message: str) -> None:
            await sender.send(channel, message, thread_ts=thread_ts)

        result = await self.engine.handle_command(text, user_id, channel, reply)
        if result is not None:
            logger.info(
                "Handled %s from %s (ok=%s): %s", event_type, user_id, result.ok, text
            )
            return

        if text.strip().lower() == HELP_COMMAND:
            snapshot = self.engine.registry.current_snapshot()
            lines = snapshot.help_lines(self.engine.settings.bot_name)
            await reply("\n".join(lines) if lines else "No commands loaded.")
            return

        logger.debug("Ignoring %s from %s: no matching alias", event_type, user_id)

    # ========================================================================
    # App Mention Handler (Lazy Listener Pattern)
    # ========================================================================

    async def ack_mention(self, ack: Callable) -> None:
        """Acknowledge app_mention event immediately.

        Args:
            ack: Slack ack function to acknowledge receipt.
        """
        await ack()

    async def process_mention(self, event: dict[str, Any], client: Any) -> None:
        """Offer a mention to the alias engine."""
        await self._process_command(
            text=_extract_user_message(event.get("text", "")),
            user_id=event.get("user", "unknown"),
            channel=str(event.get("channel")),
            thread_ts=event.get("thread_ts"),
            event_ts=event["ts"],
            client=client,
            event_type="mention",
        )

    # ========================================================================
    # DM Message Handler
    # ========================================================================

    async def process_dm(self, event: dict[str, Any], client: Any) -> None:
        """Offer a direct message to the alias engine, skipping bot messages."""
        if event.get("bot_id") or event.get("subtype") == "bot_message":
            return

        await self._process_command(
            text=_extract_user_message(event.get("text", "")),
            user_id=event.get("user", "unknown"),
            channel=str(event.get("channel")),
            thread_ts=event.get("thread_ts"),
            event_ts=event["ts"],
            client=client,
            event_type="DM",
        )

    async def handle_message(
        self, event: dict[str, Any], ack: Callable, client: Any
    ) -> None:
        """Handle message events, filtering for DMs."""
        await ack()
        if event.get("channel_type") == "im":
            await self.process_dm(event, client)
