"""Chat delivery protocol used by the alias engine.

The engine only needs to post a text to a recipient. Adapter-specific
behaviour (for Slack: turning off server-side reformatting) lives in the
implementation, not in the engine.
"""

import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class ChatSender(Protocol):
    """Protocol for delivering messages to chat.

    This protocol decouples the engine from a specific chat service.
    """

    async def send(self, recipient: str, text: str) -> str | None:
        """Send a message.

        Args:
            recipient: Channel name/ID, or user ID for a direct message.
            text: Message content to send.

        Returns:
            Message identifier (e.g., timestamp) or None on failure.
        """
        ...


class SlackChatSender:
    """Slack implementation of ChatSender.

    Posts with ``parse="none"`` so Slack does not reformat command output
    (links, channel names, user mentions).
    """

    def __init__(self, client: Any) -> None:
        """Initialize with a Slack client.

        Args:
            client: Slack AsyncWebClient instance.
        """
        self._client = client

    async def send(
        self, recipient: str, text: str, thread_ts: str | None = None
    ) -> str | None:
        """Send a Slack message.

        Args:
            recipient: Slack channel ID/name or user ID.
            text: Message text.
            thread_ts: Thread timestamp for threading.

        Returns:
            Message timestamp or None on failure.
        """
        try:
            result = await self._client.chat_postMessage(
                channel=recipient,
                text=text,
                thread_ts=thread_ts,
                parse="none",
            )
            return result.get("ts")
        except Exception as e:
            logger.error("Failed to post message to %s: %s", recipient, e)
            return None
