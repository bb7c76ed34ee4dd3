# src/core/aliases/notifier.py
"""Turn StackStorm result callbacks into chat messages.

StackStorm posts results either as a form field ``payload`` holding JSON or
as a raw JSON body of shape ``{message, user?, channel?, whisper?}``.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any

from src.core.aliases.errors import WebhookPayloadError
from src.core.aliases.formatting import format_data
from src.core.aliases.models import ChatMessage

logger = logging.getLogger(__name__)


def decode_payload(raw: Any) -> Mapping[str, Any]:
    """Decode a webhook body into the result mapping.

    Args:
        raw: Form/JSON mapping, or the raw body as str or bytes.

    Returns:
        Mapping with message, user, channel and whisper keys.

    Raises:
        WebhookPayloadError: If the body is not valid JSON or not an object.
    """
    data = raw
    try:
        if isinstance(data, (bytes, bytearray, str)):
            data = json.loads(data)
        if isinstance(data, Mapping) and data.get("payload"):
            data = json.loads(data["payload"])
    except (TypeError, ValueError) as e:
        raise WebhookPayloadError(f"Unable to decode JSON: {e}") from e

    if not isinstance(data, Mapping):
        raise WebhookPayloadError(
            f"Unable to decode JSON: expected an object, got {type(data).__name__}"
        )
    return data


class InboundNotifier:
    """Builds chat messages from StackStorm result callbacks.

    Attributes:
        default_channel: Channel used when a payload names no channel.
    """

    def __init__(self, default_channel: str | None = None) -> None:
        self.default_channel = default_channel

    def handle(self, raw: Any) -> ChatMessage:
        """Parse a callback and address the rendered message.

        A user with ``whisper: true`` gets the message privately. A user
        without whisper is named in front of the message in the channel.
        Without a user the message goes to the channel as-is.

        Args:
            raw: Webhook body (see decode_payload).

        Returns:
            ChatMessage ready for delivery.

        Raises:
            WebhookPayloadError: If the payload cannot be decoded or names
                no recipient.
        """
        data = decode_payload(raw)
        message = format_data(data.get("message"))
        user = data.get("user")
        channel = data.get("channel") or self.default_channel

        if user and data.get("whisper") is True:
            return ChatMessage(recipient=str(user), text=message, private=True)

        if not channel:
            raise WebhookPayloadError("Payload names no channel to post to")

        if user:
            message = f"{user} :\n{message}"
        return ChatMessage(recipient=str(channel), text=message)
