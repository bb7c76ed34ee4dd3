# src/core/aliases/dispatcher.py
"""Submit resolved commands to StackStorm and report back to chat.

Dispatch is fire-and-forget from the chat's point of view: the outcome is
reported as a chat message through a reply callback, and failures are
never raised to the chat adapter. No retry is attempted.
"""

import json
import logging
import random
from collections.abc import Awaitable, Callable
from typing import Any

from src.core.aliases.client import St2Client
from src.core.aliases.errors import RemoteServiceError
from src.core.aliases.models import DispatchResult, ExecutionRequest, ResolvedMatch

logger = logging.getLogger(__name__)

ReplyCallback = Callable[[str], Awaitable[Any]]

# Acknowledgements sent when an execution was accepted.
START_MESSAGES = [
    "I'll take it from here! Your execution ID for reference is {execution_id}",
    "Got it! Remember {execution_id} as your execution ID",
    "I'm on it! Your execution ID is {execution_id}",
    "Let me get right on that. Remember {execution_id} as your execution ID",
    "Always something with you. :) I'll take care of that. Your ID is {execution_id}",
    "I have it covered. Your execution ID is {execution_id}",
    "Let me start up the machine! Your execution ID is {execution_id}",
    "I'll throw that task in the oven and get cookin'! Your execution ID is {execution_id}",
    "Want me to take that off your hand? You got it! Don't forget your execution ID: {execution_id}",
]


def extract_execution_id(body: str) -> str:
    """Pull the execution identifier out of a submission response body.

    Args:
        body: Raw response body.

    Returns:
        The "id" (or "execution.id") of a JSON object body, otherwise the
        body text itself.
    """
    try:
        data = json.loads(body)
    except ValueError:
        return body.strip()

    if isinstance(data, dict):
        if data.get("id"):
            return str(data["id"])
        execution = data.get("execution")
        if isinstance(execution, dict) and execution.get("id"):
            return str(execution["id"])
    if isinstance(data, str):
        return data
    return body.strip()


class Dispatcher:
    """Builds execution requests and reports their outcome to chat.

    Attributes:
        client: StackStorm API client.
        notification_channel: Channel StackStorm posts results to.
    """

    def __init__(
        self,
        client: St2Client,
        notification_channel: str,
        rng: random.Random | None = None,
    ) -> None:
        self.client = client
        self.notification_channel = notification_channel
        self._rng = rng or random.Random()

    def build_request(
        self, match: ResolvedMatch, sender: str, source_channel: str
    ) -> ExecutionRequest:
        return ExecutionRequest(
            name=match.alias_name,
            format=match.format_string,
            command=match.raw_text,
            user=sender,
            source_channel=source_channel,
            notification_channel=self.notification_channel,
        )

    async def dispatch(
        self,
        match: ResolvedMatch,
        sender: str,
        source_channel: str,
        reply: ReplyCallback | None = None,
    ) -> DispatchResult:
        """Submit a resolved command and report the outcome.

        Args:
            match: Resolved alias match.
            sender: Name of the chat user who issued the command.
            source_channel: Channel the command was typed in.
            reply: Callback that posts a message back to the source channel.

        Returns:
            DispatchResult with the rendered message.
        """
        request = self.build_request(match, sender, source_channel)

        try:
            body = await self.client.execute(request)
        except RemoteServiceError as e:
            if e.status_code is None:
                message = f"error : {e}"
            else:
                message = f'status code "{e.status_code}": {e.body}'
            logger.warning("Dispatch of %s failed: %s", match.alias_name, message)
            result = DispatchResult(ok=False, message=message)
        else:
            execution_id = extract_execution_id(body)
            template = self._rng.choice(START_MESSAGES)
            result = DispatchResult(
                ok=True,
                message=template.format(execution_id=execution_id),
                execution_id=execution_id,
            )
            logger.info(
                "Dispatched %s for %s, execution %s",
                match.alias_name,
                sender,
                execution_id,
            )

        if reply is not None:
            try:
                await reply(result.message)
            except Exception as e:
                logger.error("Failed to send dispatch reply: %s", e)

        return result
