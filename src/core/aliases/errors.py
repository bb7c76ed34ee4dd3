"""Exceptions raised by the alias engine."""


class ChatOpsError(Exception):
    """Base class for all alias engine errors."""


class AliasDefinitionError(ChatOpsError):
    """An alias definition from the remote service is malformed."""


class PatternCompileError(ChatOpsError):
    """A format string could not be compiled into a recognizer."""

    def __init__(self, format_string: str, reason: str) -> None:
        super().__init__(f"Cannot compile format {format_string!r}: {reason}")
        self.format_string = format_string
        self.reason = reason


class RemoteServiceError(ChatOpsError):
    """A call to the StackStorm API failed at the transport or protocol level.

    Attributes:
        status_code: HTTP status of the response, None for transport errors.
        body: Raw response body, empty for transport errors.
    """

    def __init__(
        self, message: str, status_code: int | None = None, body: str = ""
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class AuthenticationError(RemoteServiceError):
    """No auth token could be obtained with the configured credentials."""


class WebhookPayloadError(ChatOpsError):
    """An inbound result payload could not be decoded."""
