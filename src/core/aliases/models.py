# src/core/aliases/models.py
"""Data models for action aliases and their compiled matchers.

This module defines the value types passed between the compiler, the
registry, the resolver and the dispatcher. All of them are immutable
once built so a registry snapshot can be shared freely between tasks.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any

from src.core.aliases.errors import AliasDefinitionError
from src.core.aliases.formatting import format_command

logger = logging.getLogger(__name__)

# Placeholder token inside a format string, e.g. {{app}}
PLACEHOLDER_RE = re.compile(r"{{.+?}}")

# Trailing "key=value" pairs accepted after any format
_PARAM_RE = re.compile(r"(\w+)=(\w+)")

# Regex group holding the trailing key=value clause
PARAMS_GROUP = "params"


@dataclass(frozen=True)
class AliasDefinition:
    """One named command concept as advertised by StackStorm.

    Attributes:
        name: Unique alias identifier (the StackStorm ref or name).
        formats: Ordered, non-empty tuple of format strings.
        description: Human-readable description, may be empty.

    Example:
        >>> alias = AliasDefinition.from_dict(
        ...     {"name": "deploy", "formats": ["deploy {{app}} to {{env}}"]}
        ... )
        >>> alias.formats
        ('deploy {{app}} to {{env}}',)
    """

    name: str
    formats: tuple[str, ...]
    description: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "AliasDefinition":
        """Build an alias from one element of the alias-list response.

        Empty or non-string formats are dropped with an error log. An alias
        left without formats is rejected.

        Args:
            data: Decoded JSON object for a single alias.

        Returns:
            The validated AliasDefinition.

        Raises:
            AliasDefinitionError: If the object is not a mapping, has no name,
                or carries no usable format strings.
        """
        if not isinstance(data, Mapping):
            raise AliasDefinitionError(f"Alias entry is not an object: {data!r}")

        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise AliasDefinitionError(f"Alias entry has no name: {data!r}")

        raw_formats = data.get("formats")
        if not isinstance(raw_formats, list) or not raw_formats:
            raise AliasDefinitionError(f"No formats specified for command: {name}")

        formats = []
        for fmt in raw_formats:
            if not isinstance(fmt, str) or not fmt:
                logger.error("Skipped empty command format for alias %s", name)
                continue
            formats.append(fmt)

        if not formats:
            raise AliasDefinitionError(f"No formats specified for command: {name}")

        description = data.get("description") or ""
        return cls(name=name, formats=tuple(formats), description=str(description))


@dataclass(frozen=True)
class CompiledMatcher:
    """Compiled recognizer for one format string.

    Attributes:
        format_string: Source format string, also the registry key.
        recognizer: Compiled regular expression for the format.
        owner_name: Name of the alias this format belongs to.
    """

    format_string: str
    recognizer: re.Pattern[str]
    owner_name: str

    def matches(self, text: str) -> bool:
        return self.recognizer.search(text) is not None

    def extract(self, text: str) -> tuple[str, ...]:
        """Return placeholder values captured from text, in textual order.

        Args:
            text: Command text that matches this format.

        Returns:
            Tuple of placeholder captures, empty if the text does not match.
        """
        match = self.recognizer.search(text)
        if match is None:
            return ()
        placeholder_count = len(PLACEHOLDER_RE.findall(self.format_string))
        return tuple(match.group(i + 1) for i in range(placeholder_count))

    def parameters(self, text: str) -> dict[str, str]:
        """Return trailing key=value pairs given after the command."""
        match = self.recognizer.search(text)
        if match is None:
            return {}
        return dict(_PARAM_RE.findall(match.group(PARAMS_GROUP) or ""))


@dataclass(frozen=True)
class RegistrySnapshot:
    """One immutable, self-consistent version of the command registry.

    Attributes:
        matchers: Read-only mapping of format string to matcher, in
            registration order.
        aliases: Read-only mapping of alias name to definition.
        created_at: When the snapshot was built (UTC).
    """

    matchers: Mapping[str, CompiledMatcher] = field(
        default_factory=lambda: MappingProxyType({})
    )
    aliases: Mapping[str, AliasDefinition] = field(
        default_factory=lambda: MappingProxyType({})
    )
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __len__(self) -> int:
        return len(self.matchers)

    def help_lines(self, bot_name: str) -> list[str]:
        """Render one help line per registered format.

        Args:
            bot_name: Name the bot is addressed by in chat.

        Returns:
            Lines such as "hubot deploy {{app}} - Deploy an application".
        """
        lines = []
        for format_string, matcher in self.matchers.items():
            alias = self.aliases.get(matcher.owner_name)
            description = alias.description if alias else ""
            command = format_command(format_string, description)
            lines.append(f"{bot_name} {command}")
        return lines


@dataclass(frozen=True)
class ResolvedMatch:
    """Result of resolving chat text against the registry.

    Attributes:
        alias_name: Name of the matched alias.
        format_string: Format string that matched.
        raw_text: Lower-cased command text as it was matched.
    """

    alias_name: str
    format_string: str
    raw_text: str


@dataclass(frozen=True)
class ExecutionRequest:
    """Payload submitted to the StackStorm alias-execution endpoint."""

    name: str
    format: str
    command: str
    user: str
    source_channel: str
    notification_channel: str

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "format": self.format,
            "command": self.command,
            "user": self.user,
            "source_channel": self.source_channel,
            "notification_channel": self.notification_channel,
        }


@dataclass(frozen=True)
class ChatMessage:
    """A message ready for delivery by the chat adapter.

    Attributes:
        recipient: Channel name/ID, or user for private messages.
        text: Rendered message text.
        private: True when the message is whispered to a user.
    """

    recipient: str
    text: str
    private: bool = False


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of one dispatch, as reported back to chat."""

    ok: bool
    message: str
    execution_id: str | None = None
