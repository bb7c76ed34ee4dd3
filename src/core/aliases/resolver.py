"""Resolve chat text to a registered alias format."""

import logging

from src.core.aliases.models import ResolvedMatch
from src.core.aliases.registry import CommandRegistry

logger = logging.getLogger(__name__)


class Resolver:
    """Finds the first registered format that matches a line of text.

    Formats are tried in registration order, which is the order the remote
    service listed aliases and, within an alias, its formats. There is no
    ranking: the first match wins.
    """

    def __init__(self, registry: CommandRegistry) -> None:
        self.registry = registry

    def resolve(self, text: str) -> ResolvedMatch | None:
        """Match text against the current snapshot.

        Args:
            text: Raw command text with any mention already stripped.

        Returns:
            ResolvedMatch for the first matching format, or None when no
            format matches (including empty text).
        """
        if not text:
            return None

        command = text.lower()
        snapshot = self.registry.current_snapshot()

        for format_string, matcher in snapshot.matchers.items():
            if matcher.matches(command):
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug(
                        "Text %r matched format %r (args=%s, params=%s)",
                        command,
                        format_string,
                        matcher.extract(command),
                        matcher.parameters(command),
                    )
                return ResolvedMatch(
                    alias_name=matcher.owner_name,
                    format_string=format_string,
                    raw_text=command,
                )

        return None
