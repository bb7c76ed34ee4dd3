# src/core/aliases/registry.py
"""Command registry holding the current snapshot of compiled aliases.

The registry owns a single reference to an immutable RegistrySnapshot.
Refreshes build a complete new snapshot off to the side and install it with
one assignment, so readers always see either the old or the new snapshot.
"""

import logging
from collections.abc import Iterable
from types import MappingProxyType

from src.core.aliases.compiler import compile_format
from src.core.aliases.errors import PatternCompileError
from src.core.aliases.models import AliasDefinition, CompiledMatcher, RegistrySnapshot

logger = logging.getLogger(__name__)


def build_snapshot(aliases: Iterable[AliasDefinition]) -> RegistrySnapshot:
    """Compile alias definitions into a new snapshot.

    Aliases and formats are registered in the order given. A format that
    fails to compile is dropped on its own; an alias left with no valid
    formats is skipped. When two aliases share a format string the later
    one wins.

    Args:
        aliases: Alias definitions in the order the remote service returned them.

    Returns:
        A new, immutable RegistrySnapshot.
    """
    matchers: dict[str, CompiledMatcher] = {}
    by_name: dict[str, AliasDefinition] = {}

    for alias in aliases:
        compiled = []
        for format_string in alias.formats:
            try:
                compiled.append(compile_format(format_string, alias.name))
            except PatternCompileError as e:
                logger.error("Dropping format for alias %s: %s", alias.name, e)

        if not compiled:
            logger.error("No valid formats for command %s, skipping", alias.name)
            continue

        for matcher in compiled:
            previous = matchers.get(matcher.format_string)
            if previous is not None and previous.owner_name != alias.name:
                logger.warning(
                    "Format %r of %s overrides the one from %s",
                    matcher.format_string,
                    alias.name,
                    previous.owner_name,
                )
            matchers[matcher.format_string] = matcher
            logger.debug("Added command: %s", matcher.format_string)

        by_name[alias.name] = alias

    return RegistrySnapshot(
        matchers=MappingProxyType(matchers), aliases=MappingProxyType(by_name)
    )


class CommandRegistry:
    """Registry of compiled alias matchers with atomic snapshot replacement.

    Attributes:
        generation: Number of snapshots installed so far.

    Example:
        >>> registry = CommandRegistry()
        >>> registry.replace([AliasDefinition("ping", ("ping",))])
        >>> registry.is_empty()
        False
    """

    def __init__(self) -> None:
        self._snapshot = RegistrySnapshot()
        self.generation = 0

    def replace(
        self, aliases: Iterable[AliasDefinition] | RegistrySnapshot
    ) -> RegistrySnapshot:
        """Install a snapshot, compiling it first from alias definitions if needed.

        Args:
            aliases: Alias definitions to compile, or a prebuilt snapshot.

        Returns:
            The snapshot that was installed.
        """
        if isinstance(aliases, RegistrySnapshot):
            snapshot = aliases
        else:
            snapshot = build_snapshot(aliases)
        self.install(snapshot)
        return snapshot

    def install(self, snapshot: RegistrySnapshot) -> None:
        """Install a prebuilt snapshot, dropping the previous one."""
        self._snapshot = snapshot
        self.generation += 1
        logger.info(
            "Installed command registry #%d with %d format(s) from %d alias(es)",
            self.generation,
            len(snapshot.matchers),
            len(snapshot.aliases),
        )

    def current_snapshot(self) -> RegistrySnapshot:
        return self._snapshot

    def is_empty(self) -> bool:
        return not self._snapshot.matchers
