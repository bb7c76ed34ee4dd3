"""Compile alias format strings into regex recognizers.

Every ``{{placeholder}}`` becomes a non-greedy ``(.+?)`` group and an
optional clause of trailing ``key=value`` pairs is appended. The pattern is
anchored at the end only, so a mention prefix may precede the command.

Literal text between placeholders is used as-is (not escaped). StackStorm
alias formats rely on this, so characters with regex meaning in a format
keep that meaning.
"""

import logging
import re

from src.core.aliases.errors import PatternCompileError
from src.core.aliases.models import PARAMS_GROUP, PLACEHOLDER_RE, CompiledMatcher

logger = logging.getLogger(__name__)

PLACEHOLDER_GROUP = "(.+?)"
TRAILING_PARAMS = rf"(?P<{PARAMS_GROUP}>(\s+)?(\s?(\w+)=(\w+)){{0,}})"


def build_pattern(format_string: str) -> str:
    """Return the regex source for a format string.

    Args:
        format_string: Alias format such as "deploy {{app}} to {{env}}".

    Returns:
        Regex source, e.g. "deploy (.+?) to (.+?)(?P<params>...)$".
    """
    body = PLACEHOLDER_RE.sub(lambda _: PLACEHOLDER_GROUP, format_string)
    return body + TRAILING_PARAMS + "$"


def compile_format(format_string: str, owner_name: str) -> CompiledMatcher:
    """Compile one format string into a matcher.

    Args:
        format_string: Alias format string.
        owner_name: Name of the alias that owns the format.

    Returns:
        CompiledMatcher keyed by the format string.

    Raises:
        PatternCompileError: If the resulting regex is invalid.
    """
    try:
        recognizer = re.compile(build_pattern(format_string), re.IGNORECASE)
    except re.error as e:
        raise PatternCompileError(format_string, str(e)) from e

    return CompiledMatcher(
        format_string=format_string, recognizer=recognizer, owner_name=owner_name
    )
