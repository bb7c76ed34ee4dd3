"""Text rendering for alias help lines and execution results.

Results pushed back by StackStorm carry arbitrary JSON. Scalars are shown
as plain text; containers are rendered as an indented listing inside a
fenced code block so chat clients keep their layout.
"""

from collections.abc import Mapping
from typing import Any

CODE_FENCE = "```"
INDENT = "  "


def format_command(format_string: str, description: str = "") -> str:
    """Build the help entry for one alias format.

    Args:
        format_string: Format string users may type.
        description: Optional alias description.

    Returns:
        "format - description", or just the format when there is no description.
    """
    if not description:
        return format_string
    return f"{format_string} - {description}"


def _format_scalar(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _is_container(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def _render(value: Any, depth: int) -> list[str]:
    prefix = INDENT * depth
    lines: list[str] = []

    if isinstance(value, Mapping):
        for key, item in value.items():
            if _is_container(item):
                lines.append(f"{prefix}{key}:")
                lines.extend(_render(item, depth + 1))
            else:
                lines.append(f"{prefix}{key}: {_format_scalar(item)}".rstrip())
        return lines

    if isinstance(value, (list, tuple)):
        for item in value:
            if _is_container(item):
                lines.append(f"{prefix}-")
                lines.extend(_render(item, depth + 1))
            else:
                lines.append(f"{prefix}- {_format_scalar(item)}".rstrip())
        return lines

    return [f"{prefix}{_format_scalar(value)}"]


def format_data(data: Any) -> str:
    """Render a webhook message value as chat text.

    Args:
        data: Decoded JSON value (string, number, mapping or sequence).

    Returns:
        Plain text for scalars; a fenced block for mappings and sequences.

    Example:
        >>> format_data("done")
        'done'
        >>> print(format_data({"stdout": "ok", "code": 0}))
        ```
        stdout: ok
        code: 0
        ```
    """
    if not _is_container(data):
        return _format_scalar(data)

    if not data:
        return ""

    body = "\n".join(_render(data, 0))
    return f"{CODE_FENCE}\n{body}\n{CODE_FENCE}"
