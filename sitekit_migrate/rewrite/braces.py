"""Balanced-delimiter extraction."""

from __future__ import annotations


def match_balanced_braces(content: str, start: int) -> str | None:
    """Return ``content[start:]`` up to and including the brace that closes
    the one at ``start``, or None.

    None means either ``content[start]`` is not ``{`` or the text ends before
    the depth returns to zero. Braces inside string or template literals are
    counted like any other brace: ``{ a: "}" }`` is cut short.
    """
    if start < 0 or start >= len(content) or content[start] != "{":
        return None

    depth = 0
    for i in range(start, len(content)):
        ch = content[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return content[start:i + 1]
    return None
