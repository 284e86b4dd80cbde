"""Anchored insertion of markup into a component's render output."""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

# Attribute text of an opening tag: quoted strings and {...} expressions
# (one level of nesting, e.g. style={{ ... }}) may contain '>'.
_ATTRS = r"""(?:[^>"'{}]|"[^"]*"|'[^']*'|\{(?:[^{}]|\{[^{}]*\})*\})*?"""

# Tried in order; the first one that matches wins.
ANCHOR_PATTERNS = (
    re.compile(r"return\s*\(\s*<>"),
    re.compile(r"return\s*\(\s*<(?:React\.)?Fragment>"),
    re.compile(r"return\s*\(\s*<([a-zA-Z][\w.]*)(?:\s" + _ATTRS + r")?(?<!/)>"),
)


def find_anchor(content: str) -> int | None:
    """Offset just past the first structural anchor, or None."""
    for pattern in ANCHOR_PATTERNS:
        m = pattern.search(content)
        if m:
            return m.end()
    return None


def insert_after_anchor(content: str, snippet: str, indent: str = "      ") -> tuple[str, bool]:
    """Insert snippet as the first child of the first render root found.

    Returns ``(content, inserted)``; content is unchanged when no anchor
    matches and the caller must ask for a manual insertion.
    """
    pos = find_anchor(content)
    if pos is None:
        logger.warning("No render anchor found; manual insertion required")
        return content, False
    return content[:pos] + "\n" + indent + snippet + content[pos:], True
