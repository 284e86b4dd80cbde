"""Detector base class and the per-file scan input."""

from __future__ import annotations

import abc
import bisect
import re
from dataclasses import dataclass, field
from pathlib import Path

from sitekit_migrate.models import Category, Detection
from sitekit_migrate.rewrite.components import is_client_component

_SITE_KIT_RE = re.compile(r"@uptrade(?:media)?/site-kit")


def uses_site_kit(content: str) -> bool:
    """True when the file already imports from the site-kit package."""
    return bool(_SITE_KIT_RE.search(content))


@dataclass
class SourceFile:
    """One file read for scanning. ``tree`` is None when parsing failed."""
    path: Path
    rel_path: str
    text: str
    tree: object | None = None
    parse_error: str | None = None
    _newlines: list[int] | None = field(default=None, repr=False)

    @property
    def root_node(self):
        return self.tree.root_node if self.tree is not None else None

    def line_at(self, offset: int) -> int:
        """1-based line number of a character offset."""
        if self._newlines is None:
            self._newlines = [i for i, ch in enumerate(self.text) if ch == "\n"]
        return bisect.bisect_left(self._newlines, offset) + 1

    def find_line(self, needle: str, default: int = 1) -> int:
        """1-based line of the first line containing needle."""
        for i, line in enumerate(self.text.split("\n")):
            if needle in line:
                return i + 1
        return default

    @property
    def line_count(self) -> int:
        return self.text.count("\n") + 1

    @property
    def is_client_component(self) -> bool:
        return is_client_component(self.text)


class BaseDetector(abc.ABC):
    """Turns one parsed (or unparsable) file into detections of one category.

    Detectors with ``needs_tree`` set are skipped for files that failed to
    parse. The others receive ``source.tree = None`` and fall back to
    text matching.
    """

    category: Category
    needs_tree: bool = True

    @abc.abstractmethod
    def detect(self, source: SourceFile) -> list[Detection]:
        """Return detections in source order."""
