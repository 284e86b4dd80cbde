"""Third-party chat widget detector."""

from __future__ import annotations

import re

from sitekit_migrate.models import Category, MatchStrategy, WidgetDetection, WidgetType
from sitekit_migrate.scanner.base import BaseDetector, SourceFile
from sitekit_migrate.scanner.parser import (
    attribute_literal,
    iter_jsx_elements,
    jsx_attributes,
    line_range,
    tag_name,
)

WIDGET_PATTERNS: list[tuple[re.Pattern, WidgetType]] = [
    (re.compile(r"intercom", re.I), WidgetType.INTERCOM),
    (re.compile(r"crisp\.chat|\$crisp", re.I), WidgetType.CRISP),
    (re.compile(r"drift\.com|driftt", re.I), WidgetType.DRIFT),
    (re.compile(r"hubspot\.com|hs-scripts", re.I), WidgetType.HUBSPOT),
    (re.compile(r"zopim|zendesk", re.I), WidgetType.ZENDESK),
]

SCRIPT_TAGS = ("script", "Script")


def widget_type_for(text: str) -> WidgetType | None:
    for pattern, widget_type in WIDGET_PATTERNS:
        if pattern.search(text):
            return widget_type
    return None


class WidgetDetector(BaseDetector):
    """One detection per script tag whose src names a vendor, or a single
    text-only detection when the vendor is only mentioned in code."""

    category = Category.WIDGET
    needs_tree = False

    def detect(self, source: SourceFile) -> list[WidgetDetection]:
        widgets: list[WidgetDetection] = []
        scripts = self._script_sources(source)

        for pattern, widget_type in WIDGET_PATTERNS:
            if not pattern.search(source.text):
                continue

            found = False
            for src, start, end in scripts:
                if pattern.search(src):
                    widgets.append(WidgetDetection(
                        file_path=source.rel_path,
                        start_line=start,
                        end_line=end,
                        widget_type=widget_type,
                        script_src=src,
                    ))
                    found = True

            if not found:
                widgets.append(WidgetDetection(
                    file_path=source.rel_path,
                    strategy=MatchStrategy.TEXT,
                    widget_type=widget_type,
                ))

        return widgets

    def _script_sources(self, source: SourceFile) -> list[tuple[str, int, int]]:
        if source.root_node is None:
            return []
        scripts = []
        for element in iter_jsx_elements(source.root_node):
            if tag_name(element) not in SCRIPT_TAGS:
                continue
            src = attribute_literal(jsx_attributes(element).get("src"))
            if src:
                scripts.append((src, *line_range(element)))
        return scripts
