"""Chat widget migrator: swaps vendor scripts for a marker comment."""

from __future__ import annotations

import re

from sitekit_migrate.models import Category, MigrationResult, WidgetDetection, WidgetType
from sitekit_migrate.migrator.base import DRY_RUN, BaseMigrator
from sitekit_migrate.rewrite.braces import match_balanced_braces
from sitekit_migrate.rewrite.markup import replace_script_tags
from sitekit_migrate.scanner.parser import ParseError, iter_nodes, node_text, parse_source, parses
from sitekit_migrate.scanner.widgets import WIDGET_PATTERNS

INTERCOM_GLOBAL = "window.Intercom"
_INTERCOM_ASSIGN_RE = re.compile(r"window\.Intercom\s*=(?!=)\s*")
_STATEMENT_TAIL_RE = re.compile(r"[ \t]*;?[ \t]*(?:\r?\n)?")

VENDOR_PATTERNS = {widget_type: pattern for pattern, widget_type in WIDGET_PATTERNS}


def replacement_marker(widget_type: WidgetType) -> str:
    return f"{{/* {widget_type.value.capitalize()} replaced with Uptrade Engage */}}"


def has_intercom_assignment(content: str) -> bool:
    return bool(_INTERCOM_ASSIGN_RE.search(content))


def remove_widget(content: str, widget_type: WidgetType) -> tuple[str, int]:
    """Replace the vendor's script tags with a marker. Returns (content, edits)."""
    pattern = VENDOR_PATTERNS.get(widget_type)
    if pattern is None:
        return content, 0

    marker = replacement_marker(widget_type)
    content, count = replace_script_tags(
        content,
        lambda tag: bool(pattern.search(tag.source)),
        lambda tag, i: marker,
    )
    if widget_type is WidgetType.INTERCOM and has_intercom_assignment(content):
        content, assignments = remove_intercom_assignments(content)
        count += assignments
    return content, count


# ── window.Intercom = ... ───────────────────────────────────


def remove_intercom_assignments(content: str) -> tuple[str, int]:
    """Delete whole ``window.Intercom = ...`` statements.

    The statements are located in the syntax tree so that a stub function
    body is removed with its assignment. In a file that does not parse only
    object-literal assignments are removed; anything else is left alone.
    """
    try:
        tree = parse_source(content)
    except ParseError:
        return _remove_object_assignments(content)

    data = content.encode("utf-8")
    spans = [
        (node.start_byte, node.end_byte)
        for node in iter_nodes(tree.root_node, prune=_is_intercom_assignment)
        if _is_intercom_assignment(node)
    ]
    for start, end in reversed(spans):
        start, end = _whole_line(data, start, end)
        data = data[:start] + data[end:]
    return data.decode("utf-8"), len(spans)


def _is_intercom_assignment(node) -> bool:
    if node.type != "expression_statement" or not node.named_children:
        return False
    expr = node.named_children[0]
    if expr.type != "assignment_expression":
        return False
    return node_text(expr.child_by_field_name("left")) == INTERCOM_GLOBAL


def _whole_line(data: bytes, start: int, end: int) -> tuple[int, int]:
    """Widen a statement span to its full line when nothing else is on it."""
    line_start = data.rfind(b"\n", 0, start) + 1
    if data[line_start:start].strip(b" \t"):
        return start, end
    line_end = data.find(b"\n", end)
    line_end = len(data) if line_end == -1 else line_end + 1
    if data[end:line_end].strip():
        return start, end
    return line_start, line_end


def _remove_object_assignments(content: str) -> tuple[str, int]:
    removed = 0
    pos = 0
    while True:
        m = _INTERCOM_ASSIGN_RE.search(content, pos)
        if m is None:
            return content, removed
        body = match_balanced_braces(content, m.end())
        if body is None:
            pos = m.end()
            continue
        tail = _STATEMENT_TAIL_RE.match(content, m.end() + len(body))
        content = content[:m.start()] + content[tail.end():]
        removed += 1
        pos = m.start()


class WidgetMigrator(BaseMigrator):
    category = Category.WIDGET

    async def _migrate(self, widget: WidgetDetection) -> MigrationResult:
        name = widget.widget_type.value
        content = self._read(widget.file_path)
        updated, edits = remove_widget(content, widget.widget_type)

        if not edits:
            if replacement_marker(widget.widget_type) in content:
                return self._already(widget.file_path, f"{name} script removed")
            return self._report(widget.file_path, [
                f"No {name} script tag found - remove the widget manually",
                "Enable Engage in SiteKitProvider to add chat widget",
            ])

        if parses(content) and not parses(updated):
            return self._report(widget.file_path, [
                f"Removing the {name} script would leave {widget.file_path} unparsable - remove it manually",
                "Enable Engage in SiteKitProvider to add chat widget",
            ])

        leftover = []
        if widget.widget_type is WidgetType.INTERCOM and has_intercom_assignment(updated):
            leftover.append(f"{INTERCOM_GLOBAL} assignment left in place - remove it manually")

        if self.options.dry_run:
            return MigrationResult(widget.file_path, True, [
                f"{DRY_RUN} Would remove {name} script",
                *(f"{DRY_RUN} {line}" for line in leftover),
                f"{DRY_RUN} Would enable Engage in SiteKitProvider",
            ])

        self._write(widget.file_path, updated)
        return MigrationResult(widget.file_path, True, [
            f"Removed {name} script",
            *leftover,
            "Enable Engage in SiteKitProvider to add chat widget",
        ])
