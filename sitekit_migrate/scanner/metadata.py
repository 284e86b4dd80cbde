"""Page metadata detector for app-router page and layout files."""

from __future__ import annotations

import re

from sitekit_migrate.models import Category, MatchStrategy, MetadataDetection, MetadataType
from sitekit_migrate.scanner.base import BaseDetector, SourceFile
from sitekit_migrate.scanner.parser import (
    element_text,
    iter_jsx_elements,
    line_range,
    node_text,
    tag_name,
)

PAGE_FILE_RE = re.compile(r"(^|/)page\.[jt]sx?$")
LAYOUT_FILE_RE = re.compile(r"(^|/)layout\.[jt]sx?$")
MANAGED_METADATA_MARKER = "getManagedMetadata"

_METADATA_EXPORT_RE = re.compile(
    r"^export\s+(?:const\s+metadata\b|(?:async\s+)?function\s+generateMetadata\b)"
)
_TITLE_RE = re.compile(r"""title:\s*['"`]([^'"`]+)['"`]""")
_DESCRIPTION_RE = re.compile(r"""description:\s*['"`]([^'"`]+)['"`]""")


def is_page_file(rel_path: str) -> bool:
    return bool(PAGE_FILE_RE.search(rel_path))


def is_layout_file(rel_path: str) -> bool:
    return bool(LAYOUT_FILE_RE.search(rel_path))


def route_dir(rel_path: str) -> str:
    """Directory part of a page or layout path ("" at the root)."""
    return rel_path.rpartition("/")[0]


class MetadataDetector(BaseDetector):
    category = Category.METADATA
    needs_tree = True

    def detect(self, source: SourceFile) -> list[MetadataDetection]:
        page = is_page_file(source.rel_path)
        if not page and not is_layout_file(source.rel_path):
            return []

        content = source.text
        if MANAGED_METADATA_MARKER in content:
            return []

        is_client = source.is_client_component

        export = self._metadata_export(source)
        if export is not None:
            scope = node_text(export)
            title = _TITLE_RE.search(scope)
            description = _DESCRIPTION_RE.search(scope)
            start, end = line_range(export)
            return [MetadataDetection(
                file_path=source.rel_path,
                start_line=start,
                end_line=end,
                type=MetadataType.NEXT_METADATA,
                title=title.group(1) if title else None,
                description=description.group(1) if description else None,
                is_client_component=is_client,
            )]

        if "NextSeo" in content or "next-seo" in content:
            start, end = self._element_lines(source, "NextSeo")
            return [MetadataDetection(
                file_path=source.rel_path,
                start_line=start,
                end_line=end,
                strategy=MatchStrategy.TREE if start else MatchStrategy.TEXT,
                type=MetadataType.NEXT_SEO,
                is_client_component=is_client,
            )]

        for element in iter_jsx_elements(source.root_node):
            if tag_name(element) != "Head":
                continue
            start, end = line_range(element)
            return [MetadataDetection(
                file_path=source.rel_path,
                start_line=start,
                end_line=end,
                type=MetadataType.HEAD,
                title=self._head_title(element),
                is_client_component=is_client,
            )]

        if page:
            return [MetadataDetection(
                file_path=source.rel_path,
                start_line=1,
                end_line=source.line_count,
                type=MetadataType.NO_METADATA,
                is_client_component=is_client,
            )]
        return []

    def _metadata_export(self, source: SourceFile):
        for child in source.root_node.named_children:
            if child.type == "export_statement" and _METADATA_EXPORT_RE.match(node_text(child)):
                return child
        return None

    def _element_lines(self, source: SourceFile, name: str) -> tuple[int, int]:
        for element in iter_jsx_elements(source.root_node):
            if tag_name(element) == name:
                return line_range(element)
        return 0, 0

    def _head_title(self, head) -> str | None:
        for element in iter_jsx_elements(head):
            if tag_name(element) == "title":
                return element_text(element) or None
        return None
