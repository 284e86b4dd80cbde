"""Scan aggregator: walks a source tree and runs every detector on each file."""

from __future__ import annotations

import logging
from pathlib import Path

from sitekit_migrate.models import (
    MetadataType,
    ParseFailure,
    ScanConfig,
    ScanResult,
)
from sitekit_migrate.scanner.analytics import AnalyticsDetector
from sitekit_migrate.scanner.base import BaseDetector, SourceFile
from sitekit_migrate.scanner.faqs import FAQDetector
from sitekit_migrate.scanner.forms import FormDetector
from sitekit_migrate.scanner.images import ImageDetector
from sitekit_migrate.scanner.metadata import (
    MANAGED_METADATA_MARKER,
    MetadataDetector,
    is_layout_file,
    is_page_file,
    route_dir,
)
from sitekit_migrate.scanner.parser import (
    ParseError,
    attribute_literal,
    iter_jsx_elements,
    jsx_attributes,
    parse_source,
    tag_name,
)
from sitekit_migrate.scanner.schemas import SchemaDetector
from sitekit_migrate.scanner.sitemaps import SitemapDetector, discover_sitemap_files
from sitekit_migrate.scanner.walker import FileWalker
from sitekit_migrate.scanner.widgets import WidgetDetector

logger = logging.getLogger(__name__)

# Category order of the report
DETECTORS: list[BaseDetector] = [
    FormDetector(),
    MetadataDetector(),
    WidgetDetector(),
    SchemaDetector(),
    FAQDetector(),
    SitemapDetector(),
    AnalyticsDetector(),
    ImageDetector(),
]


def load_source(path: Path, root: Path) -> SourceFile:
    """Read and parse one file. Raises OSError/UnicodeDecodeError on read failure."""
    text = path.read_text(encoding="utf-8")
    source = SourceFile(path=path, rel_path=path.relative_to(root).as_posix(), text=text)
    try:
        source.tree = parse_source(text)
    except ParseError as e:
        source.parse_error = str(e)
    return source


def detect_source(source: SourceFile, result: ScanResult) -> None:
    """Run every applicable detector over one file, appending to result."""
    if source.parse_error is not None:
        logger.debug("%s: %s; tree-based detectors skipped", source.rel_path, source.parse_error)
        result.parse_errors.append(ParseFailure(source.rel_path, source.parse_error))

    for detector in DETECTORS:
        if detector.needs_tree and source.tree is None:
            continue
        for detection in detector.detect(source):
            result.add(detection)


def scan_file(path: Path, root: Path | None = None) -> ScanResult:
    """Scan a single file. Paths in the result are relative to root."""
    path = Path(path).resolve()
    root = Path(root).resolve() if root is not None else path.parent
    result = ScanResult()
    try:
        source = load_source(path, root)
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Skipping unreadable file %s: %s", path, e)
        return result
    detect_source(source, result)
    return result


def scan_codebase(root: Path, config: ScanConfig | None = None) -> ScanResult:
    """Scan every source file under root and return the aggregated result."""
    root = Path(root).resolve()
    config = config or ScanConfig()
    result = ScanResult()
    managed_layout_dirs: set[str] = set()

    walker = FileWalker(root, extensions=config.extensions, skip_dirs=config.skip_dirs)
    scanned = 0
    for path in walker:
        try:
            source = load_source(path, root)
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Skipping unreadable file %s: %s", path, e)
            continue
        scanned += 1
        if is_layout_file(source.rel_path) and MANAGED_METADATA_MARKER in source.text:
            managed_layout_dirs.add(route_dir(source.rel_path))
        detect_source(source, result)

    for sitemap in discover_sitemap_files(root):
        result.add(sitemap)

    _drop_pages_covered_by_layout(result, managed_layout_dirs)

    logger.info(
        "Scanned %d files under %s: %d detections, %d parse errors",
        scanned, root, result.total, len(result.parse_errors),
    )
    return result


def _drop_pages_covered_by_layout(result: ScanResult, managed_layout_dirs: set[str]) -> None:
    """Remove no-metadata pages whose sibling layout already owns metadata."""
    covered = set(managed_layout_dirs)
    for meta in result.metadata:
        if is_layout_file(meta.file_path) and meta.type is not MetadataType.NO_METADATA:
            covered.add(route_dir(meta.file_path))

    kept = []
    for meta in result.metadata:
        if (
            meta.type is MetadataType.NO_METADATA
            and is_page_file(meta.file_path)
            and route_dir(meta.file_path) in covered
        ):
            logger.debug("%s: metadata inherited from layout", meta.file_path)
            continue
        kept.append(meta)
    result.metadata = kept


def scan_for_managed_faq_paths(root: Path, config: ScanConfig | None = None) -> list[str]:
    """Distinct string ``path`` props of ManagedFAQ usages, each with a leading slash."""
    root = Path(root).resolve()
    config = config or ScanConfig()
    paths: dict[str, None] = {}

    for path in FileWalker(root, extensions=config.extensions, skip_dirs=config.skip_dirs):
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            continue
        if "ManagedFAQ" not in text:
            continue
        try:
            tree = parse_source(text)
        except ParseError:
            continue

        for element in iter_jsx_elements(tree.root_node):
            if tag_name(element).rpartition(".")[2] != "ManagedFAQ":
                continue
            value = attribute_literal(jsx_attributes(element).get("path"))
            if value is None:
                continue
            if not value.startswith("/"):
                value = "/" + value
            paths.setdefault(value, None)

    return list(paths)


__all__ = [
    "DETECTORS",
    "BaseDetector",
    "SourceFile",
    "detect_source",
    "load_source",
    "scan_codebase",
    "scan_file",
    "scan_for_managed_faq_paths",
]
