"""Sitemap detector: generator usage in source plus config and static XML files."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from sitekit_migrate.models import Category, MatchStrategy, SitemapDetection, SitemapType
from sitekit_migrate.scanner.base import BaseDetector, SourceFile, uses_site_kit
from sitekit_migrate.scanner.walker import SITEMAP_FILE_EXTENSIONS, FileWalker

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES = (
    "next-sitemap.config.js",
    "next-sitemap.config.mjs",
    "next-sitemap.config.cjs",
    "next-sitemap.config.ts",
)

_ROUTE_SITEMAP_RE = re.compile(r"(^|/)sitemap\.[jt]s$")
_SITE_KIT_SITEMAP_RE = re.compile(r"@uptrade(?:media)?/site-kit/sitemap|createSitemap")
_EXCLUDE_RE = re.compile(r"exclude:\s*\[([\s\S]*?)\]")
_QUOTED_RE = re.compile(r"""['"]([^'"]+)['"]""")
_DB_MARKERS = ("supabase", "prisma", "sql")


def extract_exclude_paths(content: str) -> list[str]:
    m = _EXCLUDE_RE.search(content)
    if not m:
        return []
    return _QUOTED_RE.findall(m.group(1))


class SitemapDetector(BaseDetector):
    category = Category.SITEMAP
    needs_tree = False

    def detect(self, source: SourceFile) -> list[SitemapDetection]:
        content = source.text
        # Root config files are reported by discover_sitemap_files
        if Path(source.rel_path).name in CONFIG_FILE_NAMES:
            return []

        sitemaps: list[SitemapDetection] = []

        if "next-sitemap" in content and not uses_site_kit(content):
            start = source.find_line("next-sitemap")
            sitemaps.append(SitemapDetection(
                file_path=source.rel_path,
                start_line=start,
                end_line=start + 10,
                strategy=MatchStrategy.TEXT,
                type=SitemapType.NEXT_SITEMAP,
                generator="next-sitemap",
            ))

        if _ROUTE_SITEMAP_RE.search(source.rel_path) and not uses_site_kit(content):
            if (
                "MetadataRoute.Sitemap" in content
                or "export default" in content
                or "export async function" in content
            ):
                sitemaps.append(SitemapDetection(
                    file_path=source.rel_path,
                    start_line=1,
                    end_line=source.line_count,
                    strategy=MatchStrategy.TEXT,
                    type=SitemapType.CUSTOM_SITEMAP,
                    generator="custom",
                    details={
                        "has_async_function": "async" in content,
                        "has_database_query": any(m in content for m in _DB_MARKERS),
                    },
                ))

        m = _SITE_KIT_SITEMAP_RE.search(content)
        if m:
            start = source.find_line(m.group(0))
            sitemaps.append(SitemapDetection(
                file_path=source.rel_path,
                start_line=start,
                end_line=start + 10,
                strategy=MatchStrategy.TEXT,
                type=SitemapType.CUSTOM_SITEMAP,
                generator="site-kit",
            ))

        return sitemaps


def discover_sitemap_files(root: Path) -> list[SitemapDetection]:
    """Find next-sitemap config files at the root and static sitemap XML under public/."""
    root = Path(root)
    found: list[SitemapDetection] = []

    for name in CONFIG_FILE_NAMES:
        path = root / name
        if not path.is_file():
            continue
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Cannot read %s: %s", path, e)
            continue
        found.append(SitemapDetection(
            file_path=name,
            start_line=1,
            end_line=content.count("\n") + 1,
            strategy=MatchStrategy.TEXT,
            type=SitemapType.NEXT_SITEMAP_CONFIG,
            generator="next-sitemap",
            details={
                "has_robots_txt": "generateRobotsTxt" in content,
                "exclude_paths": extract_exclude_paths(content),
            },
        ))

    public = root / "public"
    if public.is_dir():
        walker = FileWalker(public, extensions=SITEMAP_FILE_EXTENSIONS)
        for path in walker:
            if not path.name.startswith("sitemap"):
                continue
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.debug("Cannot read %s: %s", path, e)
                continue
            found.append(SitemapDetection(
                file_path=path.relative_to(root).as_posix(),
                start_line=1,
                end_line=content.count("\n") + 1,
                strategy=MatchStrategy.TEXT,
                type=SitemapType.STATIC_XML,
                generator="static",
                details={
                    "url_count": content.count("<url>"),
                    "is_index": "<sitemapindex" in content,
                },
            ))

    return found
