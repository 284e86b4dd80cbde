"""Batch migration over a scan result."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path

from sitekit_migrate.config import MigrationOptions
from sitekit_migrate.models import (
    Category,
    Detection,
    FormDetection,
    MigrationResult,
    ScanResult,
    SuggestedAction,
)
from sitekit_migrate.migrator.analytics import AnalyticsMigrator
from sitekit_migrate.migrator.base import BaseMigrator
from sitekit_migrate.migrator.faqs import FAQMigrator
from sitekit_migrate.migrator.forms import FormMigrator
from sitekit_migrate.migrator.metadata import MetadataMigrator
from sitekit_migrate.migrator.queue import SequentialQueue, WorkQueue
from sitekit_migrate.migrator.schemas import SchemaMigrator
from sitekit_migrate.migrator.sitemaps import SitemapMigrator
from sitekit_migrate.migrator.widgets import WidgetMigrator
from sitekit_migrate.registry import RegistryClient
from sitekit_migrate.scanner import scan_file

logger = logging.getLogger(__name__)

# Order in which categories are migrated. Images are report-only.
MIGRATORS: dict[Category, type[BaseMigrator]] = {
    Category.FORM: FormMigrator,
    Category.WIDGET: WidgetMigrator,
    Category.METADATA: MetadataMigrator,
    Category.SCHEMA: SchemaMigrator,
    Category.FAQ: FAQMigrator,
    Category.SITEMAP: SitemapMigrator,
    Category.ANALYTICS: AnalyticsMigrator,
}


def plan(scan: ScanResult) -> list[Detection]:
    """Detections to migrate, in migration order."""
    work: list[Detection] = []
    for category in MIGRATORS:
        for detection in scan.bucket(category):
            if category is Category.SITEMAP and detection.generator == "site-kit":
                continue
            work.append(detection)
    return work


async def migrate_files(
    scan: ScanResult,
    options: MigrationOptions,
    registry: RegistryClient | None = None,
    queue: WorkQueue | None = None,
) -> list[MigrationResult]:
    """Migrate every detection in scan. Never raises; failures come back as results."""
    owns_registry = registry is None and not options.dry_run
    if owns_registry:
        registry = RegistryClient(options)
    migrators = {c: cls(options, registry) for c, cls in MIGRATORS.items()}
    queue = queue or SequentialQueue()

    async def _work(detection: Detection) -> MigrationResult:
        if (
            isinstance(detection, FormDetection)
            and detection.suggested_action is SuggestedAction.MANUAL
        ):
            return MigrationResult(
                detection.file_path, False, error="Form too complex for auto-migration",
            )
        return await migrators[detection.category].migrate(detection)

    try:
        results = await queue.run(plan(scan), _work)
    finally:
        if owns_registry:
            await registry.close()

    failed = sum(1 for r in results if not r.success)
    logger.info("Migrated %d detections: %d succeeded, %d failed", len(results), len(results) - failed, failed)
    return results


async def migrate_file(
    path: Path,
    options: MigrationOptions,
    registry: RegistryClient | None = None,
) -> list[MigrationResult]:
    """Scan one file and migrate what it contains."""
    path = Path(path).resolve()
    root = Path(options.root).resolve()
    if root not in path.parents:
        root = path.parent
        options = dataclasses.replace(options, root=root)

    scan = scan_file(path, root)
    if not scan.migratable:
        return [MigrationResult(
            path.relative_to(root).as_posix(), False,
            error="No migratable components found in file",
        )]
    return await migrate_files(scan, options, registry)


__all__ = ["MIGRATORS", "migrate_file", "migrate_files", "plan"]
