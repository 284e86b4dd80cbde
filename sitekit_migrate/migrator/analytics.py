"""Analytics migrator. Informational: existing tracking is never removed."""

from __future__ import annotations

from sitekit_migrate.models import AnalyticsDetection, Category, MigrationResult
from sitekit_migrate.migrator.base import DRY_RUN, BaseMigrator


class AnalyticsMigrator(BaseMigrator):
    category = Category.ANALYTICS

    async def _migrate(self, analytics: AnalyticsDetection) -> MigrationResult:
        found = analytics.type.value
        if analytics.tracking_id:
            found += f" ({analytics.tracking_id})"

        if self.options.dry_run:
            return MigrationResult(analytics.file_path, True, [
                f"{DRY_RUN} Detected {found}",
                f"{DRY_RUN} Would recommend moving to SiteKitProvider analytics",
            ])
        return MigrationResult(analytics.file_path, True, [
            f"Detected {found}",
            "SiteKitProvider supports analytics integration",
            "Configure analytics in project settings to consolidate tracking",
        ])
