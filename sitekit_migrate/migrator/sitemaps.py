"""Sitemap migrator. Only next-sitemap config files are edited; the rest is advice."""

from __future__ import annotations

from sitekit_migrate.models import Category, MigrationResult, SitemapDetection, SitemapType
from sitekit_migrate.migrator.base import DRY_RUN, BaseMigrator
from sitekit_migrate.rewrite.components import SITE_KIT_SEO

INTEGRATION_MARKER = "Site-Kit Integration"
INTEGRATION_COMMENT = (
    "/**\n"
    f" * {INTEGRATION_MARKER}\n"
    " *\n"
    " * Pages are automatically synced to Portal SEO module.\n"
    " * Manage URLs, priorities, and change frequencies in the Portal.\n"
    " */\n"
)


class SitemapMigrator(BaseMigrator):
    category = Category.SITEMAP

    async def _migrate(self, sitemap: SitemapDetection) -> MigrationResult:
        if sitemap.generator == "site-kit":
            return self._already(sitemap.file_path, "Site-Kit sitemap in use")

        if sitemap.type is SitemapType.NEXT_SITEMAP_CONFIG:
            return self._annotate_config(sitemap)

        if sitemap.type is SitemapType.CUSTOM_SITEMAP:
            return self._report(sitemap.file_path, [
                "Custom sitemap detected - consider using Site-Kit's createSitemap helper",
                f"Import: import {{ createSitemap }} from '{SITE_KIT_SEO}'",
            ])
        if sitemap.type is SitemapType.STATIC_XML:
            return self._report(sitemap.file_path, [
                "Static sitemap detected - Portal generates the sitemap once pages are synced",
                "Remove the static file after enabling the managed sitemap",
            ])
        return self._report(sitemap.file_path, [
            "next-sitemap usage detected - configure sitemap settings in Portal SEO module",
        ])

    def _annotate_config(self, sitemap: SitemapDetection) -> MigrationResult:
        content = self._read(sitemap.file_path)
        if "Site-Kit" in content:
            return self._already(sitemap.file_path, "sitemap config has Site-Kit integration comment")

        if self.options.dry_run:
            return MigrationResult(sitemap.file_path, True, [
                f"{DRY_RUN} Would migrate {sitemap.type.value} to Site-Kit sitemap",
                f"{DRY_RUN} Would add Site-Kit integration comment to {sitemap.file_path}",
            ])

        self._write(sitemap.file_path, INTEGRATION_COMMENT + content)
        return MigrationResult(sitemap.file_path, True, [
            "Added Site-Kit integration comment to sitemap config",
            "Configure sitemap settings in Portal SEO module for centralized management",
        ])
