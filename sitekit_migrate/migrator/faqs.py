"""FAQ migrator: registers extracted questions and inserts ManagedFAQ."""

from __future__ import annotations

import re

from sitekit_migrate.models import Category, FAQDetection, FAQType, MigrationResult
from sitekit_migrate.migrator.base import DRY_RUN, BaseMigrator
from sitekit_migrate.migrator.schemas import line_indent
from sitekit_migrate.registry import FAQPayload
from sitekit_migrate.rewrite.components import (
    SITE_KIT_SEO,
    is_client_component,
    is_typescript,
    managed_faq_element,
    route_path,
)
from sitekit_migrate.rewrite.imports import import_names
from sitekit_migrate.rewrite.markup import end_of_open_tag
from sitekit_migrate.scanner.faqs import extract_faq_items

_RETURN_ROOT_RE = re.compile(r"return\s*\($")


def _faq_tag_offset(content: str, faq: FAQDetection) -> int | None:
    if faq.component_name:
        m = re.search(r"<" + re.escape(faq.component_name) + r"\b", content)
    elif faq.type is FAQType.DETAILS_SUMMARY:
        m = re.search(r"<details\b", content)
    else:
        m = None
    return m.start() if m else None


def insert_managed_faq(content: str, faq: FAQDetection, element: str) -> tuple[str, str | None]:
    """Place ManagedFAQ next to the existing FAQ markup.

    As a preceding sibling when the FAQ tag is itself a JSX child; as the
    first child when the FAQ tag is the render root. Returns the new content
    and a change description, or None when no safe position exists.
    """
    start = _faq_tag_offset(content, faq)
    if start is None:
        return content, None

    before = content[:start].rstrip()
    indent = line_indent(content, start)

    if before.endswith((">", "}")) and not before.endswith("=>"):
        block = (
            "{/* Managed FAQ - content controlled via Portal */}\n"
            f"{indent}{element}\n"
            f"{indent}{{/* Original FAQ (can be removed once migrated) */}}\n"
            f"{indent}"
        )
        return content[:start] + block + content[start:], "Inserted ManagedFAQ component before existing FAQ"

    if _RETURN_ROOT_RE.search(before):
        tag_end = end_of_open_tag(content, start + 1)
        if tag_end is not None and content[tag_end - 2] != "/":
            child_indent = indent + "  "
            block = (
                f"\n{child_indent}{{/* Managed FAQ - content controlled via Portal */}}"
                f"\n{child_indent}{element.replace(chr(10) + indent, chr(10) + child_indent)}"
            )
            return content[:tag_end] + block + content[tag_end:], "Inserted ManagedFAQ component inside FAQ root"

    return content, None


class FAQMigrator(BaseMigrator):
    category = Category.FAQ

    async def _migrate(self, faq: FAQDetection) -> MigrationResult:
        content = self._read(faq.file_path)
        if is_client_component(content):
            return MigrationResult(faq.file_path, True, [
                "Skipped: Client component cannot use ManagedFAQ (requires server rendering)",
                "Consider using ManagedFAQ in a parent server component or layout.tsx",
            ])
        if "<ManagedFAQ" in content:
            return self._already(faq.file_path, "ManagedFAQ in use")

        page_path = route_path(faq.file_path)
        typescript = is_typescript(faq.file_path)
        items = extract_faq_items(content, faq.type)
        label = faq.type.value + (f" ({faq.component_name})" if faq.component_name else "")

        if self.options.dry_run:
            return MigrationResult(faq.file_path, True, [
                f"{DRY_RUN} Would extract {len(items)} FAQ items",
                f"{DRY_RUN} Would create managed FAQ record for path: {page_path}",
                f"{DRY_RUN} Would insert ManagedFAQ component",
                f"{DRY_RUN} FAQ type: {label}",
            ])

        changes: list[str] = []
        payload = FAQPayload.from_items(page_path, items)
        created = (
            f"Created managed FAQ with {len(items)} items for: {page_path}" if items
            else f"Created empty managed FAQ for: {page_path} (add items in Portal)"
        )
        await self._register(
            lambda registry: registry.register_faq(payload),
            created,
            f"FAQ record may already exist for: {page_path}",
            changes,
        )

        indent = "    "
        start = _faq_tag_offset(content, faq)
        if start is not None:
            indent = line_indent(content, start)
        element = managed_faq_element(page_path, typescript, indent=indent)
        updated, inserted = insert_managed_faq(content, faq, element)
        if inserted is None:
            changes.append(f"Add ManagedFAQ to your page JSX: {element}")
            return MigrationResult(faq.file_path, True, changes)

        updated = import_names(updated, ["ManagedFAQ"], SITE_KIT_SEO, self.options.import_match)
        changes.append("Added ManagedFAQ import")
        changes.append(inserted)
        self._write(faq.file_path, updated)
        return MigrationResult(faq.file_path, True, changes)
