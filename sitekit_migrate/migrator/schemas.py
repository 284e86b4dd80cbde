"""Schema migrator: uploads JSON-LD and renders it through ManagedSchema."""

from __future__ import annotations

from sitekit_migrate.models import Category, MigrationResult, SchemaBucket, SchemaDetection
from sitekit_migrate.migrator.base import DRY_RUN, BaseMigrator
from sitekit_migrate.registry import SchemaRegistration
from sitekit_migrate.rewrite.components import (
    SITE_KIT_SEO,
    is_client_component,
    is_typescript,
    managed_schema_element,
    route_path,
)
from sitekit_migrate.rewrite.imports import import_names
from sitekit_migrate.rewrite.markup import extract_schema_json, replace_script_tags

MIGRATED_MARKER = "{/* JSON-LD migrated to ManagedSchema */}"
INLINE_MARKUP = {SchemaBucket.MICRODATA: "Microdata", SchemaBucket.RDFA: "RDFa"}


def line_indent(content: str, offset: int) -> str:
    line_start = content.rfind("\n", 0, offset) + 1
    prefix = content[line_start:offset]
    return prefix[:len(prefix) - len(prefix.lstrip())]


class SchemaMigrator(BaseMigrator):
    category = Category.SCHEMA

    async def _migrate(self, schema: SchemaDetection) -> MigrationResult:
        if schema.type in INLINE_MARKUP:
            return self._report(schema.file_path, [
                f"{INLINE_MARKUP[schema.type]} markup for {schema.schema_type} found - "
                "recreate it as JSON-LD in Portal and remove the attributes manually",
            ])

        content = self._read(schema.file_path)
        if is_client_component(content):
            return MigrationResult(schema.file_path, True, [
                "Skipped: Client component cannot use ManagedSchema (requires server rendering)",
                "Consider moving schema to a parent server component or layout.tsx",
            ])

        page_path = route_path(schema.file_path)
        typescript = is_typescript(schema.file_path)
        has_managed = "<ManagedSchema" in content

        def _is_ld_json(tag) -> bool:
            return tag.is_ld_json

        def _replacement(tag, index: int) -> str:
            if has_managed or index > 0:
                return MIGRATED_MARKER
            return managed_schema_element(page_path, typescript, indent=line_indent(content, tag.start))

        updated, replaced = replace_script_tags(content, _is_ld_json, _replacement)
        if not replaced:
            if has_managed:
                return self._already(schema.file_path, "ManagedSchema in use")
            return self._report(schema.file_path, [
                f"No JSON-LD script tag found for {schema.schema_type} - move the schema to Portal manually",
            ])

        extracted = extract_schema_json(content)
        changes: list[str] = []
        if self.options.dry_run:
            schema_type = extracted[0] if extracted else schema.schema_type
            changes.append(f"{DRY_RUN} Would replace JSON-LD script with ManagedSchema component")
            changes.append(f"{DRY_RUN} Schema type: {schema_type}")
            if extracted:
                changes.append(f"{DRY_RUN} Would upload extracted schema to Portal")
            return MigrationResult(schema.file_path, True, changes)

        if extracted:
            schema_type, schema_json = extracted
            payload = SchemaRegistration(
                page_path=page_path, schema_type=schema_type, schema_data=schema_json,
            )
            await self._register(
                lambda registry: registry.register_schema(payload),
                f"Created managed schema ({schema_type}) for: {page_path}",
                f"Schema record may already exist for: {page_path}",
                changes,
            )

        if has_managed:
            changes.append("Removed JSON-LD script (ManagedSchema already present)")
        else:
            before = updated
            updated = import_names(updated, ["ManagedSchema"], SITE_KIT_SEO, self.options.import_match)
            if updated != before:
                changes.append("Added ManagedSchema import")
            changes.append("Replaced JSON-LD script with ManagedSchema component")

        self._write(schema.file_path, updated)
        return MigrationResult(schema.file_path, True, changes)
