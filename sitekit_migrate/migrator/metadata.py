"""Metadata migrator: hands page titles and descriptions to getManagedMetadata."""

from __future__ import annotations

import re
from pathlib import Path

from sitekit_migrate.models import Category, MetadataDetection, MetadataType, MigrationResult
from sitekit_migrate.migrator.base import DRY_RUN, BaseMigrator
from sitekit_migrate.registry import PageMetadataPayload
from sitekit_migrate.rewrite.braces import match_balanced_braces
from sitekit_migrate.rewrite.components import (
    SITE_KIT_SEO,
    insert_managed_schema,
    is_client_component,
    is_typescript,
    layout_component_name,
    managed_schema_element,
    project_id_expr,
    route_path,
)
from sitekit_migrate.rewrite.imports import end_of_imports, import_names
from sitekit_migrate.scanner.metadata import MANAGED_METADATA_MARKER, is_layout_file

_STATIC_EXPORT_RE = re.compile(r"export\s+const\s+metadata(?:\s*:\s*Metadata)?\s*=\s*")
LAYOUT_EXTENSIONS = (".tsx", ".ts", ".jsx", ".js")


def _js_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def generate_metadata_function(page_path: str, meta: MetadataDetection, typescript: bool) -> str:
    title = _js_string(meta.title or "Page Title")
    description = _js_string(meta.description or "Page description")
    return (
        "export async function generateMetadata() {\n"
        "  return getManagedMetadata({\n"
        f"    projectId: {project_id_expr(typescript)},\n"
        f"    path: '{page_path}',\n"
        "    fallback: {\n"
        f"      title: '{title}',\n"
        f"      description: '{description}',\n"
        "    },\n"
        "  })\n"
        "}"
    )


def generate_layout(page_path: str, page_dir: str, meta: MetadataDetection, typescript: bool) -> str:
    children = "{ children }: { children: React.ReactNode }" if typescript else "{ children }"
    schema = managed_schema_element(page_path, typescript, indent="      ")
    return (
        f"import {{ getManagedMetadata, ManagedSchema }} from '{SITE_KIT_SEO}'\n"
        "\n"
        f"{generate_metadata_function(page_path, meta, typescript)}\n"
        "\n"
        f"export default function {layout_component_name(page_dir)}({children}) {{\n"
        "  return (\n"
        "    <>\n"
        f"      {schema}\n"
        "      {children}\n"
        "    </>\n"
        "  )\n"
        "}\n"
    )


class MetadataMigrator(BaseMigrator):
    category = Category.METADATA

    async def _migrate(self, meta: MetadataDetection) -> MigrationResult:
        content = self._read(meta.file_path)
        if MANAGED_METADATA_MARKER in content:
            return self._already(meta.file_path, "getManagedMetadata in use")

        if is_client_component(content):
            return await self._client_page(meta)

        if meta.type in (MetadataType.HEAD, MetadataType.NEXT_SEO, MetadataType.OTHER):
            return self._report(meta.file_path, [
                f"{meta.type.value} metadata must be moved to generateMetadata manually",
                f"Use getManagedMetadata from '{SITE_KIT_SEO}'",
            ])

        page_path = route_path(meta.file_path)
        typescript = is_typescript(meta.file_path)

        m = body = None
        if meta.type is MetadataType.NEXT_METADATA:
            m = _STATIC_EXPORT_RE.search(content)
            if m is None:
                # Dynamic generateMetadata: the author's logic stays in charge
                return self._report(meta.file_path, [
                    "generateMetadata function detected - add getManagedMetadata manually for full control",
                ])
            body = match_balanced_braces(content, m.end())
            if body is None:
                return self._report(meta.file_path, [
                    "Metadata object has unbalanced braces - left unchanged",
                ])

        changes: list[str] = []
        if self.options.dry_run:
            changes.append(f"{DRY_RUN} Would create managed metadata for page: {page_path}")
            if meta.type is MetadataType.NEXT_METADATA:
                changes.append(f"{DRY_RUN} Would replace static metadata with getManagedMetadata")
            else:
                changes.append(f"{DRY_RUN} Would add generateMetadata function (preserving rest of file)")
            changes.append(f"{DRY_RUN} Would add ManagedSchema component")
            return MigrationResult(meta.file_path, True, changes)

        await self._register_page(page_path, meta, changes)

        function = generate_metadata_function(page_path, meta, typescript)
        if m is not None and body is not None:
            end = m.end() + len(body)
            if content[end:end + 1] == ";":
                end += 1
            content = content[:m.start()] + function + content[end:]
            changes.append("Replaced static metadata with getManagedMetadata")
        else:
            pos = end_of_imports(content)
            if pos:
                content = content[:pos] + "\n" + function + "\n\n" + content[pos:]
            else:
                content = function + "\n\n" + content
            changes.append("Added generateMetadata function")

        content = import_names(
            content, ["getManagedMetadata", "ManagedSchema"], SITE_KIT_SEO, self.options.import_match,
        )
        content, inserted = insert_managed_schema(content, page_path, typescript)
        if inserted:
            changes.append("Added ManagedSchema component")
        else:
            changes.append(
                f'Add <ManagedSchema projectId={{{project_id_expr(typescript)}}} path="{page_path}" /> '
                "to the page JSX manually"
            )

        self._write(meta.file_path, content)
        return MigrationResult(meta.file_path, True, changes)

    async def _client_page(self, meta: MetadataDetection) -> MigrationResult:
        if is_layout_file(meta.file_path):
            return self._report(meta.file_path, [
                "Client component layout cannot export metadata - move 'use client' code into a child component",
            ])

        page = Path(meta.file_path)
        typescript = is_typescript(meta.file_path)
        ext = ".tsx" if typescript else ".jsx"
        page_path = route_path(meta.file_path)

        for candidate in LAYOUT_EXTENSIONS:
            existing = page.with_name("layout" + candidate).as_posix()
            if not self._path(existing).exists():
                continue
            if MANAGED_METADATA_MARKER in self._read(existing):
                return self._already(meta.file_path, f"layout{candidate} has managed metadata")
            return self._report(meta.file_path, [
                "Layout exists but does not have managed metadata - add generateMetadata manually",
            ])

        layout = page.with_name("layout" + ext).as_posix()
        if self.options.dry_run:
            return MigrationResult(meta.file_path, True, [
                f"{DRY_RUN} Client component detected - would create layout{ext} with managed metadata",
                f"{DRY_RUN} Page path: {page_path}",
            ])

        changes: list[str] = []
        await self._register_page(page_path, meta, changes)
        self._write(layout, generate_layout(page_path, page.parent.as_posix(), meta, typescript))
        changes.append(f"Created layout{ext} with managed metadata and schema (client component page)")
        return MigrationResult(meta.file_path, True, changes)

    async def _register_page(self, page_path: str, meta: MetadataDetection, changes: list[str]):
        payload = PageMetadataPayload(
            project_id=self.options.project_id,
            path=page_path,
            managed_title=meta.title,
            managed_meta_description=meta.description,
        )
        await self._register(
            lambda registry: registry.create_page_metadata(payload),
            f"Created managed metadata for page: {page_path}",
            f"Page metadata may already exist: {page_path}",
            changes,
        )
