"""JSON-LD structured data detector."""

from __future__ import annotations

import re

from sitekit_migrate.models import Category, MatchStrategy, SchemaBucket, SchemaDetection
from sitekit_migrate.scanner.base import BaseDetector, SourceFile, uses_site_kit
from sitekit_migrate.scanner.parser import (
    attribute_literal,
    iter_jsx_elements,
    jsx_attributes,
    line_range,
    node_text,
    tag_name,
)

LD_JSON_MIME = "application/ld+json"
SCRIPT_TAGS = ("script", "Script")

_TYPE_RE = re.compile(r"""['"]?@type['"]?\s*:\s*['"]([^'"]+)['"]""")
_CONTEXT_RE = re.compile(r"""@context['"]?\s*:\s*['"]https?://schema\.org""")
_SCHEMA_ORG_TYPE_RE = re.compile(r"^https?://schema\.org/([A-Za-z]+)/?$")
_MICRODATA_TEXT_RE = re.compile(r"""itemtype=\{?['"`]https?://schema\.org/([A-Za-z]+)""", re.I)
_RDFA_TEXT_RE = re.compile(r"""\bvocab=\{?['"`]https?://schema\.org/?['"`]\}?\s+typeof=\{?['"`](?:\w+:)?([A-Za-z]+)""")


def classify_schema(schema_type: str) -> SchemaBucket:
    """Coarse bucket for a schema.org ``@type`` value."""
    if schema_type == "FAQPage":
        return SchemaBucket.FAQ_SCHEMA
    if schema_type == "Organization":
        return SchemaBucket.ORGANIZATION
    if "Business" in schema_type:
        return SchemaBucket.LOCAL_BUSINESS
    if "Service" in schema_type:
        return SchemaBucket.SERVICE
    if schema_type == "Product":
        return SchemaBucket.PRODUCT
    if schema_type in ("Article", "BlogPosting"):
        return SchemaBucket.ARTICLE
    return SchemaBucket.JSON_LD


def is_ld_json_script(element) -> bool:
    if tag_name(element) not in SCRIPT_TAGS:
        return False
    return attribute_literal(jsx_attributes(element).get("type")) == LD_JSON_MIME


def markup_schema(element) -> tuple[SchemaBucket, str] | None:
    """Bucket and type of an inline microdata (``itemScope``/``itemType``) or
    RDFa (``vocab``/``typeof``) root element, or None."""
    attrs = {name.lower(): value for name, value in jsx_attributes(element).items()}
    if "itemscope" in attrs and "itemtype" in attrs:
        m = _SCHEMA_ORG_TYPE_RE.match((attribute_literal(attrs["itemtype"]) or "").strip())
        return SchemaBucket.MICRODATA, m.group(1) if m else "Unknown"
    if "vocab" in attrs and "typeof" in attrs:
        typeof = (attribute_literal(attrs["typeof"]) or "").strip()
        # typeof may be prefixed, e.g. "schema:Person"
        return SchemaBucket.RDFA, typeof.rpartition(":")[2] or "Unknown"
    return None


class SchemaDetector(BaseDetector):
    category = Category.SCHEMA
    needs_tree = False

    def detect(self, source: SourceFile) -> list[SchemaDetection]:
        content = source.text
        if uses_site_kit(content) and "ManagedSchema" in content:
            return []

        schemas: list[SchemaDetection] = []
        if source.root_node is not None:
            for element in iter_jsx_elements(source.root_node):
                if not is_ld_json_script(element):
                    continue
                # The payload may live in a variable defined elsewhere in the file
                m = _TYPE_RE.search(node_text(element)) or _TYPE_RE.search(content)
                schema_type = m.group(1) if m else "Unknown"
                start, end = line_range(element)
                schemas.append(SchemaDetection(
                    file_path=source.rel_path,
                    start_line=start,
                    end_line=end,
                    type=classify_schema(schema_type),
                    schema_type=schema_type,
                ))
            schemas.extend(self._markup_schemas(source))
            schemas.sort(key=lambda s: s.start_line)
        else:
            for m in _MICRODATA_TEXT_RE.finditer(content):
                start = source.line_at(m.start())
                schemas.append(SchemaDetection(
                    file_path=source.rel_path,
                    start_line=start,
                    end_line=start,
                    strategy=MatchStrategy.TEXT,
                    type=SchemaBucket.MICRODATA,
                    schema_type=m.group(1),
                ))
            for m in _RDFA_TEXT_RE.finditer(content):
                start = source.line_at(m.start())
                schemas.append(SchemaDetection(
                    file_path=source.rel_path,
                    start_line=start,
                    end_line=start,
                    strategy=MatchStrategy.TEXT,
                    type=SchemaBucket.RDFA,
                    schema_type=m.group(1),
                ))
            schemas.sort(key=lambda s: s.start_line)

        if _CONTEXT_RE.search(content):
            m = _TYPE_RE.search(content)
            if m and not any(s.schema_type == m.group(1) for s in schemas):
                start = source.find_line("@context")
                schemas.append(SchemaDetection(
                    file_path=source.rel_path,
                    start_line=start,
                    end_line=start + 20,
                    strategy=MatchStrategy.TEXT,
                    type=SchemaBucket.JSON_LD,
                    schema_type=m.group(1),
                ))

        return schemas

    def _markup_schemas(self, source: SourceFile) -> list[SchemaDetection]:
        """Outermost microdata/RDFa items; nested items belong to their parent."""
        found: list[SchemaDetection] = []
        for element in iter_jsx_elements(source.root_node, prune=_is_markup_root):
            marked = _is_markup_root(element)
            if not marked:
                continue
            bucket, schema_type = marked
            start, end = line_range(element)
            found.append(SchemaDetection(
                file_path=source.rel_path,
                start_line=start,
                end_line=end,
                type=bucket,
                schema_type=schema_type,
            ))
        return found


def _is_markup_root(node):
    if node.type not in ("jsx_element", "jsx_self_closing_element"):
        return None
    return markup_schema(node)
