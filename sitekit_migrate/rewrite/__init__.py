"""Text-level rewrite primitives shared by the migrators.

All functions are pure ``str -> str`` transforms over the text read at the
start of a migration; nothing here touches the filesystem.
"""

from __future__ import annotations

from sitekit_migrate.rewrite.anchors import insert_after_anchor
from sitekit_migrate.rewrite.braces import match_balanced_braces
from sitekit_migrate.rewrite.components import (
    insert_managed_schema,
    is_client_component,
    route_path,
)
from sitekit_migrate.rewrite.imports import (
    add_import_safely,
    add_to_existing_import,
    import_names,
)
from sitekit_migrate.rewrite.markup import extract_schema_json, replace_script_tags

__all__ = [
    "add_import_safely",
    "add_to_existing_import",
    "extract_schema_json",
    "import_names",
    "insert_after_anchor",
    "insert_managed_schema",
    "is_client_component",
    "match_balanced_braces",
    "replace_script_tags",
    "route_path",
]
