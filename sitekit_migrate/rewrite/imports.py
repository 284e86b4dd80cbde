"""Import insertion that respects framework directives and avoids duplicates."""

from __future__ import annotations

import re

from sitekit_migrate.config import ImportMatch

_MODULE_RE = re.compile(r"""from\s+['"]([^'"]+)['"]""")
_DIRECTIVE_RE = re.compile(r"""^(['"]use (?:client|server)['"];?[ \t]*(?:\r?\n|$))""")
_FIRST_IMPORT_RE = re.compile(r"^import\s", re.M)


_IMPORT_STMT_RE = re.compile(
    r"""^import\s+(?:[^;'"]*?\s*from\s*)?['"][^'"\n]+['"][ \t]*;?[ \t]*(?:\r?\n|$)""", re.M
)


def end_of_imports(content: str) -> int:
    """Offset just past the last top-level import statement.

    Falls back to just past a leading directive line, then to 0.
    """
    last = None
    for last in _IMPORT_STMT_RE.finditer(content):
        pass
    if last is not None:
        return last.end()
    directive = _DIRECTIVE_RE.match(content)
    return directive.end() if directive else 0


def import_module(statement: str) -> str | None:
    """Module path of an ``import ... from '<module>'`` statement."""
    m = _MODULE_RE.search(statement)
    return m.group(1) if m else None


def has_import(content: str, module: str, match: ImportMatch = ImportMatch.SUBSTRING) -> bool:
    if match is ImportMatch.SUBSTRING:
        return module in content
    quoted = r"""['"]""" + re.escape(module) + r"""['"]"""
    pattern = r"""^\s*import\s+(?:[^;'"]*?\s*from\s*)?""" + quoted
    return bool(re.search(pattern, content, re.M))


def add_import_safely(
    content: str,
    statement: str,
    match: ImportMatch = ImportMatch.SUBSTRING,
) -> str:
    """Insert an import statement unless its module is already imported.

    A leading ``'use client'`` / ``'use server'`` directive always stays on
    the first line: the import goes directly after it. Without a directive
    the import goes before the first existing import, or at the very top.
    """
    module = import_module(statement)
    if module and has_import(content, module, match):
        return content

    directive = _DIRECTIVE_RE.match(content)
    if directive:
        head = directive.group(1)
        if not head.endswith("\n"):
            head += "\n"
        return head + statement + "\n" + content[directive.end():]

    first = _FIRST_IMPORT_RE.search(content)
    if first:
        return content[:first.start()] + statement + "\n" + content[first.start():]
    return statement + "\n\n" + content


def add_to_existing_import(content: str, name: str, module: str) -> str:
    """Append a named export to an existing ``import { ... } from '<module>'``.

    Returns content unchanged when there is no such import or the name is
    already imported.
    """
    pattern = re.compile(
        r"(import\s+(?:\w+\s*,\s*)?\{)([^}]*)(\}\s*from\s*)(['\"])" + re.escape(module) + r"\4"
    )
    m = pattern.search(content)
    if m is None:
        return content

    names = m.group(2)
    if re.search(r"\b" + re.escape(name) + r"\b", names):
        return content

    body = names.rstrip()
    trailing = names[len(body):]
    if body.endswith(","):
        body = body[:-1]
    if body.strip():
        body = f"{body}, {name}"
    else:
        body = f" {name}"
    if not trailing:
        trailing = " "
    return content[:m.start(2)] + body + trailing + content[m.end(2):]


def import_names(
    content: str,
    names: list[str],
    module: str,
    match: ImportMatch = ImportMatch.SUBSTRING,
) -> str:
    """Make each name importable from module, merging into an existing import
    where there is one."""
    missing = [n for n in names if not _is_imported(content, n, module)]
    if not missing:
        return content

    merged = content
    for name in missing:
        merged = add_to_existing_import(merged, name, module)
    if merged != content:
        return merged

    statement = "import { " + ", ".join(missing) + f" }} from '{module}'"
    return add_import_safely(content, statement, match)


def _is_imported(content: str, name: str, module: str) -> bool:
    pattern = (
        r"import\s+(?:\w+\s*,\s*)?\{[^}]*\b" + re.escape(name) + r"\b[^}]*\}\s*from\s*['\"]"
        + re.escape(module) + r"['\"]"
    )
    return bool(re.search(pattern, content))
