"""Component classification and the managed site-kit snippets."""

from __future__ import annotations

import re
from pathlib import PurePosixPath

from sitekit_migrate.rewrite.anchors import insert_after_anchor

SITE_KIT_SEO = "@uptrademedia/site-kit/seo"
SITE_KIT_FORMS = "@uptrademedia/site-kit/forms"
PROJECT_ID_ENV = "process.env.NEXT_PUBLIC_UPTRADE_PROJECT_ID"

_CLIENT_RE = re.compile(r"""['"]use client['"]""")


def is_client_component(content: str) -> bool:
    """True if a 'use client' directive appears in the first five lines."""
    head = "\n".join(content.split("\n")[:5])
    return bool(_CLIENT_RE.search(head))


def is_typescript(file_path: str) -> bool:
    return file_path.endswith((".ts", ".tsx"))


def project_id_expr(typescript: bool) -> str:
    return PROJECT_ID_ENV + ("!" if typescript else "")


def route_path(file_path: str) -> str:
    """URL path served by a route file.

    ``app/blog/[slug]/page.tsx`` -> ``/blog/:slug``; route groups such as
    ``(marketing)`` are dropped and ``app/page.tsx`` maps to ``/``.
    """
    path = re.sub(r"^(?:src/)?(?:app|pages)/", "/", file_path)
    path = re.sub(r"/?(?:page|layout)\.[jt]sx?$", "", path)
    path = re.sub(r"\.[jt]sx?$", "", path)
    path = re.sub(r"/index$", "", path)
    path = re.sub(r"/\([^)/]+\)", "", path)
    path = re.sub(r"\[(?:\.\.\.)?([^\]]+)\]", r":\1", path)
    if not path.startswith("/"):
        path = "/" + path
    return path.rstrip("/") or "/"


def layout_component_name(page_dir: str) -> str:
    """``blog-posts`` -> ``BlogPostsLayout``; ``[...slug]`` -> ``SlugLayout``."""
    name = PurePosixPath(page_dir).name
    name = re.sub(r"^\[(?:\.\.\.)?([^\]]+)\]$", r"\1", name)
    name = re.sub(r"^\(([^)]+)\)$", r"\1", name)
    words = [w for w in re.split(r"[-_\s]+", name) if w]
    return "".join(w[0].upper() + w[1:] for w in words) + "Layout" if words else "RootLayout"


def managed_schema_element(page_path: str, typescript: bool, indent: str = "      ") -> str:
    return (
        f"<ManagedSchema\n"
        f"{indent}  projectId={{{project_id_expr(typescript)}}}\n"
        f'{indent}  path="{page_path}"\n'
        f"{indent}/>"
    )


def managed_faq_element(page_path: str, typescript: bool, indent: str = "    ") -> str:
    return (
        f"<ManagedFAQ\n"
        f"{indent}  projectId={{{project_id_expr(typescript)}}}\n"
        f'{indent}  path="{page_path}"\n'
        f"{indent}/>"
    )


def insert_managed_schema(content: str, page_path: str, typescript: bool) -> tuple[str, bool]:
    """Add ``<ManagedSchema>`` as the first child of the render root.

    A file that already renders one is returned unchanged with ``True``.
    """
    if "<ManagedSchema" in content:
        return content, True
    return insert_after_anchor(content, managed_schema_element(page_path, typescript))
