"""Tests for whole-project scanning."""

import json
from pathlib import Path
from textwrap import dedent

import pytest

from sitekit_migrate.models import Category, MetadataType, ScanConfig
from sitekit_migrate.rewrite.components import is_client_component
from sitekit_migrate.scanner import load_source, scan_codebase, scan_for_managed_faq_paths


def _write(root: Path, rel: str, code: str) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dedent(code), encoding="utf-8")
    return path


@pytest.fixture
def project(tmp_path):
    _write(tmp_path, "app/page.tsx", """\
        export default function Home() {
          return <main><h1>Home</h1></main>
        }
    """)
    _write(tmp_path, "app/about/layout.tsx", """\
        export const metadata = { title: 'About' }
        export default function AboutLayout({ children }) {
          return <section>{children}</section>
        }
    """)
    _write(tmp_path, "app/about/page.tsx", """\
        export default function About() {
          return <p>About</p>
        }
    """)
    _write(tmp_path, "components/ContactForm.jsx", """\
        export function ContactForm() {
          return (
            <form onSubmit={send}>
              <input name="email" type="email" />
            </form>
          )
        }
    """)
    _write(tmp_path, "components/Broken.tsx", """\
        // gtag('config', 'G-BROKEN1')
        export default function Broken( {
    """)
    _write(tmp_path, "node_modules/lib/index.js", """\
        export const x = <form onSubmit={a}><input name="b" /></form>
    """)
    return tmp_path


def test_scan_codebase(project):
    result = scan_codebase(project)

    assert [f.file_path for f in result.forms] == ["components/ContactForm.jsx"]
    assert [(m.file_path, m.type) for m in result.metadata] == [
        ("app/page.tsx", MetadataType.NO_METADATA),
        ("app/about/layout.tsx", MetadataType.NEXT_METADATA),
    ]
    assert result.migratable == result.total - len(result.images)


def test_parse_failure_keeps_text_detectors(project):
    result = scan_codebase(project)

    assert [p.file_path for p in result.parse_errors] == ["components/Broken.tsx"]
    assert "syntax error" in result.parse_errors[0].message
    [analytics] = result.analytics
    assert analytics.file_path == "components/Broken.tsx"
    assert analytics.tracking_id == "G-BROKEN1"


def test_managed_layout_covers_pages(tmp_path):
    _write(tmp_path, "app/contact/layout.tsx", """\
        'use client'
        import { getManagedMetadata } from '@uptrademedia/site-kit/seo'
        export default function Layout({ children }) { return <>{children}</> }
    """)
    _write(tmp_path, "app/contact/page.tsx", """\
        export default function Contact() { return <main /> }
    """)
    _write(tmp_path, "app/contact/team/page.tsx", """\
        export default function Team() { return <main /> }
    """)

    result = scan_codebase(tmp_path)
    assert [m.file_path for m in result.metadata] == ["app/contact/team/page.tsx"]


def test_custom_skip_dirs(project):
    result = scan_codebase(project, ScanConfig(skip_dirs=["node_modules", "components"]))
    assert result.forms == []
    assert result.parse_errors == []


def test_report_is_json_serialisable(project):
    report = scan_codebase(project).to_dict()
    data = json.loads(json.dumps(report))
    assert set(data) == {c.value for c in Category} | {"parse_errors"}
    form = data["forms"][0]
    assert form["complexity"] == "simple"
    assert form["fields"][0] == {
        "name": "email", "type": "email", "required": False, "placeholder": None, "options": None,
    }


def test_managed_faq_paths(tmp_path):
    _write(tmp_path, "app/faq/page.tsx", """\
        import { ManagedFAQ } from '@uptrademedia/site-kit/seo'
        export default function Page() {
          return (
            <>
              <ManagedFAQ projectId={id} path="/faq" />
              <ManagedFAQ projectId={id} path="pricing" />
            </>
          )
        }
    """)
    _write(tmp_path, "app/pricing/page.tsx", """\
        import { ManagedFAQ } from '@uptrademedia/site-kit/seo'
        export default function Page() {
          return <ManagedFAQ projectId={id} path={`/pricing`} />
        }
    """)
    _write(tmp_path, "app/dynamic/page.tsx", """\
        import { ManagedFAQ } from '@uptrademedia/site-kit/seo'
        export default function Page({ path }) {
          return <ManagedFAQ projectId={id} path={path} />
        }
    """)

    assert scan_for_managed_faq_paths(tmp_path) == ["/faq", "/pricing"]


@pytest.mark.parametrize("code", [
    "'use client'\nexport default 1\n",
    '// comment\n\n"use client";\n',
    "\n\n\n\n\n'use client'\n",
])
def test_source_client_check_matches_rewrite(tmp_path, code):
    path = _write(tmp_path, "app/page.tsx", code)
    source = load_source(path, tmp_path)
    assert source.is_client_component == is_client_component(code)
