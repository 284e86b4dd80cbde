"""Tests for source file discovery."""

import os
import stat
from pathlib import Path

import pytest

from sitekit_migrate.models import ScanConfig
from sitekit_migrate.scanner.walker import SITEMAP_FILE_EXTENSIONS, FileWalker


def _touch(root: Path, rel: str, text: str = "") -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_finds_source_files_in_sorted_order(tmp_path):
    _touch(tmp_path, "app/page.tsx")
    _touch(tmp_path, "app/about/page.jsx")
    _touch(tmp_path, "lib/util.ts")
    _touch(tmp_path, "README.md")

    walker = FileWalker(tmp_path)
    found = [walker.relative(p) for p in walker]
    assert found == ["app/page.tsx", "app/about/page.jsx", "lib/util.ts"]


def test_skips_excluded_dirs_and_declaration_files(tmp_path):
    _touch(tmp_path, "node_modules/pkg/index.js")
    _touch(tmp_path, ".next/server/page.js")
    _touch(tmp_path, "types/global.d.ts")
    _touch(tmp_path, "components/Button.tsx")

    walker = FileWalker(tmp_path)
    assert [walker.relative(p) for p in walker] == ["components/Button.tsx"]


def test_custom_skip_patterns(tmp_path):
    _touch(tmp_path, "stories-old/a.tsx")
    _touch(tmp_path, "src/b.tsx")

    walker = FileWalker(tmp_path, skip_dirs=["stories-*"])
    assert [walker.relative(p) for p in walker] == ["src/b.tsx"]


def test_is_restartable(tmp_path):
    _touch(tmp_path, "a.ts")
    walker = FileWalker(tmp_path)
    assert list(walker) == list(walker)


def test_sitemap_extensions(tmp_path):
    _touch(tmp_path, "sitemap.xml")
    _touch(tmp_path, "page.tsx")

    walker = FileWalker(tmp_path, extensions=SITEMAP_FILE_EXTENSIONS)
    assert [p.name for p in walker] == ["sitemap.xml"]


def test_missing_root_is_empty(tmp_path):
    assert list(FileWalker(tmp_path / "nope")) == []


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="needs symlinks")
def test_symlink_cycle_is_not_followed(tmp_path):
    _touch(tmp_path, "a/x.ts")
    _touch(tmp_path, "b.ts")
    os.symlink("..", tmp_path / "a" / "loop", target_is_directory=True)

    walker = FileWalker(tmp_path)
    assert [walker.relative(p) for p in walker] == ["b.ts", "a/x.ts"]


@pytest.mark.skipif(
    not hasattr(os, "geteuid") or os.geteuid() == 0,
    reason="permissions are not enforced for root",
)
def test_unreadable_directory_is_treated_as_empty(tmp_path):
    _touch(tmp_path, "locked/secret.ts")
    _touch(tmp_path, "open/a.ts")
    locked = tmp_path / "locked"
    locked.chmod(0)
    try:
        walker = FileWalker(tmp_path)
        assert [walker.relative(p) for p in walker] == ["open/a.ts"]
    finally:
        locked.chmod(stat.S_IRWXU)


def test_defaults_match_scan_config(tmp_path):
    config = ScanConfig()
    walker = FileWalker(tmp_path)
    assert walker.skip_dirs == config.skip_dirs
    assert walker.extensions == config.extensions
