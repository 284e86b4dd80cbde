"""Source file discovery."""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path
from typing import Iterable, Iterator

from sitekit_migrate.models import DEFAULT_SKIP_DIRS, SOURCE_EXTENSIONS

logger = logging.getLogger(__name__)

SITEMAP_FILE_EXTENSIONS = (".xml",)


class FileWalker:
    """Finite, restartable listing of candidate files under a root.

    Each iteration walks the tree afresh. Symlinked directories are never
    followed and unreadable directories are treated as empty.
    """

    def __init__(
        self,
        root: Path,
        extensions: Iterable[str] = SOURCE_EXTENSIONS,
        skip_dirs: Iterable[str] | None = None,
    ):
        self.root = Path(root)
        self.extensions = tuple(extensions)
        self.skip_dirs = list(skip_dirs) if skip_dirs is not None else list(DEFAULT_SKIP_DIRS)

    def __iter__(self) -> Iterator[Path]:
        def _on_error(err: OSError) -> None:
            logger.debug("Skipping unreadable directory %s: %s", err.filename, err)

        for dirpath, dirnames, filenames in os.walk(
            self.root, onerror=_on_error, followlinks=False,
        ):
            # Prune in place so os.walk never descends into skipped dirs
            dirnames[:] = sorted(d for d in dirnames if not self._should_skip(d))
            for name in sorted(filenames):
                if self._accepts(name):
                    yield Path(dirpath) / name

    def relative(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()

    def _accepts(self, name: str) -> bool:
        if name.endswith(".d.ts"):
            return False
        return name.endswith(self.extensions)

    def _should_skip(self, dirname: str) -> bool:
        return any(fnmatch.fnmatch(dirname, pattern) for pattern in self.skip_dirs)
