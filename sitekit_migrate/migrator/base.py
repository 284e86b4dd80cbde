"""Abstract migrator with per-detection failure isolation."""

from __future__ import annotations

import abc
import logging
from pathlib import Path
from typing import Awaitable, Callable

from sitekit_migrate.config import MigrationOptions
from sitekit_migrate.models import Category, Detection, MigrationResult
from sitekit_migrate.registry import RegistryClient, RegistryResponse, RegistryStatus, RemoteFailure

logger = logging.getLogger(__name__)

DRY_RUN = "[DRY RUN]"
ALREADY_MIGRATED = "Already migrated"


class BaseMigrator(abc.ABC):
    """Turns one detection into a source change plus an optional registration.

    ``migrate`` never raises: file system errors, strict-mode registry errors
    and anything unexpected come back as a failed MigrationResult.
    """

    category: Category

    def __init__(self, options: MigrationOptions, registry: RegistryClient | None = None):
        self.options = options
        self.registry = registry

    async def migrate(self, detection: Detection) -> MigrationResult:
        try:
            result = await self._migrate(detection)
        except OSError as e:
            logger.error("Cannot rewrite %s: %s", detection.file_path, e)
            return MigrationResult(detection.file_path, False, error=f"File system error: {e}")
        except RemoteFailure as e:
            logger.error("Registry failure for %s: %s", detection.file_path, e)
            return MigrationResult(detection.file_path, False, error=f"Registry error: {e}")
        except Exception as e:
            logger.exception("Unexpected error migrating %s", detection.file_path)
            return MigrationResult(detection.file_path, False, error=str(e) or type(e).__name__)

        logger.info(
            "%s %s: %s", self.category.value, detection.file_path,
            "ok" if result.success else result.error,
        )
        return result

    @abc.abstractmethod
    async def _migrate(self, detection: Detection) -> MigrationResult:
        """Migrate one detection. May raise; ``migrate`` isolates failures."""

    # ── File access ─────────────────────────────────────────

    def _path(self, file_path: str) -> Path:
        return Path(self.options.root) / file_path

    def _read(self, file_path: str) -> str:
        with open(self._path(file_path), encoding="utf-8", newline="") as f:
            return f.read()

    def _write(self, file_path: str, content: str) -> None:
        with open(self._path(file_path), "w", encoding="utf-8", newline="") as f:
            f.write(content)

    # ── Result helpers ──────────────────────────────────────

    def _already(self, file_path: str, what: str) -> MigrationResult:
        return MigrationResult(file_path, True, [f"{ALREADY_MIGRATED}: {what}"])

    def _report(self, file_path: str, lines: list[str]) -> MigrationResult:
        """Advisory result that never touches the file."""
        if self.options.dry_run:
            lines = [f"{DRY_RUN} {line}" for line in lines]
        return MigrationResult(file_path, True, lines)

    async def _register(
        self,
        request: Callable[[RegistryClient], Awaitable[RegistryResponse]],
        created: str,
        exists: str,
        changes: list[str],
    ) -> RegistryResponse | None:
        """Run a registry call, recording its outcome in changes.

        Conflicts and (unless strict) failures are soft: the local rewrite
        still goes ahead.
        """
        if self.registry is None:
            failure = RemoteFailure("no registry client configured")
        else:
            try:
                response = await request(self.registry)
            except RemoteFailure as e:
                failure = e
            else:
                changes.append(created if response.status is RegistryStatus.CREATED else exists)
                return response

        if self.options.strict_remote:
            raise failure
        logger.warning("Registry call failed, continuing: %s", failure)
        changes.append(f"{exists} (registry error: {failure})")
        return None
