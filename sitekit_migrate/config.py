"""Migration options: project credentials, registry endpoint and rewrite policy."""

from __future__ import annotations

import enum
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.uptrademedia.com"
CONFIG_FILE = Path(".uptrade") / "config.json"


class ImportMatch(enum.Enum):
    """How strictly an existing import of a module is recognised.

    SUBSTRING treats any occurrence of the module path in the file as an
    existing import (a path mentioned only in a comment counts). STATEMENT
    requires an actual ``import ... from '<module>'`` statement.
    """
    SUBSTRING = "substring"
    STATEMENT = "statement"


@dataclass
class MigrationOptions:
    project_id: str = ""
    api_key: str = ""
    dry_run: bool = False
    root: Path = field(default_factory=Path.cwd)
    api_url: str = ""
    strict_remote: bool = False
    import_match: ImportMatch = ImportMatch.SUBSTRING
    timeout: float = 30.0

    def __post_init__(self):
        if not self.project_id:
            self.project_id = (
                os.getenv("NEXT_PUBLIC_UPTRADE_PROJECT_ID")
                or os.getenv("UPTRADE_PROJECT_ID", "")
            )
        if not self.api_key:
            self.api_key = os.getenv("UPTRADE_API_KEY", "")
        if not self.api_url:
            self.api_url = (
                os.getenv("UPTRADE_API_URL")
                or os.getenv("NEXT_PUBLIC_UPTRADE_API_URL")
                or DEFAULT_API_URL
            )
        self.api_url = self.api_url.rstrip("/")
        self.root = Path(self.root)

    @property
    def is_configured(self) -> bool:
        return bool(self.project_id and self.api_key)


def load_options(root: Path | None = None, **overrides) -> MigrationOptions:
    """Build options from ``.uptrade/config.json`` under root, then the environment.

    Explicit keyword overrides win over both.
    """
    root = Path(root) if root is not None else Path.cwd()
    stored: dict = {}
    config_path = root / CONFIG_FILE
    if config_path.is_file():
        try:
            stored = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable %s: %s", config_path, e)
            stored = {}

    values = {
        "project_id": stored.get("projectId") or stored.get("project_id") or "",
        "api_key": stored.get("apiKey") or stored.get("api_key") or "",
        "root": root,
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    return MigrationOptions(**values)
