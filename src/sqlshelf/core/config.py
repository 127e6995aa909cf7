"""Configuration management for sqlshelf."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .exceptions import ConfigError

if TYPE_CHECKING:
    from ..sources.base import ScriptSource


# Upgrade every available version (no ceiling).
UPGRADE_ALL = 0

# Skip upgrading, init scripts and statement preloading entirely.
UPGRADE_NONE = -1

DEFAULT_EXTENSION = ".sql"


@dataclass
class Options:
    """Options used when opening a database.

    Attributes:
        max_version: Highest version to upgrade to on open. UPGRADE_ALL runs
            every available upgrade, UPGRADE_NONE skips migration as well as
            init scripts and preloading.
        no_preload: Skip init scripts and compiling the query source up front.
            SQL errors are then only reported when a statement is first used.
        version_source: Source holding numbered ``.up.``/``.down.`` scripts.
        init_source: Source holding scripts run on every open, in name order.
        query_source: Source holding named statements.
        extension: File suffix of init and query scripts.
    """

    max_version: int = UPGRADE_ALL
    no_preload: bool = False
    version_source: ScriptSource | None = None
    init_source: ScriptSource | None = None
    query_source: ScriptSource | None = None
    extension: str = DEFAULT_EXTENSION

    @property
    def skip_startup(self) -> bool:
        """True when init scripts and preloading should not run."""
        return self.no_preload or self.max_version == UPGRADE_NONE

    @classmethod
    def from_env(cls) -> "Options":
        """Load options from environment variables."""
        from ..sources import source_from_path

        options = cls()

        if value := os.environ.get("SQLSHELF_MAX_VERSION"):
            try:
                options.max_version = int(value)
            except ValueError as e:
                raise ConfigError(f"SQLSHELF_MAX_VERSION must be an integer, got {value!r}") from e

        options.no_preload = os.environ.get("SQLSHELF_NO_PRELOAD", "").lower() in (
            "1", "true", "yes",
        )

        options.version_source = source_from_path(os.environ.get("SQLSHELF_VERSION_DIR"))
        options.init_source = source_from_path(os.environ.get("SQLSHELF_INIT_DIR"))
        options.query_source = source_from_path(os.environ.get("SQLSHELF_QUERY_DIR"))

        return options
