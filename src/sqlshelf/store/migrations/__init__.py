"""Database migrations for sqlshelf.

This module provides versioned schema migrations from numbered SQL files,
using SQLite's PRAGMA user_version for tracking.

Example:
    from sqlshelf.sources import DirectorySource
    from sqlshelf.store.migrations import MigrationRunner

    runner = MigrationRunner(connection, DirectorySource("db/versions"))
    version = runner.upgrade()
"""

from .index import VersionIndex, parse_version
from .init import run_init_scripts
from .runner import MigrationRunner, execute_script, read_version

__all__ = [
    "MigrationRunner",
    "VersionIndex",
    "execute_script",
    "parse_version",
    "read_version",
    "run_init_scripts",
]
