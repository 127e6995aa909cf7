"""Core configuration and exceptions for sqlshelf."""

from .exceptions import (
    ConfigError,
    DatabaseError,
    MigrationError,
    ScriptExecutionError,
    ScriptNotFoundError,
    SourceError,
    SourceFetchError,
    SourceListError,
    SqlShelfError,
    StartupError,
    StatementCompileError,
    StatementError,
    StatementExecutionError,
    StatementNotFoundError,
    TransactionClosedError,
    TransactionError,
    VersionReadError,
)
from .config import DEFAULT_EXTENSION, UPGRADE_ALL, UPGRADE_NONE, Options

__all__ = [
    "Options",
    "UPGRADE_ALL",
    "UPGRADE_NONE",
    "DEFAULT_EXTENSION",
    "SqlShelfError",
    "ConfigError",
    "SourceError",
    "SourceListError",
    "SourceFetchError",
    "ScriptNotFoundError",
    "DatabaseError",
    "VersionReadError",
    "ScriptExecutionError",
    "MigrationError",
    "TransactionError",
    "TransactionClosedError",
    "StatementError",
    "StatementCompileError",
    "StatementExecutionError",
    "StatementNotFoundError",
    "StartupError",
]
