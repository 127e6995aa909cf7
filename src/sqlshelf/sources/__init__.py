"""Script sources for sqlshelf.

This module provides the storage abstraction used for version scripts,
init scripts and named statements.

Example:
    from sqlshelf.sources import DirectorySource

    source = DirectorySource("db/queries")
    names = source.script_names(".sql")
"""

from __future__ import annotations

from pathlib import Path

from .base import (
    BaseScriptSource,
    ScriptEntry,
    ScriptNotFoundError,
    ScriptSource,
    SourceFetchError,
    SourceListError,
    script_names,
)
from .filesystem import DirectorySource
from .memory import MemorySource
from .package import PackageSource


def source_from_path(value: str | Path | None) -> DirectorySource | None:
    """Build a DirectorySource from a configured path.

    Args:
        value: Directory path, or None/empty for no source.

    Returns:
        DirectorySource for the path, or None.
    """
    if not value:
        return None
    return DirectorySource(Path(value))


__all__ = [
    "ScriptSource",
    "ScriptEntry",
    "BaseScriptSource",
    "DirectorySource",
    "PackageSource",
    "MemorySource",
    "SourceListError",
    "SourceFetchError",
    "ScriptNotFoundError",
    "script_names",
    "source_from_path",
]
