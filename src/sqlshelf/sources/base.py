"""Base protocol and types for script sources.

A script source is a flat, listable store of named text entries. Version
scripts, init scripts and named statements are all read through it. Uses
Protocol (structural subtyping) so applications can plug in their own
storage without inheriting from a base class.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from ..core.exceptions import ScriptNotFoundError, SourceFetchError, SourceListError

__all__ = [
    "ScriptEntry",
    "ScriptSource",
    "BaseScriptSource",
    "ScriptNotFoundError",
    "SourceFetchError",
    "SourceListError",
]


@dataclass(frozen=True)
class ScriptEntry:
    """One top-level entry of a script source.

    Attributes:
        name: Entry name relative to the source root (no path separators).
        is_dir: True for directories, which script loaders skip.
    """

    name: str
    is_dir: bool = False


@runtime_checkable
class ScriptSource(Protocol):
    """Protocol defining the interface for script sources.

    Example implementation:

        class TableSource:
            def __init__(self, rows: dict[str, str]):
                self.rows = rows

            def list_entries(self) -> list[ScriptEntry]:
                return [ScriptEntry(name) for name in self.rows]

            def read_text(self, name: str) -> str:
                if name not in self.rows:
                    raise ScriptNotFoundError(name)
                return self.rows[name]
    """

    def list_entries(self) -> list[ScriptEntry]:
        """List the top-level entries of this source.

        Returns:
            ScriptEntry for each file or directory at the source root.

        Raises:
            SourceListError: If the source cannot be enumerated.
        """
        ...

    def read_text(self, name: str) -> str:
        """Read the content of one entry.

        Args:
            name: Entry name as returned by list_entries().

        Returns:
            The entry content as text.

        Raises:
            ScriptNotFoundError: If the entry does not exist.
            SourceFetchError: If the entry exists but cannot be read.
        """
        ...


class BaseScriptSource:
    """Optional base class providing helpers on top of the protocol."""

    def list_entries(self) -> list[ScriptEntry]:
        raise NotImplementedError

    def read_text(self, name: str) -> str:
        raise NotImplementedError

    def script_names(self, extension: str) -> list[str]:
        """Return file entries ending in ``extension``, sorted by name."""
        return script_names(self, extension)


def script_names(source: ScriptSource, extension: str) -> list[str]:
    """Return the sorted names of top-level files ending in ``extension``.

    Raises:
        SourceListError: If the source cannot be enumerated.
    """
    return sorted(
        entry.name
        for entry in source.list_entries()
        if not entry.is_dir and entry.name.endswith(extension)
    )
