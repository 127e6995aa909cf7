"""Filesystem script source.

Reads scripts from a single directory on the local filesystem. Only the
top level of the directory is visible; sub-directories are reported as
directory entries and never descended into.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from .base import (
    BaseScriptSource,
    ScriptEntry,
    ScriptNotFoundError,
    SourceFetchError,
    SourceListError,
)


class DirectorySource(BaseScriptSource):
    """Script source backed by a directory.

    Example:
        source = DirectorySource("db/versions")
        for entry in source.list_entries():
            print(entry.name)
    """

    def __init__(self, path: Path | str, encoding: str = "utf-8"):
        """Initialize with directory path.

        Args:
            path: Directory holding the scripts.
            encoding: Text encoding of the scripts.
        """
        self.path = Path(path)
        self.encoding = encoding

    def __repr__(self) -> str:
        return f"DirectorySource({str(self.path)!r})"

    def list_entries(self) -> list[ScriptEntry]:
        try:
            children = list(self.path.iterdir())
        except OSError as e:
            raise SourceListError(str(self.path), str(e)) from e

        entries = [ScriptEntry(child.name, child.is_dir()) for child in children]
        logger.debug(f"Listed {len(entries)} entries in {self.path}")
        return entries

    def read_text(self, name: str) -> str:
        file_path = self.path / name
        try:
            return file_path.read_text(encoding=self.encoding)
        except FileNotFoundError as e:
            raise ScriptNotFoundError(name) from e
        except (OSError, UnicodeDecodeError) as e:
            raise SourceFetchError(name, str(e)) from e
