"""In-memory script source."""

from __future__ import annotations

from collections.abc import Mapping

from .base import BaseScriptSource, ScriptEntry, ScriptNotFoundError


class MemorySource(BaseScriptSource):
    """Script source backed by a mapping of name to text.

    Names containing ``/`` are nested entries: their first path segment is
    listed as a directory and the file itself is not visible at the top level.

    Example:
        source = MemorySource({
            "0001.up.sql": "CREATE TABLE t (id INTEGER);",
            "0001.down.sql": "DROP TABLE t;",
        })
    """

    def __init__(self, files: Mapping[str, str] | None = None):
        self.files: dict[str, str] = dict(files or {})

    def __repr__(self) -> str:
        return f"MemorySource({sorted(self.files)!r})"

    def list_entries(self) -> list[ScriptEntry]:
        entries: dict[str, ScriptEntry] = {}
        for name in self.files:
            head, sep, _ = name.partition("/")
            entries[head] = ScriptEntry(head, is_dir=bool(sep))
        return list(entries.values())

    def read_text(self, name: str) -> str:
        try:
            return self.files[name]
        except KeyError:
            raise ScriptNotFoundError(name) from None
