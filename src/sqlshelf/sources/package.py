"""Package resource script source.

Reads scripts shipped inside an importable Python package, so SQL files
can be distributed in the same wheel as the code that uses them.
"""

from __future__ import annotations

from importlib import resources
from importlib.resources.abc import Traversable

from .base import (
    BaseScriptSource,
    ScriptEntry,
    ScriptNotFoundError,
    SourceFetchError,
    SourceListError,
)


class PackageSource(BaseScriptSource):
    """Script source backed by package data.

    Example:
        versions = PackageSource("myapp", "sql/versions")
    """

    def __init__(self, package: str, subdir: str | None = None, encoding: str = "utf-8"):
        """Initialize with a package name and optional sub-directory.

        Args:
            package: Importable package name holding the scripts.
            subdir: Slash-separated directory inside the package.
            encoding: Text encoding of the scripts.
        """
        self.package = package
        self.subdir = subdir
        self.encoding = encoding

    def __repr__(self) -> str:
        return f"PackageSource({self.package!r}, {self.subdir!r})"

    @property
    def location(self) -> str:
        if self.subdir:
            return f"{self.package}:{self.subdir}"
        return self.package

    def _root(self) -> Traversable:
        root = resources.files(self.package)
        if self.subdir:
            for part in self.subdir.strip("/").split("/"):
                root = root.joinpath(part)
        return root

    def list_entries(self) -> list[ScriptEntry]:
        try:
            return [ScriptEntry(child.name, child.is_dir()) for child in self._root().iterdir()]
        except (ModuleNotFoundError, OSError) as e:
            raise SourceListError(self.location, str(e)) from e

    def read_text(self, name: str) -> str:
        try:
            resource = self._root().joinpath(name)
            found = resource.is_file()
        except (ModuleNotFoundError, OSError) as e:
            raise SourceFetchError(name, str(e)) from e

        if not found:
            raise ScriptNotFoundError(name)

        try:
            return resource.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise SourceFetchError(name, str(e)) from e
