"""Version index: maps version numbers to upgrade and downgrade scripts.

Script file names embed a version number (the first run of digits) and a
direction marker, for example ``0003.up.sql`` and ``0003.down.sql``. The
upgrade script for N moves the database from N-1 to N; the downgrade
script for N moves it from N back to N-1.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from loguru import logger

from ...core.exceptions import SourceListError
from ...sources.base import ScriptSource

_VERSION_RE = re.compile(r"\d+")
_UPGRADE_RE = re.compile(r"\.up\.")
_DOWNGRADE_RE = re.compile(r"\.down\.")


def parse_version(name: str) -> int:
    """Extract the version number from a script file name.

    Returns:
        The first run of digits as an int, or 0 if the name has none.
    """
    match = _VERSION_RE.search(name)
    if match is None:
        return 0
    return int(match.group())


@dataclass(frozen=True)
class VersionIndex:
    """Immutable mapping of version numbers to script file names.

    Attributes:
        upgrades: Version -> upgrade script reaching that version.
        downgrades: Version -> downgrade script leaving that version.
        errors: Errors met while scanning the source.
    """

    upgrades: Mapping[int, str] = field(default_factory=lambda: MappingProxyType({}))
    downgrades: Mapping[int, str] = field(default_factory=lambda: MappingProxyType({}))
    errors: tuple[Exception, ...] = ()

    @property
    def latest_version(self) -> int:
        """Highest version with an upgrade script, or 0."""
        return max(self.upgrades, default=0)

    @classmethod
    def build(cls, source: ScriptSource) -> "VersionIndex":
        """Scan the top level of ``source`` once and index its scripts.

        Entries are visited in name order, so when two files claim the same
        direction and version the lexicographically last name wins.

        A listing failure is recorded in ``errors`` and yields an empty index.
        """
        try:
            entries = source.list_entries()
        except SourceListError as e:
            logger.error(f"Could not read version source: {e}")
            return cls(errors=(e,))

        upgrades: dict[int, str] = {}
        downgrades: dict[int, str] = {}

        for entry in sorted(entries, key=lambda e: e.name):
            if entry.is_dir:
                continue
            version = parse_version(entry.name)
            if version <= 0:
                continue
            if _UPGRADE_RE.search(entry.name):
                target = upgrades
            elif _DOWNGRADE_RE.search(entry.name):
                target = downgrades
            else:
                continue
            if version in target:
                logger.warning(
                    f"Duplicate script for version {version}: "
                    f"{entry.name!r} replaces {target[version]!r}"
                )
            target[version] = entry.name

        logger.debug(
            f"Indexed {len(upgrades)} upgrade and {len(downgrades)} downgrade scripts"
        )
        return cls(
            upgrades=MappingProxyType(upgrades),
            downgrades=MappingProxyType(downgrades),
        )
