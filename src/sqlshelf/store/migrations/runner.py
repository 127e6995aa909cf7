"""Migration runner for sqlshelf.

Uses SQLite PRAGMA user_version for tracking schema version. Each step
runs its script and advances the version inside a single transaction, so
a failed step leaves the stored version exactly where it was.
"""

from __future__ import annotations

import sqlite3

from loguru import logger

from ...core.config import UPGRADE_ALL
from ...core.exceptions import (
    MigrationError,
    ScriptExecutionError,
    ScriptNotFoundError,
    SourceFetchError,
    TransactionError,
    VersionReadError,
)
from ...sources.base import ScriptSource
from .index import VersionIndex


def read_version(connection: sqlite3.Connection) -> int:
    """Get current schema version from user_version pragma.

    Raises:
        VersionReadError: If the pragma cannot be queried.
    """
    try:
        return connection.execute("PRAGMA user_version").fetchone()[0]
    except sqlite3.Error as e:
        raise VersionReadError(f"Could not query user_version: {e}") from e


def execute_script(
    connection: sqlite3.Connection,
    name: str,
    sql: str,
    version: int | None = None,
) -> None:
    """Run a SQL script in its own transaction, optionally setting the version.

    The script must not issue BEGIN, COMMIT or ROLLBACK itself.

    Args:
        connection: Connection with no transaction in progress.
        name: Script name used in error messages.
        sql: Script text, one or more statements.
        version: Value stored in user_version before committing, if given.

    Raises:
        TransactionError: If a transaction is already open on the connection.
        ScriptExecutionError: If any statement fails; the transaction is
            rolled back first.
    """
    if connection.in_transaction:
        raise TransactionError(f"Cannot run '{name}' while a transaction is open")

    try:
        connection.executescript(f"BEGIN;\n{sql}\n;")
        if not connection.in_transaction:
            raise ScriptExecutionError(name, "script ended the transaction itself")
        if version is not None:
            # PRAGMA does not take parameters
            connection.execute(f"PRAGMA user_version = {int(version)}")
        connection.execute("COMMIT")
    except sqlite3.Error as e:
        if connection.in_transaction:
            connection.execute("ROLLBACK")
        raise ScriptExecutionError(name, str(e)) from e


class MigrationRunner:
    """Applies versioned migration scripts to a SQLite database.

    Example:
        runner = MigrationRunner(connection, DirectorySource("db/versions"))
        version = runner.upgrade()
        print(f"Database now at version {version}")
    """

    def __init__(
        self,
        connection: sqlite3.Connection,
        source: ScriptSource,
        index: VersionIndex | None = None,
    ):
        """Initialize with database connection and version source.

        Args:
            connection: SQLite connection to migrate.
            source: Source holding the version scripts.
            index: Prebuilt index of ``source``; built on demand when omitted.
        """
        self.conn = connection
        self.source = source
        self.index = index if index is not None else VersionIndex.build(source)

    def get_version(self) -> int:
        """Get current schema version."""
        return read_version(self.conn)

    def set_version(self, version: int) -> None:
        """Set schema version without running any script."""
        self.conn.execute(f"PRAGMA user_version = {int(version)}")

    def upgrade(self, target: int = UPGRADE_ALL) -> int:
        """Upgrade to at most ``target``, one version at a time.

        A target of UPGRADE_ALL applies every upgrade reachable by
        consecutive version numbers. A negative target applies nothing.
        Stopping at a version with no upgrade script is not an error.

        Returns:
            The version reached.

        Raises:
            MigrationError: If a step fails. Earlier steps stay applied and
                ``reached_version`` holds the last version reached.
        """
        current = self._read(0)
        if target < 0:
            return current

        while target == UPGRADE_ALL or current < target:
            script = self.index.upgrades.get(current + 1)
            if script is None:
                break
            if not self._step(script, current + 1, current):
                break
            current = self._read(current)

        return current

    def downgrade(self, target: int = 0) -> int:
        """Downgrade to ``target``, one version at a time.

        Returns:
            The version reached; higher than ``target`` when a downgrade
            script is missing.

        Raises:
            MigrationError: If a step fails. Earlier steps stay applied and
                ``reached_version`` holds the last version reached.
        """
        current = self._read(0)

        while current > target:
            script = self.index.downgrades.get(current)
            if script is None:
                break
            if not self._step(script, current - 1, current):
                break
            current = self._read(current)

        return current

    def is_up_to_date(self) -> bool:
        """True if no further upgrade script follows the current version."""
        return (self.get_version() + 1) not in self.index.upgrades

    def _read(self, last_known: int) -> int:
        try:
            return self.get_version()
        except VersionReadError as e:
            raise MigrationError(str(e), reached_version=last_known) from e

    def _step(self, script: str, version: int, current: int) -> bool:
        """Run one script and store ``version``.

        Returns:
            False if the script vanished from the source, True once applied.
        """
        try:
            sql = self.source.read_text(script)
        except ScriptNotFoundError:
            logger.warning(f"Script {script} is indexed but missing, stopping at {current}")
            return False
        except SourceFetchError as e:
            raise MigrationError(
                f"Could not read SQL file '{script}': {e}",
                reached_version=current,
                script=script,
            ) from e

        logger.info(f"Applying {script}: version {current} -> {version}")
        try:
            execute_script(self.conn, script, sql, version=version)
        except (ScriptExecutionError, TransactionError) as e:
            logger.error(f"Migration {script} failed: {e}")
            raise MigrationError(str(e), reached_version=current, script=script) from e

        logger.debug(f"Migration {script} applied successfully")
        return True
