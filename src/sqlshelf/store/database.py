"""SQLite database wrapper with versioning and named statements."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from loguru import logger

from ..core.config import UPGRADE_ALL, UPGRADE_NONE, Options
from ..core.exceptions import DatabaseError, MigrationError, StartupError
from .migrations import MigrationRunner, VersionIndex, read_version, run_init_scripts
from .statements import Params, Statement, StatementCache, StatementCompiler
from .transaction import Transaction


def connect(path: Path | str, timeout: float = 30.0) -> sqlite3.Connection:
    """Open a SQLite connection suited to Database.

    The connection runs in autocommit mode, so statements outside an
    explicit transaction take effect immediately.

    Args:
        path: Database file, or ``":memory:"``.
        timeout: How long to wait for locks (seconds).

    Raises:
        DatabaseError: If the database cannot be opened.
    """
    try:
        if str(path) != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        connection = sqlite3.connect(str(path), timeout=timeout, isolation_level=None)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON")
    except (OSError, sqlite3.Error) as e:
        raise DatabaseError(f"Failed to connect to database: {e}") from e
    return connection


class Database:
    """A SQLite connection with version control and named statements.

    Use Database.open() to migrate, run init scripts and preload statements
    in one step. Errors met while doing so are collected in ``errors``; the
    database stays usable for everything that did not fail.

    Example:
        db = Database.open(
            connect("app.db"),
            Options(
                version_source=DirectorySource("db/versions"),
                query_source=DirectorySource("db/queries"),
            ),
        )
        db.check()
        row = db.fetchone("users.by_id", (42,))
    """

    def __init__(self, connection: sqlite3.Connection, options: Options | None = None):
        """Wrap a connection and index its version scripts.

        No SQL is run; see open() for start-up work.

        Args:
            connection: Live SQLite connection. Transactions are managed
                explicitly, so autocommit mode (``isolation_level=None``) is
                expected.
            options: Sources and start-up behaviour.

        Raises:
            ValueError: If ``connection`` is None.
        """
        if connection is None:
            raise ValueError("A sqlite3.Connection is required")

        self.connection = connection
        self.options = options or Options()
        self.errors: list[Exception] = []

        self.migrations: MigrationRunner | None = None
        if self.options.version_source is not None:
            index = VersionIndex.build(self.options.version_source)
            self.errors.extend(index.errors)
            self.migrations = MigrationRunner(connection, self.options.version_source, index)

        self.statements = StatementCache(
            StatementCompiler(connection, self.options.query_source, self.options.extension)
        )

    @classmethod
    def open(cls, connection: sqlite3.Connection, options: Options | None = None) -> Database:
        """Wrap a connection, upgrade it and load its statements.

        Steps, each skipped when its source is not configured:
            1. upgrade to ``options.max_version`` unless it is UPGRADE_NONE;
            2. run init scripts;
            3. preload every named statement.
        Steps 2 and 3 are skipped when ``options.no_preload`` is set or
        ``options.max_version`` is UPGRADE_NONE.

        Returns:
            The database, with any start-up errors in ``errors``.
        """
        db = cls(connection, options)
        options = db.options

        if db.migrations is not None and options.max_version != UPGRADE_NONE:
            try:
                db.upgrade(options.max_version)
            except MigrationError as e:
                db.errors.append(e)

        if not options.skip_startup:
            if options.init_source is not None:
                db.errors.extend(run_init_scripts(connection, options.init_source, options.extension))
            if options.query_source is not None:
                db.errors.extend(db.statements.preload())

        if db.errors:
            logger.warning(f"Database opened with {len(db.errors)} error(s)")
        else:
            logger.debug(f"Database opened with {len(db.statements)} statement(s)")
        return db

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def check(self) -> None:
        """Raise the collected start-up errors, if any.

        Raises:
            StartupError: Grouping every error in ``errors``.
        """
        if self.errors:
            raise StartupError("Database opened with errors", list(self.errors), self)

    def close(self) -> None:
        """Close the underlying connection."""
        try:
            self.connection.close()
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to close database: {e}") from e

    # -------------------------------------------------------------------------
    # Versioning
    # -------------------------------------------------------------------------

    def version(self) -> int:
        """Return the current database version."""
        return read_version(self.connection)

    def upgrade(self, target: int = UPGRADE_ALL) -> int:
        """Upgrade to at most ``target``; see MigrationRunner.upgrade."""
        if self.migrations is None:
            return self.version()
        return self.migrations.upgrade(target)

    def downgrade(self, target: int = 0) -> int:
        """Downgrade to ``target``; see MigrationRunner.downgrade."""
        if self.migrations is None:
            return self.version()
        return self.migrations.downgrade(target)

    # -------------------------------------------------------------------------
    # Named statements
    # -------------------------------------------------------------------------

    def statement(self, name: str) -> Statement:
        """Return the named statement, compiling its file if needed."""
        return self.statements.resolve(name)

    def execute(self, name: str, params: Params = ()) -> sqlite3.Cursor:
        """Execute the named statement and return the cursor."""
        return self.statement(name).execute(params)

    def fetchone(self, name: str, params: Params = ()) -> Any:
        """Execute the named statement and return its first row, or None."""
        return self.statement(name).fetchone(params)

    def fetchall(self, name: str, params: Params = ()) -> list[Any]:
        """Execute the named statement and return every row."""
        return self.statement(name).fetchall(params)

    def begin(self, mode: str = "DEFERRED") -> Transaction:
        """Begin a transaction for named statements."""
        return Transaction(self, mode)

    @contextmanager
    def transaction(self, mode: str = "DEFERRED") -> Iterator[Transaction]:
        """Context manager for a transaction.

        Commits when the block succeeds and rolls back when it raises.
        """
        tx = self.begin(mode)
        try:
            yield tx
        except BaseException:
            if tx.active:
                tx.rollback()
            raise
        if tx.active:
            tx.commit()
