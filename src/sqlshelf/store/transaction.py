"""Transactions with transaction-scoped named statements."""

from __future__ import annotations

import sqlite3
from typing import TYPE_CHECKING, Any

from loguru import logger

from ..core.exceptions import TransactionClosedError, TransactionError
from .statements import Params, Statement, run_statement

if TYPE_CHECKING:
    from .database import Database

TRANSACTION_MODES = ("DEFERRED", "IMMEDIATE", "EXCLUSIVE")


class BoundStatement:
    """A Statement re-bound to one transaction.

    The underlying Statement is shared with the database and stays valid
    outside the transaction; only this adapter is tied to it.
    """

    def __init__(self, statement: Statement, transaction: Transaction):
        self.statement = statement
        self.transaction = transaction

    def __repr__(self) -> str:
        return f"BoundStatement({self.statement.name!r})"

    @property
    def name(self) -> str:
        return self.statement.name

    @property
    def sql(self) -> str:
        return self.statement.sql

    def execute(self, params: Params = ()) -> sqlite3.Cursor:
        """Execute inside the bound transaction.

        Raises:
            TransactionClosedError: If the transaction already ended.
        """
        self.transaction.ensure_active()
        return run_statement(self.transaction.connection, self.statement, params)

    def fetchone(self, params: Params = ()) -> Any:
        return self.execute(params).fetchone()

    def fetchall(self, params: Params = ()) -> list[Any]:
        return self.execute(params).fetchall()


class Transaction:
    """An explicit transaction on a Database's connection.

    Named statements are resolved through the database's statement cache and
    bound to this transaction on first use; the bound forms are discarded on
    commit or rollback.

    A connection carries one transaction at a time. A second begin() on the
    same database fails until the first ends; concurrent transactions need
    separate connections.

    Example:
        tx = db.begin()
        try:
            tx.execute("accounts.debit", (10, 1))
            tx.execute("accounts.credit", (10, 2))
            tx.commit()
        except Exception:
            tx.rollback()
            raise
    """

    def __init__(self, database: Database, mode: str = "DEFERRED"):
        """Begin a transaction.

        Args:
            database: Database whose connection and statements are used.
            mode: DEFERRED, IMMEDIATE or EXCLUSIVE.

        Raises:
            ValueError: If ``mode`` is not a SQLite transaction mode.
            TransactionError: If a transaction is already open on the
                connection or BEGIN fails.
        """
        mode = mode.upper()
        if mode not in TRANSACTION_MODES:
            raise ValueError(f"Unknown transaction mode: {mode}")

        self.database = database
        self.connection = database.connection
        self.mode = mode
        self._statements: dict[str, BoundStatement] = {}

        if self.connection.in_transaction:
            raise TransactionError("A transaction is already open on this connection")
        try:
            self.connection.execute(f"BEGIN {mode}")
        except sqlite3.Error as e:
            raise TransactionError(f"Could not begin transaction: {e}") from e
        self._active = True

    def __enter__(self) -> Transaction:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self._active:
            return
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @property
    def active(self) -> bool:
        return self._active

    def ensure_active(self) -> None:
        if not self._active:
            raise TransactionClosedError("Transaction has already been committed or rolled back")

    def named(self, name: str) -> BoundStatement:
        """Return the statement ``name`` bound to this transaction."""
        self.ensure_active()
        bound = self._statements.get(name)
        if bound is None:
            bound = BoundStatement(self.database.statement(name), self)
            self._statements[name] = bound
        return bound

    def execute(self, name: str, params: Params = ()) -> sqlite3.Cursor:
        return self.named(name).execute(params)

    def fetchone(self, name: str, params: Params = ()) -> Any:
        return self.named(name).fetchone(params)

    def fetchall(self, name: str, params: Params = ()) -> list[Any]:
        return self.named(name).fetchall(params)

    def commit(self) -> None:
        """Commit and end the transaction.

        Raises:
            TransactionClosedError: If the transaction already ended.
            TransactionError: If COMMIT fails; the transaction is rolled back.
        """
        self.ensure_active()
        try:
            self.connection.execute("COMMIT")
        except sqlite3.Error as e:
            if self.connection.in_transaction:
                self.connection.execute("ROLLBACK")
            raise TransactionError(f"Could not commit transaction (rolled back): {e}") from e
        finally:
            self._close()
        logger.debug("Transaction committed")

    def rollback(self) -> None:
        """Roll back and end the transaction.

        Raises:
            TransactionClosedError: If the transaction already ended.
        """
        self.ensure_active()
        try:
            if self.connection.in_transaction:
                self.connection.execute("ROLLBACK")
        finally:
            self._close()
        logger.debug("Transaction rolled back")

    def _close(self) -> None:
        self._active = False
        self._statements.clear()
