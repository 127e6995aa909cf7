"""sqlshelf: SQL kept in files, applied as migrations and run by name.

Example:
    from sqlshelf import Database, DirectorySource, Options, connect

    db = Database.open(
        connect("app.db"),
        Options(
            version_source=DirectorySource("db/versions"),
            query_source=DirectorySource("db/queries"),
        ),
    )
    db.check()

    with db.transaction() as tx:
        tx.execute("users.insert", ("ada",))
"""

from .core import (
    UPGRADE_ALL,
    UPGRADE_NONE,
    MigrationError,
    Options,
    SqlShelfError,
    StartupError,
    StatementCompileError,
    StatementNotFoundError,
)
from .sources import DirectorySource, MemorySource, PackageSource, ScriptSource
from .store import BoundStatement, Database, Statement, Transaction, connect

__version__ = "0.1.0"

__all__ = [
    "Database",
    "connect",
    "Options",
    "UPGRADE_ALL",
    "UPGRADE_NONE",
    "Statement",
    "BoundStatement",
    "Transaction",
    "ScriptSource",
    "DirectorySource",
    "PackageSource",
    "MemorySource",
    "SqlShelfError",
    "MigrationError",
    "StartupError",
    "StatementCompileError",
    "StatementNotFoundError",
]
