"""Storage layer for sqlshelf: database wrapper, migrations and statements."""

from .database import Database, connect
from .migrations import MigrationRunner, VersionIndex, run_init_scripts
from .statements import (
    Fragment,
    Statement,
    StatementCache,
    StatementCompiler,
    parse_fragments,
)
from .transaction import BoundStatement, Transaction

__all__ = [
    "Database",
    "connect",
    "MigrationRunner",
    "VersionIndex",
    "run_init_scripts",
    "Fragment",
    "Statement",
    "StatementCache",
    "StatementCompiler",
    "parse_fragments",
    "BoundStatement",
    "Transaction",
]
