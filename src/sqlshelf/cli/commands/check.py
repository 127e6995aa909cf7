"""Check command for sqlshelf CLI."""

from dataclasses import replace

from ...core.config import UPGRADE_ALL, Options
from ...sources import source_from_path
from ...store import Database, connect


def handle_check(args, options: Options) -> bool:
    """Handle check command: load every statement and report problems.

    Args:
        args: Parsed command arguments.
        options: Options loaded from the environment.

    Returns:
        True if every script and statement loaded.
    """
    queries = source_from_path(args.queries) or options.query_source
    if queries is None:
        raise ValueError("No query directory given (use --queries or SQLSHELF_QUERY_DIR)")
    versions = source_from_path(args.versions) or options.version_source

    options = replace(
        options,
        query_source=queries,
        version_source=versions,
        init_source=source_from_path(args.init) or options.init_source,
        max_version=UPGRADE_ALL,
        no_preload=False,
    )
    with Database.open(connect(args.database), options) as db:
        _print_report(db)
        return not db.errors


def _print_report(db: Database) -> None:
    """Print loaded statements and start-up errors."""
    print(f"Version: {db.version()}")
    print(f"Statements: {len(db.statements)}")
    for name in db.statements.names():
        print(f"  {name}")

    if db.errors:
        print()
        print(f"Errors: {len(db.errors)}")
        for error in db.errors:
            print(f"  {error}")
