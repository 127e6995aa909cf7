"""Version commands for sqlshelf CLI."""

from dataclasses import replace

from ...core.config import UPGRADE_ALL, UPGRADE_NONE, Options
from ...sources import source_from_path
from ...store import Database, connect


def _open(args, options: Options) -> Database:
    versions = source_from_path(args.versions) or options.version_source
    if versions is None:
        raise ValueError("No version directory given (use --versions or SQLSHELF_VERSION_DIR)")
    options = replace(options, version_source=versions, max_version=UPGRADE_NONE)
    return Database.open(connect(args.database), options)


def handle_version(args, options: Options) -> None:
    """Handle version command.

    Args:
        args: Parsed command arguments.
        options: Options loaded from the environment.
    """
    db = Database(connect(args.database))
    try:
        print(db.version())
    finally:
        db.close()


def handle_upgrade(args, options: Options) -> None:
    """Handle upgrade command."""
    target = args.to if args.to is not None else UPGRADE_ALL
    with _open(args, options) as db:
        before = db.version()
        after = db.upgrade(target)
        print(f"Upgraded {args.database}: {before} -> {after}")


def handle_downgrade(args, options: Options) -> None:
    """Handle downgrade command."""
    with _open(args, options) as db:
        before = db.version()
        after = db.downgrade(args.to)
        print(f"Downgraded {args.database}: {before} -> {after}")
