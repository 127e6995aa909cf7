"""CLI entry point for sqlshelf."""

import argparse
import sys
from typing import NoReturn

from loguru import logger

from .. import __version__
from ..core.config import Options
from . import commands


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="sqlshelf",
        description="Versioned migrations and named statements from SQL files",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Show log output (-v info, -vv debug)",
    )

    subparsers = parser.add_subparsers(dest="command", required=False)

    # version
    version_parser = subparsers.add_parser("version", help="Print the database version")
    version_parser.add_argument("database", help="SQLite database file")

    # upgrade
    upgrade_parser = subparsers.add_parser("upgrade", help="Apply upgrade scripts")
    upgrade_parser.add_argument("database", help="SQLite database file")
    upgrade_parser.add_argument("--versions", help="Directory of numbered scripts")
    upgrade_parser.add_argument(
        "--to", type=int, default=None, help="Highest version to reach (default: all)"
    )

    # downgrade
    downgrade_parser = subparsers.add_parser("downgrade", help="Apply downgrade scripts")
    downgrade_parser.add_argument("database", help="SQLite database file")
    downgrade_parser.add_argument("--versions", help="Directory of numbered scripts")
    downgrade_parser.add_argument("--to", type=int, required=True, help="Version to reach")

    # check
    check_parser = subparsers.add_parser(
        "check", help="Compile every named statement and report errors"
    )
    check_parser.add_argument("database", help="SQLite database file")
    check_parser.add_argument("--queries", help="Directory of named statement files")
    check_parser.add_argument("--versions", help="Directory of numbered scripts, applied first")
    check_parser.add_argument("--init", help="Directory of init scripts, run before loading")

    return parser


def configure_logging(verbosity: int) -> None:
    """Route loguru output to stderr at the requested level."""
    logger.remove()
    if verbosity <= 0:
        return
    level = "INFO" if verbosity == 1 else "DEBUG"
    logger.add(sys.stderr, level=level)


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        options = Options.from_env()
        ok = True
        if args.command == "version":
            commands.handle_version(args, options)
        elif args.command == "upgrade":
            commands.handle_upgrade(args, options)
        elif args.command == "downgrade":
            commands.handle_downgrade(args, options)
        elif args.command == "check":
            ok = commands.handle_check(args, options)
        else:
            parser.print_help()

        sys.exit(0 if ok else 1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
