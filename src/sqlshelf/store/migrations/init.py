"""Initialization scripts run after migration on every open."""

from __future__ import annotations

import sqlite3

from loguru import logger

from ...core.config import DEFAULT_EXTENSION
from ...core.exceptions import SourceError, SqlShelfError
from ...sources.base import ScriptSource, script_names
from .runner import execute_script


def run_init_scripts(
    connection: sqlite3.Connection,
    source: ScriptSource,
    extension: str = DEFAULT_EXTENSION,
) -> list[Exception]:
    """Run every init script in name order, each in its own transaction.

    A failing script is rolled back and recorded; the remaining scripts
    still run.

    Returns:
        Errors collected while listing, reading or running scripts.
    """
    try:
        names = script_names(source, extension)
    except SourceError as e:
        logger.error(f"Could not read init source: {e}")
        return [e]

    errors: list[Exception] = []
    for name in names:
        try:
            execute_script(connection, name, source.read_text(name))
        except SqlShelfError as e:
            logger.error(f"Init script {name} failed: {e}")
            errors.append(e)
        else:
            logger.debug(f"Init script {name} applied")

    return errors
