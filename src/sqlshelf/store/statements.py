"""Named statements: parsing, compiling and caching SQL files.

A query file holds one or more statements. A file without name markers
is a single statement named after the file:

    -- users_by_id.sql
    SELECT * FROM users WHERE id = ?

A file with markers holds one statement per marker, each named
``<file>.<marker>``:

    -- users.sql
    -- name: by_id
    SELECT * FROM users WHERE id = ?
    -- name: count
    SELECT COUNT(*) FROM users

Other ``--`` comment lines and blank lines are dropped.
"""

from __future__ import annotations

import re
import sqlite3
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from ..core.config import DEFAULT_EXTENSION
from ..core.exceptions import (
    ScriptNotFoundError,
    SourceError,
    SqlShelfError,
    StatementCompileError,
    StatementError,
    StatementExecutionError,
    StatementNotFoundError,
)
from ..sources.base import ScriptSource, script_names

NAME_MARKER_RE = re.compile(r"(?i)^--\s*name:\s*(\S+)")
COMMENT_RE = re.compile(r"^--")

Params = Any


# =============================================================================
# Parsing
# =============================================================================


@dataclass(frozen=True)
class Fragment:
    """One statement's text extracted from a query file.

    Attributes:
        name: Fully qualified statement name.
        sql: Content lines joined by newlines.
        line: 1-based line of the introducing marker, or the file's line
            count for an unmarked statement.
    """

    name: str
    sql: str
    line: int


def parse_fragments(base_name: str, text: str, filename: str | None = None) -> list[Fragment]:
    """Split a query file into named fragments.

    Args:
        base_name: File name without extension.
        text: File content.
        filename: File name used in error messages.

    Returns:
        Fragments in file order. Empty when the file has no content lines.

    Raises:
        StatementCompileError: If a marker name repeats within the file.
    """
    filename = filename or base_name
    lines = text.splitlines()
    fragments: list[Fragment] = []
    seen: set[str] = set()

    subname = ""
    marker_line = 0
    buffer: list[str] = []

    def finalize() -> None:
        if not buffer:
            return
        name = f"{base_name}.{subname}" if subname else base_name
        if name in seen:
            raise StatementCompileError(filename, marker_line, name, "duplicate statement name")
        seen.add(name)
        fragments.append(Fragment(name, "\n".join(buffer), marker_line or len(lines)))

    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue
        if match := NAME_MARKER_RE.match(line):
            finalize()
            subname = match.group(1)
            marker_line = lineno
            buffer = []
        elif not COMMENT_RE.match(line):
            buffer.append(line)

    finalize()
    return fragments


# =============================================================================
# Compiled statements
# =============================================================================


@dataclass(frozen=True)
class Statement:
    """A compiled, reusable named statement.

    The connection keeps prepared statements in its own cache keyed by SQL
    text, so executing the same Statement repeatedly reuses one prepared
    form.

    Attributes:
        name: Fully qualified statement name.
        sql: Statement text.
        filename: Query file the statement came from.
        line: Line reported in errors about this statement.
        connection: Connection the statement was compiled against.
    """

    name: str
    sql: str
    filename: str
    line: int
    connection: sqlite3.Connection = field(repr=False, compare=False)

    def execute(self, params: Params = ()) -> sqlite3.Cursor:
        """Execute with ``params`` and return the cursor."""
        return run_statement(self.connection, self, params)

    def fetchone(self, params: Params = ()) -> Any:
        """Execute and return the first row, or None."""
        return self.execute(params).fetchone()

    def fetchall(self, params: Params = ()) -> list[Any]:
        """Execute and return every row."""
        return self.execute(params).fetchall()


def run_statement(connection: sqlite3.Connection, statement: Statement, params: Params) -> sqlite3.Cursor:
    """Execute ``statement`` on ``connection``.

    Raises:
        StatementExecutionError: If execution fails.
    """
    try:
        return connection.execute(statement.sql, params)
    except (sqlite3.Error, sqlite3.Warning) as e:
        raise StatementExecutionError(statement.name, statement.filename, str(e)) from e


def prepare(connection: sqlite3.Connection, sql: str) -> None:
    """Compile ``sql`` against ``connection`` without running it.

    Raises:
        sqlite3.Error: If the text does not compile (syntax errors, unknown
            tables or columns, several statements in one fragment).
    """
    probe = sql if sql[:7].upper() == "EXPLAIN" else f"EXPLAIN {sql}"
    try:
        connection.execute(probe).close()
    except sqlite3.ProgrammingError as e:
        # parameters are bound only after a successful prepare
        if "bindings" not in str(e):
            raise


class StatementCompiler:
    """Compiles query files from a source into Statements."""

    def __init__(
        self,
        connection: sqlite3.Connection,
        source: ScriptSource | None,
        extension: str = DEFAULT_EXTENSION,
    ):
        self.conn = connection
        self.source = source
        self.extension = extension

    def compile(self, base_name: str) -> dict[str, Statement]:
        """Read, parse and compile one query file.

        Args:
            base_name: File name without extension.

        Returns:
            Mapping of fully qualified name to Statement. Empty when the file
            holds no SQL.

        Raises:
            StatementError: If no query source is configured.
            ScriptNotFoundError: If the file does not exist.
            SourceFetchError: If the file cannot be read.
            StatementCompileError: If any fragment fails to compile; nothing
                from the file is returned.
        """
        if self.source is None:
            raise StatementError(f"No query source configured, cannot load '{base_name}'")

        filename = base_name + self.extension
        text = self.source.read_text(filename)

        statements: dict[str, Statement] = {}
        for fragment in parse_fragments(base_name, text, filename):
            try:
                prepare(self.conn, fragment.sql)
            except (sqlite3.Error, sqlite3.Warning) as e:
                raise StatementCompileError(filename, fragment.line, fragment.name, str(e)) from e
            statements[fragment.name] = Statement(
                name=fragment.name,
                sql=fragment.sql,
                filename=filename,
                line=fragment.line,
                connection=self.conn,
            )

        logger.debug(f"Compiled {len(statements)} statement(s) from {filename}")
        return statements


# =============================================================================
# Cache
# =============================================================================


def candidate_files(name: str) -> list[str]:
    """Files that may define ``name``, most specific first.

    ``a.b.c`` may be the unmarked statement of ``a.b.c``, the ``c`` marker
    of ``a.b`` or the ``b.c`` marker of ``a``.
    """
    parts = name.split(".")
    return [".".join(parts[:i]) for i in range(len(parts), 0, -1)]


class StatementCache:
    """Name to Statement mapping with lazy compilation on a miss.

    Entries are added on first successful compilation and never evicted.

    Example:
        cache = StatementCache(StatementCompiler(conn, DirectorySource("db/queries")))
        errors = cache.preload()
        row = cache.resolve("users.by_id").fetchone((42,))
    """

    def __init__(self, compiler: StatementCompiler):
        self.compiler = compiler
        self._statements: dict[str, Statement] = {}
        self._loaded: set[str] = set()

    def __contains__(self, name: object) -> bool:
        return name in self._statements

    def __len__(self) -> int:
        return len(self._statements)

    def names(self) -> list[str]:
        """Sorted names of every cached statement."""
        return sorted(self._statements)

    def load(self, base_name: str) -> list[str]:
        """Compile one query file and cache its statements.

        Names already cached keep their existing Statement.

        Returns:
            Names defined by the file.
        """
        statements = self.compiler.compile(base_name)
        for name, statement in statements.items():
            self._statements.setdefault(name, statement)
        self._loaded.add(base_name)
        return list(statements)

    def resolve(self, name: str) -> Statement:
        """Return the cached statement, compiling its file on a miss.

        Raises:
            StatementNotFoundError: If no candidate file defines ``name``.
            StatementCompileError: If a candidate file fails to compile.
            SourceFetchError: If a candidate file exists but cannot be read.
        """
        statement = self._statements.get(name)
        if statement is not None:
            return statement

        for base_name in candidate_files(name):
            if base_name in self._loaded:
                continue
            try:
                self.load(base_name)
            except ScriptNotFoundError:
                continue
            logger.debug(f"Lazily loaded {base_name}{self.compiler.extension} for '{name}'")
            if name in self._statements:
                return self._statements[name]

        raise StatementNotFoundError(name)

    def preload(self) -> list[Exception]:
        """Compile every query file in the compiler's source.

        A failing file does not stop its siblings.

        Returns:
            Errors collected while listing, reading or compiling files.
        """
        source = self.compiler.source
        if source is None:
            return []

        extension = self.compiler.extension
        try:
            filenames = script_names(source, extension)
        except SourceError as e:
            logger.error(f"Could not read query source: {e}")
            return [e]

        errors: list[Exception] = []
        for filename in filenames:
            base_name = filename[: -len(extension)] if extension else filename
            try:
                self.load(base_name)
            except SqlShelfError as e:
                logger.error(f"Could not load {filename}: {e}")
                errors.append(e)

        logger.info(f"Preloaded {len(self._statements)} statement(s) from {len(filenames)} file(s)")
        return errors
