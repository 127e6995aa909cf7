"""Custom exceptions for sqlshelf."""


class SqlShelfError(Exception):
    """Base exception for all sqlshelf errors."""

    pass


class ConfigError(SqlShelfError):
    """Configuration value could not be parsed."""

    pass


# =============================================================================
# Script sources
# =============================================================================


class SourceError(SqlShelfError):
    """Base exception for script source operations."""

    pass


class SourceListError(SourceError):
    """Failed to list entries of a script source."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to list entries of {source}: {reason}")


class SourceFetchError(SourceError):
    """Failed to read a script entry."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Failed to read {name}: {reason}")


class ScriptNotFoundError(SourceFetchError):
    """Script entry does not exist in its source."""

    def __init__(self, name: str):
        super().__init__(name, "no such entry")


# =============================================================================
# Database and migrations
# =============================================================================


class DatabaseError(SqlShelfError):
    """Database operation failed."""

    pass


class VersionReadError(DatabaseError):
    """The stored schema version could not be read."""

    pass


class ScriptExecutionError(DatabaseError):
    """A SQL script failed to run and was rolled back."""

    def __init__(self, script: str, reason: str):
        self.script = script
        self.reason = reason
        super().__init__(f"Could not run SQL file '{script}' (rolled back): {reason}")


class MigrationError(DatabaseError):
    """A migration step failed.

    Attributes:
        reached_version: Last version successfully reached before the failure.
        script: File name of the failing step, if one was running.
    """

    def __init__(self, message: str, reached_version: int, script: str | None = None):
        self.reached_version = reached_version
        self.script = script
        super().__init__(message)


class TransactionError(DatabaseError):
    """Transaction could not be started or finished."""

    pass


class TransactionClosedError(TransactionError):
    """Operation attempted on a transaction that already ended."""

    pass


# =============================================================================
# Named statements
# =============================================================================


class StatementError(SqlShelfError):
    """Named statement operation failed."""

    pass


class StatementCompileError(StatementError):
    """A statement fragment could not be compiled."""

    def __init__(self, filename: str, line: int, name: str, reason: str):
        self.filename = filename
        self.line = line
        self.name = name
        self.reason = reason
        super().__init__(f"[{filename}:{line}] could not prepare '{name}': {reason}")


class StatementExecutionError(StatementError):
    """A named statement failed at execution time."""

    def __init__(self, name: str, filename: str, reason: str):
        self.name = name
        self.filename = filename
        self.reason = reason
        super().__init__(f"Could not execute '{name}' from {filename}: {reason}")


class StatementNotFoundError(StatementError):
    """No cached or loadable statement has the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Statement not found: {name}")


class StartupError(SqlShelfError, ExceptionGroup):
    """Errors collected while opening a database.

    The database object is still usable for every script and statement
    that did not fail; it is available as ``database``.
    """

    def __new__(cls, message, exceptions, database=None):
        self = super().__new__(cls, message, exceptions)
        self.database = database
        return self

    def derive(self, excs):
        return StartupError(self.message, excs, self.database)
