"""Tests for named statement parsing, compiling and caching."""

import pytest

from sqlshelf.core.exceptions import (
    SourceFetchError,
    StatementCompileError,
    StatementError,
    StatementExecutionError,
    StatementNotFoundError,
)
from sqlshelf.sources import MemorySource
from sqlshelf.store.statements import (
    Fragment,
    StatementCache,
    StatementCompiler,
    candidate_files,
    parse_fragments,
)
from tests.helpers import QUERY_SCRIPTS, RecordingSource


@pytest.fixture
def schema(conn):
    """Create the users table the query fixtures refer to."""
    conn.executescript(
        """
        CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT NOT NULL);
        CREATE TABLE posts (id INTEGER PRIMARY KEY, user_id INTEGER, title TEXT);
        """
    )
    return conn


class TestParseFragments:
    """Tests for parse_fragments()."""

    def test_unmarked_file_is_one_statement(self):
        """A file without markers is named after the file."""
        fragments = parse_fragments("count_users", "SELECT COUNT(*)\n  FROM users\n")

        assert fragments == [Fragment("count_users", "SELECT COUNT(*)\nFROM users", 2)]

    def test_marked_file(self):
        """Each marker starts a statement named base.sub."""
        text = (
            "-- Queries on users\n"
            "\n"
            "-- name: by_id\n"
            "SELECT *\n"
            "  FROM users\n"
            " WHERE id = ?\n"
            "\n"
            "-- name: count\n"
            "SELECT COUNT(*) FROM users\n"
        )

        fragments = parse_fragments("users", text)

        assert fragments == [
            Fragment("users.by_id", "SELECT *\nFROM users\nWHERE id = ?", 3),
            Fragment("users.count", "SELECT COUNT(*) FROM users", 8),
        ]

    def test_marker_is_case_insensitive(self):
        fragments = parse_fragments("f", "--NAME:  Upper\nSELECT 1\n-- Name: mixed\nSELECT 2")

        assert [f.name for f in fragments] == ["f.Upper", "f.mixed"]

    def test_comments_and_blank_lines_dropped(self):
        """Comment lines inside a fragment are not SQL."""
        text = "-- name: q\nSELECT 1\n\n-- trailing note\n  , 2\n"

        assert parse_fragments("f", text)[0].sql == "SELECT 1\n, 2"

    def test_content_before_first_marker(self):
        """Leading unmarked content keeps the plain base name."""
        fragments = parse_fragments("f", "SELECT 1\n-- name: b\nSELECT 2\n")

        assert [(f.name, f.sql) for f in fragments] == [("f", "SELECT 1"), ("f.b", "SELECT 2")]
        assert fragments[0].line == 3

    def test_marker_without_content_is_dropped(self):
        fragments = parse_fragments("f", "-- name: empty\n-- name: real\nSELECT 1\n")

        assert [f.name for f in fragments] == ["f.real"]

    def test_blank_content_yields_nothing(self):
        """Only comments and blank lines: zero fragments, no error."""
        assert parse_fragments("f", "-- nothing here\n\n   \n-- name: x\n") == []
        assert parse_fragments("f", "") == []

    def test_duplicate_marker_name_raises(self):
        text = "-- name: a\nSELECT 1\n-- name: a\nSELECT 2\n"

        with pytest.raises(StatementCompileError, match="duplicate") as excinfo:
            parse_fragments("f", text, "f.sql")

        assert excinfo.value.line == 3
        assert excinfo.value.filename == "f.sql"


class TestStatementCompiler:
    """Tests for StatementCompiler."""

    def test_compile_marked_file(self, schema):
        compiler = StatementCompiler(schema, MemorySource(QUERY_SCRIPTS))

        statements = compiler.compile("users")

        assert set(statements) == {"users.insert", "users.by_id", "users.count"}
        by_id = statements["users.by_id"]
        assert by_id.filename == "users.sql"
        assert by_id.connection is schema

    def test_compile_does_not_execute(self, schema):
        """Compiling an INSERT must not insert anything."""
        StatementCompiler(schema, MemorySource(QUERY_SCRIPTS)).compile("users")

        assert schema.execute("SELECT COUNT(*) FROM users").fetchone()[0] == 0

    def test_named_parameters_compile(self, schema):
        source = MemorySource({"q.sql": "SELECT * FROM users WHERE id = :id AND name = :name"})

        assert "q" in StatementCompiler(schema, source).compile("q")

    def test_syntax_error_reports_file_and_line(self, schema):
        source = MemorySource({"bad.sql": "-- name: ok\nSELECT 1\n\n-- name: broken\nSELEC 2\n"})

        with pytest.raises(StatementCompileError) as excinfo:
            StatementCompiler(schema, source).compile("bad")

        error = excinfo.value
        assert error.filename == "bad.sql"
        assert error.line == 4
        assert error.name == "bad.broken"
        assert "[bad.sql:4]" in str(error)

    def test_unknown_table_is_compile_error(self, schema):
        source = MemorySource({"q.sql": "SELECT * FROM nowhere\n"})

        with pytest.raises(StatementCompileError) as excinfo:
            StatementCompiler(schema, source).compile("q")

        assert excinfo.value.line == 1

    def test_multiple_statements_in_fragment_rejected(self, schema):
        source = MemorySource({"q.sql": "SELECT 1; SELECT 2;"})

        with pytest.raises(StatementCompileError):
            StatementCompiler(schema, source).compile("q")

    def test_empty_file_compiles_to_nothing(self, schema):
        source = MemorySource({"empty.sql": "-- todo\n\n"})

        assert StatementCompiler(schema, source).compile("empty") == {}

    def test_custom_extension(self, schema):
        source = MemorySource({"q.query": "SELECT 1"})

        assert "q" in StatementCompiler(schema, source, ".query").compile("q")

    def test_no_source_configured(self, schema):
        with pytest.raises(StatementError, match="No query source"):
            StatementCompiler(schema, None).compile("users")


class TestStatementExecution:
    """Tests for executing compiled statements."""

    def test_execute_and_fetch(self, schema):
        statements = StatementCompiler(schema, MemorySource(QUERY_SCRIPTS)).compile("users")

        statements["users.insert"].execute(("ada",))
        statements["users.insert"].execute(("grace",))

        assert statements["users.count"].fetchone()[0] == 2
        row = statements["users.by_id"].fetchone((2,))
        assert row["name"] == "grace"
        assert len(statements["users.by_id"].fetchall((99,))) == 0

    def test_execution_error_tagged_with_file(self, schema):
        statements = StatementCompiler(schema, MemorySource(QUERY_SCRIPTS)).compile("users")

        with pytest.raises(StatementExecutionError, match="users.sql") as excinfo:
            statements["users.insert"].execute((None,))

        assert excinfo.value.name == "users.insert"


class TestCandidateFiles:
    """Tests for candidate_files()."""

    def test_plain_name(self):
        assert candidate_files("users") == ["users"]

    def test_dotted_name(self):
        assert candidate_files("a.b.c") == ["a.b.c", "a.b", "a"]


class TestStatementCache:
    """Tests for StatementCache."""

    @pytest.fixture
    def source(self) -> RecordingSource:
        return RecordingSource({
            **QUERY_SCRIPTS,
            "report.daily.sql": "SELECT 1\n",
            "broken.sql": "-- name: good\nSELECT 1\n-- name: bad\nSELEC 2\n",
            "empty.sql": "-- nothing\n",
        })

    @pytest.fixture
    def cache(self, schema, source) -> StatementCache:
        return StatementCache(StatementCompiler(schema, source))

    def test_preload_loads_every_file(self, cache, source):
        """Preloading compiles all files and collects per-file errors."""
        errors = cache.preload()

        assert len(errors) == 1
        assert isinstance(errors[0], StatementCompileError)
        assert cache.names() == [
            "posts_count",
            "report.daily",
            "users.by_id",
            "users.count",
            "users.insert",
        ]

    def test_failed_file_contributes_nothing(self, cache):
        """A compile failure aborts its whole file."""
        cache.preload()

        assert "broken.good" not in cache
        assert "broken.bad" not in cache

    def test_hit_returns_same_statement(self, cache, source):
        cache.preload()
        source.reads.clear()

        first = cache.resolve("users.by_id")
        second = cache.resolve("users.by_id")

        assert first is second
        assert source.reads == []

    def test_lazy_unmarked_file(self, cache, source):
        """A miss compiles the file named after the statement."""
        statement = cache.resolve("posts_count")

        assert statement.name == "posts_count"
        assert source.reads == ["posts_count.sql"]

    def test_lazy_dotted_name_maps_to_containing_file(self, cache, source):
        """A sub-name resolves by loading its containing file."""
        statement = cache.resolve("users.count")

        assert statement.name == "users.count"
        assert "users.insert" in cache
        assert source.reads == ["users.count.sql", "users.sql"]

    def test_lazy_dotted_file_name(self, cache):
        """A file whose own name contains a dot is found directly."""
        assert cache.resolve("report.daily").filename == "report.daily.sql"

    def test_loaded_file_not_recompiled(self, cache, source):
        cache.resolve("users.count")
        source.reads.clear()

        with pytest.raises(StatementNotFoundError):
            cache.resolve("users.missing")
        assert "users.sql" not in source.reads

    def test_unknown_name_not_found(self, cache):
        with pytest.raises(StatementNotFoundError, match="nope"):
            cache.resolve("nope")

    def test_empty_file_name_not_found(self, cache):
        with pytest.raises(StatementNotFoundError):
            cache.resolve("empty")

    def test_compile_error_propagates(self, cache):
        with pytest.raises(StatementCompileError):
            cache.resolve("broken.good")

    def test_read_failure_propagates(self, schema):
        class FailingSource(MemorySource):
            def read_text(self, name):
                raise SourceFetchError(name, "permission denied")

        cache = StatementCache(StatementCompiler(schema, FailingSource()))

        with pytest.raises(SourceFetchError):
            cache.resolve("users")

    def test_preload_without_source(self, schema):
        cache = StatementCache(StatementCompiler(schema, None))

        assert cache.preload() == []
        assert len(cache) == 0

    def test_preload_list_failure(self, schema, tmp_path):
        from sqlshelf.sources import DirectorySource

        cache = StatementCache(StatementCompiler(schema, DirectorySource(tmp_path / "missing")))

        errors = cache.preload()

        assert len(errors) == 1
