"""Pytest configuration and fixtures."""

import sqlite3
from pathlib import Path

import pytest

from sqlshelf.core.config import Options
from sqlshelf.store import Database, connect
from tests.helpers import QUERY_SCRIPTS, VERSION_SCRIPTS, RecordingSource


@pytest.fixture
def test_db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path for tests."""
    return tmp_path / "test.db"


@pytest.fixture
def conn(test_db_path: Path) -> sqlite3.Connection:
    """Provide an autocommit connection to a fresh database."""
    connection = connect(test_db_path)
    yield connection
    connection.close()


@pytest.fixture
def version_source() -> RecordingSource:
    """Provide three upgrade/downgrade pairs: users, posts, posts index."""
    return RecordingSource(VERSION_SCRIPTS)


@pytest.fixture
def query_source() -> RecordingSource:
    """Provide named statements over the users and posts tables."""
    return RecordingSource(QUERY_SCRIPTS)


@pytest.fixture
def db(conn: sqlite3.Connection, version_source, query_source) -> Database:
    """Provide a database upgraded to the latest version with statements preloaded."""
    return Database.open(
        conn,
        Options(version_source=version_source, query_source=query_source),
    )
