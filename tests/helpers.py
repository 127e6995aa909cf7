"""Shared test helpers and script fixtures."""

import sqlite3

from sqlshelf.sources import MemorySource


class RecordingSource(MemorySource):
    """MemorySource that remembers every entry read."""

    def __init__(self, files=None):
        super().__init__(files)
        self.reads: list[str] = []

    def read_text(self, name: str) -> str:
        self.reads.append(name)
        return super().read_text(name)


VERSION_SCRIPTS = {
    "0001.up.sql": """
        -- users table
        CREATE TABLE users (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL
        );
    """,
    "0001.down.sql": "DROP TABLE users;",
    "0002.up.sql": """
        CREATE TABLE posts (
            id INTEGER PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id),
            title TEXT NOT NULL
        );
    """,
    "0002.down.sql": "DROP TABLE posts;",
    "0003.up.sql": "CREATE INDEX idx_posts_user ON posts(user_id);",
    "0003.down.sql": "DROP INDEX idx_posts_user;",
}

QUERY_SCRIPTS = {
    "users.sql": """
        -- Queries on the users table.

        -- name: insert
        INSERT INTO users (name) VALUES (?)

        -- name: by_id
        SELECT id, name
          FROM users
         WHERE id = ?

        -- name: count
        SELECT COUNT(*) FROM users
    """,
    "posts_count.sql": "SELECT COUNT(*) FROM posts\n",
}


def table_names(connection: sqlite3.Connection) -> set[str]:
    """Names of the user tables in the database."""
    rows = connection.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
    ).fetchall()
    return {row[0] for row in rows}


def index_names(connection: sqlite3.Connection) -> set[str]:
    """Names of the explicitly created indexes in the database."""
    rows = connection.execute(
        "SELECT name FROM sqlite_master WHERE type='index' AND sql IS NOT NULL"
    ).fetchall()
    return {row[0] for row in rows}
