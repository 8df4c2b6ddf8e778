"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import MagicMock, patch

import pytest

from row_map.core.connection import Connection, ConnectionConfig
from row_map.repository.session import Session

BLOG_SCHEMA = [
    "CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT NOT NULL, "
    "email TEXT, password TEXT)",
    "CREATE TABLE posts (id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "author INTEGER REFERENCES users(id), parent INTEGER REFERENCES posts(id), "
    "title TEXT, body TEXT, score INTEGER DEFAULT 0)",
    "INSERT INTO users (name, email, password) VALUES ('Alice', 'alice@example.com', 's3cret')",
    "INSERT INTO users (name, email, password) VALUES ('Bob', 'bob@example.com', 'hunter2')",
    "INSERT INTO posts (author, parent, title, body, score) "
    "VALUES (1, NULL, 'Hello', 'First!', 5)",
    "INSERT INTO posts (author, parent, title, body, score) "
    "VALUES (2, 1, 'Re: Hello', 'Hi', 2)",
    "INSERT INTO posts (author, parent, title, body, score) "
    "VALUES (1, 1, 'Re: Re: Hello', 'Yo', 7)",
]


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config."""
    return ConnectionConfig(driver="sqlite", database=":memory:")


@pytest.fixture
def connection(sqlite_config: ConnectionConfig) -> Iterator[Connection]:
    """An open in-memory SQLite connection."""
    conn = Connection(sqlite_config)
    conn.open()
    yield conn
    conn.close()


@pytest.fixture
def blog_connection(connection: Connection) -> Connection:
    """Connection with the users/posts tables created and seeded.

    users: 1 Alice, 2 Bob
    posts: 1 by Alice, 2 by Bob replying to 1, 3 by Alice replying to 1
    """
    for statement in BLOG_SCHEMA:
        connection.execute(statement)
    return connection


@pytest.fixture
def session(blog_connection: Connection) -> Session:
    """Session over the seeded blog database."""
    return Session(blog_connection)


@pytest.fixture
def statements(blog_connection: Connection) -> Iterator[MagicMock]:
    """Spy recording every statement sent through the blog connection.

    Fixtures run before it are not recorded; call reset_mock() to skip
    statements issued while arranging a test.
    """
    with patch.object(blog_connection, "execute", wraps=blog_connection.execute) as spy:
        yield spy
