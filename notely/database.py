"""SQLite-backed storage for users and notes."""

from __future__ import annotations

import sqlite3
from dataclasses import astuple, dataclass


class RecordNotFoundError(LookupError):
    """Raised when a query expecting exactly one row finds none."""


@dataclass(frozen=True)
class Note:
    """A note row as stored in the database."""

    id: str
    created_at: str
    updated_at: str
    note: str
    user_id: str


@dataclass(frozen=True)
class User:
    """A user row as stored in the database."""

    id: str
    created_at: str
    updated_at: str
    name: str
    api_key: str


_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    name TEXT NOT NULL,
    api_key TEXT UNIQUE NOT NULL
);
CREATE TABLE IF NOT EXISTS notes (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    note TEXT NOT NULL,
    user_id TEXT NOT NULL REFERENCES users (id) ON DELETE CASCADE
);
"""

_CREATE_NOTE = (
    "INSERT INTO notes (id, created_at, updated_at, note, user_id) "
    "VALUES (?, ?, ?, ?, ?)"
)
_GET_NOTE = "SELECT id, created_at, updated_at, note, user_id FROM notes WHERE id = ?"
_GET_NOTES_FOR_USER = (
    "SELECT id, created_at, updated_at, note, user_id FROM notes WHERE user_id = ?"
)
_CREATE_USER = (
    "INSERT INTO users (id, created_at, updated_at, name, api_key) "
    "VALUES (?, ?, ?, ?, ?)"
)
_GET_USER = (
    "SELECT id, created_at, updated_at, name, api_key FROM users WHERE api_key = ?"
)


def connect(url: str) -> sqlite3.Connection:
    """Open a database connection.

    Accepts a plain file path, ':memory:', a 'file:' URI or a 'sqlite:///' URL.
    """
    if not url:
        raise ValueError("database URL is empty")
    target = url.removeprefix("sqlite:///") if url.startswith("sqlite:///") else url
    conn = sqlite3.connect(
        target, uri=target.startswith("file:"), check_same_thread=False
    )
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


class Queries:
    """The queries the service runs against its database."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def create_schema(self) -> None:
        """Create the users and notes tables if they do not exist yet."""
        with self._conn:
            self._conn.executescript(_SCHEMA)

    def create_note(self, note: Note) -> None:
        with self._conn:
            self._conn.execute(_CREATE_NOTE, astuple(note))

    def get_note(self, note_id: str) -> Note:
        row = self._conn.execute(_GET_NOTE, (note_id,)).fetchone()
        if row is None:
            raise RecordNotFoundError(f"no note with id {note_id!r}")
        return Note(*row)

    def get_notes_for_user(self, user_id: str) -> list[Note]:
        return [Note(*row) for row in self._conn.execute(_GET_NOTES_FOR_USER, (user_id,))]

    def create_user(self, user: User) -> None:
        with self._conn:
            self._conn.execute(_CREATE_USER, astuple(user))

    def get_user(self, api_key: str) -> User:
        row = self._conn.execute(_GET_USER, (api_key,)).fetchone()
        if row is None:
            raise RecordNotFoundError("no user with the given api key")
        return User(*row)