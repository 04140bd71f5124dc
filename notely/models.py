"""API representations of users and notes."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any

from . import database

_RFC3339 = re.compile(r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(\.\d+)?(Z|[+-]\d{2}:\d{2})")


def _parse_rfc3339(value: str) -> datetime:
    match = _RFC3339.fullmatch(value)
    if match is None:
        raise ValueError(f"not an RFC 3339 timestamp: {value!r}")
    stamp, fraction, offset = match.groups()
    micros = (fraction or ".")[1:].ljust(6, "0")[:6]
    return datetime.fromisoformat(f"{stamp}.{micros}{'+00:00' if offset == 'Z' else offset}")


def _format_rfc3339(moment: datetime) -> str:
    fraction = f".{moment.microsecond:06d}".rstrip("0").rstrip(".")
    offset = moment.strftime("%z") or "+0000"
    zone = "Z" if offset == "+0000" else f"{offset[:3]}:{offset[3:5]}"
    return moment.strftime("%Y-%m-%dT%H:%M:%S") + fraction + zone


def _as_json(obj: Any) -> dict[str, Any]:
    return {
        field.name: _format_rfc3339(value) if isinstance(value, datetime) else value
        for field in fields(obj)
        for value in (getattr(obj, field.name),)
    }


@dataclass(frozen=True)
class User:
    """A user as returned by the API."""

    id: str
    created_at: datetime
    updated_at: datetime
    name: str
    api_key: str

    def to_dict(self) -> dict[str, Any]:
        return _as_json(self)


@dataclass(frozen=True)
class Note:
    """A note as returned by the API."""

    id: str
    created_at: datetime
    updated_at: datetime
    note: str
    user_id: str

    def to_dict(self) -> dict[str, Any]:
        return _as_json(self)


def database_user_to_user(user: database.User) -> User:
    """Convert a stored user; raises ValueError on a bad timestamp."""
    return User(
        id=user.id,
        created_at=_parse_rfc3339(user.created_at),
        updated_at=_parse_rfc3339(user.updated_at),
        name=user.name,
        api_key=user.api_key,
    )


def database_note_to_note(note: database.Note) -> Note:
    """Convert a stored note; raises ValueError on a bad timestamp."""
    return Note(
        id=note.id,
        created_at=_parse_rfc3339(note.created_at),
        updated_at=_parse_rfc3339(note.updated_at),
        note=note.note,
        user_id=note.user_id,
    )


def database_notes_to_notes(notes: Iterable[database.Note]) -> list[Note]:
    """Convert stored notes, keeping their order."""
    return [database_note_to_note(note) for note in notes]