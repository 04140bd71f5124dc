"""HTTP handlers for users, notes and readiness."""

from __future__ import annotations

import functools
import hashlib
import json
import secrets
import sqlite3
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from flask import Response, request

from . import database
from .auth import AuthError, get_api_key
from .models import database_note_to_note, database_notes_to_notes, database_user_to_user
from .responses import respond_with_error, respond_with_json

AuthedHandler = Callable[[database.User], Response]


def generate_random_sha256_hash() -> str:
    """Return the hex SHA-256 digest of 32 random bytes."""
    return hashlib.sha256(secrets.token_bytes(32)).hexdigest()


def handler_readiness() -> Response:
    """Report that the service is up."""
    return respond_with_json(200, {"status": "ok"})


def _now_rfc3339() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _decode_string_param(field: str) -> str:
    """Read one string field from the JSON request body.

    Only the first JSON value in the body is read. A missing or null field
    gives an empty string; anything but an object, or a non-string field,
    raises ValueError.
    """
    text = request.get_data(as_text=True).lstrip()
    value, _ = json.JSONDecoder().raw_decode(text)
    if value is None:
        return ""
    if not isinstance(value, dict):
        raise ValueError("request body is not a JSON object")
    if field in value:
        found: Any = value[field]
    else:
        found = next(
            (item for key, item in value.items() if key.lower() == field.lower()),
            None,
        )
    if found is None:
        return ""
    if not isinstance(found, str):
        raise ValueError(f"field {field!r} is not a string")
    return found


class ApiConfig:
    """Handlers that share one database."""

    def __init__(self, db: database.Queries | None) -> None:
        self.db = db

    def middleware_auth(self, handler: AuthedHandler) -> Callable[[], Response]:
        """Wrap a handler so it receives the user named by the request's API key."""

        @functools.wraps(handler)
        def wrapped() -> Response:
            try:
                api_key = get_api_key(request.headers)
            except AuthError as err:
                return respond_with_error(401, "Couldn't find api key", err)
            try:
                user = self.db.get_user(api_key)
            except (database.RecordNotFoundError, sqlite3.Error) as err:
                return respond_with_error(404, "Couldn't get user", err)
            return handler(user)

        return wrapped

    def handler_users_create(self) -> Response:
        try:
            name = _decode_string_param("name")
        except ValueError as err:
            return respond_with_error(500, "Couldn't decode parameters", err)

        try:
            api_key = generate_random_sha256_hash()
        except OSError as err:
            return respond_with_error(500, "Couldn't gen apikey", err)

        now = _now_rfc3339()
        try:
            self.db.create_user(
                database.User(
                    id=str(uuid.uuid4()),
                    created_at=now,
                    updated_at=now,
                    name=name,
                    api_key=api_key,
                )
            )
        except sqlite3.Error as err:
            return respond_with_error(500, "Couldn't create user", err)

        try:
            user = self.db.get_user(api_key)
        except (database.RecordNotFoundError, sqlite3.Error) as err:
            return respond_with_error(500, "Couldn't get user", err)

        try:
            user_resp = database_user_to_user(user)
        except ValueError as err:
            return respond_with_error(500, "Couldn't convert user", err)
        return respond_with_json(201, user_resp)

    def handler_users_get(self, user: database.User) -> Response:
        try:
            user_resp = database_user_to_user(user)
        except ValueError as err:
            return respond_with_error(500, "Couldn't convert user", err)
        return respond_with_json(200, user_resp)

    def handler_notes_get(self, user: database.User) -> Response:
        try:
            notes = self.db.get_notes_for_user(user.id)
        except sqlite3.Error as err:
            return respond_with_error(500, "Couldn't get posts for user", err)
        try:
            notes_resp = database_notes_to_notes(notes)
        except ValueError as err:
            return respond_with_error(500, "Couldn't convert posts", err)
        return respond_with_json(200, notes_resp)

    def handler_notes_create(self, user: database.User) -> Response:
        try:
            text = _decode_string_param("note")
        except ValueError as err:
            return respond_with_error(500, "Couldn't decode parameters", err)

        note_id = str(uuid.uuid4())
        now = _now_rfc3339()
        try:
            self.db.create_note(
                database.Note(
                    id=note_id,
                    created_at=now,
                    updated_at=now,
                    note=text,
                    user_id=user.id,
                )
            )
        except sqlite3.Error as err:
            return respond_with_error(500, "Couldn't create note", err)

        try:
            note = self.db.get_note(note_id)
        except (database.RecordNotFoundError, sqlite3.Error) as err:
            return respond_with_error(404, "Couldn't get note", err)

        try:
            note_resp = database_note_to_note(note)
        except ValueError as err:
            return respond_with_error(500, "Couldn't convert note", err)
        return respond_with_json(201, note_resp)