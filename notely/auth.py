"""Extraction of API keys from request headers."""

from __future__ import annotations

from collections.abc import Mapping


class AuthError(Exception):
    """Base class for authentication header problems."""


class NoAuthHeaderIncludedError(AuthError):
    """Raised when the request carries no Authorization header."""

    def __init__(self, message: str = "no authorization header included") -> None:
        super().__init__(message)


class MalformedAuthHeaderError(AuthError):
    """Raised when the Authorization header is not of the form 'ApiKey <key>'."""

    def __init__(self, message: str = "malformed authorization header") -> None:
        super().__init__(message)


def get_api_key(headers: Mapping[str, str]) -> str:
    """Return the key from an 'Authorization: ApiKey <key>' header, matched case-insensitively."""
    auth_header = next(
        (value for key, value in headers.items() if key.lower() == "authorization"), ""
    )
    if not auth_header:
        raise NoAuthHeaderIncludedError()
    parts = auth_header.split(" ")
    if len(parts) < 2 or parts[0] != "ApiKey":
        raise MalformedAuthHeaderError()
    return parts[1]