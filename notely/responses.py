"""JSON HTTP responses."""

from __future__ import annotations

import json
import logging
from typing import Any

from flask import Response

logger = logging.getLogger(__name__)

_ESCAPES = {"<": "\\u003c", ">": "\\u003e", "&": "\\u0026", "\u2028": "\\u2028", "\u2029": "\\u2029"}


def _encode(obj: Any) -> Any:
    if callable(getattr(obj, "to_dict", None)):
        return obj.to_dict()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def respond_with_json(code: int, payload: Any) -> Response:
    """Build a JSON response; an unserialisable payload gives an empty 500."""
    try:
        body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=_encode)
    except (TypeError, ValueError) as err:
        logger.error("Error marshalling JSON: %s", err)
        return Response(b"", status=500, content_type="application/json")
    for char, escaped in _ESCAPES.items():
        body = body.replace(char, escaped)
    return Response(body, status=code, content_type="application/json")


def respond_with_error(code: int, msg: str, log_err: BaseException | None = None) -> Response:
    """Log the error and build a JSON response of the form {"error": msg}."""
    if log_err is not None:
        logger.error("%s", log_err)
    if code > 499:
        logger.error("Responding with 5XX error: %s", msg)
    return respond_with_json(code, {"error": msg})