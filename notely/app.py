"""Application assembly and the command that serves it."""

from __future__ import annotations

import argparse
import logging
import os
import sqlite3
from collections.abc import Sequence
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, Response, request

from . import database
from .handlers import ApiConfig, handler_readiness

logger = logging.getLogger(__name__)

_ALLOWED_METHODS = ("GET", "POST", "PUT", "DELETE", "OPTIONS")


def _cors_allowed(origin: str, method: str) -> bool:
    return origin.lower().startswith(("https://", "http://")) and method.upper() in _ALLOWED_METHODS


def _is_preflight() -> bool:
    return request.method == "OPTIONS" and bool(request.headers.get("Access-Control-Request-Method"))


def _preflight_response() -> Response:
    resp = Response(status=200)
    for value in ("Origin", "Access-Control-Request-Method", "Access-Control-Request-Headers"):
        resp.headers.add("Vary", value)
    origin = request.headers.get("Origin", "")
    req_method = request.headers.get("Access-Control-Request-Method", "")
    if not _cors_allowed(origin, req_method):
        return resp
    req_headers = [
        "-".join(part.capitalize() for part in item.strip().split("-"))
        for item in request.headers.get("Access-Control-Request-Headers", "").split(",")
        if item.strip()
    ]
    resp.headers["Access-Control-Allow-Origin"] = origin
    resp.headers["Access-Control-Allow-Methods"] = req_method.upper()
    if req_headers:
        resp.headers["Access-Control-Allow-Headers"] = ", ".join(req_headers)
    resp.headers["Access-Control-Max-Age"] = "300"
    return resp


def _add_cors_headers(resp: Response) -> Response:
    if _is_preflight():
        return resp
    resp.headers.add("Vary", "Origin")
    origin = request.headers.get("Origin", "")
    if _cors_allowed(origin, request.method):
        resp.headers["Access-Control-Allow-Origin"] = origin
        resp.headers["Access-Control-Expose-Headers"] = "Link"
    return resp


def create_app(db: database.Queries | None, static_dir: str | Path | None = None) -> Flask:
    """Build the web application; CRUD endpoints exist only when a database is given."""
    app = Flask(__name__)
    static_root = Path(static_dir if static_dir is not None else "static")
    api_cfg = ApiConfig(db)

    app.before_request(lambda: _preflight_response() if _is_preflight() else None)
    app.after_request(_add_cors_headers)

    @app.get("/")
    def index() -> Response:
        try:
            content = (static_root / "index.html").read_bytes()
        except OSError as err:
            resp = Response(f"{err}\n", status=500, content_type="text/plain; charset=utf-8")
            resp.headers["X-Content-Type-Options"] = "nosniff"
            return resp
        return Response(content, status=200, content_type="text/html; charset=utf-8")

    if db is not None:
        routes = [
            ("/v1/users", "users_create", api_cfg.handler_users_create, "POST"),
            ("/v1/users", "users_get", api_cfg.middleware_auth(api_cfg.handler_users_get), "GET"),
            ("/v1/notes", "notes_get", api_cfg.middleware_auth(api_cfg.handler_notes_get), "GET"),
            ("/v1/notes", "notes_create", api_cfg.middleware_auth(api_cfg.handler_notes_create), "POST"),
        ]
        for rule, endpoint, view, method in routes:
            app.add_url_rule(rule, endpoint, view, methods=[method])

    app.add_url_rule("/v1/healthz", "readiness", handler_readiness, methods=["GET"])
    return app


def main(argv: Sequence[str] | None = None) -> int:
    """Serve the API on the port named by the PORT environment variable."""
    argparse.ArgumentParser(description="Serve the notes API.").parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    if not load_dotenv(".env"):
        logger.warning("warning: assuming default configuration. .env unreadable")

    port = os.environ.get("PORT", "")
    if not port:
        logger.critical("PORT environment variable is not set")
        return 1

    db: database.Queries | None = None
    db_url = os.environ.get("DATABASE_URL", "")
    if not db_url:
        logger.info("DATABASE_URL environment variable is not set")
        logger.info("Running without CRUD endpoints")
    else:
        try:
            db = database.Queries(database.connect(db_url))
            db.create_schema()
        except (sqlite3.Error, ValueError) as err:
            logger.critical("%s", err)
            return 1
        logger.info("Connected to database!")

    logger.info("Serving on port: %s", port)
    create_app(db).run(host="0.0.0.0", port=int(port))
    return 0