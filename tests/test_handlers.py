import string

import pytest
from flask import Flask

from notely import database
from notely.handlers import ApiConfig, generate_random_sha256_hash, handler_readiness


@pytest.fixture
def conn():
    connection = database.connect(":memory:")
    yield connection
    connection.close()


@pytest.fixture
def queries(conn):
    q = database.Queries(conn)
    q.create_schema()
    return q


@pytest.fixture
def flask_app():
    return Flask("handlers_test")


@pytest.fixture
def user(queries):
    stored = database.User(
        id="u1",
        created_at="2024-01-02T03:04:05Z",
        updated_at="2024-01-02T03:04:05Z",
        name="Ann",
        api_key="placeholder",
    )
    queries.create_user(stored)
    return stored


def test_readiness(flask_app):
    with flask_app.test_request_context("/v1/healthz"):
        resp = handler_readiness()
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}


def test_random_hash_is_hex_sha256():
    first = generate_random_sha256_hash()
    second = generate_random_sha256_hash()
    assert len(first) == 64
    assert set(first) <= set(string.hexdigits.lower())
    assert first != second


def test_users_create_stores_user(flask_app, queries):
    cfg = ApiConfig(queries)
    with flask_app.test_request_context("/v1/users", method="POST", json={"name": "Bob"}):
        resp = cfg.handler_users_create()
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["name"] == "Bob"
    assert len(body["api_key"]) == 64
    assert body["created_at"].endswith("Z")
    stored = queries.get_user(body["api_key"])
    assert stored.id == body["id"]


def test_users_create_bad_body(flask_app, queries):
    cfg = ApiConfig(queries)
    with flask_app.test_request_context("/v1/users", method="POST", data="not json"):
        resp = cfg.handler_users_create()
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Couldn't decode parameters"}


def test_users_create_empty_body(flask_app, queries):
    cfg = ApiConfig(queries)
    with flask_app.test_request_context("/v1/users", method="POST", data=""):
        resp = cfg.handler_users_create()
    assert resp.status_code == 500


def test_users_get(flask_app, queries, user):
    cfg = ApiConfig(queries)
    with flask_app.test_request_context("/v1/users"):
        resp = cfg.handler_users_get(user)
    assert resp.status_code == 200
    assert resp.get_json()["id"] == user.id
    assert resp.get_json()["name"] == user.name


def test_users_get_bad_timestamp(flask_app, queries):
    broken = database.User(
        id="u2", created_at="yesterday", updated_at="yesterday", name="Cy", api_key="token"
    )
    cfg = ApiConfig(queries)
    with flask_app.test_request_context("/v1/users"):
        resp = cfg.handler_users_get(broken)
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Couldn't convert user"}


def test_middleware_missing_header(flask_app, queries, user):
    cfg = ApiConfig(queries)
    wrapped = cfg.middleware_auth(cfg.handler_users_get)
    with flask_app.test_request_context("/v1/users"):
        resp = wrapped()
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Couldn't find api key"}


def test_middleware_unknown_key(flask_app, queries, user):
    cfg = ApiConfig(queries)
    wrapped = cfg.middleware_auth(cfg.handler_users_get)
    with flask_app.test_request_context("/v1/users", headers={"Authorization": "ApiKey token"}):
        resp = wrapped()
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Couldn't get user"}


def test_middleware_passes_user(flask_app, queries, user):
    cfg = ApiConfig(queries)
    wrapped = cfg.middleware_auth(cfg.handler_users_get)
    with flask_app.test_request_context(
        "/v1/users", headers={"Authorization": "ApiKey placeholder"}
    ):
        resp = wrapped()
    assert resp.status_code == 200
    assert resp.get_json()["id"] == user.id


def test_notes_get_empty(flask_app, queries, user):
    cfg = ApiConfig(queries)
    with flask_app.test_request_context("/v1/notes"):
        resp = cfg.handler_notes_get(user)
    assert resp.status_code == 200
    assert resp.get_json() == []


def test_notes_create_then_get(flask_app, queries, user):
    cfg = ApiConfig(queries)
    with flask_app.test_request_context("/v1/notes", method="POST", json={"note": "buy milk"}):
        created = cfg.handler_notes_create(user)
    assert created.status_code == 201
    body = created.get_json()
    assert body["note"] == "buy milk"
    assert body["user_id"] == user.id
    with flask_app.test_request_context("/v1/notes"):
        listed = cfg.handler_notes_get(user)
    assert listed.get_json() == [body]


def test_notes_create_bad_body(flask_app, queries, user):
    cfg = ApiConfig(queries)
    with flask_app.test_request_context("/v1/notes", method="POST", json={"note": 5}):
        resp = cfg.handler_notes_create(user)
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Couldn't decode parameters"}
    assert queries.get_notes_for_user(user.id) == []


def test_notes_get_database_failure(flask_app, queries, user, conn):
    cfg = ApiConfig(queries)
    conn.close()
    with flask_app.test_request_context("/v1/notes"):
        resp = cfg.handler_notes_get(user)
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Couldn't get posts for user"}