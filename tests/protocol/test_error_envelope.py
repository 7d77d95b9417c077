from __future__ import annotations

from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from duckchess.engine.errors import CapacityError, IllegalMoveError
from duckchess.protocol.http.app import create_app


def test_error_envelope_for_http_exception() -> None:
    app: FastAPI = create_app()

    @app.get("/boom")
    def boom():  # type: ignore[no-redef]
        raise HTTPException(status_code=400, detail="oops")

    client = TestClient(app)
    r = client.get("/boom")
    assert r.status_code == 400
    err = r.json()["error"]
    assert err["code"] == "bad_request"
    assert err["message"] == "oops"
    assert err["type"] == "client_error"
    assert err["request_id"] == r.headers["x-request-id"]


def test_engine_errors_render_as_client_errors() -> None:
    app: FastAPI = create_app()

    @app.get("/illegal")
    def illegal():  # type: ignore[no-redef]
        raise IllegalMoveError("illegal move: 'a1a1'")

    @app.get("/full")
    def full():  # type: ignore[no-redef]
        raise CapacityError("piece set full (capacity 9)")

    client = TestClient(app)
    r = client.get("/illegal")
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "illegal_move"

    r = client.get("/full")
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "capacity_exceeded"


def test_unhandled_exception_is_internal_error() -> None:
    app: FastAPI = create_app()

    @app.get("/crash")
    def crash():  # type: ignore[no-redef]
        raise RuntimeError("kaput")

    client = TestClient(app, raise_server_exceptions=False)
    r = client.get("/crash")
    assert r.status_code == 500
    err = r.json()["error"]
    assert err["code"] == "internal_error"
    assert err["type"] == "server_error"


def test_validation_errors_list_fields() -> None:
    client = TestClient(create_app())
    game_id = client.post("/api/games").json()["game_id"]
    r = client.post(f"/api/games/{game_id}/search", json={"depth": 0})
    assert r.status_code == 422
    err = r.json()["error"]
    assert err["code"] == "unprocessable_entity"
    assert any(fe["field"].endswith("depth") for fe in err["field_errors"])


def test_client_request_id_is_echoed() -> None:
    client = TestClient(create_app())
    r = client.get("/healthz", headers={"x-request-id": "abc-123"})
    assert r.headers["x-request-id"] == "abc-123"
