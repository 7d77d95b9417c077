from __future__ import annotations

from fastapi.testclient import TestClient

from duckchess.protocol.http.app import create_app


def _client() -> TestClient:
    return TestClient(create_app())


def test_undo_without_moves_returns_400() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]

    r_undo = client.post(f"/api/games/{game_id}/undo")
    assert r_undo.status_code == 400
    body = r_undo.json()
    assert body["error"]["code"] == "bad_request"
    assert "no moves" in body["error"]["message"].lower()


def test_undo_restores_prior_state() -> None:
    client = _client()
    r = client.post("/api/games")
    game_id = r.json()["game_id"]
    start_fen = r.json()["fen"]

    r_move = client.post(f"/api/games/{game_id}/move", json={"move": "e2e4"})
    assert r_move.status_code == 200
    assert r_move.json()["fen"].endswith(" duck")

    r_undo = client.post(f"/api/games/{game_id}/undo")
    assert r_undo.status_code == 200
    state = r_undo.json()
    assert state["fen"] == start_fen
    assert len(state["legal_moves"]) == 20
    assert state["last_move"] is None


def test_only_one_move_can_be_undone() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    client.post(f"/api/games/{game_id}/move", json={"move": "e2e4"})
    client.post(f"/api/games/{game_id}/move", json={"move": "@d5"})

    assert client.post(f"/api/games/{game_id}/undo").status_code == 200
    state = client.get(f"/api/games/{game_id}/state").json()
    assert state["duck_turn"] is True
    assert client.post(f"/api/games/{game_id}/undo").status_code == 400
