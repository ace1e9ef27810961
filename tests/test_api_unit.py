import pytest
from fastapi.testclient import TestClient

from backend.app import main as api


@pytest.fixture()
def client(monkeypatch):
    monkeypatch.setattr(api, "_sessions", {})
    monkeypatch.setattr(api, "settings", dict(api.config.DEFAULT_SETTINGS))
    return TestClient(api.app)


def _create(client, equation="2x + 3 = 7") -> dict:
    resp = client.post("/api/sessions", json={"equation": equation})
    assert resp.status_code == 201
    return resp.json()


def test_parse_endpoint(client) -> None:
    resp = client.post("/api/parse", json={"equation": "2x+3=7"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["text"] == "2x + 3 = 7"
    assert body["latex"] == "2 x + 3 = 7"
    assert body["equation"]["left"][0]["coefficient"] == 2
    assert body["equation"]["left"][0]["variable"] == "x"
    assert body["equation"]["right"][0]["is_constant"] is True


@pytest.mark.parametrize("equation", ["", "x = 1 = 2", "2x + 3"])
def test_parse_rejects_bad_input(client, equation: str) -> None:
    resp = client.post("/api/parse", json={"equation": equation})
    assert resp.status_code == 400


def test_create_session_uses_default_equation(client) -> None:
    resp = client.post("/api/sessions", json={})
    assert resp.status_code == 201
    body = resp.json()
    assert body["text"] == "2x + 3 = 7"
    assert body["current_index"] == 0
    assert body["can_undo"] is False
    assert body["history"][0]["description"] == "Initial equation"


def test_operation_move_undo_redo_flow(client) -> None:
    sid = _create(client)["id"]

    resp = client.post(f"/api/sessions/{sid}/operations",
                       json={"type": "subtract", "value": "3", "side": "both"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["text"] == "2x + 3 - 3 = 7 - 3"
    assert body["history"][-1]["operation"] == {"type": "subtract", "value": "3", "side": "both"}

    minus_three = body["equation"]["right"][1]["id"]
    resp = client.post(f"/api/sessions/{sid}/moves",
                       json={"term_ids": [minus_three], "from_side": "right", "to_side": "left"})
    assert resp.json()["text"] == "2x + 3 - 3 + 3 = 7"
    assert resp.json()["history"][-1]["description"] == "Moved 3 from right to left"

    body = client.post(f"/api/sessions/{sid}/undo").json()
    assert body["text"] == "2x + 3 - 3 = 7 - 3"
    assert body["can_redo"] is True
    assert len(body["history"]) == 2

    body = client.post(f"/api/sessions/{sid}/redo").json()
    assert body["text"] == "2x + 3 - 3 + 3 = 7"

    body = client.post(f"/api/sessions/{sid}/redo").json()
    assert body["text"] == "2x + 3 - 3 + 3 = 7"


def test_divide_by_zero_is_a_bad_request(client) -> None:
    sid = _create(client)["id"]
    resp = client.post(f"/api/sessions/{sid}/operations",
                       json={"type": "divide", "value": "0", "side": "both"})
    assert resp.status_code == 400
    assert "divide by zero" in resp.json()["detail"]
    assert client.get(f"/api/sessions/{sid}").json()["text"] == "2x + 3 = 7"


def test_unknown_operation_type_is_rejected(client) -> None:
    sid = _create(client)["id"]
    resp = client.post(f"/api/sessions/{sid}/operations",
                       json={"type": "power", "value": "2", "side": "both"})
    assert resp.status_code == 422


def test_select_and_load(client) -> None:
    body = _create(client)
    sid = body["id"]
    x_id = body["equation"]["left"][0]["id"]

    body = client.post(f"/api/sessions/{sid}/select", json={"item_id": x_id}).json()
    assert body["equation"]["left"][0]["is_selected"] is True

    resp = client.post(f"/api/sessions/{sid}/select", json={"item_id": "missing"})
    assert resp.status_code == 404

    body = client.post(f"/api/sessions/{sid}/load", json={"equation": "y - 1 = 4"}).json()
    assert body["text"] == "y - 1 = 4"
    assert len(body["history"]) == 1

    resp = client.post(f"/api/sessions/{sid}/load", json={"equation": "y - 1"})
    assert resp.status_code == 400


def test_expand_group(client) -> None:
    body = _create(client, "x + (2 + y) = 5")
    sid = body["id"]
    group_id = body["equation"]["left"][1]["id"]

    body = client.post(f"/api/sessions/{sid}/expand", json={"group_id": group_id}).json()
    assert body["equation"]["left"][1]["is_expanded"] is False

    resp = client.post(f"/api/sessions/{sid}/expand", json={"group_id": "missing"})
    assert resp.status_code == 404


def test_graph_returns_png(client) -> None:
    sid = _create(client)["id"]
    resp = client.get(f"/api/sessions/{sid}/graph")
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"
    assert resp.content.startswith(b"\x89PNG")


def test_missing_and_deleted_sessions(client) -> None:
    assert client.get("/api/sessions/nope").status_code == 404
    sid = _create(client)["id"]
    assert client.delete(f"/api/sessions/{sid}").status_code == 204
    assert client.get(f"/api/sessions/{sid}").status_code == 404
    assert client.post(f"/api/sessions/{sid}/undo").status_code == 404
