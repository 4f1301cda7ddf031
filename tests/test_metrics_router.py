import pytest
from starlette.websockets import WebSocketDisconnect

from serenmind import config
from serenmind.models.metrics import MentalMetricCreate
from serenmind.services.metrics_service import save_mental_metric


def current_user(client, headers):
    return client.get("/auth/session", headers=headers).json()["user_id"]


def test_metrics_empty(client, auth_headers):
    body = client.get("/metrics", headers=auth_headers).json()
    assert body["total_entries"] == 0
    assert body["percentages"] == {}


def test_metrics_aggregate(client, auth_headers):
    user_id = current_user(client, auth_headers)
    for topics in (["sleep"], ["work", "sleep"], ["work"]):
        save_mental_metric(user_id, MentalMetricCreate(mood_score=5, topics=topics))
    save_mental_metric("someone-else", MentalMetricCreate(mood_score=5, topics=["family"]))

    body = client.get("/metrics", headers=auth_headers).json()
    assert body["total_entries"] == 3
    assert body["percentages"] == {"sleep": 67, "work": 67}
    assert body["wellness_score"] == 100
    assert len(body["mood_trend"]) == 3


def test_stream_sends_first_snapshot(client, auth_headers):
    token = auth_headers["Authorization"].split(" ", 1)[1]
    save_mental_metric(current_user(client, auth_headers), MentalMetricCreate(mood_score=4, topics=["stress"]))

    with client.websocket_connect(f"/metrics/ws?token={token}") as ws:
        snapshot = ws.receive_json()

    assert snapshot["total_entries"] == 1
    assert snapshot["percentages"] == {"stress": 100}
    assert snapshot["wellness_score"] == 0


def test_stream_rejects_missing_token(client):
    with pytest.raises(WebSocketDisconnect) as exc:
        with client.websocket_connect("/metrics/ws"):
            pass
    assert exc.value.code == 1008


def test_stream_closes_on_sign_out(client, auth_headers):
    with client.websocket_connect("/metrics/ws", headers=auth_headers) as ws:
        ws.receive_json()
        assert client.post("/auth/sign-out", headers=auth_headers).status_code == 204
        message = ws.receive()
        assert message["type"] == "websocket.close"


def test_recommendations(client, auth_headers):
    bundle = client.get("/recommendations", params={"mood": "Anxious"}, headers=auth_headers).json()
    assert bundle["mood"] == "Anxious"
    assert bundle["activities"][0]["title"] == "4-7-8 Breathing Exercise"
    assert bundle["music"][0]["coverUrl"].startswith("/placeholder.svg")

    fallback = client.get("/recommendations/activities", params={"mood": "Unknown-Label"}, headers=auth_headers)
    neutral = client.get("/recommendations/activities", params={"mood": "Neutral"}, headers=auth_headers)
    assert fallback.json() == neutral.json()

    quick = client.get("/recommendations/quick", params={"mood": "Stressed"}, headers=auth_headers).json()
    assert [r["id"] for r in quick] == ["rec-1", "rec-2"]


def test_sign_out_keeps_other_device_stream(client, auth_headers, monkeypatch):
    monkeypatch.setattr(config, "METRICS_POLL_SECONDS", 0.05)
    other = client.post("/auth/sign-in", json={"email": "ada@example.com", "password": "s3cret-pass"}).json()
    other_headers = {"Authorization": f"Bearer {other['access_token']}"}

    with client.websocket_connect("/metrics/ws", headers=other_headers) as ws:
        assert ws.receive_json()["total_entries"] == 0
        assert client.post("/auth/sign-out", headers=auth_headers).status_code == 204

        save_mental_metric(other["user_id"], MentalMetricCreate(mood_score=6, topics=["sleep"]))
        snapshot = ws.receive_json()
        assert snapshot["total_entries"] == 1

    assert client.get("/auth/session", headers=other_headers).status_code == 200
