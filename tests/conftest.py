import os

os.environ.setdefault("JWT_SECRET", "test-secret")

import httpx
import mongomock
import pytest
from fastapi.testclient import TestClient

from serenmind import config
from serenmind.db import database
from serenmind.services import ai_service, chat_service, metrics_service


@pytest.fixture(autouse=True)
def db(monkeypatch):
    monkeypatch.setattr(config, "JWT_SECRET", "test-secret")
    monkeypatch.setattr(config, "GOOGLE_API_KEY", "")
    mock_db = mongomock.MongoClient()["serenmind_test"]
    database.set_database(mock_db)
    yield mock_db
    database.set_database(None)
    chat_service.conversations._conversations.clear()
    metrics_service._subscriptions.clear()
    ai_service.set_generation_client(None)


def completion_body(text):
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}, "finishReason": "STOP"}]}


@pytest.fixture
def gemini():
    """Installs a completion client backed by httpx.MockTransport.

    Set ``gemini.status`` / ``gemini.body`` to shape the next responses;
    sent payloads are collected in ``gemini.requests``.
    """

    class Stub:
        status = 200
        body = completion_body("I'm here for you.")
        requests = []

        def handler(self, request):
            self.requests.append(request)
            if isinstance(self.body, (dict, list)):
                return httpx.Response(self.status, json=self.body)
            return httpx.Response(self.status, text=self.body)

    stub = Stub()
    stub.requests = []
    client = ai_service.GenerationClient("test-key", transport=httpx.MockTransport(stub.handler))
    ai_service.set_generation_client(client)
    return stub


@pytest.fixture
def client():
    from serenmind.main import app
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers(client):
    resp = client.post("/auth/sign-up", json={
        "email": "ada@example.com",
        "password": "s3cret-pass",
        "name": "Ada",
    })
    assert resp.status_code == 201
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}
