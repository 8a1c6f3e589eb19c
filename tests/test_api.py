import json
import logging

import httpx
import pytest
import yaml
from fastapi.testclient import TestClient

from therapist_relay.api.routes.chat import get_relay_service
from therapist_relay.config.settings import load_settings
from therapist_relay.main import create_app
from therapist_relay.providers import registry as registry_module
from therapist_relay.providers.registry import ProviderRegistry


API_KEY = "sk-very-secret"


class Upstream:
    """Scripted stand-in for the provider HTTP API."""

    def __init__(self):
        self.calls = []
        self.status_code = 200
        self.payload = {"choices": [{"message": {"content": "Tell me more."}}]}
        self.error = None

    def __call__(self, request):
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.payload)


@pytest.fixture
def upstream():
    return Upstream()


@pytest.fixture
def make_client(tmp_path, monkeypatch, upstream):
    catalog = tmp_path / "providers.yaml"
    catalog.write_text(
        yaml.safe_dump(
            {
                "providers": [
                    {
                        "id": "testai",
                        "name": "Test AI",
                        "type": "openai",
                        "auth_scheme": "bearer-header",
                        "api_key": "${TEST_RELAY_KEY}",
                        "base_url": "https://api.example.com/v1",
                        "model": "test-model",
                    }
                ]
            }
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("PROVIDERS_FILE", str(catalog))
    monkeypatch.setenv("RELAY_PROVIDER", "testai")
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("TEST_RELAY_KEY", API_KEY)

    def factory(**entry_overrides):
        if entry_overrides:
            data = yaml.safe_load(catalog.read_text(encoding="utf-8"))
            data["providers"][0].update(entry_overrides)
            catalog.write_text(yaml.safe_dump(data), encoding="utf-8")
        registry = ProviderRegistry(load_settings(), transport=httpx.MockTransport(upstream))
        monkeypatch.setattr(registry_module, "_registry_instance", registry)
        return TestClient(create_app(), raise_server_exceptions=False)

    return factory


def test_chat_success(make_client, upstream):
    with make_client() as client:
        response = client.post(
            "/api/chat",
            json={
                "message": "I feel anxious today",
                "history": [
                    {"content": "hi", "type": "user", "timestamp": "09:15"},
                    {"content": "Hello, how are you?", "type": "ai", "timestamp": "09:15"},
                ],
            },
        )
    assert response.status_code == 200
    body = response.json()
    assert body["response"] == "Tell me more."
    assert "T" in body["timestamp"]
    assert len(upstream.calls) == 1
    sent = upstream.calls[0]
    assert sent.headers["Authorization"] == f"Bearer {API_KEY}"
    roles = [message["role"] for message in json.loads(sent.content)["messages"]]
    assert roles == ["system", "user", "assistant", "user"]


def test_chat_missing_message(make_client, upstream):
    with make_client() as client:
        response = client.post("/api/chat", json={"history": []})
    assert response.status_code == 400
    assert response.json() == {"error": "Message is required"}
    assert upstream.calls == []


def test_chat_blank_message(make_client, upstream):
    with make_client() as client:
        response = client.post("/api/chat", json={"message": "   "})
    assert response.status_code == 400
    assert response.json()["error"] == "Message is required"
    assert upstream.calls == []


def test_chat_malformed_body(make_client, upstream):
    with make_client() as client:
        response = client.post(
            "/api/chat", content="not json", headers={"Content-Type": "application/json"}
        )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}
    assert upstream.calls == []


def test_chat_missing_key(make_client, upstream, monkeypatch):
    monkeypatch.delenv("TEST_RELAY_KEY")
    with make_client() as client:
        response = client.post("/api/chat", json={"message": "hello"})
    assert response.status_code == 500
    assert response.json() == {"error": "Test AI API key not configured"}
    assert upstream.calls == []


def test_chat_upstream_rate_limit(make_client, upstream):
    upstream.status_code = 429
    upstream.payload = {"error": {"message": "rate limited"}}
    with make_client() as client:
        response = client.post("/api/chat", json={"message": "hello"})
    assert response.status_code == 429
    assert "rate limited" in response.json()["error"]


def test_chat_empty_upstream_reply(make_client, upstream):
    upstream.payload = {"choices": [{"message": {"content": ""}}]}
    with make_client() as client:
        response = client.post("/api/chat", json={"message": "hello"})
    assert response.status_code == 500
    assert response.json() == {"error": "No response generated"}


def test_chat_transport_failure(make_client, upstream):
    upstream.error = httpx.ConnectError("connection refused")
    with make_client() as client:
        response = client.post("/api/chat", json={"message": "hello"})
    assert response.status_code == 500
    assert response.json() == {"error": "Could not reach Test AI"}


def test_chat_details_in_development(make_client, upstream, monkeypatch):
    monkeypatch.setenv("APP_ENV", "development")
    upstream.error = httpx.ConnectError("connection refused")
    with make_client() as client:
        response = client.post("/api/chat", json={"message": "hello"})
    assert response.status_code == 500
    assert response.json()["details"] == "connection refused"


def test_health_reports_configured(make_client):
    with make_client() as client:
        response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["testaiConfigured"] is True
    assert body["provider"] == "testai"
    assert API_KEY not in response.text


def test_health_without_key(make_client, monkeypatch):
    monkeypatch.delenv("TEST_RELAY_KEY")
    with make_client() as client:
        response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["testaiConfigured"] is False


def test_index_page_is_served(make_client):
    with make_client() as client:
        response = client.get("/")
    assert response.status_code == 200
    assert "Therapist AI" in response.text


def test_query_param_key_never_reaches_logs(make_client, upstream, caplog):
    upstream.payload = {"candidates": [{"content": {"parts": [{"text": "I hear you."}]}}]}
    with caplog.at_level(logging.DEBUG):
        with make_client(type="google", auth_scheme="query-param") as client:
            response = client.post("/api/chat", json={"message": "hello"})
    assert response.status_code == 200
    assert response.json()["response"] == "I hear you."
    assert upstream.calls[0].url.params["key"] == API_KEY
    leaked = [record.getMessage() for record in caplog.records if API_KEY in record.getMessage()]
    assert leaked == []


class FailingService:
    async def handle(self, request):
        raise RuntimeError("service exploded")


def test_unexpected_error_is_generic_500(make_client, upstream):
    with make_client() as client:
        client.app.dependency_overrides[get_relay_service] = FailingService
        response = client.post("/api/chat", json={"message": "hello"})
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert upstream.calls == []


def test_unexpected_error_details_in_development(make_client, monkeypatch):
    monkeypatch.setenv("APP_ENV", "development")
    with make_client() as client:
        client.app.dependency_overrides[get_relay_service] = FailingService
        response = client.post("/api/chat", json={"message": "hello"})
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error", "details": "service exploded"}
