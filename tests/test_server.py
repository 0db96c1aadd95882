"""Tests for the HTTP server endpoints."""

import json
from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest
import requests
from fastapi.testclient import TestClient

from organizer.adapters.file_store import FileDocumentStore
from organizer.adapters.oauth import (
    AuthenticationError,
    MissingCredentialsError,
    ReauthorizationRequired,
)
from organizer.config import Config
from organizer.core.users import AIIntegration
from organizer.server import TokenVerifier, create_app
from organizer.stores import UserStore

API_TOKEN = "secret-token"
AUTH = {"Authorization": f"Bearer {API_TOKEN}"}


@pytest.fixture
def config():
    return Config(user_id="u1", api_token=API_TOKEN)


@pytest.fixture
def db(tmp_path):
    return FileDocumentStore(tmp_path)


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def ai_service():
    return MagicMock()


@pytest.fixture
def client(config, db, session, ai_service):
    app = create_app(config, db=db, session=session, ai_service_factory=MagicMock(return_value=ai_service))
    return TestClient(app)


def upstream_response(status=200, json_data=None, text="", reason="OK"):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = status < 400
    resp.reason = reason
    resp.text = text
    if json_data is None:
        resp.json.side_effect = ValueError("not json")
    else:
        resp.json.return_value = json_data
    return resp


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


class TestTokenRefresh:
    def test_requires_refresh_token(self, client):
        resp = client.post("/api/auth/refresh", json={"provider": "google"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Refresh token is required"}

    @patch("organizer.server.refresh_tokens")
    def test_success_returns_provider_tokens(self, mock_refresh, client, config, session):
        mock_refresh.return_value = {"access_token": "new", "expires_in": 3600}
        resp = client.post("/api/auth/refresh", json={"refreshToken": "r1", "email": "ada@example.com"})

        assert resp.status_code == 200
        assert resp.json() == {"access_token": "new", "expires_in": 3600}
        mock_refresh.assert_called_once_with("google", "r1", config, session)

    @patch("organizer.server.refresh_tokens", side_effect=ValueError("nope"))
    def test_unsupported_provider(self, mock_refresh, client):
        resp = client.post("/api/auth/refresh", json={"refreshToken": "r1", "provider": "yahoo"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Unsupported provider: yahoo"}

    @patch("organizer.server.refresh_tokens", side_effect=MissingCredentialsError("Google OAuth client not configured"))
    def test_missing_credentials(self, mock_refresh, client):
        resp = client.post("/api/auth/refresh", json={"refreshToken": "r1"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "Google OAuth client not configured"}

    @patch(
        "organizer.server.refresh_tokens",
        side_effect=ReauthorizationRequired("Token has been expired or revoked.", status=400),
    )
    def test_invalid_grant(self, mock_refresh, client):
        resp = client.post("/api/auth/refresh", json={"refreshToken": "r1"})
        assert resp.status_code == 400
        assert resp.json() == {
            "error": "invalid_grant",
            "error_description": "Token has been expired or revoked.",
        }

    @patch(
        "organizer.server.refresh_tokens",
        side_effect=AuthenticationError("Token refresh failed", status=401, details={"error": "invalid_client"}),
    )
    def test_provider_error_keeps_status(self, mock_refresh, client):
        resp = client.post("/api/auth/refresh", json={"refreshToken": "r1"})
        assert resp.status_code == 401
        assert resp.json() == {"error": "Token refresh failed", "details": {"error": "invalid_client"}}

    @patch("organizer.server.refresh_tokens", side_effect=AuthenticationError("connection reset"))
    def test_network_error(self, mock_refresh, client):
        resp = client.post("/api/auth/refresh", json={"refreshToken": "r1"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal server error during token refresh"}


class TestProxy:
    def test_requires_url(self, client):
        resp = client.get("/api/proxy")
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Missing required url parameter"

    def test_forwards_json(self, client, session):
        session.request.return_value = upstream_response(json_data={"ok": True})
        resp = client.get(
            "/api/proxy",
            params={"url": "https://api.example.com/items"},
            headers={"Authorization": "Bearer upstream", "Origin": "http://localhost"},
        )

        assert resp.status_code == 200
        assert resp.json() == {"ok": True}
        method, url = session.request.call_args.args
        kwargs = session.request.call_args.kwargs
        assert (method, url) == ("GET", "https://api.example.com/items")
        assert kwargs["headers"]["authorization"] == "Bearer upstream"
        assert "origin" not in kwargs["headers"]
        assert "host" not in kwargs["headers"]
        assert kwargs["data"] is None
        assert kwargs["timeout"] == 30

    def test_forwards_body(self, client, session):
        session.request.return_value = upstream_response(json_data={"id": 1})
        client.post(
            "/api/proxy",
            params={"url": "https://api.example.com/items"},
            content=json.dumps({"name": "x"}),
            headers={"Content-Type": "application/json"},
        )
        assert json.loads(session.request.call_args.kwargs["data"]) == {"name": "x"}

    def test_upstream_error(self, client, session):
        session.request.return_value = upstream_response(status=404, reason="Not Found", text="missing")
        resp = client.get("/api/proxy", params={"url": "https://api.example.com/x"})
        assert resp.status_code == 404
        assert resp.json() == {"error": "Not Found", "data": "missing"}

    def test_text_response(self, client, session):
        session.request.return_value = upstream_response(text="plain body")
        resp = client.get("/api/proxy", params={"url": "https://api.example.com/x"})
        assert resp.status_code == 200
        assert resp.text == "plain body"
        assert resp.headers["content-type"].startswith("text/plain")

    def test_network_error(self, client, session):
        session.request.side_effect = requests.ConnectionError("refused")
        resp = client.get("/api/proxy", params={"url": "https://api.example.com/x"})
        assert resp.status_code == 502


class TestAnalyze:
    @pytest.fixture(autouse=True)
    def integration(self, db):
        UserStore(db, "u1").save_ai_integration(AIIntegration("openai", api_key="sk-test"))

    def test_requires_token(self, client):
        resp = client.post("/api/ai/analyze", json={"providerId": "openai", "text": "hi"})
        assert resp.status_code == 401

    def test_rejects_wrong_token(self, client):
        resp = client.post(
            "/api/ai/analyze",
            json={"providerId": "openai", "text": "hi"},
            headers={"Authorization": "Bearer wrong"},
        )
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Unauthorized"

    def test_analyze(self, client, ai_service):
        ai_service.generate.return_value = json.dumps(
            {"projects": [{"name": "Website", "confidence": 0.7}], "summary": "Website work"}
        )
        resp = client.post(
            "/api/ai/analyze", json={"providerId": "openai", "text": "Finish the website"}, headers=AUTH
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["summary"] == "Website work"
        assert body["projects"][0]["name"] == "Website"
        assert body["people"] == []

    def test_validation_error(self, client):
        resp = client.post("/api/ai/analyze", json={"providerId": "openai", "text": ""}, headers=AUTH)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Text to analyze is required"

    def test_provider_failure(self, client, ai_service):
        ai_service.generate.side_effect = RuntimeError("quota exceeded")
        resp = client.post("/api/ai/analyze", json={"providerId": "openai", "text": "hi"}, headers=AUTH)
        assert resp.status_code == 502
        assert resp.json()["detail"] == "Failed to analyze text: quota exceeded"


class TestIntegrationCheck:
    def test_missing_fields(self, client):
        resp = client.post("/api/ai/test-integration", json={"provider": "openai"})
        assert resp.json() == {"success": False, "error": "Missing required fields: provider and apiKey"}

    @patch("organizer.server.verify_api_key", return_value=True)
    def test_valid_key(self, mock_verify, client, session):
        resp = client.post("/api/ai/test-integration", json={"provider": "openai", "apiKey": "sk"})
        assert resp.json() == {"success": True, "error": None}
        mock_verify.assert_called_once_with("openai", "sk", session)

    @patch("organizer.server.verify_api_key", return_value=False)
    def test_invalid_key(self, mock_verify, client):
        resp = client.post("/api/ai/test-integration", json={"provider": "gemini", "apiKey": "bad"})
        assert resp.json() == {"success": False, "error": "Could not connect with the provided API key"}

    @patch("organizer.server.verify_api_key", side_effect=ValueError("Unsupported AI provider: foo"))
    def test_unsupported_provider(self, mock_verify, client):
        resp = client.post("/api/ai/test-integration", json={"provider": "foo", "apiKey": "k"})
        assert resp.json() == {"success": False, "error": "Unsupported provider: foo"}


class TestTokenVerifier:
    def test_api_token(self, config):
        verifier = TokenVerifier(config)
        assert verifier.verify(API_TOKEN) == "u1"
        assert verifier.verify("other") is None

    def test_no_api_token_configured(self):
        assert TokenVerifier(Config(api_token="")).verify("") is None

    @patch("firebase_admin.auth.verify_id_token", return_value={"uid": "firebase-user"})
    def test_firebase_id_token(self, mock_verify):
        verifier = TokenVerifier(Config(store_backend="firestore"))
        assert verifier.verify("id-token") == "firebase-user"
        mock_verify.assert_called_once_with("id-token")


class TestRefreshScheduler:
    @patch("apscheduler.schedulers.background.BackgroundScheduler")
    def test_scheduled_for_app_lifetime(self, mock_scheduler_cls, db):
        config = Config(user_id="u1", api_token=API_TOKEN, refresh_interval_minutes=15, timezone="Europe/London")
        scheduler = mock_scheduler_cls.return_value

        with TestClient(create_app(config, db=db, session=MagicMock())) as client:
            assert client.get("/api/health").status_code == 200
            mock_scheduler_cls.assert_called_once_with(timezone="Europe/London")
            scheduler.start.assert_called_once()
            scheduler.shutdown.assert_not_called()

            func, trigger = scheduler.add_job.call_args.args
            kwargs = scheduler.add_job.call_args.kwargs
            assert func.__name__ == "refresh_all"
            assert trigger.interval == timedelta(minutes=15)
            assert kwargs["max_instances"] == 1
            assert kwargs["coalesce"] is True

        scheduler.shutdown.assert_called_once_with(wait=False)

    @patch("apscheduler.schedulers.background.BackgroundScheduler")
    def test_disabled_without_interval(self, mock_scheduler_cls, config, db):
        app = create_app(config, db=db, session=MagicMock())
        with TestClient(app):
            assert app.state.scheduler is None
        mock_scheduler_cls.assert_not_called()
