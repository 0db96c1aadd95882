"""Tests for OAuth token refresh."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from organizer.adapters.oauth import (
    GOOGLE_TOKEN_URL,
    AuthenticationError,
    MissingCredentialsError,
    ReauthorizationRequired,
    TokenRefresher,
    client_credentials,
    mask_token,
    refresh_tokens,
    token_url,
)
from organizer.config import Config
from organizer.core.accounts import IntegrationAccount


@pytest.fixture
def config():
    return Config(
        google_client_id="gid",
        google_client_secret="gsecret",
        microsoft_client_id="mid",
        microsoft_client_secret="msecret",
        microsoft_tenant="contoso",
    )


def response(status=200, json_data=None, reason="OK"):
    resp = MagicMock(status_code=status, reason=reason)
    resp.json.return_value = json_data or {}
    resp.text = str(json_data)
    return resp


@pytest.fixture
def session():
    session = MagicMock()
    session.post.return_value = response(json_data={"access_token": "new", "expires_in": 3600})
    return session


@pytest.fixture
def account():
    return IntegrationAccount.new(
        "u1", "google", "ada@example.com", connected=True, refresh_token="refresh-token"
    )


class TestClientCredentials:
    def test_google(self, config):
        assert client_credentials("google", config) == ("gid", "gsecret")

    def test_missing(self):
        with pytest.raises(MissingCredentialsError, match="missing Google API credentials"):
            client_credentials("google", Config())

    def test_unsupported(self, config):
        with pytest.raises(ValueError):
            client_credentials("yahoo", config)

    def test_token_urls(self, config):
        assert token_url("google", config) == GOOGLE_TOKEN_URL
        assert "/contoso/" in token_url("microsoft", config)

    def test_mask_token(self):
        assert mask_token("abcdefghijk") == "abcde..."
        assert mask_token("") == "(none)"


class TestRefreshTokens:
    def test_google_posts_form(self, config, session):
        tokens = refresh_tokens("google", "refresh-token", config, session)

        assert tokens["access_token"] == "new"
        url = session.post.call_args[0][0]
        data = session.post.call_args.kwargs["data"]
        assert url == GOOGLE_TOKEN_URL
        assert data["grant_type"] == "refresh_token"
        assert data["client_id"] == "gid"
        assert "scope" not in data

    def test_microsoft_sends_scope(self, config, session):
        refresh_tokens("microsoft", "refresh-token", config, session)
        data = session.post.call_args.kwargs["data"]
        assert "offline_access" in data["scope"]

    def test_invalid_grant(self, config, session):
        session.post.return_value = response(
            400, {"error": "invalid_grant", "error_description": "Token has been revoked."}, "Bad Request"
        )
        with pytest.raises(ReauthorizationRequired) as exc_info:
            refresh_tokens("google", "refresh-token", config, session)
        assert exc_info.value.status == 400
        assert str(exc_info.value) == "Token has been revoked."

    def test_other_error(self, config, session):
        session.post.return_value = response(500, {"error": "server_error"}, "Server Error")
        with pytest.raises(AuthenticationError, match="Google OAuth error: 500 Server Error") as exc_info:
            refresh_tokens("google", "refresh-token", config, session)
        assert not isinstance(exc_info.value, ReauthorizationRequired)

    def test_network_error(self, config, session):
        import requests

        session.post.side_effect = requests.ConnectionError("down")
        with pytest.raises(AuthenticationError):
            refresh_tokens("google", "refresh-token", config, session)


class TestTokenRefresher:
    def test_refresh_updates_and_persists(self, config, session, account):
        saved = []
        refresher = TokenRefresher(config, on_update=saved.append, session=session)

        before = datetime.now(timezone.utc)
        result = refresher.refresh(account)

        assert result is account
        assert account.access_token == "new"
        assert account.refresh_token == "refresh-token"
        assert account.token_expiry >= before + timedelta(seconds=3239)
        assert saved == [account]

    def test_invalid_grant_marks_disconnected(self, config, session, account):
        session.post.return_value = response(400, {"error": "invalid_grant"}, "Bad Request")
        saved = []
        refresher = TokenRefresher(config, on_update=saved.append, session=session)

        with pytest.raises(ReauthorizationRequired):
            refresher.refresh(account)

        assert account.connected is False
        assert saved == [account]

    def test_no_refresh_token(self, config, session, account):
        account.refresh_token = ""
        with pytest.raises(AuthenticationError):
            TokenRefresher(config, session=session).refresh(account)
        session.post.assert_not_called()

    def test_exchange_account_uses_microsoft(self, config, session, account):
        account.type = "exchange"
        TokenRefresher(config, session=session).refresh(account)
        assert "login.microsoftonline.com" in session.post.call_args[0][0]
