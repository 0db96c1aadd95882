"""OAuth token endpoints, refresh and authorization flows for Google and Microsoft."""

import logging
import time
import webbrowser
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable
from urllib.parse import urlencode

import requests

from organizer.config import Config
from organizer.core.accounts import IntegrationAccount, apply_token_response, token_provider

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
MICROSOFT_AUTHORIZE_URL = "https://login.microsoftonline.com/{tenant}/oauth2/v2.0/authorize"
MICROSOFT_TOKEN_URL = "https://login.microsoftonline.com/{tenant}/oauth2/v2.0/token"
MICROSOFT_REDIRECT_URI = "http://localhost:8080/callback"
REQUEST_TIMEOUT = 30

GOOGLE_SCOPES = [
    "openid",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/gmail.modify",
    "https://www.googleapis.com/auth/gmail.send",
    "https://www.googleapis.com/auth/contacts",
    "https://www.googleapis.com/auth/tasks",
]

MICROSOFT_SCOPES = [
    "offline_access",
    "User.Read",
    "Calendars.ReadWrite",
    "Mail.ReadWrite",
    "Mail.Send",
    "Contacts.ReadWrite",
    "Tasks.ReadWrite",
]


class AuthenticationError(Exception):
    """Raised when authentication fails."""

    def __init__(self, message: str, status: int | None = None, details=None):
        super().__init__(message)
        self.status = status
        self.details = details


class MissingCredentialsError(AuthenticationError):
    """Raised when no OAuth client id/secret is configured for a provider."""


class ReauthorizationRequired(AuthenticationError):
    """Raised when the provider rejects the refresh token (invalid_grant)."""


def mask_token(token: str) -> str:
    """Short prefix of a token, safe for logs."""
    if not token:
        return "(none)"
    return f"{token[:5]}..."


def client_credentials(provider: str, config: Config) -> tuple[str, str]:
    """Return (client_id, client_secret) for a provider."""
    match provider:
        case "google":
            client_id, secret = config.google_client_id, config.google_client_secret
        case "microsoft":
            client_id, secret = config.microsoft_client_id, config.microsoft_client_secret
        case _:
            raise ValueError(f"Unsupported provider: {provider}")
    if not client_id or not secret:
        raise MissingCredentialsError(
            f"Server configuration error - missing {provider.title()} API credentials"
        )
    return client_id, secret


def token_url(provider: str, config: Config) -> str:
    if provider == "google":
        return GOOGLE_TOKEN_URL
    return MICROSOFT_TOKEN_URL.format(tenant=config.microsoft_tenant or "common")


def refresh_tokens(
    provider: str,
    refresh_token: str,
    config: Config,
    session: requests.Session | None = None,
) -> dict:
    """
    Exchange a refresh token for a new access token.

    Returns the provider's token JSON. Raises ReauthorizationRequired when the
    refresh token was revoked or expired, AuthenticationError for any other
    failure.
    """
    client_id, client_secret = client_credentials(provider, config)
    data = {
        "client_id": client_id,
        "client_secret": client_secret,
        "refresh_token": refresh_token,
        "grant_type": "refresh_token",
    }
    if provider == "microsoft":
        data["scope"] = " ".join(MICROSOFT_SCOPES)

    logger.info(f"Refreshing {provider} token (refresh token {mask_token(refresh_token)})")
    http = session or requests
    try:
        resp = http.post(
            token_url(provider, config),
            data=data,
            headers={"Accept": "application/json"},
            timeout=REQUEST_TIMEOUT,
        )
    except requests.RequestException as e:
        raise AuthenticationError(f"{provider} token refresh failed: {e}") from e

    if resp.status_code != 200:
        try:
            details = resp.json()
        except ValueError:
            details = resp.text
        if isinstance(details, dict) and details.get("error") == "invalid_grant":
            description = details.get("error_description") or (
                "Refresh token is invalid or has expired. "
                "You may need to re-authenticate your account."
            )
            logger.warning(f"{provider} refresh token rejected: {description}")
            raise ReauthorizationRequired(description, status=resp.status_code, details=details)
        logger.error(f"{provider} token refresh failed: {resp.status_code} {details}")
        raise AuthenticationError(
            f"{provider.title()} OAuth error: {resp.status_code} {resp.reason}",
            status=resp.status_code,
            details=details,
        )

    return resp.json()


class TokenRefresher:
    """
    Refreshes an integration account's tokens and persists the result.

    ``on_update`` is called with the account after every state change, both
    for a successful refresh and when the account is marked disconnected.
    """

    def __init__(
        self,
        config: Config,
        on_update: Callable[[IntegrationAccount], None] | None = None,
        session: requests.Session | None = None,
    ):
        self.config = config
        self.on_update = on_update
        self._session = session or requests.Session()

    def refresh(self, account: IntegrationAccount) -> IntegrationAccount:
        if not account.refresh_token:
            raise AuthenticationError(f"No refresh token for {account.email}")

        provider = token_provider(account)
        try:
            tokens = refresh_tokens(provider, account.refresh_token, self.config, self._session)
        except ReauthorizationRequired:
            account.connected = False
            self._persist(account)
            raise

        apply_token_response(account, tokens)
        self._persist(account)
        logger.info(f"Refreshed token for {account.email}")
        return account

    def _persist(self, account: IntegrationAccount) -> None:
        if self.on_update:
            self.on_update(account)


def _credentials_to_tokens(creds) -> dict:
    expires_in = None
    if creds.expiry:
        # google-auth reports a naive UTC expiry
        expiry = creds.expiry.replace(tzinfo=timezone.utc)
        expires_in = max(int((expiry - datetime.now(timezone.utc)).total_seconds()), 0)
    return {
        "access_token": creds.token,
        "refresh_token": creds.refresh_token or "",
        "expires_in": expires_in,
        "scope": " ".join(creds.scopes or []),
        "token_type": "Bearer",
    }


def authorize_google(config: Config, scopes: list[str] | None = None) -> dict:
    """Run the installed-app OAuth flow in a local browser. Returns token JSON."""
    from google_auth_oauthlib.flow import InstalledAppFlow

    scopes = scopes or GOOGLE_SCOPES
    if config.google_client_secret_file:
        secret_path = Path(config.google_client_secret_file).expanduser()
        if not secret_path.exists():
            raise MissingCredentialsError(f"Client secret file not found: {secret_path}")
        flow = InstalledAppFlow.from_client_secrets_file(str(secret_path), scopes)
    else:
        client_id, client_secret = client_credentials("google", config)
        flow = InstalledAppFlow.from_client_config(
            {
                "installed": {
                    "client_id": client_id,
                    "client_secret": client_secret,
                    "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                    "token_uri": GOOGLE_TOKEN_URL,
                    "redirect_uris": ["http://localhost"],
                }
            },
            scopes,
        )

    creds = flow.run_local_server(port=0, access_type="offline", prompt="consent")
    return _credentials_to_tokens(creds)


def authorize_microsoft(config: Config, scopes: list[str] | None = None) -> dict:
    """Run the Microsoft authorization-code flow by pasting the code. Returns token JSON."""
    client_id, client_secret = client_credentials("microsoft", config)
    scopes = scopes or MICROSOFT_SCOPES
    tenant = config.microsoft_tenant or "common"

    auth_url = MICROSOFT_AUTHORIZE_URL.format(tenant=tenant) + "?" + urlencode(
        {
            "client_id": client_id,
            "response_type": "code",
            "redirect_uri": MICROSOFT_REDIRECT_URI,
            "response_mode": "query",
            "scope": " ".join(scopes),
        }
    )

    print("Opening browser for Microsoft authorization...")
    webbrowser.open(auth_url)

    print("\nAfter authorizing, you'll be redirected to a page that won't load.")
    print("Copy the 'code' parameter from the URL.\n")

    code = input("Paste the code here: ").strip()
    if not code:
        raise AuthenticationError("No code provided")

    print("Exchanging code for tokens...")
    resp = requests.post(
        MICROSOFT_TOKEN_URL.format(tenant=tenant),
        data={
            "client_id": client_id,
            "client_secret": client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": MICROSOFT_REDIRECT_URI,
            "scope": " ".join(scopes),
        },
        timeout=REQUEST_TIMEOUT,
    )

    if resp.status_code != 200:
        raise AuthenticationError(f"Token exchange failed: {resp.text}", status=resp.status_code)

    return resp.json()


def authorize_account(account: IntegrationAccount, config: Config) -> IntegrationAccount:
    """Run the interactive flow for an account's provider and store the tokens on it."""
    provider = token_provider(account)
    started = time.time()
    if provider == "google":
        tokens = authorize_google(config)
    else:
        tokens = authorize_microsoft(config)
    apply_token_response(account, tokens)
    logger.info(f"Authorized {account.email} via {provider} in {time.time() - started:.1f}s")
    return account
