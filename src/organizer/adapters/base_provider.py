"""Base class for integration provider adapters - authentication and request retry."""

import logging
import time
from typing import Callable, TypeVar

import requests

from organizer.config import Config
from organizer.core.accounts import IntegrationAccount, has_valid_tokens

from .oauth import AuthenticationError, TokenRefresher, mask_token

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_RETRIES = 2
BACKOFF_SECONDS = 1.0
REQUEST_TIMEOUT = 30


class ApiError(Exception):
    """Raised when a provider API answers with a non-success status."""

    def __init__(self, message: str, status: int, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class ProviderError(Exception):
    """Raised when a provider request fails after retries."""

    def __init__(self, provider: str, status: int | None, message: str):
        label = f"{provider} API error ({status})" if status else f"{provider} API error"
        super().__init__(f"{label}: {message}")
        self.provider = provider
        self.status = status


class BaseProvider:
    """
    Shared behavior for every provider adapter.

    Holds the integration account, refreshes its tokens when they are
    missing or expired, and retries requests once the token is refreshed.
    """

    def __init__(
        self,
        account: IntegrationAccount,
        config: Config,
        refresher: TokenRefresher | None = None,
        session: requests.Session | None = None,
    ):
        self.account = account
        self.config = config
        self.refresher = refresher or TokenRefresher(config)
        self._session = session or requests.Session()
        self._sleep = time.sleep

    @property
    def provider_type(self) -> str:
        return self.account.type

    def _log_prefix(self) -> str:
        return f"[{self.account.type}:{self.account.email}]"

    def is_authenticated(self) -> bool:
        return has_valid_tokens(self.account)

    def authenticate(self) -> bool:
        """Refresh the access token if needed. Returns False when that is not possible."""
        if self.is_authenticated():
            return True

        if not self.account.refresh_token:
            logger.warning(
                f"{self._log_prefix()} No refresh token, the account must be reconnected"
            )
            return False

        try:
            self.account = self.refresher.refresh(self.account)
        except AuthenticationError as e:
            logger.error(f"{self._log_prefix()} Failed to refresh token: {e}")
            return False
        return True

    def _call(self, request: Callable[[], T]) -> T:
        """
        Run a provider request with authentication and retry.

        401/403 force a token refresh before retrying; 429 backs off. Each
        retries at most MAX_RETRIES times in total.
        """
        retries = 0
        while True:
            if not self.is_authenticated() and not self.authenticate():
                raise ProviderError(self.provider_type, None, "Authentication failed")

            try:
                return request()
            except ApiError as e:
                if e.status in (401, 403) and retries < MAX_RETRIES:
                    retries += 1
                    logger.info(
                        f"{self._log_prefix()} Received {e.status} "
                        f"(try {retries}/{MAX_RETRIES}), refreshing token"
                    )
                    try:
                        self.account = self.refresher.refresh(self.account)
                    except AuthenticationError as refresh_error:
                        raise ProviderError(
                            self.provider_type,
                            e.status,
                            f"Token refresh failed - {refresh_error}",
                        ) from refresh_error
                    continue

                if e.status == 429 and retries < MAX_RETRIES:
                    retries += 1
                    backoff = BACKOFF_SECONDS * retries
                    logger.info(
                        f"{self._log_prefix()} Rate limited, backing off {backoff:.0f}s "
                        f"(retry {retries}/{MAX_RETRIES})"
                    )
                    self._sleep(backoff)
                    continue

                logger.warning(f"{self._log_prefix()} Request failed with status {e.status}: {e}")
                raise ProviderError(self.provider_type, e.status, str(e)) from e

    def _auth_headers(self) -> dict:
        if not self.account.access_token:
            raise AuthenticationError(f"No access token for account {self.account.email}")
        return {
            "Authorization": f"Bearer {self.account.access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _request(
        self,
        method: str,
        url: str,
        params: dict | None = None,
        json: dict | None = None,
        headers: dict | None = None,
    ):
        """Authenticated JSON request. Raises ApiError on a non-2xx answer."""
        final_headers = {**self._auth_headers(), **(headers or {})}
        logger.debug(
            f"[API] {method} {url} (token {mask_token(self.account.access_token)})"
        )
        try:
            resp = self._session.request(
                method,
                url,
                params=params,
                json=json,
                headers=final_headers,
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise ProviderError(self.provider_type, None, str(e)) from e

        if not resp.ok:
            raise ApiError(
                f"API request failed: {resp.status_code} {resp.reason}",
                resp.status_code,
                resp.text,
            )
        if resp.status_code == 204 or not resp.content:
            return None
        if "application/json" in resp.headers.get("Content-Type", ""):
            return resp.json()
        return resp.text
