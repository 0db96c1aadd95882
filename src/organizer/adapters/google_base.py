"""Shared plumbing for the Google API adapters."""

import logging

from .base_provider import ApiError, BaseProvider

logger = logging.getLogger(__name__)


class GoogleProvider(BaseProvider):
    """
    BaseProvider for googleapiclient services.

    Services are built from the account's current access token and rebuilt
    whenever a refresh replaces it.
    """

    API_NAME = ""
    API_VERSION = ""

    _cached_service = None
    _cached_token = ""

    def _build_service(self):
        """Build an API service for the account's current token."""
        from google.oauth2.credentials import Credentials
        from googleapiclient.discovery import build

        creds = Credentials(token=self.account.access_token)
        return build(self.API_NAME, self.API_VERSION, credentials=creds, cache_discovery=False)

    def _service(self):
        if self._cached_service is None or self._cached_token != self.account.access_token:
            self._cached_service = self._build_service()
            self._cached_token = self.account.access_token
        return self._cached_service

    def _execute(self, make_request):
        """
        Execute a googleapiclient request with retry.

        make_request receives the service and returns an unexecuted request.
        """
        from googleapiclient.errors import HttpError

        def run():
            try:
                return make_request(self._service()).execute()
            except HttpError as e:
                body = e.content.decode("utf-8", errors="replace") if e.content else ""
                raise ApiError(str(e), int(e.resp.status), body) from e

        return self._call(run)
