"""Integration account store."""

import logging

from organizer.config import Config
from organizer.core.accounts import Capability, IntegrationAccount
from organizer.core.records import utcnow

from .base import EntityStore

logger = logging.getLogger(__name__)


class AccountStore(EntityStore[IntegrationAccount]):
    collection = "integrationAccounts"
    kind = "integration account"
    record_type = IntegrationAccount
    default_order = "createdAt"

    def add(self, type: str, email: str, **fields) -> IntegrationAccount:
        return self.create(IntegrationAccount.new(self.user_id, type, email, **fields))

    def connected_for(self, capability: Capability | str) -> list[IntegrationAccount]:
        """Connected accounts that sync and show the capability."""
        return [a for a in self.list() if a.connected and a.syncs(capability)]

    def save(self, account: IntegrationAccount) -> IntegrationAccount:
        """Persist an account whose tokens or status changed outside the store."""
        account.user_id = account.user_id or self.user_id
        account.updated_at = utcnow()
        return self._save(account)

    def token_refresher(self, config: Config):
        """A TokenRefresher that writes refreshed accounts back to this store."""
        from organizer.adapters.oauth import TokenRefresher

        return TokenRefresher(config, on_update=self.save)
