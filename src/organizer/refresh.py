"""Refresh mail, calendar and contacts data for every connected account."""

import logging
import threading
from dataclasses import dataclass, field
from datetime import date, datetime

from .config import Config
from .core.accounts import Capability, IntegrationAccount
from .core.calendar import month_range
from .core.records import to_iso, utcnow
from .stores.accounts import AccountStore
from .stores.calendar import CalendarStore
from .stores.mail import MailStore
from .stores.people import PeopleStore

logger = logging.getLogger(__name__)

ALL_FAILED = "Failed to refresh data from all providers"

# Order in which an account's data is refreshed
CAPABILITIES = (Capability.MAIL, Capability.CALENDAR, Capability.CONTACTS)


@dataclass
class RefreshResult:
    succeeded: int = 0
    failed: int = 0
    error: str | None = None
    refreshed_at: datetime = field(default_factory=utcnow)
    skipped: int = 0

    def to_dict(self) -> dict:
        return {
            "succeeded": self.succeeded,
            "failed": self.failed,
            "error": self.error,
            "refreshedAt": to_iso(self.refreshed_at),
            "skipped": self.skipped,
        }


class DataRefresher:
    """
    Runs one refresh pass over all integration accounts.

    Only one pass runs at a time; a call made while a pass is running
    returns None instead of waiting.
    """

    def __init__(
        self,
        accounts: AccountStore,
        mail: MailStore,
        calendar: CalendarStore,
        people: PeopleStore,
        config: Config,
        provider_factories: dict | None = None,
    ):
        from .adapters.providers import (
            get_calendar_provider,
            get_contact_provider,
            get_mail_provider,
        )

        self.accounts = accounts
        self.mail = mail
        self.calendar = calendar
        self.people = people
        self.config = config
        self.factories = {
            Capability.MAIL: get_mail_provider,
            Capability.CALENDAR: get_calendar_provider,
            Capability.CONTACTS: get_contact_provider,
            **(provider_factories or {}),
        }
        self._lock = threading.Lock()

    @property
    def in_progress(self) -> bool:
        return self._lock.locked()

    def refresh_all(self, today: date | None = None) -> RefreshResult | None:
        if not self._lock.acquire(blocking=False):
            logger.info("Refresh already in progress, skipping")
            return None
        try:
            return self._refresh_all(today or date.today())
        finally:
            self._lock.release()

    def _refresh_all(self, today: date) -> RefreshResult:
        result = RefreshResult()
        try:
            accounts = self.accounts.list()
            logger.info(f"Starting data refresh for {len(accounts)} accounts")

            for account in accounts:
                if not account.connected or not account.access_token:
                    logger.debug(f"Skipping {account.email}: not connected")
                    result.skipped += 1
                    continue
                self._refresh_account(account, today, result)
                account.last_sync = utcnow()
                self.accounts.save(account)

            if result.failed > 0 and result.succeeded == 0:
                result.error = ALL_FAILED
        except Exception as e:
            logger.exception("Data refresh failed")
            result.error = str(e)

        result.refreshed_at = utcnow()
        logger.info(
            f"Refresh complete: {result.succeeded} succeeded, "
            f"{result.failed} failed, {result.skipped} skipped"
        )
        return result

    def _refresh_account(self, account: IntegrationAccount, today: date, result: RefreshResult) -> None:
        logger.info(f"Refreshing {account.type} account {account.email}")
        refresher = self.accounts.token_refresher(self.config)

        for capability in CAPABILITIES:
            if not account.syncs(capability):
                continue

            try:
                provider = self.factories[capability](account, self.config, refresher)
                authenticated = provider.is_authenticated() or provider.authenticate()
            except Exception as e:
                logger.error(f"Could not connect to {account.email}, skipping account: {e}")
                result.failed += 1
                return
            if not authenticated:
                logger.warning(f"Authentication failed for {account.email}, skipping account")
                result.failed += 1
                return
            # authenticate() may have swapped in refreshed tokens
            account = getattr(provider, "account", account)

            try:
                self._refresh_capability(capability, account, provider, today)
            except Exception as e:
                logger.error(f"Failed to refresh {capability.value} for {account.email}: {e}")
                result.failed += 1
            else:
                logger.info(f"Refreshed {capability.value} for {account.email}")
                result.succeeded += 1

    def _refresh_capability(self, capability: Capability, account, provider, today: date) -> None:
        if capability is Capability.MAIL:
            self.mail.refresh_account(account, provider)
        elif capability is Capability.CALENDAR:
            start, end = month_range(today)
            self.calendar.refresh_account(account, provider, start, end)
        else:
            self.people.import_contacts(account, provider)
