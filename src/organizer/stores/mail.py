"""Mail store - messages aggregated across connected mail accounts."""

import logging

from organizer.config import Config
from organizer.core import mail
from organizer.core.accounts import Capability, IntegrationAccount
from organizer.core.mail import Email, MailFolder
from organizer.errors import NotFoundError
from organizer.ports.mail_provider import MailProvider

from .accounts import AccountStore

logger = logging.getLogger(__name__)


class MailStore:
    """
    Fetches mail from every connected mail account and keeps the latest
    results in memory, newest first.
    """

    def __init__(self, accounts: AccountStore, config: Config, provider_factory=None):
        if provider_factory is None:
            from organizer.adapters.providers import get_mail_provider

            provider_factory = get_mail_provider
        self.accounts = accounts
        self.config = config
        self._provider_factory = provider_factory
        self.emails: list[Email] = []

    def provider_for(self, account: IntegrationAccount) -> MailProvider:
        return self._provider_factory(account, self.config, self.accounts.token_refresher(self.config))

    def _fetch_from(
        self, account: IntegrationAccount, provider: MailProvider, folder: str, max_results: int
    ) -> list[Email]:
        if not provider.is_authenticated() and not provider.authenticate():
            raise RuntimeError(f"Authentication failed for {account.email}")
        emails = provider.fetch_emails(folder, max_results)
        for email in emails:
            email.account_id = account.id
            email.folder = folder
        return emails

    def _replace(self, account_id: str | None, folder: str, fetched: list[Email]) -> None:
        kept = [
            e for e in self.emails
            if e.folder != folder or (account_id is not None and e.account_id != account_id)
        ]
        self.emails = mail.sort_newest_first(kept + fetched)

    def fetch_emails(self, folder: str = "inbox", max_results: int = 50) -> list[Email]:
        """Fetch a folder from all connected accounts; failing accounts are skipped."""
        fetched = []
        for account in self.accounts.connected_for(Capability.MAIL):
            try:
                fetched.extend(self._fetch_from(account, self.provider_for(account), folder, max_results))
            except Exception as e:
                logger.warning(f"Mail fetch failed for {account.email}: {e}")
        self._replace(None, folder, fetched)
        return mail.emails_in_folder(self.emails, folder)

    def refresh_account(
        self,
        account: IntegrationAccount,
        provider: MailProvider,
        folder: str = "inbox",
        max_results: int = 50,
    ) -> list[Email]:
        """Replace one account's cached folder. Errors propagate."""
        fetched = self._fetch_from(account, provider, folder, max_results)
        self._replace(account.id, folder, fetched)
        return fetched

    def folder_counts(self, folders: list[MailFolder] | None = None) -> dict[str, int]:
        return mail.folder_counts(self.emails, folders)

    def _find(self, email_id: str) -> Email:
        for email in self.emails:
            if email.id == email_id:
                return email
        raise NotFoundError("email", email_id)

    def _provider_for_email(self, email: Email) -> MailProvider:
        return self.provider_for(self.accounts.get(email.account_id))

    def mark_read(self, email_id: str, read: bool = True) -> Email:
        email = self._find(email_id)
        self._provider_for_email(email).mark_read(email_id, read)
        email.read = read
        return email

    def delete_email(self, email_id: str) -> Email:
        """Move to trash locally, then remove on the provider."""
        email = self._find(email_id)
        previous_folder = email.folder
        email.folder = "trash"
        try:
            self._provider_for_email(email).delete_email(email_id)
        except Exception:
            email.folder = previous_folder
            raise
        return email

    def send_email(self, account_id: str, email: Email) -> None:
        account = self.accounts.get(account_id)
        if not email.sender.email:
            email.sender = mail.EmailAddress(name=account.name, email=account.email)
        self.provider_for(account).send_email(email)
        logger.info(f"Sent '{email.subject}' via {account.email}")
