"""Factories that pick the provider adapter for an integration account."""

from organizer.config import Config
from organizer.core.accounts import AccountType, IntegrationAccount
from organizer.ports import CalendarProvider, ContactProvider, MailProvider, TaskProvider

from .gmail import GmailAdapter
from .google_calendar import GoogleCalendarAdapter
from .google_contacts import GoogleContactsAdapter
from .google_tasks import GoogleTasksAdapter
from .microsoft import (
    Office365CalendarAdapter,
    Office365ContactsAdapter,
    Office365MailAdapter,
    Office365TasksAdapter,
)
from .oauth import TokenRefresher

_CALENDAR = {
    AccountType.GOOGLE.value: GoogleCalendarAdapter,
    AccountType.OFFICE365.value: Office365CalendarAdapter,
    AccountType.EXCHANGE.value: Office365CalendarAdapter,
}
_MAIL = {
    AccountType.GOOGLE.value: GmailAdapter,
    AccountType.OFFICE365.value: Office365MailAdapter,
    AccountType.EXCHANGE.value: Office365MailAdapter,
}
_CONTACTS = {
    AccountType.GOOGLE.value: GoogleContactsAdapter,
    AccountType.OFFICE365.value: Office365ContactsAdapter,
    AccountType.EXCHANGE.value: Office365ContactsAdapter,
}
_TASKS = {
    AccountType.GOOGLE.value: GoogleTasksAdapter,
    AccountType.OFFICE365.value: Office365TasksAdapter,
    AccountType.EXCHANGE.value: Office365TasksAdapter,
}


def _build(registry: dict, kind: str, account: IntegrationAccount, config: Config, refresher):
    adapter_cls = registry.get(account.type)
    if adapter_cls is None:
        raise ValueError(f"Unsupported {kind} provider type: {account.type}")
    return adapter_cls(account, config, refresher=refresher)


def get_calendar_provider(
    account: IntegrationAccount, config: Config, refresher: TokenRefresher | None = None
) -> CalendarProvider:
    return _build(_CALENDAR, "calendar", account, config, refresher)


def get_mail_provider(
    account: IntegrationAccount, config: Config, refresher: TokenRefresher | None = None
) -> MailProvider:
    return _build(_MAIL, "mail", account, config, refresher)


def get_contact_provider(
    account: IntegrationAccount, config: Config, refresher: TokenRefresher | None = None
) -> ContactProvider:
    return _build(_CONTACTS, "contact", account, config, refresher)


def get_task_provider(
    account: IntegrationAccount, config: Config, refresher: TokenRefresher | None = None
) -> TaskProvider:
    return _build(_TASKS, "task", account, config, refresher)
