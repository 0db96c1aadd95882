"""Calendar store - events aggregated across connected accounts."""

import logging
from datetime import date, datetime, time, timedelta, timezone

from organizer.config import Config
from organizer.core import calendar as cal
from organizer.core.accounts import Capability, IntegrationAccount
from organizer.core.calendar import Calendar, CalendarEvent, EventQuery
from organizer.errors import NotFoundError
from organizer.ports.calendar_provider import CalendarProvider

from .accounts import AccountStore

logger = logging.getLogger(__name__)


def _day_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    return (
        datetime.combine(start, time.min, tzinfo=timezone.utc),
        datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc),
    )


class CalendarStore:
    """
    Fetches events from every connected calendar account and keeps the
    latest results in memory, sorted by start.
    """

    def __init__(self, accounts: AccountStore, config: Config, provider_factory=None):
        if provider_factory is None:
            from organizer.adapters.providers import get_calendar_provider

            provider_factory = get_calendar_provider
        self.accounts = accounts
        self.config = config
        self._provider_factory = provider_factory
        self.events: list[CalendarEvent] = []

    def provider_for(self, account: IntegrationAccount) -> CalendarProvider:
        return self._provider_factory(account, self.config, self.accounts.token_refresher(self.config))

    def _fetch_from(self, account: IntegrationAccount, provider: CalendarProvider, query: EventQuery):
        if not provider.is_authenticated() and not provider.authenticate():
            raise RuntimeError(
                f"Authentication failed for {account.email}. "
                "Check token permissions or try reconnecting the account."
            )
        events = provider.fetch_events(query)
        for event in events:
            event.account_id = account.id
        return events

    def fetch_events(self, start: date, end: date) -> list[CalendarEvent]:
        """Fetch events in [start, end] from all connected accounts; failing accounts are skipped."""
        range_start, range_end = _day_bounds(start, end)
        query = EventQuery(start=range_start, end=range_end)
        events = []
        for account in self.accounts.connected_for(Capability.CALENDAR):
            try:
                events.extend(self._fetch_from(account, self.provider_for(account), query))
            except Exception as e:
                logger.warning(f"Calendar fetch failed for {account.email}: {e}")
        self.events = cal.sort_by_start(events)
        return self.events

    def refresh_account(
        self,
        account: IntegrationAccount,
        provider: CalendarProvider,
        start: date,
        end: date,
    ) -> list[CalendarEvent]:
        """Replace one account's cached events. Errors propagate."""
        range_start, range_end = _day_bounds(start, end)
        fetched = self._fetch_from(account, provider, EventQuery(start=range_start, end=range_end))
        others = [e for e in self.events if e.account_id != account.id]
        self.events = cal.sort_by_start(others + fetched)
        return fetched

    def events_for_day(self, target_date: date) -> list[CalendarEvent]:
        return cal.events_for_day(self.events, target_date)

    def events_for_range(self, start: date, end: date) -> list[CalendarEvent]:
        return cal.events_for_range(self.events, start, end)

    def fetch_calendars(self) -> list[Calendar]:
        calendars = []
        for account in self.accounts.connected_for(Capability.CALENDAR):
            try:
                calendars.extend(self.provider_for(account).get_calendars())
            except Exception as e:
                logger.warning(f"Calendar list failed for {account.email}: {e}")
        return calendars

    def _account_for(self, event: CalendarEvent) -> IntegrationAccount:
        connected = self.accounts.connected_for(Capability.CALENDAR)
        if not event.account_id:
            if not connected:
                raise NotFoundError("integration account", "(connected calendar)")
            return connected[0]
        for account in connected:
            if account.id == event.account_id:
                return account
        raise NotFoundError("integration account", event.account_id)

    def create_event(self, event: CalendarEvent) -> CalendarEvent:
        """Create an event on its account, or the first connected calendar account."""
        account = self._account_for(event)
        created = self.provider_for(account).create_event(event)
        created.account_id = account.id
        self.events = cal.sort_by_start([*self.events, created])
        return created

    def update_event(self, event: CalendarEvent) -> CalendarEvent:
        if not event.account_id:
            raise NotFoundError("integration account", "(none)")
        account = self._account_for(event)
        updated = self.provider_for(account).update_event(event)
        updated.account_id = account.id
        self.events = cal.sort_by_start(
            [updated if e.id == event.id else e for e in self.events]
        )
        return updated

    def delete_event(self, event: CalendarEvent) -> None:
        if not event.account_id:
            raise NotFoundError("integration account", "(none)")
        account = self._account_for(event)
        self.provider_for(account).delete_event(event.id, event.calendar_id)
        self.events = [e for e in self.events if e.id != event.id]
