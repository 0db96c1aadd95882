"""Tests for the calendar and mail stores that aggregate connected accounts."""

from datetime import date, datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from organizer.adapters.file_store import FileDocumentStore
from organizer.config import Config
from organizer.core.calendar import CalendarEvent
from organizer.core.mail import Email, EmailAddress
from organizer.errors import NotFoundError
from organizer.stores import AccountStore, CalendarStore, MailStore


def at(day, hour):
    return datetime(2025, 3, day, hour, tzinfo=timezone.utc)


def make_event(id, start, account_id=""):
    return CalendarEvent(id=id, title=id, start=start, end=start + timedelta(hours=1), account_id=account_id)


def make_email(id, when, folder="inbox", account_id="", read=False):
    return Email(
        id=id,
        subject=id,
        sender=EmailAddress("Bob", "bob@example.com"),
        to=[],
        body="",
        date=when,
        read=read,
        folder=folder,
        account_id=account_id,
    )


@pytest.fixture
def accounts(tmp_path):
    return AccountStore(FileDocumentStore(tmp_path), "u1")


@pytest.fixture
def providers():
    """Provider mocks keyed by account email; the factory looks them up."""
    return {}


@pytest.fixture
def factory(providers):
    def build(account, config, refresher):
        provider = providers[account.email]
        provider.account = account
        return provider

    return MagicMock(side_effect=build)


def make_provider(**methods):
    provider = MagicMock()
    provider.is_authenticated.return_value = True
    for name, value in methods.items():
        getattr(provider, name).return_value = value
    return provider


class TestCalendarStore:
    def test_fetch_merges_and_sorts(self, accounts, providers, factory):
        work = accounts.add("google", "work@example.com", connected=True)
        home = accounts.add("office365", "home@example.com", connected=True)
        accounts.add("google", "off@example.com", connected=False)
        providers["work@example.com"] = make_provider(fetch_events=[make_event("b", at(10, 14))])
        providers["home@example.com"] = make_provider(fetch_events=[make_event("a", at(10, 9))])

        store = CalendarStore(accounts, Config(), provider_factory=factory)
        events = store.fetch_events(date(2025, 3, 10), date(2025, 3, 10))

        assert [e.id for e in events] == ["a", "b"]
        assert [e.account_id for e in events] == [home.id, work.id]
        query = providers["work@example.com"].fetch_events.call_args.args[0]
        assert query.start == at(10, 0)
        assert query.end == at(11, 0)
        assert factory.call_count == 2

    def test_failing_account_is_skipped(self, accounts, providers, factory):
        accounts.add("google", "bad@example.com", connected=True)
        accounts.add("google", "good@example.com", connected=True)
        providers["bad@example.com"] = make_provider()
        providers["bad@example.com"].fetch_events.side_effect = RuntimeError("boom")
        providers["good@example.com"] = make_provider(fetch_events=[make_event("a", at(10, 9))])

        store = CalendarStore(accounts, Config(), provider_factory=factory)
        assert [e.id for e in store.fetch_events(date(2025, 3, 10), date(2025, 3, 10))] == ["a"]

    def test_unauthenticated_account_is_skipped(self, accounts, providers, factory):
        accounts.add("google", "stale@example.com", connected=True)
        provider = make_provider(fetch_events=[make_event("a", at(10, 9))])
        provider.is_authenticated.return_value = False
        provider.authenticate.return_value = False
        providers["stale@example.com"] = provider

        store = CalendarStore(accounts, Config(), provider_factory=factory)
        assert store.fetch_events(date(2025, 3, 10), date(2025, 3, 10)) == []
        provider.fetch_events.assert_not_called()

    def test_refresh_account_replaces_only_that_account(self, accounts, providers, factory):
        work = accounts.add("google", "work@example.com", connected=True)
        store = CalendarStore(accounts, Config(), provider_factory=factory)
        store.events = [make_event("old", at(10, 9), work.id), make_event("other", at(10, 8), "acct-x")]
        provider = make_provider(fetch_events=[make_event("new", at(10, 10))])

        store.refresh_account(work, provider, date(2025, 3, 1), date(2025, 3, 31))

        assert [e.id for e in store.events] == ["other", "new"]
        assert [e.id for e in store.events_for_day(date(2025, 3, 10))] == ["other", "new"]
        assert store.events_for_range(date(2025, 3, 11), date(2025, 3, 12)) == []

    def test_create_event_defaults_to_first_connected_account(self, accounts, providers, factory):
        work = accounts.add("google", "work@example.com", connected=True)
        created = make_event("e1", at(12, 9))
        providers["work@example.com"] = make_provider(create_event=created)

        store = CalendarStore(accounts, Config(), provider_factory=factory)
        result = store.create_event(make_event("", at(12, 9)))

        assert result.account_id == work.id
        assert store.events == [created]

    def test_create_event_without_accounts(self, accounts, factory):
        store = CalendarStore(accounts, Config(), provider_factory=factory)
        with pytest.raises(NotFoundError):
            store.create_event(make_event("", at(12, 9)))

    def test_update_and_delete_need_account(self, accounts, providers, factory):
        work = accounts.add("google", "work@example.com", connected=True)
        providers["work@example.com"] = make_provider()
        store = CalendarStore(accounts, Config(), provider_factory=factory)

        with pytest.raises(NotFoundError):
            store.update_event(make_event("e1", at(12, 9)))
        with pytest.raises(NotFoundError):
            store.delete_event(make_event("e1", at(12, 9), "unknown"))

        store.events = [make_event("e1", at(12, 9), work.id)]
        store.delete_event(store.events[0])
        providers["work@example.com"].delete_event.assert_called_once_with("e1", "")
        assert store.events == []

    def test_update_event_replaces_cached_copy(self, accounts, providers, factory):
        work = accounts.add("google", "work@example.com", connected=True)
        moved = make_event("e1", at(13, 9))
        providers["work@example.com"] = make_provider(update_event=moved)
        store = CalendarStore(accounts, Config(), provider_factory=factory)
        store.events = [make_event("e1", at(12, 9), work.id)]

        store.update_event(store.events[0])
        assert store.events == [moved]
        assert moved.account_id == work.id


class TestMailStore:
    def test_fetch_sets_folder_and_sorts_newest_first(self, accounts, providers, factory):
        work = accounts.add("google", "work@example.com", connected=True)
        providers["work@example.com"] = make_provider(
            fetch_emails=[make_email("old", at(1, 9)), make_email("new", at(2, 9))]
        )
        store = MailStore(accounts, Config(), provider_factory=factory)

        emails = store.fetch_emails("sent", max_results=10)

        assert [e.id for e in emails] == ["new", "old"]
        assert {e.folder for e in emails} == {"sent"}
        assert {e.account_id for e in emails} == {work.id}
        providers["work@example.com"].fetch_emails.assert_called_once_with("sent", 10)

    def test_fetch_keeps_other_folders(self, accounts, providers, factory):
        accounts.add("google", "work@example.com", connected=True)
        providers["work@example.com"] = make_provider(fetch_emails=[make_email("i2", at(3, 9))])
        store = MailStore(accounts, Config(), provider_factory=factory)
        store.emails = [make_email("s1", at(1, 9), "sent"), make_email("i1", at(2, 9))]

        store.fetch_emails("inbox")
        assert sorted(e.id for e in store.emails) == ["i2", "s1"]
        assert store.folder_counts()["inbox"] == 1

    def test_mark_read(self, accounts, providers, factory):
        work = accounts.add("google", "work@example.com", connected=True)
        providers["work@example.com"] = make_provider()
        store = MailStore(accounts, Config(), provider_factory=factory)
        store.emails = [make_email("m1", at(1, 9), account_id=work.id)]

        assert store.mark_read("m1").read is True
        providers["work@example.com"].mark_read.assert_called_once_with("m1", True)

    def test_mark_read_unknown_email(self, accounts, factory):
        store = MailStore(accounts, Config(), provider_factory=factory)
        with pytest.raises(NotFoundError, match="Email not found"):
            store.mark_read("nope")

    def test_delete_restores_folder_on_failure(self, accounts, providers, factory):
        work = accounts.add("google", "work@example.com", connected=True)
        providers["work@example.com"] = make_provider()
        providers["work@example.com"].delete_email.side_effect = RuntimeError("offline")
        store = MailStore(accounts, Config(), provider_factory=factory)
        store.emails = [make_email("m1", at(1, 9), account_id=work.id)]

        with pytest.raises(RuntimeError):
            store.delete_email("m1")
        assert store.emails[0].folder == "inbox"

    def test_delete_moves_to_trash(self, accounts, providers, factory):
        work = accounts.add("google", "work@example.com", connected=True)
        providers["work@example.com"] = make_provider()
        store = MailStore(accounts, Config(), provider_factory=factory)
        store.emails = [make_email("m1", at(1, 9), account_id=work.id)]

        assert store.delete_email("m1").folder == "trash"

    def test_send_fills_sender_from_account(self, accounts, providers, factory):
        work = accounts.add("google", "work@example.com", name="Work", connected=True)
        providers["work@example.com"] = make_provider()
        store = MailStore(accounts, Config(), provider_factory=factory)
        email = make_email("", at(1, 9))
        email.sender = EmailAddress("", "")

        store.send_email(work.id, email)

        sent = providers["work@example.com"].send_email.call_args.args[0]
        assert sent.sender == EmailAddress("Work", "work@example.com")
