"""Tests for core calendar logic."""

from datetime import date, datetime, timedelta, timezone

import pytest

from organizer.core.calendar import (
    Attendee,
    CalendarEvent,
    events_for_day,
    events_for_range,
    month_range,
    sort_by_start,
    week_start,
)

UTC = timezone.utc
EST = timezone(timedelta(hours=-5))


def make_event(title, start, end=None, all_day=False):
    return CalendarEvent(
        id=title.lower(),
        title=title,
        start=start,
        end=end or start + timedelta(hours=1),
        all_day=all_day,
    )


@pytest.fixture
def day():
    return date(2025, 1, 15)


class TestCalendarEvent:
    def test_format_time_timed(self):
        event = make_event("Standup", datetime(2025, 1, 15, 10, 0, tzinfo=UTC),
                           datetime(2025, 1, 15, 10, 30, tzinfo=UTC))
        assert event.format_time() == "10:00-10:30"
        assert event.duration_minutes() == 30

    def test_format_time_all_day(self):
        event = make_event("Holiday", datetime(2025, 1, 15, tzinfo=UTC), all_day=True)
        assert event.format_time() == "All day"

    def test_document_keys(self):
        event = make_event("Review", datetime(2025, 1, 15, 9, 0, tzinfo=UTC))
        event.organizer = Attendee("Ada", "ada@example.com")
        event.account_id = "acct-1"
        doc = event.to_dict()
        assert doc["startTime"] == "2025-01-15T09:00:00+00:00"
        assert doc["allDay"] is False
        assert doc["accountId"] == "acct-1"
        assert doc["organizer"] == {"name": "Ada", "email": "ada@example.com"}

    def test_from_dict_defaults_end_to_start(self):
        event = CalendarEvent.from_dict({"id": "x", "title": "T", "startTime": "2025-01-15T09:00:00Z"})
        assert event.end == event.start
        assert event.start.tzinfo is not None
        assert event.organizer is None


class TestSortByStart:
    def test_orders_by_start(self):
        late = make_event("Late", datetime(2025, 1, 15, 15, tzinfo=UTC))
        early = make_event("Early", datetime(2025, 1, 15, 8, tzinfo=UTC))
        assert [e.title for e in sort_by_start([late, early])] == ["Early", "Late"]


class TestEventsForDay:
    def test_timed_event_on_day(self, day):
        events = [make_event("Standup", datetime(2025, 1, 15, 10, tzinfo=UTC))]
        assert len(events_for_day(events, day)) == 1

    def test_timed_event_other_day_excluded(self, day):
        events = [make_event("Tomorrow", datetime(2025, 1, 16, 10, tzinfo=UTC))]
        assert events_for_day(events, day) == []

    def test_all_day_matches_date(self, day):
        events = [make_event("Holiday", datetime(2025, 1, 15, tzinfo=UTC), all_day=True)]
        assert len(events_for_day(events, day)) == 1

    def test_uses_event_timezone(self, day):
        # 23:00 EST on the 15th is the 16th in UTC
        events = [make_event("Late call", datetime(2025, 1, 15, 23, tzinfo=EST))]
        assert len(events_for_day(events, day)) == 1


class TestEventsForRange:
    def test_starts_inside(self):
        events = [make_event("A", datetime(2025, 1, 14, 9, tzinfo=UTC))]
        assert len(events_for_range(events, date(2025, 1, 13), date(2025, 1, 19))) == 1

    def test_ends_inside(self):
        events = [make_event("Offsite", datetime(2025, 1, 10, 9, tzinfo=UTC),
                             datetime(2025, 1, 13, 17, tzinfo=UTC))]
        assert len(events_for_range(events, date(2025, 1, 13), date(2025, 1, 19))) == 1

    def test_spans_range(self):
        events = [make_event("Conference", datetime(2025, 1, 1, tzinfo=UTC),
                             datetime(2025, 1, 31, tzinfo=UTC))]
        assert len(events_for_range(events, date(2025, 1, 13), date(2025, 1, 19))) == 1

    def test_outside_excluded(self):
        events = [make_event("Old", datetime(2025, 1, 2, 9, tzinfo=UTC))]
        assert events_for_range(events, date(2025, 1, 13), date(2025, 1, 19)) == []


class TestMonthRange:
    def test_regular_month(self):
        assert month_range(date(2025, 1, 15)) == (date(2025, 1, 1), date(2025, 1, 31))

    def test_leap_february(self):
        assert month_range(date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 2, 29))


class TestWeekStart:
    def test_monday_start(self):
        # 2025-01-15 is a Wednesday
        assert week_start(date(2025, 1, 15), starts_on=1) == date(2025, 1, 13)

    def test_sunday_start(self):
        assert week_start(date(2025, 1, 15), starts_on=0) == date(2025, 1, 12)

    def test_start_day_itself(self):
        assert week_start(date(2025, 1, 13), starts_on=1) == date(2025, 1, 13)
        assert week_start(date(2025, 1, 12), starts_on=0) == date(2025, 1, 12)
