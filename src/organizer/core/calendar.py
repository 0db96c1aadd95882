"""Pure calendar domain logic - no I/O dependencies."""

import calendar as _calendar
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta

from .records import parse_datetime, to_iso


@dataclass
class Attendee:
    name: str
    email: str

    def to_dict(self) -> dict:
        return {"name": self.name, "email": self.email}

    @classmethod
    def from_dict(cls, data: dict | None) -> "Attendee | None":
        if not data:
            return None
        return cls(name=data.get("name", ""), email=data.get("email", ""))


@dataclass
class CalendarEvent:
    """A calendar event fetched from a provider."""

    id: str
    title: str
    start: datetime
    end: datetime
    all_day: bool = False
    description: str = ""
    location: str = ""
    organizer: Attendee | None = None
    attendees: list[Attendee] = field(default_factory=list)
    calendar_id: str = ""
    account_id: str = ""
    recurrence: str = ""
    type: str = ""

    def format_time(self) -> str:
        """Format the event time for display."""
        if self.all_day:
            return "All day"
        return f"{self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')}"

    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() / 60)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "startTime": to_iso(self.start),
            "endTime": to_iso(self.end),
            "allDay": self.all_day,
            "description": self.description,
            "location": self.location,
            "organizer": self.organizer.to_dict() if self.organizer else None,
            "attendees": [a.to_dict() for a in self.attendees],
            "calendarId": self.calendar_id,
            "accountId": self.account_id,
            "recurrence": self.recurrence,
            "type": self.type,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CalendarEvent":
        start = parse_datetime(data.get("startTime"))
        return cls(
            id=data.get("id", ""),
            title=data.get("title", ""),
            start=start,
            end=parse_datetime(data.get("endTime")) or start,
            all_day=bool(data.get("allDay", False)),
            description=data.get("description", "") or "",
            location=data.get("location", "") or "",
            organizer=Attendee.from_dict(data.get("organizer")),
            attendees=[Attendee.from_dict(a) for a in data.get("attendees") or []],
            calendar_id=data.get("calendarId", "") or "",
            account_id=data.get("accountId", "") or "",
            recurrence=data.get("recurrence", "") or "",
            type=data.get("type", "") or "",
        )


@dataclass
class Calendar:
    id: str
    name: str
    primary: bool = False
    color: str = ""
    account_id: str = ""


@dataclass
class EventQuery:
    """Date range and calendar filter for provider fetches."""

    start: datetime | None = None
    end: datetime | None = None
    calendar_id: str = ""


def sort_by_start(events: list[CalendarEvent]) -> list[CalendarEvent]:
    return sorted(events, key=lambda e: e.start)


def events_for_day(events: list[CalendarEvent], target_date: date) -> list[CalendarEvent]:
    """
    Events on a given day.

    All-day events match on their date; timed events must start within the day.
    Pure function - no I/O.
    """
    result = []
    for event in events:
        if event.all_day:
            if event.start.date() == target_date:
                result.append(event)
            continue
        tz = event.start.tzinfo
        day_start = datetime.combine(target_date, time.min, tzinfo=tz)
        day_end = datetime.combine(target_date, time.max, tzinfo=tz)
        if day_start <= event.start <= day_end:
            result.append(event)
    return result


def events_for_range(
    events: list[CalendarEvent],
    start_date: date,
    end_date: date,
) -> list[CalendarEvent]:
    """
    Events overlapping an inclusive date range.

    Pure function - no I/O.
    """
    result = []
    for event in events:
        tz = event.start.tzinfo
        range_start = datetime.combine(start_date, time.min, tzinfo=tz)
        range_end = datetime.combine(end_date, time.max, tzinfo=tz)
        starts_inside = range_start <= event.start <= range_end
        ends_inside = range_start <= event.end <= range_end
        spans = event.start <= range_start and event.end >= range_end
        if starts_inside or ends_inside or spans:
            result.append(event)
    return result


def month_range(target_date: date) -> tuple[date, date]:
    """First and last day of the month containing target_date."""
    last_day = _calendar.monthrange(target_date.year, target_date.month)[1]
    return target_date.replace(day=1), target_date.replace(day=last_day)


def week_start(target_date: date, starts_on: int = 1) -> date:
    """
    First day of the week containing target_date.

    starts_on follows the JavaScript convention: 0 = Sunday, 1 = Monday.
    """
    # date.weekday(): Monday=0 ... Sunday=6; convert to Sunday=0
    js_weekday = (target_date.weekday() + 1) % 7
    offset = (js_weekday - starts_on) % 7
    return target_date - timedelta(days=offset)
