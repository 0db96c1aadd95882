"""Google Calendar API adapter."""

import logging
from datetime import date, datetime, timedelta, timezone

from organizer.core.calendar import Attendee, Calendar, CalendarEvent, EventQuery

from .google_base import GoogleProvider

logger = logging.getLogger(__name__)


def _person(raw: dict | None) -> Attendee | None:
    if not raw or not raw.get("email"):
        return None
    return Attendee(name=raw.get("displayName") or raw["email"], email=raw["email"])


def _parse_event(item: dict, calendar_id: str, account_id: str) -> CalendarEvent | None:
    start_raw = item.get("start", {})
    end_raw = item.get("end", {})

    if "date" in start_raw:
        start_dt = datetime.fromisoformat(start_raw["date"]).replace(tzinfo=timezone.utc)
        # Google's all-day end date is exclusive
        end_dt = (
            datetime.fromisoformat(end_raw["date"]).replace(tzinfo=timezone.utc) - timedelta(days=1)
            if "date" in end_raw
            else start_dt
        )
        all_day = True
    elif "dateTime" in start_raw:
        start_dt = datetime.fromisoformat(start_raw["dateTime"].replace("Z", "+00:00"))
        end_dt = (
            datetime.fromisoformat(end_raw["dateTime"].replace("Z", "+00:00"))
            if "dateTime" in end_raw
            else start_dt
        )
        all_day = False
    else:
        return None

    return CalendarEvent(
        id=item.get("id", ""),
        title=item.get("summary") or "(No title)",
        start=start_dt,
        end=end_dt,
        all_day=all_day,
        description=item.get("description", ""),
        location=item.get("location", ""),
        organizer=_person(item.get("organizer")),
        attendees=[a for a in (_person(raw) for raw in item.get("attendees", [])) if a],
        calendar_id=calendar_id,
        account_id=account_id,
        recurrence=", ".join(item.get("recurrence", [])),
        type=item.get("eventType", ""),
    )


def _event_body(event: CalendarEvent) -> dict:
    body = {
        "summary": event.title,
        "description": event.description or "",
        "location": event.location or "",
    }
    if event.all_day:
        body["start"] = {"date": event.start.date().isoformat()}
        body["end"] = {"date": (event.end.date() + timedelta(days=1)).isoformat()}
    else:
        body["start"] = {"dateTime": event.start.isoformat()}
        body["end"] = {"dateTime": event.end.isoformat()}
    if event.attendees:
        body["attendees"] = [
            {"email": a.email, "displayName": a.name} for a in event.attendees
        ]
    return body


class GoogleCalendarAdapter(GoogleProvider):
    """
    Google Calendar v3 adapter.

    Implements CalendarProvider protocol.
    """

    API_NAME = "calendar"
    API_VERSION = "v3"

    def fetch_events(self, query: EventQuery | None = None) -> list[CalendarEvent]:
        query = query or EventQuery()
        calendar_id = query.calendar_id or "primary"
        start = query.start or datetime.combine(date.today(), datetime.min.time(), tzinfo=timezone.utc)
        end = query.end or start + timedelta(days=31)

        events = []
        page_token = None
        while True:
            result = self._execute(
                lambda service: service.events().list(
                    calendarId=calendar_id,
                    timeMin=start.isoformat(),
                    timeMax=end.isoformat(),
                    singleEvents=True,
                    orderBy="startTime",
                    pageToken=page_token,
                )
            )
            for item in result.get("items", []):
                event = _parse_event(item, calendar_id, self.account.id)
                if event:
                    events.append(event)
            page_token = result.get("nextPageToken")
            if not page_token:
                break

        logger.debug(f"Fetched {len(events)} events for {self.account.email}")
        return events

    def create_event(self, event: CalendarEvent) -> CalendarEvent:
        calendar_id = event.calendar_id or "primary"
        item = self._execute(
            lambda service: service.events().insert(calendarId=calendar_id, body=_event_body(event))
        )
        return _parse_event(item, calendar_id, self.account.id) or event

    def update_event(self, event: CalendarEvent) -> CalendarEvent:
        calendar_id = event.calendar_id or "primary"
        item = self._execute(
            lambda service: service.events().patch(
                calendarId=calendar_id, eventId=event.id, body=_event_body(event)
            )
        )
        return _parse_event(item, calendar_id, self.account.id) or event

    def delete_event(self, event_id: str, calendar_id: str = "") -> None:
        self._execute(
            lambda service: service.events().delete(
                calendarId=calendar_id or "primary", eventId=event_id
            )
        )

    def get_calendars(self) -> list[Calendar]:
        result = self._execute(lambda service: service.calendarList().list())
        return [
            Calendar(
                id=entry["id"],
                name=entry.get("summary", ""),
                primary=bool(entry.get("primary", False)),
                color=entry.get("backgroundColor", ""),
                account_id=self.account.id,
            )
            for entry in result.get("items", [])
        ]
