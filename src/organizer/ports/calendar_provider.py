"""Calendar provider interface."""

from typing import Protocol

from organizer.core.calendar import Calendar, CalendarEvent, EventQuery


class CalendarProvider(Protocol):
    """Interface for reading and writing events on an external calendar."""

    def is_authenticated(self) -> bool:
        ...

    def authenticate(self) -> bool:
        """Make sure the account holds a usable token. Returns success."""
        ...

    def fetch_events(self, query: EventQuery) -> list[CalendarEvent]:
        ...

    def create_event(self, event: CalendarEvent) -> CalendarEvent:
        ...

    def update_event(self, event: CalendarEvent) -> CalendarEvent:
        ...

    def delete_event(self, event_id: str, calendar_id: str = "") -> None:
        ...

    def get_calendars(self) -> list[Calendar]:
        ...
