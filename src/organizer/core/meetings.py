"""Pure meeting domain logic - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from .records import parse_datetime, str_list, to_iso, utcnow


@dataclass
class Meeting:
    """A meeting owned by a user."""

    id: str
    user_id: str
    title: str
    start_time: datetime
    end_time: datetime
    description: str = ""
    location: str = ""
    participants: list[str] = field(default_factory=list)
    summary: str = ""
    tasks: list[str] = field(default_factory=list)
    related_projects: list[str] = field(default_factory=list)
    category: str = ""
    notes: str = ""
    tags: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() / 60)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "startTime": to_iso(self.start_time),
            "endTime": to_iso(self.end_time),
            "description": self.description,
            "location": self.location,
            "participants": list(self.participants),
            "summary": self.summary,
            "tasks": list(self.tasks),
            "relatedProjects": list(self.related_projects),
            "category": self.category,
            "notes": self.notes,
            "tags": list(self.tags),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Meeting":
        start = parse_datetime(data.get("startTime")) or utcnow()
        return cls(
            id=data["id"],
            user_id=data.get("userId", ""),
            title=data.get("title", ""),
            start_time=start,
            end_time=parse_datetime(data.get("endTime")) or start + timedelta(hours=1),
            description=data.get("description", "") or "",
            location=data.get("location", "") or "",
            participants=str_list(data.get("participants")),
            summary=data.get("summary", "") or "",
            tasks=str_list(data.get("tasks")),
            related_projects=str_list(data.get("relatedProjects")),
            category=data.get("category", "") or "",
            notes=data.get("notes", "") or "",
            tags=str_list(data.get("tags")),
            created_at=parse_datetime(data.get("createdAt")) or utcnow(),
            updated_at=parse_datetime(data.get("updatedAt")) or utcnow(),
        )


@dataclass
class MeetingCategory:
    id: str
    user_id: str
    name: str
    color: str = ""
    description: str = ""
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "color": self.color,
            "description": self.description,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MeetingCategory":
        return cls(
            id=data["id"],
            user_id=data.get("userId", ""),
            name=data.get("name", ""),
            color=data.get("color", "") or "",
            description=data.get("description", "") or "",
            created_at=parse_datetime(data.get("createdAt")) or utcnow(),
            updated_at=parse_datetime(data.get("updatedAt")) or utcnow(),
        )


def upcoming(meetings: list[Meeting], now: datetime | None = None) -> list[Meeting]:
    """Meetings starting after now, soonest first."""
    now = now or utcnow()
    return sorted((m for m in meetings if m.start_time > now), key=lambda m: m.start_time)


def past(meetings: list[Meeting], now: datetime | None = None) -> list[Meeting]:
    """Meetings that started before now, most recent first."""
    now = now or utcnow()
    return sorted(
        (m for m in meetings if m.start_time < now),
        key=lambda m: m.start_time,
        reverse=True,
    )


def on_day(meetings: list[Meeting], target_date: date) -> list[Meeting]:
    return sorted(
        (m for m in meetings if m.start_time.date() == target_date),
        key=lambda m: m.start_time,
    )


def filter_by_category(meetings: list[Meeting], category: str) -> list[Meeting]:
    return [m for m in meetings if m.category == category]


def filter_by_participant(meetings: list[Meeting], person_id: str) -> list[Meeting]:
    return [m for m in meetings if person_id in m.participants]


def filter_by_project(meetings: list[Meeting], project_id: str) -> list[Meeting]:
    return [m for m in meetings if project_id in m.related_projects]


def categories(meetings: list[Meeting]) -> list[str]:
    """Distinct non-empty categories in first-seen order."""
    seen: dict[str, None] = {}
    for meeting in meetings:
        if meeting.category:
            seen.setdefault(meeting.category, None)
    return list(seen)
