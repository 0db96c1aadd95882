"""Pure coaching domain logic - records kept per person being coached."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .records import new_id, parse_datetime, str_list, to_iso, utcnow


class GoalStatus(str, Enum):
    NOT_STARTED = "notStarted"
    IN_PROGRESS = "inProgress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TRAIT_TYPES = ("strength", "weakness")
DEFAULT_ICON = "mdi-account-heart"
DEFAULT_COLOR = "primary"


@dataclass
class HistoryEntry:
    """One logged change to a trait or goal."""

    date: datetime
    notes: str = ""
    intensity: int | None = None
    status: str | None = None
    progression: int | None = None

    def to_dict(self) -> dict:
        data = {"date": to_iso(self.date), "notes": self.notes}
        for key in ("intensity", "status", "progression"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryEntry":
        return cls(
            date=parse_datetime(data.get("date")) or utcnow(),
            notes=data.get("notes", "") or "",
            intensity=data.get("intensity"),
            status=data.get("status"),
            progression=data.get("progression"),
        )


@dataclass
class Trait:
    """A strength or a weakness, rated by intensity."""

    id: str
    type: str
    description: str
    intensity: int = 1
    notes: str = ""
    history_log: list[HistoryEntry] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "description": self.description,
            "intensity": self.intensity,
            "notes": self.notes,
            "historyLog": [h.to_dict() for h in self.history_log],
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict, default_type: str = "strength") -> "Trait":
        return cls(
            id=data.get("id") or new_id(),
            type=data.get("type") or default_type,
            description=data.get("description", "") or "",
            intensity=data.get("intensity") or 1,
            notes=data.get("notes", "") or "",
            history_log=[HistoryEntry.from_dict(h) for h in data.get("historyLog") or []],
            created_at=parse_datetime(data.get("createdAt")) or utcnow(),
            updated_at=parse_datetime(data.get("updatedAt")) or utcnow(),
        )


@dataclass
class Goal:
    id: str
    title: str
    description: str = ""
    status: str = GoalStatus.NOT_STARTED.value
    progression: int = 0
    target_date: datetime | None = None
    completed_date: datetime | None = None
    history_log: list[HistoryEntry] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "progression": self.progression,
            "targetDate": to_iso(self.target_date),
            "completedDate": to_iso(self.completed_date),
            "historyLog": [h.to_dict() for h in self.history_log],
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Goal":
        return cls(
            id=data.get("id") or new_id(),
            title=data.get("title", ""),
            description=data.get("description", "") or "",
            status=data.get("status") or GoalStatus.NOT_STARTED.value,
            progression=data.get("progression") or 0,
            target_date=parse_datetime(data.get("targetDate")),
            completed_date=parse_datetime(data.get("completedDate")),
            history_log=[HistoryEntry.from_dict(h) for h in data.get("historyLog") or []],
            created_at=parse_datetime(data.get("createdAt")) or utcnow(),
            updated_at=parse_datetime(data.get("updatedAt")) or utcnow(),
        )


@dataclass
class TimelineEntry:
    id: str
    date: datetime
    notes: str = ""
    related_goals: list[str] = field(default_factory=list)
    related_traits: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": to_iso(self.date),
            "notes": self.notes,
            "relatedGoals": list(self.related_goals),
            "relatedStrengthsWeaknesses": list(self.related_traits),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TimelineEntry":
        return cls(
            id=data.get("id") or new_id(),
            date=parse_datetime(data.get("date")) or utcnow(),
            notes=data.get("notes", "") or "",
            related_goals=str_list(data.get("relatedGoals")),
            related_traits=str_list(data.get("relatedStrengthsWeaknesses")),
            created_at=parse_datetime(data.get("createdAt")) or utcnow(),
            updated_at=parse_datetime(data.get("updatedAt")) or utcnow(),
        )


@dataclass
class CoachingRecord:
    id: str
    user_id: str
    person_id: str
    title: str
    notes: str = ""
    icon: str = DEFAULT_ICON
    color: str = DEFAULT_COLOR
    strengths: list[Trait] = field(default_factory=list)
    weaknesses: list[Trait] = field(default_factory=list)
    goals: list[Goal] = field(default_factory=list)
    timeline: list[TimelineEntry] = field(default_factory=list)
    related_tasks: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "personId": self.person_id,
            "title": self.title,
            "notes": self.notes,
            "icon": self.icon,
            "color": self.color,
            "strengths": [t.to_dict() for t in self.strengths],
            "weaknesses": [t.to_dict() for t in self.weaknesses],
            "goals": [g.to_dict() for g in self.goals],
            "timeline": [e.to_dict() for e in self.timeline],
            "relatedTasks": list(self.related_tasks),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CoachingRecord":
        return cls(
            id=data["id"],
            user_id=data.get("userId", ""),
            person_id=data.get("personId", ""),
            title=data.get("title", ""),
            notes=data.get("notes", "") or "",
            icon=data.get("icon") or DEFAULT_ICON,
            color=data.get("color") or DEFAULT_COLOR,
            strengths=[Trait.from_dict(t, "strength") for t in data.get("strengths") or []],
            weaknesses=[Trait.from_dict(t, "weakness") for t in data.get("weaknesses") or []],
            goals=[Goal.from_dict(g) for g in data.get("goals") or []],
            timeline=[TimelineEntry.from_dict(e) for e in data.get("timeline") or []],
            related_tasks=str_list(data.get("relatedTasks")),
            created_at=parse_datetime(data.get("createdAt")) or utcnow(),
            updated_at=parse_datetime(data.get("updatedAt")) or utcnow(),
        )

    def traits(self, trait_type: str) -> list[Trait]:
        return self.strengths if trait_type == "strength" else self.weaknesses


def filter_by_person(records: list[CoachingRecord], person_id: str) -> list[CoachingRecord]:
    return [r for r in records if r.person_id == person_id]


def sort_by_updated(records: list[CoachingRecord]) -> list[CoachingRecord]:
    """Most recently updated first. Pure function - no I/O."""
    return sorted(records, key=lambda r: r.updated_at, reverse=True)


def open_goals(record: CoachingRecord) -> list[Goal]:
    """Goals that are neither completed nor cancelled."""
    closed = (GoalStatus.COMPLETED.value, GoalStatus.CANCELLED.value)
    return [g for g in record.goals if g.status not in closed]


def sorted_timeline(record: CoachingRecord) -> list[TimelineEntry]:
    return sorted(record.timeline, key=lambda e: e.date, reverse=True)
