"""Pure project domain logic - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from organizer.errors import ValidationError

from .records import parse_datetime, str_list, to_iso, utcnow


class ProjectStatus(str, Enum):
    NOT_STARTED = "notStarted"
    PLANNING = "planning"
    ACTIVE = "active"
    IN_PROGRESS = "inProgress"
    ON_HOLD = "onHold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


PRIORITY_VALUES = {"low": 1, "medium": 2, "high": 3, "urgent": 4}


@dataclass
class Project:
    """A project owned by a user."""

    id: str
    user_id: str
    title: str
    description: str = ""
    status: str = ProjectStatus.PLANNING.value
    priority: str = "medium"
    start_date: datetime | None = None
    due_date: datetime | None = None
    completed_date: datetime | None = None
    members: list[str] = field(default_factory=list)
    tasks: list[str] = field(default_factory=list)
    meetings: list[str] = field(default_factory=list)
    pages: list[str] = field(default_factory=list)
    progress: int = 0
    notes: str = ""
    tags: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "startDate": to_iso(self.start_date),
            "dueDate": to_iso(self.due_date),
            "completedDate": to_iso(self.completed_date),
            "members": list(self.members),
            "tasks": list(self.tasks),
            "meetings": list(self.meetings),
            "pages": list(self.pages),
            "progress": self.progress,
            "notes": self.notes,
            "tags": list(self.tags),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Project":
        return cls(
            id=data["id"],
            user_id=data.get("userId", ""),
            title=data.get("title", ""),
            description=data.get("description", "") or "",
            status=data.get("status") or ProjectStatus.PLANNING.value,
            priority=data.get("priority") or "medium",
            start_date=parse_datetime(data.get("startDate")),
            due_date=parse_datetime(data.get("dueDate")),
            completed_date=parse_datetime(data.get("completedDate")),
            # teamMembers is the legacy name for members
            members=str_list(data.get("members") or data.get("teamMembers")),
            tasks=str_list(data.get("tasks")),
            meetings=str_list(data.get("meetings")),
            pages=str_list(data.get("pages")),
            progress=int(data.get("progress") or 0),
            notes=data.get("notes", "") or "",
            tags=str_list(data.get("tags")),
            created_at=parse_datetime(data.get("createdAt")) or utcnow(),
            updated_at=parse_datetime(data.get("updatedAt")) or utcnow(),
        )


@dataclass
class ProjectPage:
    """A free-form page of notes attached to a project."""

    id: str
    user_id: str
    project_id: str
    title: str
    content: str = ""
    order: int = 0
    tags: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "projectId": self.project_id,
            "title": self.title,
            "content": self.content,
            "order": self.order,
            "tags": list(self.tags),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectPage":
        return cls(
            id=data["id"],
            user_id=data.get("userId", ""),
            project_id=data.get("projectId", ""),
            title=data.get("title", ""),
            content=data.get("content", "") or "",
            order=int(data.get("order") or 0),
            tags=str_list(data.get("tags")),
            created_at=parse_datetime(data.get("createdAt")) or utcnow(),
            updated_at=parse_datetime(data.get("updatedAt")) or utcnow(),
        )


def priority_value(priority: str | int) -> int:
    """Numeric rank of a priority (low=1 ... urgent=4, unknown=0)."""
    if isinstance(priority, int):
        return priority
    return PRIORITY_VALUES.get(priority, 0)


def validate_priority(priority: str) -> str:
    if priority not in PRIORITY_VALUES:
        raise ValidationError(f"Invalid priority: {priority}")
    return priority


def validate_progress(progress: int) -> int:
    """Progress must be between 0 and 100."""
    if progress < 0 or progress > 100:
        raise ValidationError("Progress must be between 0 and 100")
    return progress


def sort_by_priority(projects: list[Project]) -> list[Project]:
    """Sort ascending by priority rank (low first)."""
    return sorted(projects, key=lambda p: priority_value(p.priority))


def filter_by_status(projects: list[Project], status: str) -> list[Project]:
    return [p for p in projects if p.status == status]


def filter_by_tag(projects: list[Project], tag: str) -> list[Project]:
    return [p for p in projects if tag in p.tags]


def filter_by_member(projects: list[Project], person_id: str) -> list[Project]:
    return [p for p in projects if person_id in p.members]


def all_tags(projects: list[Project]) -> list[str]:
    seen: dict[str, None] = {}
    for project in projects:
        for tag in project.tags:
            seen.setdefault(tag, None)
    return list(seen)


def sort_pages(pages: list[ProjectPage]) -> list[ProjectPage]:
    return sorted(pages, key=lambda p: (p.order, p.created_at))
