"""Pure task domain logic - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .records import new_id, parse_datetime, str_list, to_iso, utcnow


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "inProgress"
    COMPLETED = "completed"
    DELEGATED = "delegated"
    CANCELLED = "cancelled"


class TaskType(str, Enum):
    TASK = "task"
    PERSONAL = "personal"
    WORK = "work"
    DELEGATED = "delegated"
    RECURRING = "recurring"
    ROUTINE = "routine"
    DELEGATION = "delegation"
    FOLLOW_UP = "followUp"


PRIORITIES = ("low", "medium", "high", "urgent")
OPEN_STATUSES = (TaskStatus.TODO.value, TaskStatus.IN_PROGRESS.value)


@dataclass
class Comment:
    id: str
    user_id: str
    text: str
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "text": self.text,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Comment":
        return cls(
            id=data.get("id") or new_id(),
            user_id=data.get("userId", ""),
            # Older comments used "content"
            text=data.get("text") or data.get("content", ""),
            created_at=parse_datetime(data.get("createdAt")) or utcnow(),
            updated_at=parse_datetime(data.get("updatedAt")),
        )


@dataclass
class Recurrence:
    frequency: str
    interval: int = 1
    end_date: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "frequency": self.frequency,
            "interval": self.interval,
            "endDate": to_iso(self.end_date),
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "Recurrence | None":
        if not data:
            return None
        return cls(
            frequency=data.get("frequency", "weekly"),
            interval=int(data.get("interval", 1)),
            end_date=parse_datetime(data.get("endDate")),
        )


@dataclass
class Task:
    """A task owned by a user."""

    id: str
    user_id: str
    title: str
    description: str = ""
    status: str = TaskStatus.TODO.value
    priority: str = "medium"
    type: str = TaskType.TASK.value
    due_date: datetime | None = None
    completed_at: datetime | None = None
    assigned_to: str = ""
    delegated_to: str = ""
    project_id: str = ""
    parent_task: str = ""
    subtasks: list[str] = field(default_factory=list)
    related_projects: list[str] = field(default_factory=list)
    related_meetings: list[str] = field(default_factory=list)
    related_behaviors: list[str] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
    recurrence: Recurrence | None = None
    notes: str = ""
    tags: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "type": self.type,
            "dueDate": to_iso(self.due_date),
            "completedAt": to_iso(self.completed_at),
            "assignedTo": self.assigned_to,
            "delegatedTo": self.delegated_to,
            "projectId": self.project_id,
            "parentTask": self.parent_task,
            "subtasks": list(self.subtasks),
            "relatedProjects": list(self.related_projects),
            "relatedMeetings": list(self.related_meetings),
            "relatedBehaviors": list(self.related_behaviors),
            "comments": [c.to_dict() for c in self.comments],
            "recurrence": self.recurrence.to_dict() if self.recurrence else None,
            "notes": self.notes,
            "tags": list(self.tags),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        return cls(
            id=data["id"],
            user_id=data.get("userId", ""),
            title=data.get("title", ""),
            description=data.get("description", "") or "",
            status=data.get("status") or TaskStatus.TODO.value,
            priority=data.get("priority") or "medium",
            type=data.get("type") or TaskType.TASK.value,
            due_date=parse_datetime(data.get("dueDate")),
            completed_at=parse_datetime(data.get("completedAt") or data.get("completedDate")),
            # assignee/parent are legacy aliases
            assigned_to=data.get("assignedTo") or data.get("assignee") or "",
            delegated_to=data.get("delegatedTo") or "",
            project_id=data.get("projectId") or "",
            parent_task=data.get("parentTask") or data.get("parent") or "",
            subtasks=str_list(data.get("subtasks")),
            related_projects=str_list(data.get("relatedProjects")),
            related_meetings=str_list(data.get("relatedMeetings")),
            related_behaviors=str_list(data.get("relatedBehaviors")),
            comments=[Comment.from_dict(c) for c in data.get("comments") or []],
            recurrence=Recurrence.from_dict(data.get("recurrence")),
            notes=data.get("notes", "") or "",
            tags=str_list(data.get("tags")),
            created_at=parse_datetime(data.get("createdAt")) or utcnow(),
            updated_at=parse_datetime(data.get("updatedAt")) or utcnow(),
        )


def sort_by_due_date(tasks: list[Task]) -> list[Task]:
    """Sort by due date ascending, undated tasks last."""
    dated = sorted((t for t in tasks if t.due_date), key=lambda t: t.due_date)
    return dated + [t for t in tasks if not t.due_date]


def filter_by_status(tasks: list[Task], status: str) -> list[Task]:
    return [t for t in tasks if t.status == status]


def filter_by_type(tasks: list[Task], task_type: str) -> list[Task]:
    return [t for t in tasks if t.type == task_type]


def filter_by_tag(tasks: list[Task], tag: str) -> list[Task]:
    return [t for t in tasks if tag in t.tags]


def filter_by_assignee(tasks: list[Task], person_id: str) -> list[Task]:
    return [t for t in tasks if t.assigned_to == person_id]


def filter_by_project(tasks: list[Task], project_id: str) -> list[Task]:
    return [t for t in tasks if project_id in t.related_projects or t.project_id == project_id]


def filter_by_meeting(tasks: list[Task], meeting_id: str) -> list[Task]:
    return [t for t in tasks if meeting_id in t.related_meetings]


def filter_by_behavior(tasks: list[Task], behavior_id: str) -> list[Task]:
    return [t for t in tasks if behavior_id in t.related_behaviors]


def filter_by_parent(tasks: list[Task], parent_id: str) -> list[Task]:
    return [t for t in tasks if t.parent_task == parent_id]


def upcoming(tasks: list[Task], now: datetime | None = None) -> list[Task]:
    """
    Open tasks due in the future, soonest first.

    Pure function - no I/O.
    """
    now = now or utcnow()
    return sort_by_due_date([t for t in tasks if t.is_open and t.due_date and t.due_date > now])


def overdue(tasks: list[Task], now: datetime | None = None) -> list[Task]:
    """Open tasks whose due date has passed, oldest first."""
    now = now or utcnow()
    return sort_by_due_date([t for t in tasks if t.is_open and t.due_date and t.due_date < now])


def all_tags(tasks: list[Task]) -> list[str]:
    """Distinct tags in first-seen order."""
    seen: dict[str, None] = {}
    for task in tasks:
        for tag in task.tags:
            seen.setdefault(tag, None)
    return list(seen)


def routine_tasks(tasks: list[Task]) -> list[Task]:
    return filter_by_type(tasks, TaskType.ROUTINE.value)


def delegation_tasks(tasks: list[Task]) -> list[Task]:
    return filter_by_type(tasks, TaskType.DELEGATION.value)


def follow_up_tasks(tasks: list[Task]) -> list[Task]:
    return filter_by_type(tasks, TaskType.FOLLOW_UP.value)
