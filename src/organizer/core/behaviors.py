"""Pure behavior-tracking domain logic."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .records import new_id, parse_datetime, str_list, to_iso, utcnow


class BehaviorType(str, Enum):
    DO_WELL = "doWell"
    WANT_TO_DO_BETTER = "wantToDoBetter"
    NEED_TO_IMPROVE = "needToImprove"


@dataclass
class ActionPlan:
    """Steps toward changing a behavior, linked to tasks."""

    id: str
    description: str
    tasks: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"id": self.id, "description": self.description, "tasks": list(self.tasks)}

    @classmethod
    def from_dict(cls, data: dict) -> "ActionPlan":
        return cls(
            id=data.get("id") or new_id(),
            description=data.get("description", ""),
            tasks=str_list(data.get("tasks")),
        )


@dataclass
class Behavior:
    id: str
    user_id: str
    title: str
    type: str
    description: str = ""
    rationale: str = ""
    examples: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    action_plans: list[ActionPlan] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "type": self.type,
            "description": self.description,
            "rationale": self.rationale,
            "examples": list(self.examples),
            "categories": list(self.categories),
            "actionPlans": [p.to_dict() for p in self.action_plans],
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Behavior":
        return cls(
            id=data["id"],
            user_id=data.get("userId", ""),
            title=data.get("title", ""),
            type=data.get("type") or BehaviorType.DO_WELL.value,
            description=data.get("description", "") or "",
            rationale=data.get("rationale", "") or "",
            examples=str_list(data.get("examples")),
            categories=str_list(data.get("categories")),
            action_plans=[ActionPlan.from_dict(p) for p in data.get("actionPlans") or []],
            created_at=parse_datetime(data.get("createdAt")) or utcnow(),
            updated_at=parse_datetime(data.get("updatedAt")) or utcnow(),
        )


def filter_by_type(behaviors: list[Behavior], behavior_type: str) -> list[Behavior]:
    return [b for b in behaviors if b.type == behavior_type]
