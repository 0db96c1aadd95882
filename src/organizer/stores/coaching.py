"""Coaching store - records per coached person, their traits, goals and timeline."""

from datetime import datetime

from organizer.core.coaching import (
    TRAIT_TYPES,
    CoachingRecord,
    Goal,
    GoalStatus,
    HistoryEntry,
    TimelineEntry,
    Trait,
)
from organizer.core.records import new_id, utcnow
from organizer.errors import NotFoundError, ValidationError

from .base import EntityStore

GOAL_STATUSES = tuple(s.value for s in GoalStatus)


def _validate_scale(name: str, value: int, low: int, high: int) -> int:
    if not low <= value <= high:
        raise ValidationError(f"{name} must be between {low} and {high}")
    return value


class CoachingStore(EntityStore[CoachingRecord]):
    collection = "coaching"
    kind = "coaching record"
    record_type = CoachingRecord

    def add(self, person_id: str, title: str, **fields) -> CoachingRecord:
        return self.create(
            CoachingRecord(id="", user_id=self.user_id, person_id=person_id, title=title, **fields)
        )

    def list(self, filters=None, order_by=None, descending=False) -> "list[CoachingRecord]":
        """Records most recently updated first unless another order is requested."""
        if order_by is None:
            order_by, descending = "updatedAt", True
        return super().list(filters, order_by, descending)

    def for_person(self, person_id: str) -> "list[CoachingRecord]":
        return self.list([("personId", person_id)])

    def _touch(self, record: CoachingRecord) -> None:
        record.updated_at = utcnow()
        self._save(record)

    # Strengths and weaknesses

    def _find_trait(self, record: CoachingRecord, trait_id: str) -> Trait:
        for trait in record.strengths + record.weaknesses:
            if trait.id == trait_id:
                return trait
        raise NotFoundError("strength or weakness", trait_id)

    def add_trait(self, record_id: str, trait_type: str, description: str, intensity: int = 1, notes: str = "") -> Trait:
        if trait_type not in TRAIT_TYPES:
            raise ValidationError(f"Trait type must be one of {', '.join(TRAIT_TYPES)}: {trait_type}")
        record = self.get(record_id)
        trait = Trait(
            id=new_id(),
            type=trait_type,
            description=description,
            intensity=_validate_scale("Intensity", intensity, 1, 5),
            notes=notes,
        )
        record.traits(trait_type).append(trait)
        self._touch(record)
        return trait

    def rate_trait(self, record_id: str, trait_id: str, intensity: int, notes: str = "") -> Trait:
        """Change a trait's intensity and log the change."""
        record = self.get(record_id)
        trait = self._find_trait(record, trait_id)
        trait.intensity = _validate_scale("Intensity", intensity, 1, 5)
        trait.history_log.append(HistoryEntry(date=utcnow(), notes=notes, intensity=intensity))
        trait.updated_at = utcnow()
        self._touch(record)
        return trait

    def remove_trait(self, record_id: str, trait_id: str) -> None:
        record = self.get(record_id)
        trait = self._find_trait(record, trait_id)
        record.traits(trait.type).remove(trait)
        self._touch(record)

    # Goals

    def _find_goal(self, record: CoachingRecord, goal_id: str) -> Goal:
        for goal in record.goals:
            if goal.id == goal_id:
                return goal
        raise NotFoundError("goal", goal_id)

    def add_goal(self, record_id: str, title: str, description: str = "", target_date: datetime | None = None) -> Goal:
        record = self.get(record_id)
        goal = Goal(id=new_id(), title=title, description=description, target_date=target_date)
        record.goals.append(goal)
        self._touch(record)
        return goal

    def update_goal(
        self,
        record_id: str,
        goal_id: str,
        status: str | None = None,
        progression: int | None = None,
        notes: str = "",
    ) -> Goal:
        """
        Move a goal's status or progression and log the change.

        Completing a goal stamps completed_date and sets progression to 100;
        leaving completed clears the date.
        """
        if status is not None and status not in GOAL_STATUSES:
            raise ValidationError(f"Invalid goal status: {status}")
        if progression is not None:
            _validate_scale("Progression", progression, 0, 100)

        record = self.get(record_id)
        goal = self._find_goal(record, goal_id)
        if status is not None:
            if status == GoalStatus.COMPLETED.value and goal.status != status:
                goal.completed_date = utcnow()
                progression = 100
            elif status != GoalStatus.COMPLETED.value:
                goal.completed_date = None
            goal.status = status
        if progression is not None:
            goal.progression = progression

        goal.history_log.append(
            HistoryEntry(date=utcnow(), notes=notes, status=status, progression=progression)
        )
        goal.updated_at = utcnow()
        self._touch(record)
        return goal

    def remove_goal(self, record_id: str, goal_id: str) -> None:
        record = self.get(record_id)
        record.goals.remove(self._find_goal(record, goal_id))
        self._touch(record)

    # Timeline

    def add_timeline_entry(
        self,
        record_id: str,
        notes: str,
        when: datetime | None = None,
        related_goals: "list[str] | None" = None,
        related_traits: "list[str] | None" = None,
    ) -> TimelineEntry:
        record = self.get(record_id)
        entry = TimelineEntry(
            id=new_id(),
            date=when or utcnow(),
            notes=notes,
            related_goals=list(related_goals or []),
            related_traits=list(related_traits or []),
        )
        record.timeline.append(entry)
        self._touch(record)
        return entry
