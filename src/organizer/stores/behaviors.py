"""Behavior store - CRUD and action plans."""

from organizer.core.behaviors import ActionPlan, Behavior
from organizer.core.records import new_id, utcnow
from organizer.errors import NotFoundError

from .base import EntityStore


class BehaviorStore(EntityStore[Behavior]):
    collection = "behaviors"
    kind = "behavior"
    record_type = Behavior

    def add(self, title: str, type: str, **fields) -> Behavior:
        return self.create(Behavior(id="", user_id=self.user_id, title=title, type=type, **fields))

    def _find_plan(self, behavior: Behavior, plan_id: str) -> ActionPlan:
        for plan in behavior.action_plans:
            if plan.id == plan_id:
                return plan
        raise NotFoundError("action plan", plan_id)

    def add_action_plan(self, behavior_id: str, description: str, tasks: list[str] | None = None) -> ActionPlan:
        behavior = self.get(behavior_id)
        plan = ActionPlan(id=new_id(), description=description, tasks=list(tasks or []))
        behavior.action_plans.append(plan)
        behavior.updated_at = utcnow()
        self._save(behavior)
        return plan

    def update_action_plan(self, behavior_id: str, plan_id: str, changes: dict) -> ActionPlan:
        behavior = self.get(behavior_id)
        plan = self._find_plan(behavior, plan_id)
        if "description" in changes:
            plan.description = changes["description"]
        if "tasks" in changes:
            plan.tasks = list(changes["tasks"])
        behavior.updated_at = utcnow()
        self._save(behavior)
        return plan

    def delete_action_plan(self, behavior_id: str, plan_id: str) -> None:
        behavior = self.get(behavior_id)
        behavior.action_plans.remove(self._find_plan(behavior, plan_id))
        behavior.updated_at = utcnow()
        self._save(behavior)
