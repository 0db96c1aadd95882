"""Task store - CRUD, status transitions, comments and subtasks."""

import logging

from organizer.core.records import new_id, utcnow
from organizer.core.tasks import Comment, Task, TaskStatus, TaskType
from organizer.errors import NotFoundError

from .base import EntityStore

logger = logging.getLogger(__name__)


class TaskStore(EntityStore[Task]):
    collection = "tasks"
    kind = "task"
    record_type = Task

    def add(self, title: str, **fields) -> Task:
        """Create a task; unspecified fields take the Task defaults (todo, medium, task)."""
        task = Task(id="", user_id=self.user_id, title=title, **fields)
        if task.status == TaskStatus.COMPLETED.value and not task.completed_at:
            task.completed_at = utcnow()
        return self.create(task)

    def update(self, record_id: str, changes: dict) -> Task:
        """Update a task, keeping completed_at in step with status."""
        task = self.get(record_id)
        new_status = changes.get("status")
        changes = dict(changes)
        if new_status is not None and new_status != task.status:
            if new_status == TaskStatus.COMPLETED.value:
                changes.setdefault("completed_at", utcnow())
            elif task.status == TaskStatus.COMPLETED.value:
                changes["completed_at"] = None
        self._apply_changes(task, changes)
        task.updated_at = utcnow()
        return self._save(task)

    def mark_complete(self, task_id: str) -> Task:
        return self.update(task_id, {"status": TaskStatus.COMPLETED.value})

    def mark_in_progress(self, task_id: str) -> Task:
        return self.update(task_id, {"status": TaskStatus.IN_PROGRESS.value})

    def mark_delegated(self, task_id: str, assignee: str) -> Task:
        return self.update(
            task_id,
            {
                "status": TaskStatus.DELEGATED.value,
                "assigned_to": assignee,
                "delegated_to": assignee,
                "type": TaskType.DELEGATION.value,
            },
        )

    def add_comment(self, task_id: str, text: str) -> Comment:
        task = self.get(task_id)
        comment = Comment(id=new_id(), user_id=self.user_id, text=text)
        task.comments.append(comment)
        task.updated_at = utcnow()
        self._save(task)
        return comment

    def _find_comment(self, task: Task, comment_id: str) -> Comment:
        for comment in task.comments:
            if comment.id == comment_id:
                return comment
        raise NotFoundError("comment", comment_id)

    def update_comment(self, task_id: str, comment_id: str, text: str) -> Comment:
        task = self.get(task_id)
        comment = self._find_comment(task, comment_id)
        comment.text = text
        comment.updated_at = utcnow()
        task.updated_at = comment.updated_at
        self._save(task)
        return comment

    def delete_comment(self, task_id: str, comment_id: str) -> None:
        task = self.get(task_id)
        comment = self._find_comment(task, comment_id)
        task.comments.remove(comment)
        task.updated_at = utcnow()
        self._save(task)

    def add_subtask(self, parent_id: str, title: str, **fields) -> Task:
        """Create a task under a parent and link it from the parent's subtasks."""
        parent = self.get(parent_id)
        subtask = self.add(title, parent_task=parent_id, **fields)
        parent.subtasks.append(subtask.id)
        parent.updated_at = utcnow()
        self._save(parent)
        return subtask
