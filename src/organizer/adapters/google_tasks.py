"""Google Tasks API adapter."""

import logging

from organizer.core.records import parse_datetime, to_iso
from organizer.core.tasks import Task, TaskStatus

from .google_base import GoogleProvider

logger = logging.getLogger(__name__)

DEFAULT_LIST = "@default"


def parse_task(raw: dict, user_id: str = "") -> Task:
    completed = raw.get("status") == "completed"
    return Task(
        id=raw.get("id", ""),
        user_id=user_id,
        title=raw.get("title", ""),
        notes=raw.get("notes", ""),
        status=TaskStatus.COMPLETED.value if completed else TaskStatus.TODO.value,
        due_date=parse_datetime(raw.get("due")),
        completed_at=parse_datetime(raw.get("completed")) if completed else None,
        parent_task=raw.get("parent", ""),
    )


def task_body(task: Task) -> dict:
    body = {
        "title": task.title,
        "notes": task.notes or task.description,
        "status": "completed" if task.status == TaskStatus.COMPLETED.value else "needsAction",
    }
    if task.due_date:
        body["due"] = to_iso(task.due_date)
    return body


class GoogleTasksAdapter(GoogleProvider):
    """
    Google Tasks v1 adapter.

    Implements TaskProvider protocol.
    """

    API_NAME = "tasks"
    API_VERSION = "v1"

    def fetch_tasks(self, list_id: str = "") -> list[Task]:
        tasks = []
        page_token = None
        while True:
            result = self._execute(
                lambda service: service.tasks().list(
                    tasklist=list_id or DEFAULT_LIST,
                    showCompleted=True,
                    pageToken=page_token,
                )
            )
            tasks.extend(parse_task(item, self.account.user_id) for item in result.get("items", []))
            page_token = result.get("nextPageToken")
            if not page_token:
                return tasks

    def create_task(self, task: Task, list_id: str = "") -> Task:
        raw = self._execute(
            lambda service: service.tasks().insert(tasklist=list_id or DEFAULT_LIST, body=task_body(task))
        )
        return parse_task(raw, task.user_id)

    def update_task(self, task: Task, list_id: str = "") -> Task:
        raw = self._execute(
            lambda service: service.tasks().patch(
                tasklist=list_id or DEFAULT_LIST, task=task.id, body=task_body(task)
            )
        )
        return parse_task(raw, task.user_id)

    def delete_task(self, task_id: str, list_id: str = "") -> None:
        self._execute(
            lambda service: service.tasks().delete(tasklist=list_id or DEFAULT_LIST, task=task_id)
        )

    def complete_task(self, task_id: str, list_id: str = "") -> Task:
        raw = self._execute(
            lambda service: service.tasks().patch(
                tasklist=list_id or DEFAULT_LIST, task=task_id, body={"status": "completed"}
            )
        )
        return parse_task(raw, self.account.user_id)
