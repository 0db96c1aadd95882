"""Task provider interface."""

from typing import Protocol

from organizer.core.tasks import Task


class TaskProvider(Protocol):
    """Interface for an external task list."""

    def is_authenticated(self) -> bool:
        ...

    def authenticate(self) -> bool:
        ...

    def fetch_tasks(self, list_id: str = "") -> list[Task]:
        ...

    def create_task(self, task: Task, list_id: str = "") -> Task:
        ...

    def update_task(self, task: Task, list_id: str = "") -> Task:
        ...

    def delete_task(self, task_id: str, list_id: str = "") -> None:
        ...

    def complete_task(self, task_id: str, list_id: str = "") -> Task:
        ...
