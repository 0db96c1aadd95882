"""Project store - CRUD, progress/priority/status updates and project pages."""

import logging

from organizer.core.projects import (
    Project,
    ProjectPage,
    sort_by_priority,
    sort_pages,
    validate_priority,
    validate_progress,
)
from organizer.core.records import utcnow
from organizer.errors import NotFoundError, UnauthorizedError
from organizer.ports.document_store import DocumentStore

from .base import EntityStore

logger = logging.getLogger(__name__)


class ProjectPageStore(EntityStore[ProjectPage]):
    collection = "projectPages"
    kind = "project page"
    record_type = ProjectPage


class ProjectStore(EntityStore[Project]):
    collection = "projects"
    kind = "project"
    record_type = Project

    def __init__(self, db: DocumentStore, user_id: str):
        super().__init__(db, user_id)
        self.pages = ProjectPageStore(db, user_id)

    def add(self, title: str, **fields) -> Project:
        project = Project(id="", user_id=self.user_id, title=title, **fields)
        validate_progress(project.progress)
        validate_priority(project.priority)
        return self.create(project)

    def list(self, filters=None, order_by=None, descending=False) -> list[Project]:
        """Projects by priority rank (low first) unless another order is requested."""
        projects = super().list(filters, order_by, descending)
        return projects if order_by else sort_by_priority(projects)

    def update(self, record_id: str, changes: dict) -> Project:
        if "progress" in changes:
            validate_progress(changes["progress"])
        if "priority" in changes:
            validate_priority(changes["priority"])
        return super().update(record_id, changes)

    def update_progress(self, project_id: str, progress: int) -> Project:
        return self.update(project_id, {"progress": validate_progress(progress)})

    def update_priority(self, project_id: str, priority: str) -> Project:
        return self.update(project_id, {"priority": priority})

    def update_status(self, project_id: str, status: str) -> Project:
        changes = {"status": status}
        if status == "completed":
            changes["completed_date"] = utcnow()
        return self.update(project_id, changes)

    # Pages

    def fetch_pages(self, project_id: str) -> "list[ProjectPage]":
        self.get(project_id)
        return sort_pages(self.pages.list([("projectId", project_id)]))

    def get_page(self, page_id: str) -> ProjectPage:
        return self.pages.get(page_id)

    def create_page(self, project_id: str, title: str, content: str = "", **fields) -> ProjectPage:
        """Create a page and append it to the project's page list."""
        project = self.get(project_id)
        fields.setdefault("order", len(project.pages))
        page = self.pages.create(
            ProjectPage(
                id="",
                user_id=self.user_id,
                project_id=project_id,
                title=title,
                content=content,
                **fields,
            )
        )
        project.pages.append(page.id)
        project.updated_at = utcnow()
        self._save(project)
        return page

    def update_page(self, page_id: str, changes: dict) -> ProjectPage:
        changes = {k: v for k, v in changes.items() if k != "project_id"}
        return self.pages.update(page_id, changes)

    def delete_page(self, page_id: str) -> None:
        """Delete a page and drop it from its project's page list."""
        page = self.pages.get(page_id)
        self.pages.delete(page_id)
        try:
            project = self.get(page.project_id)
        except (NotFoundError, UnauthorizedError):
            logger.warning(f"Page {page_id} pointed at missing project {page.project_id}")
            return
        if page_id in project.pages:
            project.pages.remove(page_id)
            project.updated_at = utcnow()
            self._save(project)
