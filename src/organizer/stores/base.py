"""Per-user CRUD over a document collection."""

import dataclasses
import logging
from typing import Generic, TypeVar

from organizer.core.records import new_id, utcnow
from organizer.errors import NotFoundError, UnauthorizedError, ValidationError
from organizer.ports.document_store import DocumentStore, Filter

logger = logging.getLogger(__name__)

R = TypeVar("R")

PROTECTED_FIELDS = frozenset({"id", "user_id", "created_at"})


class EntityStore(Generic[R]):
    """
    CRUD for one record type, scoped to a user.

    Subclasses set ``collection``, ``kind`` (used in error messages) and
    ``record_type`` (a dataclass with ``to_dict``/``from_dict``).
    """

    collection: str = ""
    kind: str = ""
    record_type: type = None
    default_order: str | None = None

    def __init__(self, db: DocumentStore, user_id: str):
        self.db = db
        self.user_id = user_id

    def _to_record(self, doc: dict) -> R:
        return self.record_type.from_dict(doc)

    def _save(self, record: R) -> R:
        self.db.set(self.collection, record.id, record.to_dict())
        return record

    def create(self, record: R) -> R:
        """Store a new record owned by the current user."""
        now = utcnow()
        record.id = record.id or new_id()
        record.user_id = self.user_id
        record.created_at = now
        record.updated_at = now
        self._save(record)
        logger.debug(f"Created {self.kind} {record.id}")
        return record

    def get(self, record_id: str) -> R:
        """Fetch a record. Raises NotFoundError or UnauthorizedError."""
        doc = self.db.get(self.collection, record_id)
        if doc is None:
            raise NotFoundError(self.kind, record_id)
        if doc.get("userId") != self.user_id:
            raise UnauthorizedError(self.kind, record_id)
        return self._to_record(doc)

    def list(
        self,
        filters: list[Filter] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[R]:
        docs = self.db.query(
            self.collection,
            [("userId", self.user_id), *(filters or [])],
            order_by=order_by or self.default_order,
            descending=descending,
        )
        return [self._to_record(doc) for doc in docs]

    def _apply_changes(self, record: R, changes: dict) -> None:
        field_names = {f.name for f in dataclasses.fields(record)}
        for name, value in changes.items():
            if name in PROTECTED_FIELDS:
                continue
            if name not in field_names:
                raise ValidationError(f"Unknown {self.kind} field: {name}")
            setattr(record, name, value)

    def update(self, record_id: str, changes: dict) -> R:
        """
        Apply attribute changes to a record.

        id, user_id and created_at are never changed; updated_at is bumped.
        """
        record = self.get(record_id)
        self._apply_changes(record, changes)
        record.updated_at = utcnow()
        return self._save(record)

    def delete(self, record_id: str) -> None:
        self.get(record_id)
        self.db.delete(self.collection, record_id)
        logger.debug(f"Deleted {self.kind} {record_id}")
