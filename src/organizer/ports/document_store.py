"""Document store interface."""

from typing import Protocol

# (field, value) equality filter
Filter = tuple[str, object]


class DocumentStore(Protocol):
    """Interface for a collection-of-documents database."""

    def add(self, collection: str, data: dict) -> str:
        """Insert a document with a generated id. Returns the id."""
        ...

    def get(self, collection: str, doc_id: str) -> dict | None:
        """Fetch a document (with its id). Returns None if not found."""
        ...

    def set(self, collection: str, doc_id: str, data: dict) -> None:
        """Create or replace a document."""
        ...

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        """Merge fields into an existing document. Raises KeyError if missing."""
        ...

    def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document. Deleting a missing document is a no-op."""
        ...

    def query(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict]:
        """Documents matching all equality filters, optionally ordered."""
        ...
