"""Exceptions raised by stores and services."""


class OrganizerError(Exception):
    """Base class for organizer errors."""


class NotFoundError(OrganizerError):
    """Raised when a document does not exist."""

    def __init__(self, kind: str, doc_id: str):
        super().__init__(f"{kind.capitalize()} not found: {doc_id}")
        self.kind = kind
        self.doc_id = doc_id


class UnauthorizedError(OrganizerError):
    """Raised when a document belongs to another user."""

    def __init__(self, kind: str, doc_id: str):
        super().__init__(f"Unauthorized access to {kind}: {doc_id}")
        self.kind = kind
        self.doc_id = doc_id


class ValidationError(OrganizerError, ValueError):
    """Raised when a value is outside its allowed range or set."""
