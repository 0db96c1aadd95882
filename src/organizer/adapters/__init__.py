"""Adapters - I/O implementations of ports."""

from .base_provider import ApiError, BaseProvider, ProviderError
from .claude_cli import ClaudeCLIService
from .file_store import FileDocumentStore
from .firestore_store import FirestoreDocumentStore
from .oauth import AuthenticationError, ReauthorizationRequired, TokenRefresher
from .providers import (
    get_calendar_provider,
    get_contact_provider,
    get_mail_provider,
    get_task_provider,
)

__all__ = [
    "ApiError",
    "BaseProvider",
    "ProviderError",
    "ClaudeCLIService",
    "FileDocumentStore",
    "FirestoreDocumentStore",
    "AuthenticationError",
    "ReauthorizationRequired",
    "TokenRefresher",
    "get_calendar_provider",
    "get_contact_provider",
    "get_mail_provider",
    "get_task_provider",
]
