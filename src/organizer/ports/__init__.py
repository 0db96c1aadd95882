"""Ports - interfaces/protocols for external dependencies."""

from .document_store import DocumentStore, Filter
from .calendar_provider import CalendarProvider
from .mail_provider import MailProvider
from .contact_provider import ContactProvider
from .task_provider import TaskProvider
from .llm_service import LLMService

__all__ = [
    "DocumentStore",
    "Filter",
    "CalendarProvider",
    "MailProvider",
    "ContactProvider",
    "TaskProvider",
    "LLMService",
]
