"""Per-user stores over a DocumentStore and the provider adapters."""

from .accounts import AccountStore
from .base import EntityStore
from .behaviors import BehaviorStore
from .calendar import CalendarStore
from .coaching import CoachingStore
from .feedback import FeedbackStore
from .mail import MailStore
from .meetings import MeetingCategoryStore, MeetingStore
from .people import ImportResult, PeopleStore
from .projects import ProjectPageStore, ProjectStore
from .tasks import TaskStore
from .users import UserStore

__all__ = [
    "AccountStore",
    "BehaviorStore",
    "CalendarStore",
    "CoachingStore",
    "EntityStore",
    "FeedbackStore",
    "ImportResult",
    "MailStore",
    "MeetingCategoryStore",
    "MeetingStore",
    "PeopleStore",
    "ProjectPageStore",
    "ProjectStore",
    "TaskStore",
    "UserStore",
]
