"""Functional core - pure business logic with no I/O."""

from .accounts import IntegrationAccount, AccountType, Capability, has_valid_tokens
from .tasks import Task, TaskStatus, Comment, sort_by_due_date
from .projects import Project, ProjectPage, sort_by_priority
from .meetings import Meeting, MeetingCategory
from .people import Person, ContactPage
from .behaviors import Behavior, ActionPlan
from .feedback import Feedback
from .calendar import CalendarEvent, Calendar, EventQuery, events_for_day, events_for_range
from .mail import Email, EmailAddress, MailFolder, DEFAULT_FOLDERS
from .analysis import AnalysisResult, parse_analysis

__all__ = [
    # Accounts
    "IntegrationAccount",
    "AccountType",
    "Capability",
    "has_valid_tokens",
    # Tasks
    "Task",
    "TaskStatus",
    "Comment",
    "sort_by_due_date",
    # Projects
    "Project",
    "ProjectPage",
    "sort_by_priority",
    # Meetings
    "Meeting",
    "MeetingCategory",
    # People
    "Person",
    "ContactPage",
    # Behaviors
    "Behavior",
    "ActionPlan",
    # Feedback
    "Feedback",
    # Calendar
    "CalendarEvent",
    "Calendar",
    "EventQuery",
    "events_for_day",
    "events_for_range",
    # Mail
    "Email",
    "EmailAddress",
    "MailFolder",
    "DEFAULT_FOLDERS",
    # Analysis
    "AnalysisResult",
    "parse_analysis",
]
