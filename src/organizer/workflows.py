"""Shared workflow layer between the CLI and the HTTP server.

Builds the per-user stores from config and runs the multi-step operations
(text analysis, feedback review) that both front ends expose.
"""

import logging
from dataclasses import dataclass

from .adapters.ai_providers import get_ai_service
from .adapters.claude_cli import ClaudeCLIService
from .adapters.file_store import FileDocumentStore
from .config import ORGANIZER_HOME, Config
from .core.analysis import SYSTEM_PROMPT, AnalysisResult, parse_analysis
from .core.feedback import Feedback, pending_processing, review_prompt
from .errors import ValidationError
from .ports.document_store import DocumentStore
from .ports.llm_service import LLMService
from .refresh import DataRefresher
from .stores import (
    AccountStore,
    BehaviorStore,
    CalendarStore,
    CoachingStore,
    FeedbackStore,
    MailStore,
    MeetingCategoryStore,
    MeetingStore,
    PeopleStore,
    ProjectStore,
    TaskStore,
    UserStore,
)

logger = logging.getLogger(__name__)


def get_document_store(config: Config) -> DocumentStore:
    """Resolve the document store backend from config."""
    match config.store_backend:
        case "file":
            return FileDocumentStore(config.resolved_data_dir)
        case "firestore":
            from .adapters.firestore_store import FirestoreDocumentStore

            return FirestoreDocumentStore(config)
    raise ValueError(f"Unknown store backend: {config.store_backend}")


@dataclass
class Workspace:
    """Every store for one user, sharing a document store."""

    config: Config
    db: DocumentStore
    user_id: str
    accounts: AccountStore
    tasks: TaskStore
    projects: ProjectStore
    meetings: MeetingStore
    meeting_categories: MeetingCategoryStore
    people: PeopleStore
    behaviors: BehaviorStore
    coaching: CoachingStore
    feedback: FeedbackStore
    users: UserStore
    calendar: CalendarStore
    mail: MailStore

    def refresher(self) -> DataRefresher:
        return DataRefresher(self.accounts, self.mail, self.calendar, self.people, self.config)


def open_workspace(config: Config, db: DocumentStore | None = None, user_id: str | None = None) -> Workspace:
    db = db or get_document_store(config)
    user_id = user_id or config.user_id
    accounts = AccountStore(db, user_id)
    return Workspace(
        config=config,
        db=db,
        user_id=user_id,
        accounts=accounts,
        tasks=TaskStore(db, user_id),
        projects=ProjectStore(db, user_id),
        meetings=MeetingStore(db, user_id),
        meeting_categories=MeetingCategoryStore(db, user_id),
        people=PeopleStore(db, user_id),
        behaviors=BehaviorStore(db, user_id),
        coaching=CoachingStore(db, user_id),
        feedback=FeedbackStore(db, user_id),
        users=UserStore(db, user_id),
        calendar=CalendarStore(accounts, config),
        mail=MailStore(accounts, config),
    )


def analyze_text(users: UserStore, provider_id: str, text: str, service_factory=get_ai_service) -> AnalysisResult:
    """
    Extract people, projects, tasks, behaviors and meetings from free text
    using the user's configured AI integration.

    Raises ValidationError for a missing provider, text, integration or key.
    Provider failures propagate.
    """
    if not provider_id:
        raise ValidationError("AI provider ID is required")
    if not text or not text.strip():
        raise ValidationError("Text to analyze is required")

    integration = users.ai_integration(provider_id)
    if integration is None or not integration.enabled:
        raise ValidationError("AI integration not found or disabled")
    if not integration.api_key:
        raise ValidationError("API key not found for the AI provider")

    service: LLMService = service_factory(provider_id, integration.api_key)
    logger.info(f"Analyzing {len(text)} characters with {provider_id}")
    result = parse_analysis(service.generate(text, system=SYSTEM_PROMPT))
    users.touch_ai_integration(provider_id)
    return result


def process_feedback(feedback: FeedbackStore, llm: LLMService | None = None) -> list[Feedback]:
    """Send approved, unprocessed feedback for review and store the suggestions."""
    llm = llm or ClaudeCLIService(cwd=ORGANIZER_HOME)
    processed = []
    for item in pending_processing(feedback.list()):
        logger.info(f"Reviewing feedback {item.id}")
        suggestion = llm.generate(review_prompt(item)).strip()
        processed.append(feedback.mark_processed(item.id, suggestion))
    return processed
