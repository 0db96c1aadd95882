"""User profile and settings store."""

import logging

from organizer.core.records import utcnow
from organizer.core.users import AIIntegration, User
from organizer.errors import NotFoundError
from organizer.ports.document_store import DocumentStore

logger = logging.getLogger(__name__)

COLLECTION = "users"


class UserStore:
    """The current user's profile document (``users/<user_id>``)."""

    def __init__(self, db: DocumentStore, user_id: str):
        self.db = db
        self.user_id = user_id

    def get(self) -> User:
        doc = self.db.get(COLLECTION, self.user_id)
        if doc is None:
            raise NotFoundError("user", self.user_id)
        return User.from_dict(doc)

    def _save(self, user: User) -> User:
        user.updated_at = utcnow()
        self.db.set(COLLECTION, user.id, user.to_dict())
        return user

    def ensure_user(self, email: str = "", display_name: str = "", photo_url: str = "") -> User:
        """Return the user, creating the profile with default settings on first use."""
        doc = self.db.get(COLLECTION, self.user_id)
        if doc is not None:
            return User.from_dict(doc)
        user = User(id=self.user_id, email=email, display_name=display_name, photo_url=photo_url)
        logger.info(f"Created user profile {self.user_id}")
        return self._save(user)

    def record_login(self) -> User:
        user = self.ensure_user()
        user.last_login = utcnow()
        return self._save(user)

    def update_settings(self, **changes) -> User:
        user = self.ensure_user()
        for name, value in changes.items():
            if not hasattr(user.settings, name):
                raise ValueError(f"Unknown setting: {name}")
            setattr(user.settings, name, value)
        return self._save(user)

    def ai_integration(self, provider: str) -> AIIntegration | None:
        return self.ensure_user().ai_integration(provider)

    def save_ai_integration(self, integration: AIIntegration) -> User:
        """Add or replace the integration for its provider."""
        user = self.ensure_user()
        now = utcnow()
        integration.updated_at = now
        integration.created_at = integration.created_at or now
        others = [i for i in user.settings.ai_integrations if i.provider != integration.provider]
        user.settings.ai_integrations = [*others, integration]
        return self._save(user)

    def touch_ai_integration(self, provider: str) -> None:
        """Stamp last_used on an integration after a successful call."""
        user = self.ensure_user()
        integration = user.ai_integration(provider)
        if integration is None:
            return
        integration.last_used = utcnow()
        self._save(user)
