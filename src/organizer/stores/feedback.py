"""Feedback store - submission and the manual review workflow."""

import logging

from organizer.core.feedback import USER_ACTIONS, Feedback
from organizer.core.records import utcnow
from organizer.errors import ValidationError

from .base import EntityStore

logger = logging.getLogger(__name__)


class FeedbackStore(EntityStore[Feedback]):
    collection = "feedbacks"
    kind = "feedback"
    record_type = Feedback

    def add(self, message: str, **fields) -> Feedback:
        """Submit feedback. New feedback is always unseen with no decision."""
        fields.pop("seen", None)
        fields.pop("user_action", None)
        feedback = Feedback(id="", user_id=self.user_id, message=message, **fields)
        return self.create(feedback)

    def list(self, filters=None, order_by=None, descending=False) -> list[Feedback]:
        """Feedback newest first unless another order is requested."""
        if order_by is None:
            order_by, descending = "timestamp", True
        return super().list(filters, order_by, descending)

    def mark_seen(self, feedback_id: str) -> Feedback:
        return self.update(feedback_id, {"seen": True})

    def set_user_action(self, feedback_id: str, action: str) -> Feedback:
        if action not in USER_ACTIONS:
            raise ValidationError(f"User action must be one of {', '.join(USER_ACTIONS)}: {action}")
        return self.update(feedback_id, {"user_action": action})

    def mark_improved(self, feedback_id: str) -> Feedback:
        return self.update(feedback_id, {"improved": True, "improved_at": utcnow()})

    def archive(self, feedback_id: str) -> Feedback:
        return self.update(feedback_id, {"archived": True, "archived_at": utcnow()})

    def unarchive(self, feedback_id: str) -> Feedback:
        return self.update(feedback_id, {"archived": False, "archived_at": None})

    def mark_processed(self, feedback_id: str, suggestion: str = "") -> Feedback:
        return self.update(
            feedback_id,
            {"processed": True, "processed_at": utcnow(), "suggestion": suggestion},
        )
