"""Pure feedback review logic.

Feedback moves through a manual review workflow: it is submitted unseen,
marked seen, approved or rejected (``user_action`` yes/no), optionally marked
improved once acted on, and archived to take it out of the active list
without losing history.
"""

from dataclasses import dataclass, field
from datetime import datetime

from .records import parse_datetime, to_iso, utcnow

USER_ACTIONS = ("yes", "no")


@dataclass
class Feedback:
    id: str
    user_id: str
    message: str
    page: str = ""
    screenshot: str = ""
    console_messages: str = ""
    timestamp: datetime = field(default_factory=utcnow)
    seen: bool = False
    user_action: str = ""
    improved: bool = False
    improved_at: datetime | None = None
    archived: bool = False
    archived_at: datetime | None = None
    processed: bool = False
    processed_at: datetime | None = None
    suggestion: str = ""
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def approved(self) -> bool:
        return self.user_action == "yes"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "message": self.message,
            "page": self.page,
            "screenshot": self.screenshot,
            "consoleMessages": self.console_messages,
            "timestamp": to_iso(self.timestamp),
            "seen": self.seen,
            "userAction": self.user_action or None,
            "improved": self.improved,
            "improvedAt": to_iso(self.improved_at),
            "archived": self.archived,
            "archivedAt": to_iso(self.archived_at),
            "processed": self.processed,
            "processedAt": to_iso(self.processed_at),
            "suggestion": self.suggestion,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Feedback":
        return cls(
            id=data["id"],
            user_id=data.get("userId", ""),
            message=data.get("message", ""),
            page=data.get("page", "") or "",
            screenshot=data.get("screenshot", "") or "",
            console_messages=data.get("consoleMessages", "") or "",
            timestamp=parse_datetime(data.get("timestamp")) or utcnow(),
            seen=bool(data.get("seen", False)),
            user_action=data.get("userAction") or "",
            improved=bool(data.get("improved", False)),
            improved_at=parse_datetime(data.get("improvedAt")),
            archived=bool(data.get("archived", False)),
            archived_at=parse_datetime(data.get("archivedAt")),
            # processedByClaude is the legacy name
            processed=bool(data.get("processed", data.get("processedByClaude", False))),
            processed_at=parse_datetime(data.get("processedAt")),
            suggestion=data.get("suggestion", "") or "",
            created_at=parse_datetime(data.get("createdAt")) or utcnow(),
            updated_at=parse_datetime(data.get("updatedAt")) or utcnow(),
        )


def unseen(items: list[Feedback]) -> list[Feedback]:
    return [f for f in items if not f.seen]


def approved(items: list[Feedback]) -> list[Feedback]:
    return [f for f in items if f.approved]


def improved(items: list[Feedback]) -> list[Feedback]:
    return [f for f in items if f.improved]


def active(items: list[Feedback]) -> list[Feedback]:
    return [f for f in items if not f.archived]


def archived(items: list[Feedback]) -> list[Feedback]:
    return [f for f in items if f.archived]


def pending_processing(items: list[Feedback]) -> list[Feedback]:
    """Approved, still active, and not yet sent for review."""
    return [f for f in items if f.approved and not f.processed and not f.archived]


def review_payload(item: Feedback) -> dict:
    """Summary of a feedback item for review; the screenshot itself is left out."""
    return {
        "message": item.message,
        "screenshot": "Included" if item.screenshot else "Not included",
        "consoleMessages": item.console_messages or "None",
        "page": item.page,
        "timestamp": to_iso(item.timestamp),
    }


def review_prompt(item: Feedback) -> str:
    payload = review_payload(item)
    lines = [
        "Please review this user feedback and suggest action.",
        "",
        f"Message: {payload['message']}",
        f"Page: {payload['page'] or '(unknown)'}",
        f"Submitted: {payload['timestamp']}",
        f"Screenshot: {payload['screenshot']}",
        "Console messages:",
        payload["consoleMessages"],
    ]
    return "\n".join(lines)
