"""Pure mail domain logic - no I/O dependencies."""

import base64
import re
from dataclasses import dataclass, field
from datetime import datetime

from .records import parse_datetime, to_iso

_ADDRESS_PATTERN = re.compile(r'^\s*"?([^"<]*?)"?\s*<([^>]+)>\s*$')


@dataclass
class EmailAddress:
    name: str
    email: str

    def format(self) -> str:
        return f"{self.name} <{self.email}>" if self.name else self.email

    def to_dict(self) -> dict:
        return {"name": self.name, "email": self.email}

    @classmethod
    def from_dict(cls, data: dict) -> "EmailAddress":
        return cls(name=data.get("name", ""), email=data.get("email", ""))


@dataclass
class Attachment:
    name: str
    size: int = 0
    url: str = ""


@dataclass
class Email:
    id: str
    subject: str
    sender: EmailAddress
    to: list[EmailAddress]
    body: str
    date: datetime
    read: bool = False
    folder: str = "inbox"
    cc: list[EmailAddress] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)
    account_id: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "subject": self.subject,
            "from": self.sender.to_dict(),
            "to": [a.to_dict() for a in self.to],
            "cc": [a.to_dict() for a in self.cc],
            "body": self.body,
            "date": to_iso(self.date),
            "read": self.read,
            "folder": self.folder,
            "attachments": [
                {"name": a.name, "size": a.size, "url": a.url} for a in self.attachments
            ],
            "labels": list(self.labels),
            "accountId": self.account_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Email":
        return cls(
            id=data.get("id", ""),
            subject=data.get("subject", ""),
            sender=EmailAddress.from_dict(data.get("from") or {}),
            to=[EmailAddress.from_dict(a) for a in data.get("to") or []],
            cc=[EmailAddress.from_dict(a) for a in data.get("cc") or []],
            body=data.get("body", ""),
            date=parse_datetime(data.get("date")),
            read=bool(data.get("read", False)),
            folder=data.get("folder", "inbox"),
            attachments=[
                Attachment(a.get("name", ""), a.get("size", 0), a.get("url", ""))
                for a in data.get("attachments") or []
            ],
            labels=list(data.get("labels") or []),
            account_id=data.get("accountId", "") or "",
        )


@dataclass
class MailFolder:
    id: str
    name: str
    icon: str


DEFAULT_FOLDERS = [
    MailFolder("inbox", "Inbox", "mdi-inbox"),
    MailFolder("sent", "Sent", "mdi-send"),
    MailFolder("drafts", "Drafts", "mdi-file-document-outline"),
    MailFolder("trash", "Trash", "mdi-delete"),
    MailFolder("spam", "Spam", "mdi-alert-circle"),
]


def parse_email_address(value: str) -> EmailAddress:
    """Parse ``"Name" <addr>``, ``Name <addr>`` or a bare address."""
    if not value:
        return EmailAddress(name="", email="")
    match = _ADDRESS_PATTERN.match(value)
    if match:
        return EmailAddress(name=match.group(1).strip(), email=match.group(2).strip())
    return EmailAddress(name="", email=value.strip())


def parse_address_list(value: str) -> list[EmailAddress]:
    if not value:
        return []
    return [parse_email_address(part) for part in value.split(",") if part.strip()]


def decode_base64url(data: str) -> str:
    """Decode base64url content (as used by Gmail message bodies)."""
    if not data:
        return ""
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded).decode("utf-8", errors="replace")


def encode_base64url(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def sort_newest_first(emails: list[Email]) -> list[Email]:
    return sorted(emails, key=lambda e: e.date, reverse=True)


def emails_in_folder(emails: list[Email], folder: str) -> list[Email]:
    return [e for e in emails if e.folder == folder]


def unread_count(emails: list[Email], folder: str) -> int:
    return sum(1 for e in emails if e.folder == folder and not e.read)


def folder_counts(emails: list[Email], folders: list[MailFolder] | None = None) -> dict[str, int]:
    """Unread counts for each folder."""
    folders = folders or DEFAULT_FOLDERS
    return {f.id: unread_count(emails, f.id) for f in folders}
