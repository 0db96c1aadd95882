"""Gmail API adapter."""

import base64
import logging
from email.message import EmailMessage

from organizer.core.mail import (
    Attachment,
    Email,
    decode_base64url,
    parse_address_list,
    parse_email_address,
)
from organizer.core.records import parse_datetime

from .google_base import GoogleProvider

logger = logging.getLogger(__name__)

FOLDER_LABELS = {
    "inbox": "INBOX",
    "sent": "SENT",
    "drafts": "DRAFT",
    "trash": "TRASH",
    "spam": "SPAM",
}


def folder_label(folder: str) -> str:
    return FOLDER_LABELS.get(folder, folder.upper())


def _header(payload: dict, name: str) -> str:
    for header in payload.get("headers", []):
        if header.get("name", "").lower() == name.lower():
            return header.get("value", "")
    return ""


def _body(payload: dict) -> str:
    """Body text of a message payload, preferring HTML over plain text."""
    data = payload.get("body", {}).get("data")
    if data and not payload.get("parts"):
        return decode_base64url(data)

    found = {}
    stack = list(payload.get("parts", []))
    while stack:
        part = stack.pop(0)
        mime = part.get("mimeType", "")
        part_data = part.get("body", {}).get("data")
        if mime in ("text/html", "text/plain") and part_data and mime not in found:
            found[mime] = decode_base64url(part_data)
        stack.extend(part.get("parts", []))
    return found.get("text/html") or found.get("text/plain") or ""


def _attachments(payload: dict) -> list[Attachment]:
    result = []
    stack = list(payload.get("parts", []))
    while stack:
        part = stack.pop(0)
        if part.get("filename"):
            result.append(Attachment(name=part["filename"], size=part.get("body", {}).get("size", 0)))
        stack.extend(part.get("parts", []))
    return result


def parse_message(message: dict, folder: str, account_id: str) -> Email:
    payload = message.get("payload", {})
    labels = message.get("labelIds", [])
    return Email(
        id=message.get("id", ""),
        subject=_header(payload, "Subject") or "(No subject)",
        sender=parse_email_address(_header(payload, "From")),
        to=parse_address_list(_header(payload, "To")),
        cc=parse_address_list(_header(payload, "Cc")),
        body=_body(payload),
        date=parse_datetime(int(message.get("internalDate") or 0)),
        read="UNREAD" not in labels,
        folder=folder,
        attachments=_attachments(payload),
        labels=list(labels),
        account_id=account_id,
    )


def build_raw_message(email: Email) -> str:
    """Encode an email as a base64url RFC 2822 message."""
    msg = EmailMessage()
    msg["From"] = email.sender.format()
    msg["To"] = ", ".join(a.format() for a in email.to)
    if email.cc:
        msg["Cc"] = ", ".join(a.format() for a in email.cc)
    msg["Subject"] = email.subject
    msg.set_content(email.body or "", subtype="html")
    return base64.urlsafe_b64encode(msg.as_bytes()).decode("ascii").rstrip("=")


class GmailAdapter(GoogleProvider):
    """
    Gmail v1 adapter.

    Implements MailProvider protocol.
    """

    API_NAME = "gmail"
    API_VERSION = "v1"

    def fetch_emails(self, folder: str = "inbox", max_results: int = 50) -> list[Email]:
        listing = self._execute(
            lambda service: service.users().messages().list(
                userId="me",
                q=f"in:{folder_label(folder)}",
                maxResults=max_results,
            )
        )

        emails = []
        for ref in listing.get("messages", []):
            message = self._execute(
                lambda service: service.users().messages().get(
                    userId="me", id=ref["id"], format="full"
                )
            )
            emails.append(parse_message(message, folder, self.account.id))
        return emails

    def count_emails(self, folder: str = "inbox") -> int:
        result = self._execute(
            lambda service: service.users().messages().list(
                userId="me", q=f"in:{folder_label(folder)}", fields="resultSizeEstimate"
            )
        )
        return int(result.get("resultSizeEstimate", 0))

    def send_email(self, email: Email) -> None:
        raw = build_raw_message(email)
        self._execute(
            lambda service: service.users().messages().send(userId="me", body={"raw": raw})
        )
        logger.info(f"Sent email '{email.subject}' from {self.account.email}")

    def mark_read(self, email_id: str, read: bool = True) -> None:
        body = {"removeLabelIds": ["UNREAD"]} if read else {"addLabelIds": ["UNREAD"]}
        self._execute(
            lambda service: service.users().messages().modify(userId="me", id=email_id, body=body)
        )

    def delete_email(self, email_id: str) -> None:
        self._execute(lambda service: service.users().messages().trash(userId="me", id=email_id))
