"""Mail provider interface."""

from typing import Protocol

from organizer.core.mail import Email


class MailProvider(Protocol):
    """Interface for an external mailbox."""

    def is_authenticated(self) -> bool:
        ...

    def authenticate(self) -> bool:
        ...

    def fetch_emails(self, folder: str = "inbox", max_results: int = 50) -> list[Email]:
        ...

    def send_email(self, email: Email) -> None:
        ...

    def mark_read(self, email_id: str, read: bool = True) -> None:
        ...

    def delete_email(self, email_id: str) -> None:
        ...
