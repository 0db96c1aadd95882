"""Contact provider interface."""

from typing import Protocol

from organizer.core.people import ContactPage, Person


class ContactProvider(Protocol):
    """Interface for an external address book."""

    def is_authenticated(self) -> bool:
        ...

    def authenticate(self) -> bool:
        ...

    def fetch_contacts(self, query: str = "", page: str | None = None) -> ContactPage:
        """Fetch one page of contacts; pass ContactPage.next_page to continue."""
        ...

    def create_contact(self, person: Person) -> Person:
        ...

    def update_contact(self, person: Person) -> Person:
        ...

    def delete_contact(self, contact_id: str) -> None:
        ...

    def get_contact_groups(self) -> list[dict]:
        ...
