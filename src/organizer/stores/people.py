"""People store - CRUD, contact dates and provider contact import."""

import logging
from dataclasses import dataclass
from datetime import datetime

from organizer.core.accounts import IntegrationAccount
from organizer.core.people import Person, find_matching_person, merge_contact
from organizer.core.records import utcnow
from organizer.ports.contact_provider import ContactProvider

from .base import EntityStore

logger = logging.getLogger(__name__)

# Guard against providers that keep returning a next-page token
MAX_IMPORT_PAGES = 100


@dataclass
class ImportResult:
    created: int = 0
    updated: int = 0

    @property
    def total(self) -> int:
        return self.created + self.updated


class PeopleStore(EntityStore[Person]):
    collection = "people"
    kind = "person"
    record_type = Person
    default_order = "lastName"

    def add(self, first_name: str, **fields) -> Person:
        return self.create(Person(id="", user_id=self.user_id, first_name=first_name, **fields))

    def update_last_contact_date(self, person_id: str, when: datetime | None = None) -> Person:
        return self.update(person_id, {"last_contacted": when or utcnow()})

    def import_contacts(self, account: IntegrationAccount, provider: ContactProvider) -> ImportResult:
        """
        Pull every contact page from a provider into the people collection.

        Contacts matching an existing person (by external id or email) update
        that person; the rest are created.
        """
        people = self.list()
        result = ImportResult()
        page_token = None

        for _ in range(MAX_IMPORT_PAGES):
            page = provider.fetch_contacts(page=page_token)
            for contact in page.contacts:
                contact.source_account_id = contact.source_account_id or account.id
                existing = find_matching_person(people, contact)
                if existing is None:
                    person = self.create(contact)
                    people.append(person)
                    result.created += 1
                elif merge_contact(existing, contact):
                    existing.updated_at = utcnow()
                    self._save(existing)
                    result.updated += 1
            page_token = page.next_page
            if not page_token:
                break
        else:
            logger.warning(f"Stopped contact import for {account.email} after {MAX_IMPORT_PAGES} pages")

        logger.info(
            f"Imported contacts from {account.email}: "
            f"{result.created} created, {result.updated} updated"
        )
        return result
