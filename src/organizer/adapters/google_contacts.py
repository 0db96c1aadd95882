"""Google People API adapter."""

import logging

from organizer.core.people import ContactPage, Person

from .google_base import GoogleProvider

logger = logging.getLogger(__name__)

PERSON_FIELDS = "names,emailAddresses,phoneNumbers,organizations,biographies,memberships"
PAGE_SIZE = 100


def _first(items: list | None, key: str = "value") -> str:
    if not items:
        return ""
    return items[0].get(key, "") or ""


def parse_contact(raw: dict, account_id: str, user_id: str = "") -> Person:
    organizations = raw.get("organizations") or []
    return Person(
        id="",
        user_id=user_id,
        first_name=_first(raw.get("names"), "givenName"),
        last_name=_first(raw.get("names"), "familyName"),
        email=_first(raw.get("emailAddresses")),
        phone=_first(raw.get("phoneNumbers")),
        organization=_first(organizations, "name"),
        role=_first(organizations, "title"),
        notes=_first(raw.get("biographies")),
        source_account_id=account_id,
        external_id=raw.get("resourceName", ""),
    )


def contact_body(person: Person) -> dict:
    body = {
        "names": [{"givenName": person.first_name, "familyName": person.last_name}],
        "emailAddresses": [{"value": person.email}] if person.email else [],
        "phoneNumbers": [{"value": person.phone}] if person.phone else [],
    }
    if person.organization or person.role:
        body["organizations"] = [{"name": person.organization, "title": person.role}]
    if person.notes:
        body["biographies"] = [{"value": person.notes, "contentType": "TEXT_PLAIN"}]
    return body


class GoogleContactsAdapter(GoogleProvider):
    """
    Google People v1 adapter.

    Implements ContactProvider protocol.
    """

    API_NAME = "people"
    API_VERSION = "v1"

    def fetch_contacts(self, query: str = "", page: str | None = None) -> ContactPage:
        if query:
            result = self._execute(
                lambda service: service.people().searchContacts(
                    query=query, readMask=PERSON_FIELDS, pageSize=30
                )
            )
            contacts = [
                parse_contact(r.get("person", {}), self.account.id)
                for r in result.get("results", [])
            ]
            return ContactPage(contacts=contacts, next_page=None, total=len(contacts))

        result = self._execute(
            lambda service: service.people().connections().list(
                resourceName="people/me",
                personFields=PERSON_FIELDS,
                pageSize=PAGE_SIZE,
                pageToken=page,
            )
        )
        return ContactPage(
            contacts=[parse_contact(c, self.account.id) for c in result.get("connections", [])],
            next_page=result.get("nextPageToken"),
            total=result.get("totalPeople"),
        )

    def create_contact(self, person: Person) -> Person:
        raw = self._execute(
            lambda service: service.people().createContact(body=contact_body(person))
        )
        return parse_contact(raw, self.account.id, person.user_id)

    def update_contact(self, person: Person) -> Person:
        existing = self._execute(
            lambda service: service.people().get(
                resourceName=person.external_id, personFields=PERSON_FIELDS
            )
        )
        body = {**contact_body(person), "etag": existing.get("etag")}
        raw = self._execute(
            lambda service: service.people().updateContact(
                resourceName=person.external_id,
                updatePersonFields="names,emailAddresses,phoneNumbers,organizations,biographies",
                body=body,
            )
        )
        return parse_contact(raw, self.account.id, person.user_id)

    def delete_contact(self, contact_id: str) -> None:
        self._execute(lambda service: service.people().deleteContact(resourceName=contact_id))

    def get_contact_groups(self) -> list[dict]:
        result = self._execute(lambda service: service.contactGroups().list(pageSize=100))
        return [
            {
                "id": group.get("resourceName", ""),
                "name": group.get("formattedName") or group.get("name", ""),
                "memberCount": group.get("memberCount", 0),
            }
            for group in result.get("contactGroups", [])
        ]
