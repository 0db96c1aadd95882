"""Pure people/contacts domain logic - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import datetime

from .records import parse_datetime, str_list, to_iso, utcnow

# Fields a provider contact may overwrite on a matching person
_SYNCED_FIELDS = ("first_name", "last_name", "email", "phone", "organization", "role")


@dataclass
class Person:
    """A person (contact) known to a user."""

    id: str
    user_id: str
    first_name: str
    last_name: str = ""
    email: str = ""
    phone: str = ""
    organization: str = ""
    role: str = ""
    team: str = ""
    notes: str = ""
    tags: list[str] = field(default_factory=list)
    related_projects: list[str] = field(default_factory=list)
    last_contacted: datetime | None = None
    source_account_id: str = ""
    external_id: str = ""
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "organization": self.organization,
            "role": self.role,
            "team": self.team,
            "notes": self.notes,
            "tags": list(self.tags),
            "relatedProjects": list(self.related_projects),
            "lastContacted": to_iso(self.last_contacted),
            "sourceAccountId": self.source_account_id,
            "externalId": self.external_id,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Person":
        return cls(
            id=data.get("id", ""),
            user_id=data.get("userId", ""),
            first_name=data.get("firstName", "") or "",
            last_name=data.get("lastName", "") or "",
            email=data.get("email", "") or "",
            phone=data.get("phone", "") or "",
            organization=data.get("organization", "") or "",
            role=data.get("role", "") or "",
            team=data.get("team", "") or "",
            notes=data.get("notes", "") or "",
            tags=str_list(data.get("tags")),
            related_projects=str_list(data.get("relatedProjects")),
            last_contacted=parse_datetime(data.get("lastContacted")),
            source_account_id=data.get("sourceAccountId", "") or "",
            external_id=data.get("externalId", "") or "",
            created_at=parse_datetime(data.get("createdAt")) or utcnow(),
            updated_at=parse_datetime(data.get("updatedAt")) or utcnow(),
        )


def recently_contacted(people: list[Person], limit: int = 5) -> list[Person]:
    """People with a last-contacted date, most recent first."""
    contacted = [p for p in people if p.last_contacted]
    contacted.sort(key=lambda p: p.last_contacted, reverse=True)
    return contacted[:limit]


def filter_by_organization(people: list[Person], organization: str) -> list[Person]:
    return [p for p in people if p.organization == organization]


def filter_by_team(people: list[Person], team: str) -> list[Person]:
    return [p for p in people if p.team == team]


def filter_by_role(people: list[Person], role: str) -> list[Person]:
    return [p for p in people if p.role == role]


def find_matching_person(people: list[Person], contact: Person) -> Person | None:
    """
    Find the person a provider contact corresponds to.

    Matches on (source account, external id) first, then on email
    (case-insensitive).
    """
    if contact.external_id:
        for person in people:
            if (
                person.external_id == contact.external_id
                and person.source_account_id == contact.source_account_id
            ):
                return person
    if contact.email:
        email = contact.email.lower()
        for person in people:
            if person.email and person.email.lower() == email:
                return person
    return None


def merge_contact(person: Person, contact: Person) -> bool:
    """
    Copy non-empty provider fields onto a person. Returns True if anything changed.

    Local-only fields (team, notes, related projects) are never touched; tags
    are unioned.
    """
    changed = False
    for name in _SYNCED_FIELDS:
        value = getattr(contact, name)
        if value and getattr(person, name) != value:
            setattr(person, name, value)
            changed = True

    for tag in contact.tags:
        if tag not in person.tags:
            person.tags.append(tag)
            changed = True

    if contact.external_id and not person.external_id:
        person.external_id = contact.external_id
        person.source_account_id = contact.source_account_id
        changed = True

    return changed


@dataclass
class ContactPage:
    """One page of contacts from a provider."""

    contacts: list[Person]
    next_page: str | None = None
    total: int | None = None
