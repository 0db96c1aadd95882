"""Office365 (Microsoft Graph) and Exchange (Outlook REST) adapters."""

import logging
from datetime import date, datetime, time, timedelta, timezone

from organizer.core.calendar import Attendee, Calendar, CalendarEvent, EventQuery
from organizer.core.mail import Email, EmailAddress
from organizer.core.people import ContactPage, Person
from organizer.core.records import parse_datetime
from organizer.core.tasks import Task, TaskStatus

from .base_provider import BaseProvider

logger = logging.getLogger(__name__)

GRAPH_BASE = "https://graph.microsoft.com/v1.0"
OUTLOOK_BASE = "https://outlook.office.com/api/v2.0"
PAGE_SIZE = 50

FOLDER_NAMES = {
    "inbox": "inbox",
    "sent": "sentitems",
    "drafts": "drafts",
    "trash": "deleteditems",
    "spam": "junkemail",
}


def _pascal(value):
    """Convert dict keys to PascalCase, recursively."""
    if isinstance(value, dict):
        return {k[:1].upper() + k[1:]: _pascal(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_pascal(v) for v in value]
    return value


def _camel(value):
    """Convert dict keys to camelCase, recursively. OData annotations are kept."""
    if isinstance(value, dict):
        return {
            (k if k.startswith("@") else k[:1].lower() + k[1:]): _camel(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [_camel(v) for v in value]
    return value


def graph_datetime(value: dict | None) -> datetime | None:
    """
    Parse a Graph dateTimeTimeZone value.

    Graph sends seven fractional digits and no offset; the zone is UTC when
    requested with the outlook.timezone preference.
    """
    if not value or not value.get("dateTime"):
        return None
    text = value["dateTime"].rstrip("Z")
    if "." in text:
        head, fraction = text.split(".", 1)
        text = f"{head}.{fraction[:6]}"
    return datetime.fromisoformat(text).replace(tzinfo=timezone.utc)


def _utc_text(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")


def _address(raw: dict | None) -> EmailAddress:
    raw = (raw or {}).get("emailAddress") or {}
    return EmailAddress(name=raw.get("name", ""), email=raw.get("address", ""))


def _recipient(address: EmailAddress) -> dict:
    return {"emailAddress": {"name": address.name, "address": address.email}}


class MicrosoftProvider(BaseProvider):
    """
    BaseProvider for Microsoft REST APIs.

    Office365 accounts talk to Graph v1.0. Exchange accounts use the Outlook
    REST v2.0 endpoint, which spells its properties in PascalCase; payloads
    are converted on the way in and out so adapters only see camelCase.
    """

    @property
    def base_url(self) -> str:
        return OUTLOOK_BASE if self.account.type == "exchange" else GRAPH_BASE

    @property
    def pascal_case(self) -> bool:
        return self.account.type == "exchange"

    def _api(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        body: dict | None = None,
        headers: dict | None = None,
    ):
        url = path if path.startswith("http") else f"{self.base_url}{path}"
        if body is not None and self.pascal_case:
            body = _pascal(body)
        data = self._call(lambda: self._request(method, url, params=params, json=body, headers=headers))
        return _camel(data) if self.pascal_case else data

    def _paged(self, path: str, params: dict | None = None, headers: dict | None = None) -> list[dict]:
        items = []
        data = self._api("GET", path, params=params, headers=headers) or {}
        while True:
            items.extend(data.get("value", []))
            next_link = data.get("@odata.nextLink")
            if not next_link:
                return items
            data = self._api("GET", next_link, headers=headers) or {}


# Calendar


def parse_event(item: dict, calendar_id: str, account_id: str) -> CalendarEvent:
    start = graph_datetime(item.get("start"))
    end = graph_datetime(item.get("end")) or start
    all_day = bool(item.get("isAllDay"))
    if all_day and end and end > start:
        # All-day end is exclusive
        end = end - timedelta(days=1)
    organizer = _address(item.get("organizer"))
    return CalendarEvent(
        id=item.get("id", ""),
        title=item.get("subject") or "(No title)",
        start=start,
        end=end,
        all_day=all_day,
        description=item.get("bodyPreview", "") or "",
        location=(item.get("location") or {}).get("displayName", ""),
        organizer=Attendee(organizer.name, organizer.email) if organizer.email else None,
        attendees=[
            Attendee(a.name or a.email, a.email)
            for a in (_address(raw) for raw in item.get("attendees") or [])
            if a.email
        ],
        calendar_id=calendar_id,
        account_id=account_id,
        type=item.get("type", ""),
    )


def event_body(event: CalendarEvent) -> dict:
    if event.all_day:
        start = datetime.combine(event.start.date(), time.min)
        end = datetime.combine(event.end.date() + timedelta(days=1), time.min)
        start_text, end_text = start.isoformat(), end.isoformat()
    else:
        start_text, end_text = _utc_text(event.start), _utc_text(event.end)
    body = {
        "subject": event.title,
        "body": {"contentType": "text", "content": event.description or ""},
        "isAllDay": event.all_day,
        "start": {"dateTime": start_text, "timeZone": "UTC"},
        "end": {"dateTime": end_text, "timeZone": "UTC"},
        "location": {"displayName": event.location or ""},
    }
    if event.attendees:
        body["attendees"] = [
            {"emailAddress": {"name": a.name, "address": a.email}, "type": "required"}
            for a in event.attendees
        ]
    return body


class Office365CalendarAdapter(MicrosoftProvider):
    """Implements CalendarProvider protocol over Graph/Outlook REST."""

    PREFER_UTC = {"Prefer": 'outlook.timezone="UTC"'}

    def fetch_events(self, query: EventQuery | None = None) -> list[CalendarEvent]:
        query = query or EventQuery()
        start = query.start or datetime.combine(date.today(), time.min, tzinfo=timezone.utc)
        end = query.end or start + timedelta(days=31)
        path = (
            f"/me/calendars/{query.calendar_id}/calendarView"
            if query.calendar_id
            else "/me/calendarView"
        )
        items = self._paged(
            path,
            params={
                "startDateTime": _utc_text(start),
                "endDateTime": _utc_text(end),
                "$top": str(PAGE_SIZE),
                "$orderby": "start/dateTime",
            },
            headers=self.PREFER_UTC,
        )
        return [parse_event(item, query.calendar_id, self.account.id) for item in items]

    def create_event(self, event: CalendarEvent) -> CalendarEvent:
        path = f"/me/calendars/{event.calendar_id}/events" if event.calendar_id else "/me/events"
        item = self._api("POST", path, body=event_body(event), headers=self.PREFER_UTC)
        return parse_event(item, event.calendar_id, self.account.id)

    def update_event(self, event: CalendarEvent) -> CalendarEvent:
        item = self._api("PATCH", f"/me/events/{event.id}", body=event_body(event), headers=self.PREFER_UTC)
        return parse_event(item, event.calendar_id, self.account.id)

    def delete_event(self, event_id: str, calendar_id: str = "") -> None:
        self._api("DELETE", f"/me/events/{event_id}")

    def get_calendars(self) -> list[Calendar]:
        return [
            Calendar(
                id=item.get("id", ""),
                name=item.get("name", ""),
                primary=bool(item.get("isDefaultCalendar", False)),
                color=item.get("hexColor") or item.get("color", ""),
                account_id=self.account.id,
            )
            for item in self._paged("/me/calendars")
        ]


# Mail


def parse_message(item: dict, folder: str, account_id: str) -> Email:
    body = item.get("body") or {}
    return Email(
        id=item.get("id", ""),
        subject=item.get("subject") or "(No subject)",
        sender=_address(item.get("from")),
        to=[_address(r) for r in item.get("toRecipients") or []],
        cc=[_address(r) for r in item.get("ccRecipients") or []],
        body=body.get("content") or item.get("bodyPreview", ""),
        date=parse_datetime(item.get("receivedDateTime")),
        read=bool(item.get("isRead", False)),
        folder=folder,
        account_id=account_id,
    )


class Office365MailAdapter(MicrosoftProvider):
    """Implements MailProvider protocol over Graph/Outlook REST."""

    def fetch_emails(self, folder: str = "inbox", max_results: int = 50) -> list[Email]:
        graph_folder = FOLDER_NAMES.get(folder, folder)
        data = self._api(
            "GET",
            f"/me/mailFolders/{graph_folder}/messages",
            params={
                "$top": str(max_results),
                "$orderby": "receivedDateTime desc",
                "$select": "id,subject,from,toRecipients,ccRecipients,body,bodyPreview,"
                "receivedDateTime,isRead",
            },
        ) or {}
        return [parse_message(item, folder, self.account.id) for item in data.get("value", [])]

    def send_email(self, email: Email) -> None:
        message = {
            "subject": email.subject,
            "body": {"contentType": "HTML", "content": email.body or ""},
            "toRecipients": [_recipient(a) for a in email.to],
        }
        if email.cc:
            message["ccRecipients"] = [_recipient(a) for a in email.cc]
        self._api("POST", "/me/sendMail", body={"message": message, "saveToSentItems": True})
        logger.info(f"Sent email '{email.subject}' from {self.account.email}")

    def mark_read(self, email_id: str, read: bool = True) -> None:
        self._api("PATCH", f"/me/messages/{email_id}", body={"isRead": read})

    def delete_email(self, email_id: str) -> None:
        self._api("POST", f"/me/messages/{email_id}/move", body={"destinationId": "deleteditems"})


# Contacts


def parse_contact(item: dict, account_id: str, user_id: str = "") -> Person:
    emails = item.get("emailAddresses") or []
    phones = item.get("businessPhones") or []
    return Person(
        id="",
        user_id=user_id,
        first_name=item.get("givenName") or "",
        last_name=item.get("surname") or "",
        email=emails[0].get("address", "") if emails else "",
        phone=item.get("mobilePhone") or (phones[0] if phones else ""),
        organization=item.get("companyName") or "",
        role=item.get("jobTitle") or "",
        notes=item.get("personalNotes") or "",
        source_account_id=account_id,
        external_id=item.get("id", ""),
    )


def contact_body(person: Person) -> dict:
    body = {
        "givenName": person.first_name,
        "surname": person.last_name,
        "emailAddresses": (
            [{"address": person.email, "name": person.full_name}] if person.email else []
        ),
        "companyName": person.organization,
        "jobTitle": person.role,
        "personalNotes": person.notes,
    }
    if person.phone:
        body["mobilePhone"] = person.phone
    return body


class Office365ContactsAdapter(MicrosoftProvider):
    """Implements ContactProvider protocol over Graph/Outlook REST."""

    def fetch_contacts(self, query: str = "", page: str | None = None) -> ContactPage:
        if page:
            data = self._api("GET", page)
        else:
            params = {"$top": str(PAGE_SIZE), "$count": "true"}
            if query:
                escaped = query.replace("'", "''")
                params["$filter"] = f"startswith(displayName,'{escaped}')"
            data = self._api("GET", "/me/contacts", params=params)
        data = data or {}
        return ContactPage(
            contacts=[parse_contact(item, self.account.id) for item in data.get("value", [])],
            next_page=data.get("@odata.nextLink"),
            total=data.get("@odata.count"),
        )

    def create_contact(self, person: Person) -> Person:
        item = self._api("POST", "/me/contacts", body=contact_body(person))
        return parse_contact(item, self.account.id, person.user_id)

    def update_contact(self, person: Person) -> Person:
        item = self._api("PATCH", f"/me/contacts/{person.external_id}", body=contact_body(person))
        return parse_contact(item, self.account.id, person.user_id)

    def delete_contact(self, contact_id: str) -> None:
        self._api("DELETE", f"/me/contacts/{contact_id}")

    def get_contact_groups(self) -> list[dict]:
        return [
            {"id": item.get("id", ""), "name": item.get("displayName", "")}
            for item in self._paged("/me/contactFolders")
        ]


# Tasks


def parse_task(item: dict, user_id: str = "") -> Task:
    status = item.get("status", "notStarted")
    if status == "completed":
        mapped = TaskStatus.COMPLETED.value
    elif status == "inProgress":
        mapped = TaskStatus.IN_PROGRESS.value
    else:
        mapped = TaskStatus.TODO.value
    return Task(
        id=item.get("id", ""),
        user_id=user_id,
        title=item.get("title") or item.get("subject") or "",
        description=(item.get("body") or {}).get("content", ""),
        status=mapped,
        priority="high" if item.get("importance") == "high" else "medium",
        due_date=graph_datetime(item.get("dueDateTime")),
        completed_at=graph_datetime(item.get("completedDateTime")),
    )


class Office365TasksAdapter(MicrosoftProvider):
    """
    Implements TaskProvider protocol.

    Office365 uses Microsoft To Do lists; Exchange uses the Outlook task
    folders, where a task's title is called its subject.
    """

    def _title_field(self) -> str:
        return "subject" if self.pascal_case else "title"

    def _tasks_path(self, list_id: str) -> str:
        if self.pascal_case:
            return f"/me/taskfolders/{list_id}/tasks" if list_id else "/me/tasks"
        return f"/me/todo/lists/{list_id or self._default_list()}/tasks"

    def _default_list(self) -> str:
        lists = self._paged("/me/todo/lists")
        for item in lists:
            if item.get("wellknownListName") == "defaultList":
                return item["id"]
        if not lists:
            raise ValueError(f"No task lists for {self.account.email}")
        return lists[0]["id"]

    def _body(self, task: Task) -> dict:
        body = {
            self._title_field(): task.title,
            "body": {"content": task.description or task.notes, "contentType": "text"},
            "status": {
                TaskStatus.COMPLETED.value: "completed",
                TaskStatus.IN_PROGRESS.value: "inProgress",
            }.get(task.status, "notStarted"),
        }
        if task.due_date:
            body["dueDateTime"] = {"dateTime": _utc_text(task.due_date), "timeZone": "UTC"}
        return body

    def fetch_tasks(self, list_id: str = "") -> list[Task]:
        return [parse_task(item, self.account.user_id) for item in self._paged(self._tasks_path(list_id))]

    def create_task(self, task: Task, list_id: str = "") -> Task:
        item = self._api("POST", self._tasks_path(list_id), body=self._body(task))
        return parse_task(item, task.user_id)

    def update_task(self, task: Task, list_id: str = "") -> Task:
        item = self._api("PATCH", f"{self._tasks_path(list_id)}/{task.id}", body=self._body(task))
        return parse_task(item, task.user_id)

    def delete_task(self, task_id: str, list_id: str = "") -> None:
        self._api("DELETE", f"{self._tasks_path(list_id)}/{task_id}")

    def complete_task(self, task_id: str, list_id: str = "") -> Task:
        item = self._api(
            "PATCH", f"{self._tasks_path(list_id)}/{task_id}", body={"status": "completed"}
        )
        return parse_task(item, self.account.user_id)
