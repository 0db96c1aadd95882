"""Pure integration-account logic - token validity and account status."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from .records import new_id, parse_datetime, to_iso, utcnow

# Tokens this close to expiry count as expired (network latency, clock skew)
EXPIRY_BUFFER = timedelta(seconds=30)
# Fraction of expires_in we trust
EXPIRY_SAFETY_FACTOR = 0.9
DEFAULT_EXPIRES_IN = 3600

GMAIL_SCOPE_MARKERS = (
    "gmail.readonly",
    "gmail.send",
    "gmail.modify",
    "gmail.labels",
)


class AccountType(str, Enum):
    GOOGLE = "google"
    OFFICE365 = "office365"
    EXCHANGE = "exchange"


class Capability(str, Enum):
    CALENDAR = "calendar"
    MAIL = "mail"
    TASKS = "tasks"
    CONTACTS = "contacts"


@dataclass
class IntegrationAccount:
    """A connection to an external mail/calendar/contacts/tasks provider."""

    id: str
    user_id: str
    name: str
    type: str
    email: str
    username: str = ""
    server: str = ""
    connected: bool = False
    last_sync: datetime | None = None
    sync_calendar: bool = True
    sync_mail: bool = True
    sync_tasks: bool = True
    sync_contacts: bool = True
    show_in_calendar: bool = True
    show_in_mail: bool = True
    show_in_tasks: bool = True
    show_in_contacts: bool = True
    color: str = "#1976D2"
    access_token: str = ""
    refresh_token: str = ""
    token_expiry: datetime | None = None
    token_type: str = "Bearer"
    scope: str = ""
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @classmethod
    def new(cls, user_id: str, type: str, email: str, **kwargs) -> "IntegrationAccount":
        AccountType(type)
        return cls(
            id=kwargs.pop("id", None) or new_id(),
            user_id=user_id,
            name=kwargs.pop("name", None) or email,
            type=type,
            email=email,
            username=kwargs.pop("username", None) or email,
            **kwargs,
        )

    def syncs(self, capability: Capability | str) -> bool:
        """True when the account both syncs and shows the given capability."""
        cap = Capability(capability).value
        return getattr(self, f"sync_{cap}") and getattr(self, f"show_in_{cap}")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "type": self.type,
            "email": self.email,
            "username": self.username,
            "server": self.server,
            "connected": self.connected,
            "lastSync": to_iso(self.last_sync),
            "syncCalendar": self.sync_calendar,
            "syncMail": self.sync_mail,
            "syncTasks": self.sync_tasks,
            "syncContacts": self.sync_contacts,
            "showInCalendar": self.show_in_calendar,
            "showInMail": self.show_in_mail,
            "showInTasks": self.show_in_tasks,
            "showInContacts": self.show_in_contacts,
            "color": self.color,
            "accessToken": self.access_token,
            "refreshToken": self.refresh_token,
            "tokenExpiry": to_iso(self.token_expiry),
            "tokenType": self.token_type,
            "scope": self.scope,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "IntegrationAccount":
        # Older documents nest the token fields under oauthData
        oauth = {**data, **(data.get("oauthData") or {})}
        return cls(
            id=data["id"],
            user_id=data.get("userId", ""),
            name=data.get("name", "") or oauth.get("email", ""),
            type=data.get("type", AccountType.GOOGLE.value),
            email=oauth.get("email", ""),
            username=data.get("username", ""),
            server=data.get("server", "") or "",
            connected=bool(oauth.get("connected", False)),
            last_sync=parse_datetime(data.get("lastSync")),
            sync_calendar=data.get("syncCalendar", True),
            sync_mail=data.get("syncMail", True),
            sync_tasks=data.get("syncTasks", True),
            sync_contacts=data.get("syncContacts", True),
            show_in_calendar=data.get("showInCalendar", True),
            show_in_mail=data.get("showInMail", True),
            show_in_tasks=data.get("showInTasks", True),
            show_in_contacts=data.get("showInContacts", True),
            color=data.get("color", "#1976D2"),
            access_token=oauth.get("accessToken", "") or "",
            refresh_token=oauth.get("refreshToken", "") or "",
            token_expiry=parse_datetime(oauth.get("tokenExpiry")),
            token_type=oauth.get("tokenType", "Bearer") or "Bearer",
            scope=oauth.get("scope", "") or "",
            created_at=parse_datetime(data.get("createdAt")) or utcnow(),
            updated_at=parse_datetime(data.get("updatedAt")) or utcnow(),
        )


def token_provider(account: IntegrationAccount) -> str:
    """Map an account type to the OAuth provider that issues its tokens."""
    match account.type:
        case AccountType.GOOGLE.value:
            return "google"
        case AccountType.OFFICE365.value | AccountType.EXCHANGE.value:
            return "microsoft"
    raise ValueError(f"Unsupported account type: {account.type}")


def has_valid_tokens(account: IntegrationAccount, now: datetime | None = None) -> bool:
    """
    Check that the account holds a usable access token.

    A token without a known expiry is treated as expired.
    Pure function - no I/O.
    """
    if not account.access_token:
        return False
    if not account.token_expiry:
        return False
    now = now or utcnow()
    return now + EXPIRY_BUFFER <= account.token_expiry


def apply_token_response(
    account: IntegrationAccount,
    tokens: dict,
    now: datetime | None = None,
) -> IntegrationAccount:
    """
    Update an account from a token endpoint response.

    Accepts snake_case or camelCase keys. Keeps the existing refresh token and
    scope when the response omits them.
    """
    access_token = tokens.get("access_token") or tokens.get("accessToken")
    if not access_token:
        raise ValueError("Token response is missing an access token")

    now = now or utcnow()
    expires_in = tokens.get("expires_in") or tokens.get("expiresIn") or DEFAULT_EXPIRES_IN
    account.access_token = access_token
    account.refresh_token = (
        tokens.get("refresh_token") or tokens.get("refreshToken") or account.refresh_token
    )
    account.token_type = tokens.get("token_type") or tokens.get("tokenType") or "Bearer"
    account.scope = tokens.get("scope") or account.scope
    account.token_expiry = now + timedelta(seconds=int(expires_in) * EXPIRY_SAFETY_FACTOR)
    account.connected = True
    account.updated_at = now
    return account


def _missing_mail_scope(account: IntegrationAccount) -> bool:
    if not account.scope:
        return False
    if account.type == AccountType.GOOGLE.value:
        return not any(marker in account.scope for marker in GMAIL_SCOPE_MARKERS)
    return "Mail.Read" not in account.scope


def account_status_message(account: IntegrationAccount, now: datetime | None = None) -> str:
    """Human-readable connection status."""
    if not account.connected:
        return "Not connected"
    if not has_valid_tokens(account, now):
        return "Authentication required"
    if _missing_mail_scope(account):
        if account.type == AccountType.GOOGLE.value:
            return "Gmail permissions required"
        return "Mail access permissions required"
    return "Connected"


def account_status_color(account: IntegrationAccount, now: datetime | None = None) -> str:
    """Status colour: error, warning or success."""
    if not account.connected:
        return "error"
    if not has_valid_tokens(account, now) or _missing_mail_scope(account):
        return "warning"
    return "success"
