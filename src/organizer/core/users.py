"""User profile and settings records."""

from dataclasses import dataclass, field
from datetime import datetime

from .records import parse_datetime, to_iso, utcnow

AI_PROVIDERS = ("openai", "gemini", "xai")


@dataclass
class AIIntegration:
    """An API key for an AI provider, kept in the user's settings."""

    provider: str
    name: str = ""
    api_key: str = ""
    enabled: bool = True
    connected: bool = False
    last_used: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "provider": self.provider,
            "name": self.name,
            "apiKey": self.api_key,
            "enabled": self.enabled,
            "connected": self.connected,
            "lastUsed": to_iso(self.last_used),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AIIntegration":
        return cls(
            provider=data.get("provider", ""),
            name=data.get("name", "") or "",
            api_key=data.get("apiKey", "") or "",
            enabled=bool(data.get("enabled", True)),
            connected=bool(data.get("connected", False)),
            last_used=parse_datetime(data.get("lastUsed")),
            created_at=parse_datetime(data.get("createdAt")),
            updated_at=parse_datetime(data.get("updatedAt")),
        )


@dataclass
class UserSettings:
    default_language: str = "en"
    dark_mode: bool = False
    email_notifications: bool = True
    calendar_sync: bool = False
    week_starts_on: int = 1
    ai_integrations: list[AIIntegration] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "defaultLanguage": self.default_language,
            "darkMode": self.dark_mode,
            "emailNotifications": self.email_notifications,
            "calendarSync": self.calendar_sync,
            "weekStartsOn": self.week_starts_on,
            "aiIntegrations": [i.to_dict() for i in self.ai_integrations],
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "UserSettings":
        data = data or {}
        return cls(
            default_language=data.get("defaultLanguage", "en") or "en",
            dark_mode=bool(data.get("darkMode", False)),
            email_notifications=bool(data.get("emailNotifications", True)),
            calendar_sync=bool(data.get("calendarSync", False)),
            week_starts_on=int(data.get("weekStartsOn", 1)),
            ai_integrations=[AIIntegration.from_dict(i) for i in data.get("aiIntegrations") or []],
        )


@dataclass
class User:
    id: str
    email: str = ""
    display_name: str = ""
    photo_url: str = ""
    last_login: datetime | None = None
    settings: UserSettings = field(default_factory=UserSettings)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def ai_integration(self, provider: str) -> AIIntegration | None:
        for integration in self.settings.ai_integrations:
            if integration.provider == provider:
                return integration
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            # Users own themselves, so owner checks work on this collection too
            "userId": self.id,
            "email": self.email,
            "displayName": self.display_name,
            "photoURL": self.photo_url,
            "lastLogin": to_iso(self.last_login),
            "settings": self.settings.to_dict(),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        return cls(
            id=data["id"],
            email=data.get("email", "") or "",
            display_name=data.get("displayName", "") or "",
            photo_url=data.get("photoURL", "") or "",
            last_login=parse_datetime(data.get("lastLogin")),
            settings=UserSettings.from_dict(data.get("settings")),
            created_at=parse_datetime(data.get("createdAt")) or utcnow(),
            updated_at=parse_datetime(data.get("updatedAt")) or utcnow(),
        )
