"""Configuration management for Organizer."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

ORGANIZER_HOME = Path(os.environ.get("ORGANIZER_HOME", Path.home() / "organizer"))
CONFIG_FILE = ORGANIZER_HOME / "config" / "organizer.conf"
DATA_DIR = ORGANIZER_HOME / "data"

# Environment variables that override values from organizer.conf
ENV_OVERRIDES = {
    "GOOGLE_CLIENT_ID": "google_client_id",
    "GOOGLE_CLIENT_SECRET": "google_client_secret",
    "MICROSOFT_CLIENT_ID": "microsoft_client_id",
    "MICROSOFT_CLIENT_SECRET": "microsoft_client_secret",
    "ORGANIZER_API_TOKEN": "api_token",
}

_INT_KEYS = {"week_starts_on", "refresh_interval_minutes", "server_port"}


@dataclass
class Config:
    """Organizer configuration."""

    user_id: str = "local"
    data_dir: str = ""
    store_backend: str = "file"
    firebase_credentials_file: str = ""
    firebase_project_id: str = ""
    google_client_id: str = ""
    google_client_secret: str = ""
    google_client_secret_file: str = ""
    microsoft_client_id: str = ""
    microsoft_client_secret: str = ""
    microsoft_tenant: str = "common"
    timezone: str = "UTC"
    week_starts_on: int = 1
    refresh_interval_minutes: int = 0
    server_host: str = "127.0.0.1"
    server_port: int = 3000
    api_token: str = ""
    default_language: str = "en"

    @property
    def resolved_data_dir(self) -> Path:
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return DATA_DIR


def _unquote(value: str) -> str:
    """Strip quotes, or inline comments from unquoted values."""
    if value[:1] in ('"', "'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _apply(config: Config, key: str, value: str) -> None:
    if key not in Config.__dataclass_fields__:
        return
    if key in _INT_KEYS:
        try:
            setattr(config, key, int(value))
        except ValueError:
            logger.warning(f"Invalid integer for {key.upper()}: {value!r}")
        return
    setattr(config, key, value)


def load_config(path: Path | None = None) -> Config:
    """Load configuration from organizer.conf, then apply environment overrides."""
    config = Config()
    path = path or CONFIG_FILE

    if path.exists():
        for line in path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, _, value = line.partition("=")
            _apply(config, key.strip().lower(), _unquote(value.strip()))

    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            _apply(config, key, value)

    return config
