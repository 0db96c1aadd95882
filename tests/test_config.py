"""Tests for configuration loading."""

from pathlib import Path

import pytest

from organizer.config import DATA_DIR, ENV_OVERRIDES, Config, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "nope.conf")
        assert config == Config()

    def test_parses_keys_comments_and_quotes(self, tmp_path):
        path = tmp_path / "organizer.conf"
        path.write_text(
            "# Organizer config\n"
            "\n"
            "USER_ID=alice\n"
            'GOOGLE_CLIENT_ID="abc # not a comment"\n'
            "STORE_BACKEND=firestore  # inline comment\n"
            "TIMEZONE='America/Toronto'\n"
        )
        config = load_config(path)
        assert config.user_id == "alice"
        assert config.google_client_id == "abc # not a comment"
        assert config.store_backend == "firestore"
        assert config.timezone == "America/Toronto"

    def test_int_keys(self, tmp_path):
        path = tmp_path / "organizer.conf"
        path.write_text("SERVER_PORT=8080\nREFRESH_INTERVAL_MINUTES=15\nWEEK_STARTS_ON=0\n")
        config = load_config(path)
        assert config.server_port == 8080
        assert config.refresh_interval_minutes == 15
        assert config.week_starts_on == 0

    def test_malformed_int_keeps_default(self, tmp_path, caplog):
        path = tmp_path / "organizer.conf"
        path.write_text("SERVER_PORT=lots\n")
        config = load_config(path)
        assert config.server_port == 3000
        assert "SERVER_PORT" in caplog.text

    def test_unknown_key_ignored(self, tmp_path):
        path = tmp_path / "organizer.conf"
        path.write_text("TELEGRAM_BOT_TOKEN=x\nUSER_ID=bob\n")
        config = load_config(path)
        assert config.user_id == "bob"
        assert not hasattr(config, "telegram_bot_token")

    def test_environment_wins_over_file(self, tmp_path, monkeypatch):
        path = tmp_path / "organizer.conf"
        path.write_text("GOOGLE_CLIENT_SECRET=from-file\nAPI_TOKEN=file-token\n")
        monkeypatch.setenv("GOOGLE_CLIENT_SECRET", "from-env")
        monkeypatch.setenv("ORGANIZER_API_TOKEN", "env-token")
        config = load_config(path)
        assert config.google_client_secret == "from-env"
        assert config.api_token == "env-token"


class TestResolvedDataDir:
    def test_default(self):
        assert Config().resolved_data_dir == DATA_DIR

    def test_expands_user(self):
        config = Config(data_dir="~/org-data")
        assert config.resolved_data_dir == Path.home() / "org-data"
