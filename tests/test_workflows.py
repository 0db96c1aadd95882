"""Tests for the shared workflow layer."""

import importlib
import json
from unittest.mock import MagicMock, patch

import pytest

from organizer.adapters.file_store import FileDocumentStore
from organizer.config import ORGANIZER_HOME, Config
from organizer.core.users import AIIntegration
from organizer.errors import ValidationError
from organizer.refresh import DataRefresher
from organizer.stores import FeedbackStore, UserStore
from organizer.workflows import (
    analyze_text,
    get_document_store,
    open_workspace,
    process_feedback,
)


@pytest.fixture
def db(tmp_path):
    return FileDocumentStore(tmp_path)


class TestGetDocumentStore:
    def test_file_backend_uses_data_dir(self, tmp_path):
        store = get_document_store(Config(data_dir=str(tmp_path / "data")))
        assert isinstance(store, FileDocumentStore)
        assert store.data_dir == tmp_path / "data"

    @patch("organizer.adapters.firestore_store.FirestoreDocumentStore")
    def test_firestore_backend(self, mock_cls):
        config = Config(store_backend="firestore")
        assert get_document_store(config) is mock_cls.return_value
        mock_cls.assert_called_once_with(config)

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown store backend: sqlite"):
            get_document_store(Config(store_backend="sqlite"))


class TestOpenWorkspace:
    def test_stores_share_db_and_user(self, db):
        workspace = open_workspace(Config(user_id="ada"), db)
        assert workspace.user_id == "ada"
        assert workspace.tasks.db is db
        assert workspace.feedback.user_id == "ada"
        assert workspace.calendar.accounts is workspace.accounts
        assert workspace.mail.accounts is workspace.accounts

    def test_user_override(self, db):
        assert open_workspace(Config(user_id="ada"), db, user_id="bob").people.user_id == "bob"

    @pytest.mark.parametrize("module", ["organizer.cli", "organizer.server", "organizer.stores.projects"])
    def test_front_ends_import(self, module):
        assert importlib.import_module(module)

    def test_project_pages_through_workspace(self, db):
        projects = open_workspace(Config(user_id="ada"), db).projects
        project = projects.add("Website")
        projects.create_page(project.id, "Notes")
        assert [p.title for p in projects.fetch_pages(project.id)] == ["Notes"]

    def test_refresher(self, db):
        workspace = open_workspace(Config(), db)
        refresher = workspace.refresher()
        assert isinstance(refresher, DataRefresher)
        assert refresher.mail is workspace.mail


ANALYSIS = json.dumps(
    {
        "people": [{"name": "Grace Hopper", "confidence": 0.9, "details": {"firstName": "Grace"}}],
        "tasks": [{"name": "Send slides", "confidence": 0.8, "details": {}}],
        "summary": "Planning call",
    }
)


class TestAnalyzeText:
    @pytest.fixture
    def users(self, db):
        users = UserStore(db, "u1")
        users.save_ai_integration(AIIntegration("openai", api_key="sk-test"))
        return users

    def test_analyzes_with_configured_integration(self, users):
        service = MagicMock()
        service.generate.return_value = ANALYSIS
        factory = MagicMock(return_value=service)

        result = analyze_text(users, "openai", "Call Grace about the slides", service_factory=factory)

        factory.assert_called_once_with("openai", "sk-test")
        assert service.generate.call_args.args[0] == "Call Grace about the slides"
        assert service.generate.call_args.kwargs["system"]
        assert [p.name for p in result.people] == ["Grace Hopper"]
        assert result.summary == "Planning call"
        assert users.ai_integration("openai").last_used is not None

    @pytest.mark.parametrize(
        "provider, text, message",
        [
            ("", "text", "AI provider ID is required"),
            ("openai", "   ", "Text to analyze is required"),
            ("gemini", "text", "AI integration not found or disabled"),
        ],
    )
    def test_validation(self, users, provider, text, message):
        with pytest.raises(ValidationError, match=message):
            analyze_text(users, provider, text, service_factory=MagicMock())

    def test_disabled_integration(self, users):
        users.save_ai_integration(AIIntegration("openai", api_key="sk-test", enabled=False))
        with pytest.raises(ValidationError, match="not found or disabled"):
            analyze_text(users, "openai", "text", service_factory=MagicMock())

    def test_missing_api_key(self, users):
        users.save_ai_integration(AIIntegration("xai"))
        with pytest.raises(ValidationError, match="API key not found"):
            analyze_text(users, "xai", "text", service_factory=MagicMock())

    def test_provider_failure_propagates(self, users):
        service = MagicMock()
        service.generate.side_effect = RuntimeError("rate limited")
        with pytest.raises(RuntimeError):
            analyze_text(users, "openai", "text", service_factory=MagicMock(return_value=service))
        assert users.ai_integration("openai").last_used is None


class TestProcessFeedback:
    @pytest.fixture
    def feedback(self, db):
        return FeedbackStore(db, "u1")

    def test_processes_approved_feedback(self, feedback):
        approved = feedback.add("Search is slow", page="/people")
        feedback.set_user_action(approved.id, "yes")
        rejected = feedback.add("Make it purple")
        feedback.set_user_action(rejected.id, "no")
        feedback.add("Unreviewed")
        llm = MagicMock()
        llm.generate.return_value = "  Add an index on lastName\n"

        processed = process_feedback(feedback, llm)

        assert [f.id for f in processed] == [approved.id]
        assert "Search is slow" in llm.generate.call_args.args[0]
        stored = feedback.get(approved.id)
        assert stored.processed
        assert stored.suggestion == "Add an index on lastName"

    def test_already_processed_is_skipped(self, feedback):
        item = feedback.add("Search is slow")
        feedback.set_user_action(item.id, "yes")
        feedback.mark_processed(item.id, "done")
        llm = MagicMock()

        assert process_feedback(feedback, llm) == []
        llm.generate.assert_not_called()

    @patch("organizer.workflows.ClaudeCLIService")
    def test_defaults_to_claude_cli(self, mock_cls, feedback):
        assert process_feedback(feedback) == []
        mock_cls.assert_called_once_with(cwd=ORGANIZER_HOME)
