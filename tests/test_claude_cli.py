"""Tests for the Claude CLI adapter."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from organizer.adapters.claude_cli import INSTALL_HINT, ClaudeCLIService


@patch("organizer.adapters.claude_cli.subprocess.run")
def test_generate_passes_prompt_on_stdin(mock_run, tmp_path):
    mock_run.return_value = MagicMock(returncode=0, stdout="suggestion", stderr="")
    service = ClaudeCLIService(cwd=tmp_path, timeout=10)

    assert service.generate("review this", system="you review feedback") == "suggestion"
    args, kwargs = mock_run.call_args
    assert args[0] == ["claude", "-p", "-", "--append-system-prompt", "you review feedback"]
    assert kwargs["input"] == "review this"
    assert kwargs["cwd"] == tmp_path
    assert kwargs["timeout"] == 10


@patch("organizer.adapters.claude_cli.subprocess.run")
def test_nonzero_exit(mock_run):
    mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="boom")
    with pytest.raises(RuntimeError, match="Claude CLI failed: boom"):
        ClaudeCLIService().generate("x")


@patch("organizer.adapters.claude_cli.subprocess.run", side_effect=FileNotFoundError)
def test_missing_executable(mock_run):
    with pytest.raises(RuntimeError, match="Claude CLI not found"):
        ClaudeCLIService().generate("x")
    assert "npm install" in INSTALL_HINT


@patch(
    "organizer.adapters.claude_cli.subprocess.run",
    side_effect=subprocess.TimeoutExpired(cmd="claude", timeout=5),
)
def test_timeout(mock_run):
    with pytest.raises(RuntimeError, match="timed out after 5s"):
        ClaudeCLIService(timeout=5).generate("x")
