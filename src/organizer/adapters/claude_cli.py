"""Claude CLI adapter - subprocess LLM used for feedback review."""

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

INSTALL_HINT = "Claude CLI not found. Install with: npm install -g @anthropic-ai/claude-code"


class ClaudeCLIService:
    """
    Claude CLI subprocess adapter.

    Implements LLMService protocol. The prompt goes in on stdin so long
    feedback payloads don't hit argument limits.
    """

    def __init__(
        self,
        cwd: Path | str | None = None,
        timeout: int = 300,
        executable: str = "claude",
    ):
        self.cwd = Path(cwd) if cwd else None
        self.timeout = timeout
        self.executable = executable

    def generate(self, prompt: str, system: str | None = None) -> str:
        cmd = [self.executable, "-p", "-"]
        if system:
            cmd += ["--append-system-prompt", system]
        try:
            proc = subprocess.run(
                cmd,
                input=prompt,
                cwd=self.cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise RuntimeError(INSTALL_HINT)
        except subprocess.TimeoutExpired:
            raise RuntimeError(f"Claude CLI timed out after {self.timeout}s")

        if proc.returncode != 0:
            logger.error(f"Claude CLI failed: {proc.stderr}")
            raise RuntimeError(f"Claude CLI failed: {proc.stderr}")
        return proc.stdout
