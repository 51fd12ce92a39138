"""GitHub CLI boundary.

The active token is global state owned by ``gh``. It is reached only
through the :class:`ExternalTool` protocol so tests can swap in a fake.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Protocol

from gh_token_switch.exceptions import ExternalToolUnavailable

logger = logging.getLogger(__name__)

GH_HOSTNAME = "github.com"
DEFAULT_TIMEOUT_SECONDS = 30


class ExternalTool(Protocol):
    """Read and replace the credential held by the external CLI."""

    def active_token(self) -> str | None:
        """Return the active token, or None when no login is present."""
        ...

    def login_with_token(self, token: str) -> None:
        """Hand *token* to the tool; raise ExternalToolUnavailable on failure."""
        ...


class GhCli:
    """``gh`` subprocess adapter bound to one hostname."""

    def __init__(
        self,
        executable: str = "gh",
        hostname: str = GH_HOSTNAME,
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.executable = executable
        self.hostname = hostname
        self.timeout = timeout

    def _run(self, args: list[str], *, input_text: str | None = None):
        cmd = [self.executable, *args]
        label = " ".join(["gh", *args])
        try:
            return subprocess.run(
                cmd,
                input=input_text,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise ExternalToolUnavailable(
                f"failed to run '{label}' (is gh installed?)"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise ExternalToolUnavailable(
                f"'{label}' timed out ({self.timeout}s)"
            ) from e
        except OSError as e:
            raise ExternalToolUnavailable(f"failed to run '{label}': {e}") from e

    def active_token(self) -> str | None:
        result = self._run(["auth", "token", "--hostname", self.hostname])
        if result.returncode != 0:
            logger.debug(
                "'gh auth token' exited %d; treating as no active login",
                result.returncode,
            )
            return None
        token = result.stdout.strip()
        return token or None

    def login_with_token(self, token: str) -> None:
        result = self._run(
            ["auth", "login", "--hostname", self.hostname, "--with-token"],
            input_text=token,
        )
        if result.returncode != 0:
            detail = (result.stderr or "").strip()
            message = (
                f"'gh auth login --with-token' failed "
                f"(exit {result.returncode})"
            )
            if detail:
                message = f"{message}: {detail}"
            raise ExternalToolUnavailable(message)
