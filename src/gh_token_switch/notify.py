"""Best-effort desktop notifications for implicit token cycles."""

from __future__ import annotations

import logging
import subprocess
import sys
from collections.abc import Callable

from gh_token_switch.config import NotificationConfig

logger = logging.getLogger(__name__)

NOTIFY_TIMEOUT_SECONDS = 10


class NotificationError(Exception):
    """Raised by a sender when delivery fails. Never leaves the Notifier."""


def has_tty() -> bool:
    """Whether any standard stream is attached to a terminal."""
    for stream in (sys.stdin, sys.stdout, sys.stderr):
        try:
            if stream is not None and stream.isatty():
                return True
        except (AttributeError, ValueError):
            continue
    return False


def _applescript_quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def send_desktop_notification(title: str, body: str) -> None:
    """Show a desktop notification on macOS or Linux; no-op elsewhere."""
    if sys.platform == "darwin":
        script = (
            f'display notification "{_applescript_quote(body)}" '
            f'with title "{_applescript_quote(title)}"'
        )
        cmd = ["osascript", "-e", script]
    elif sys.platform.startswith("linux"):
        cmd = ["notify-send", title, body]
    else:
        return

    try:
        result = subprocess.run(
            cmd, capture_output=True, timeout=NOTIFY_TIMEOUT_SECONDS
        )
    except (OSError, subprocess.SubprocessError) as e:
        raise NotificationError(f"failed to run {cmd[0]}: {e}") from e
    if result.returncode != 0:
        raise NotificationError(f"{cmd[0]} exited {result.returncode}")


class Notifier:
    """Gate and deliver switch notifications.

    ``interactive`` overrides TTY detection and ``sender`` overrides the
    platform delivery function; both exist for tests.
    """

    def __init__(
        self,
        config: NotificationConfig,
        *,
        interactive: bool | None = None,
        sender: Callable[[str, str], None] | None = None,
    ) -> None:
        self.config = config
        self._interactive = interactive
        self._sender = sender or send_desktop_notification

    def _is_interactive(self) -> bool:
        if self._interactive is not None:
            return self._interactive
        return has_tty()

    def should_notify(self, implicit_cycle: bool) -> bool:
        if not self.config.enabled:
            return False
        if self.config.only_on_implicit_cycle and not implicit_cycle:
            return False
        if self.config.only_when_no_tty and self._is_interactive():
            return False
        return True

    def notify_switch(self, alias: str, *, implicit_cycle: bool = True) -> bool:
        """Announce a switch to *alias*. Returns True when delivered."""
        if not self.should_notify(implicit_cycle):
            return False
        try:
            self._sender("GitHub token switched", f"Switched GitHub token: {alias}")
        except Exception as e:
            logger.debug("Notification for alias %r failed (ignored): %s", alias, e)
            return False
        return True
