"""Tests for notification gating and delivery."""

from __future__ import annotations

import subprocess

import pytest

from gh_token_switch.config import NotificationConfig
from gh_token_switch.notify import (
    NotificationError,
    Notifier,
    send_desktop_notification,
)


def _notifier(config: NotificationConfig, *, interactive: bool):
    sent: list[tuple[str, str]] = []
    notifier = Notifier(
        config, interactive=interactive, sender=lambda t, b: sent.append((t, b))
    )
    return notifier, sent


class TestGating:
    def test_disabled_never_notifies(self):
        notifier, sent = _notifier(NotificationConfig(enabled=False), interactive=False)
        assert notifier.notify_switch("work") is False
        assert sent == []

    def test_tty_suppresses_when_only_when_no_tty(self):
        notifier, sent = _notifier(NotificationConfig(), interactive=True)
        assert notifier.notify_switch("work") is False
        assert sent == []

    def test_tty_allowed_when_flag_off(self):
        notifier, sent = _notifier(
            NotificationConfig(only_when_no_tty=False), interactive=True
        )
        assert notifier.notify_switch("work") is True
        assert sent == [("GitHub token switched", "Switched GitHub token: work")]

    def test_explicit_switch_suppressed_by_implicit_only_flag(self):
        notifier, _ = _notifier(NotificationConfig(), interactive=False)
        assert notifier.should_notify(implicit_cycle=False) is False
        assert notifier.should_notify(implicit_cycle=True) is True

    def test_explicit_switch_allowed_when_flag_off(self):
        notifier, _ = _notifier(
            NotificationConfig(only_on_implicit_cycle=False), interactive=False
        )
        assert notifier.should_notify(implicit_cycle=False) is True

    def test_sender_errors_are_swallowed(self):
        def _broken(title, body):
            raise NotificationError("notify-send exited 1")

        notifier = Notifier(NotificationConfig(), interactive=False, sender=_broken)
        assert notifier.notify_switch("work") is False


class TestDelivery:
    def test_linux_uses_notify_send(self, monkeypatch):
        calls = []
        monkeypatch.setattr("gh_token_switch.notify.sys.platform", "linux")
        monkeypatch.setattr(
            subprocess,
            "run",
            lambda cmd, **kw: calls.append(cmd) or subprocess.CompletedProcess(cmd, 0),
        )
        send_desktop_notification("Title", "Body")
        assert calls == [["notify-send", "Title", "Body"]]

    def test_macos_uses_osascript_with_escaping(self, monkeypatch):
        calls = []
        monkeypatch.setattr("gh_token_switch.notify.sys.platform", "darwin")
        monkeypatch.setattr(
            subprocess,
            "run",
            lambda cmd, **kw: calls.append(cmd) or subprocess.CompletedProcess(cmd, 0),
        )
        send_desktop_notification("Title", 'say "hi"')
        assert calls[0][:2] == ["osascript", "-e"]
        assert 'display notification "say \\"hi\\""' in calls[0][2]

    def test_missing_binary_raises_notification_error(self, monkeypatch):
        def _missing(cmd, **kw):
            raise FileNotFoundError(cmd[0])

        monkeypatch.setattr("gh_token_switch.notify.sys.platform", "linux")
        monkeypatch.setattr(subprocess, "run", _missing)
        with pytest.raises(NotificationError):
            send_desktop_notification("Title", "Body")

    def test_nonzero_exit_raises_notification_error(self, monkeypatch):
        monkeypatch.setattr("gh_token_switch.notify.sys.platform", "linux")
        monkeypatch.setattr(
            subprocess, "run", lambda cmd, **kw: subprocess.CompletedProcess(cmd, 1)
        )
        with pytest.raises(NotificationError):
            send_desktop_notification("Title", "Body")

    def test_other_platforms_are_noop(self, monkeypatch):
        def _unexpected(cmd, **kw):
            raise AssertionError("should not run")

        monkeypatch.setattr("gh_token_switch.notify.sys.platform", "win32")
        monkeypatch.setattr(subprocess, "run", _unexpected)
        send_desktop_notification("Title", "Body")
