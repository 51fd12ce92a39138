"""Shared test fixtures for gh-token-switch."""

from __future__ import annotations

from pathlib import Path

import keyring.errors
import pytest

from gh_token_switch.config import MetadataStore
from gh_token_switch.exceptions import ExternalToolUnavailable
from gh_token_switch.registry import ProfileRegistry
from gh_token_switch.secret_store import KeyringSecretStore


class MemoryKeyring:
    """In-memory stand-in for a keyring backend."""

    def __init__(self) -> None:
        self.entries: dict[tuple[str, str], str] = {}
        self.unavailable = False
        self.fail_on: set[str] = set()

    def _check(self, operation: str) -> None:
        if self.unavailable or operation in self.fail_on:
            raise keyring.errors.NoKeyringError("no backend available")

    def set_password(self, service: str, username: str, password: str) -> None:
        self._check("set")
        self.entries[(service, username)] = password

    def get_password(self, service: str, username: str) -> str | None:
        self._check("get")
        return self.entries.get((service, username))

    def delete_password(self, service: str, username: str) -> None:
        self._check("delete")
        if (service, username) not in self.entries:
            raise keyring.errors.PasswordDeleteError("Password not found")
        del self.entries[(service, username)]


class FakeGh:
    """Fake gh CLI holding one active token."""

    def __init__(self, active: str | None = None) -> None:
        self.active = active
        self.logins: list[str] = []
        self.login_error: str | None = None
        self.installed = True

    def active_token(self) -> str | None:
        if not self.installed:
            raise ExternalToolUnavailable("failed to run 'gh auth token'")
        return self.active

    def login_with_token(self, token: str) -> None:
        if not self.installed:
            raise ExternalToolUnavailable("failed to run 'gh auth login'")
        if self.login_error is not None:
            raise ExternalToolUnavailable(self.login_error)
        self.logins.append(token)
        self.active = token


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "gh-token-switch" / "config.toml"


@pytest.fixture
def backend() -> MemoryKeyring:
    return MemoryKeyring()


@pytest.fixture
def secrets(backend: MemoryKeyring) -> KeyringSecretStore:
    return KeyringSecretStore(backend=backend)


@pytest.fixture
def registry(config_path: Path, secrets: KeyringSecretStore) -> ProfileRegistry:
    return ProfileRegistry(MetadataStore(config_path), secrets)


@pytest.fixture
def gh() -> FakeGh:
    return FakeGh()
