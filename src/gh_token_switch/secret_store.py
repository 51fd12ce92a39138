"""Keychain adapter for per-alias GitHub tokens.

Uses the ``keyring`` library, which maps to:
  macOS: Keychain Access
  Windows: Windows Credential Manager
  Linux: Secret Service API (GNOME Keyring, KWallet)

Every token is stored under the fixed service name ``SERVICE`` with the
alias as the account name.
"""

from __future__ import annotations

import logging

import keyring
import keyring.errors

from gh_token_switch.exceptions import SecretNotFound, SecretStoreUnavailable

logger = logging.getLogger(__name__)

SERVICE = "github-cli-login-switcher"


class KeyringSecretStore:
    """Thin wrapper around keyring for token put/get/delete by alias.

    ``backend`` defaults to the ``keyring`` module itself; any object
    exposing ``get_password``/``set_password``/``delete_password`` works.
    """

    def __init__(self, service: str = SERVICE, backend=None) -> None:
        self.service = service
        self._backend = backend if backend is not None else keyring

    def store(self, alias: str, secret: str) -> None:
        try:
            self._backend.set_password(self.service, alias, secret)
        except keyring.errors.KeyringError as e:
            raise SecretStoreUnavailable(alias, "store", e) from e
        logger.debug("Stored token for alias %r", alias)

    def retrieve(self, alias: str) -> str:
        try:
            secret = self._backend.get_password(self.service, alias)
        except keyring.errors.KeyringError as e:
            raise SecretStoreUnavailable(alias, "retrieve", e) from e
        if secret is None:
            raise SecretNotFound(alias, "retrieve")
        return secret

    def erase(self, alias: str) -> None:
        try:
            self._backend.delete_password(self.service, alias)
        except keyring.errors.PasswordDeleteError as e:
            raise SecretNotFound(alias, "erase") from e
        except keyring.errors.KeyringError as e:
            raise SecretStoreUnavailable(alias, "erase", e) from e
        logger.debug("Erased token for alias %r", alias)
