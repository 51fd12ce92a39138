"""gh-token-switch exception hierarchy.

Provides a structured exception tree so the CLI can report each failure
mode with a specific message. Every error is terminal for the command
that raised it; nothing is retried internally.
"""

from __future__ import annotations

from pathlib import Path


class TokenSwitchError(Exception):
    """Base for all gh-token-switch exceptions."""


class ProfileError(TokenSwitchError):
    """Alias lifecycle and selection failures."""


class InvalidAliasSyntax(ProfileError):
    """Alias is empty or contains characters that are not allowed."""

    def __init__(self, alias: str, reason: str) -> None:
        self.alias = alias
        self.reason = reason
        super().__init__(f"invalid alias {alias!r}: {reason}")


class AliasNotFound(ProfileError):
    def __init__(self, alias: str) -> None:
        self.alias = alias
        super().__init__(f"alias '{alias}' not found")


class AliasExists(ProfileError):
    def __init__(self, alias: str) -> None:
        self.alias = alias
        super().__init__(f"alias '{alias}' already exists")


class NeedsAtLeastTwoProfiles(ProfileError):
    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(
            f"need at least 2 aliases to cycle (have {count}); "
            "add more with 'set <alias>'"
        )


class EmptySecret(ProfileError):
    def __init__(self, alias: str) -> None:
        self.alias = alias
        super().__init__(f"token for alias '{alias}' is empty")


class StateError(TokenSwitchError):
    """Metadata persistence failures."""


class ConfigCorrupt(StateError):
    """Config file exists but does not match the expected shape."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"config file {path} is corrupt: {detail}")


class ConfigWriteError(StateError):
    def __init__(
        self, path: Path, detail: str, operation: str | None = None
    ) -> None:
        self.path = path
        self.detail = detail
        self.operation = operation
        context = f" while trying to {operation}" if operation else ""
        super().__init__(f"failed to write config {path}{context}: {detail}")


class SecretStoreError(TokenSwitchError):
    """OS keychain failures."""

    def __init__(self, alias: str, operation: str, detail: str) -> None:
        self.alias = alias
        self.operation = operation
        super().__init__(detail)


class SecretStoreUnavailable(SecretStoreError):
    def __init__(self, alias: str, operation: str, cause: object) -> None:
        super().__init__(
            alias,
            operation,
            f"keychain unavailable while trying to {operation} token "
            f"for alias '{alias}': {cause}",
        )


class SecretNotFound(SecretStoreError):
    def __init__(self, alias: str, operation: str = "retrieve") -> None:
        super().__init__(alias, operation, f"no token found for alias '{alias}'")


class ExternalToolUnavailable(TokenSwitchError):
    """The gh executable is missing, timed out, or exited non-zero."""
