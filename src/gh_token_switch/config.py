"""Profile metadata loader and writer.

The config file holds only non-secret data: alias order, token
fingerprints, the last alias switched to, and notification preferences.
It is read once per command and rewritten atomically after a mutation.
"""

from __future__ import annotations

import logging
import os
import re
import sys
import tomllib
import unicodedata
from dataclasses import dataclass, field, fields
from pathlib import Path

from gh_token_switch.exceptions import (
    ConfigCorrupt,
    ConfigWriteError,
    InvalidAliasSyntax,
)
from gh_token_switch.fingerprint import is_fingerprint

logger = logging.getLogger(__name__)

APP_NAME = "gh-token-switch"
CONFIG_ENV_VAR = "GH_TOKEN_SWITCH_CONFIG"
CONFIG_FILENAME = "config.toml"


@dataclass(frozen=True)
class NotificationConfig:
    """Desktop notification gates. All must pass for a notification."""

    enabled: bool = True
    only_when_no_tty: bool = True
    # Explicit `use` never notifies today, so False has no effect yet.
    only_on_implicit_cycle: bool = True


@dataclass(frozen=True)
class ProfileSet:
    """Persisted profile metadata."""

    aliases: list[str] = field(default_factory=list)
    fingerprints: dict[str, str] = field(default_factory=dict)
    last_used_alias: str | None = None
    notifications: NotificationConfig = field(default_factory=NotificationConfig)

    def __contains__(self, alias: object) -> bool:
        return alias in self.aliases


def validate_alias(alias: str) -> str:
    """Return *alias* unchanged or raise :class:`InvalidAliasSyntax`."""
    if not isinstance(alias, str) or not alias:
        raise InvalidAliasSyntax(str(alias or ""), "alias cannot be empty")
    if alias != alias.strip():
        raise InvalidAliasSyntax(
            alias, "alias cannot start or end with whitespace"
        )
    if "/" in alias or "\\" in alias:
        raise InvalidAliasSyntax(alias, "alias cannot contain path separators")
    if any(unicodedata.category(ch) == "Cc" for ch in alias):
        raise InvalidAliasSyntax(
            alias, "alias cannot contain control characters"
        )
    return alias


def default_config_dir() -> Path:
    """Per-user config directory for this tool."""
    if sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    elif sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        base = Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
    else:
        xdg = os.environ.get("XDG_CONFIG_HOME")
        base = Path(xdg) if xdg else Path.home() / ".config"
    return base / APP_NAME


def default_config_path() -> Path:
    """Resolve config path from the environment or the per-user default."""
    override = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser()
    return default_config_dir() / CONFIG_FILENAME


# -- Parsing -------------------------------------------------------------

_TOP_LEVEL_KEYS = {"aliases", "fingerprints", "last_used_alias", "notifications"}
_NOTIFICATION_KEYS = {f.name for f in fields(NotificationConfig)}


def _parse_aliases(raw: object, *, path: Path) -> list[str]:
    if not isinstance(raw, list):
        raise ConfigCorrupt(path, "'aliases' must be a list of strings")
    aliases: list[str] = []
    seen: set[str] = set()
    for item in raw:
        if not isinstance(item, str):
            raise ConfigCorrupt(path, f"alias {item!r} is not a string")
        try:
            validate_alias(item)
        except InvalidAliasSyntax as e:
            raise ConfigCorrupt(path, str(e)) from e
        if item in seen:
            raise ConfigCorrupt(path, f"alias '{item}' is listed more than once")
        seen.add(item)
        aliases.append(item)
    return aliases


def _parse_fingerprints(
    raw: object, aliases: list[str], *, path: Path
) -> dict[str, str]:
    if not isinstance(raw, dict):
        raise ConfigCorrupt(path, "'fingerprints' must be a table")
    for alias, value in raw.items():
        if alias not in aliases:
            raise ConfigCorrupt(
                path, f"fingerprint for unknown alias '{alias}'"
            )
        if not is_fingerprint(value):
            raise ConfigCorrupt(
                path, f"fingerprint for alias '{alias}' is malformed"
            )
    missing = [alias for alias in aliases if alias not in raw]
    if missing:
        raise ConfigCorrupt(
            path, f"missing fingerprint for alias(es): {', '.join(missing)}"
        )
    return {alias: raw[alias] for alias in aliases}


def _parse_notifications(raw: object, *, path: Path) -> NotificationConfig:
    if not isinstance(raw, dict):
        raise ConfigCorrupt(path, "'notifications' must be a table")
    unknown = sorted(set(raw) - _NOTIFICATION_KEYS)
    if unknown:
        raise ConfigCorrupt(
            path, f"unknown notifications setting(s): {', '.join(unknown)}"
        )
    for key, value in raw.items():
        if not isinstance(value, bool):
            raise ConfigCorrupt(
                path, f"notifications.{key} must be true or false"
            )
    return NotificationConfig(**raw)


def parse_profile_set(raw: dict, *, path: Path) -> ProfileSet:
    """Strictly convert a decoded TOML document into a ProfileSet."""
    unknown = sorted(set(raw) - _TOP_LEVEL_KEYS)
    if unknown:
        raise ConfigCorrupt(path, f"unknown key(s): {', '.join(unknown)}")

    aliases = _parse_aliases(raw.get("aliases", []), path=path)
    fingerprints = _parse_fingerprints(
        raw.get("fingerprints", {}), aliases, path=path
    )

    last_used = raw.get("last_used_alias")
    if last_used is not None:
        if not isinstance(last_used, str):
            raise ConfigCorrupt(path, "'last_used_alias' must be a string")
        if last_used not in aliases:
            raise ConfigCorrupt(
                path, f"last_used_alias '{last_used}' is not a known alias"
            )

    notifications = _parse_notifications(
        raw.get("notifications", {}), path=path
    )
    return ProfileSet(
        aliases=aliases,
        fingerprints=fingerprints,
        last_used_alias=last_used,
        notifications=notifications,
    )


# -- Rendering -----------------------------------------------------------

_TOML_BARE_KEY_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def _toml_escape(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    escaped = "".join(
        f"\\u{ord(ch):04x}" if unicodedata.category(ch) == "Cc" else ch
        for ch in escaped
    )
    return f'"{escaped}"'


def _toml_key(value: str) -> str:
    if _TOML_BARE_KEY_RE.fullmatch(value):
        return value
    return _toml_escape(value)


def _toml_bool(value: bool) -> str:
    return "true" if value else "false"


def render_profile_set(profiles: ProfileSet) -> str:
    """Render config.toml content."""
    lines: list[str] = [
        "# gh-token-switch profile metadata",
        "# Tokens live in the OS keychain; this file stores fingerprints only.",
        "",
        "aliases = [" + ", ".join(_toml_escape(a) for a in profiles.aliases) + "]",
    ]
    if profiles.last_used_alias is not None:
        lines.append(f"last_used_alias = {_toml_escape(profiles.last_used_alias)}")
    lines.append("")

    lines.append("[fingerprints]")
    for alias in profiles.aliases:
        lines.append(
            f"{_toml_key(alias)} = {_toml_escape(profiles.fingerprints[alias])}"
        )
    lines.append("")

    lines.append("[notifications]")
    for name in sorted(_NOTIFICATION_KEYS):
        lines.append(f"{name} = {_toml_bool(getattr(profiles.notifications, name))}")
    return "\n".join(lines) + "\n"


def _atomic_write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp-{os.getpid()}")
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
        try:
            dir_fd = os.open(path.parent, os.O_RDONLY)
            try:
                os.fsync(dir_fd)
            finally:
                os.close(dir_fd)
        except OSError:
            pass
    finally:
        try:
            if tmp_path.exists():
                tmp_path.unlink()
        except OSError:
            pass


class MetadataStore:
    """Load and atomically save the ProfileSet at one config path."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = (path or default_config_path()).expanduser()

    def load(self) -> ProfileSet:
        if not self.path.exists():
            logger.debug("No config at %s; starting empty", self.path)
            return ProfileSet()
        try:
            with open(self.path, "rb") as f:
                raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigCorrupt(self.path, f"invalid TOML: {e}") from e
        except UnicodeDecodeError as e:
            raise ConfigCorrupt(self.path, f"not valid UTF-8: {e}") from e
        except OSError as e:
            raise ConfigCorrupt(self.path, f"cannot read file: {e}") from e
        return parse_profile_set(raw, path=self.path)

    def save(self, profiles: ProfileSet) -> None:
        content = render_profile_set(profiles)
        try:
            _atomic_write_text(self.path, content)
        except OSError as e:
            raise ConfigWriteError(self.path, str(e)) from e
        logger.debug(
            "Saved %d alias(es) to %s", len(profiles.aliases), self.path
        )
