"""Token switching state machine.

Which alias is "current" is never stored. It is derived on every call by
fingerprinting the token ``gh`` reports and looking it up among the
known aliases. ``last_used_alias`` is a record of the last switch, not an
input to selection.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from gh_token_switch.exceptions import (
    AliasNotFound,
    ExternalToolUnavailable,
    NeedsAtLeastTwoProfiles,
)
from gh_token_switch.fingerprint import fingerprint
from gh_token_switch.gh import ExternalTool
from gh_token_switch.notify import Notifier
from gh_token_switch.registry import ProfileRegistry

logger = logging.getLogger(__name__)


class ProfileState(enum.Enum):
    NO_PROFILES = "no_profiles"
    SINGLE_PROFILE = "single_profile"
    MULTI_PROFILE_KNOWN_CURRENT = "multi_profile_known_current"
    MULTI_PROFILE_UNKNOWN_CURRENT = "multi_profile_unknown_current"


@dataclass(frozen=True)
class SwitchResult:
    alias: str
    # last_used_alias before the switch
    previous: str | None
    implicit_cycle: bool


def choose_next_alias(aliases: list[str], current: str | None) -> str:
    """Circular successor of *current*, or the first alias when unknown."""
    if len(aliases) < 2:
        raise NeedsAtLeastTwoProfiles(len(aliases))
    if current is None or current not in aliases:
        return aliases[0]
    idx = aliases.index(current)
    return aliases[(idx + 1) % len(aliases)]


class SwitchEngine:
    """Resolve, switch, and reconcile the active gh token."""

    def __init__(
        self,
        registry: ProfileRegistry,
        tool: ExternalTool,
        notifier: Notifier | None = None,
    ) -> None:
        self.registry = registry
        self.tool = tool
        self.notifier = notifier

    def current(self) -> str | None:
        """Alias whose fingerprint matches gh's active token, else None.

        Read-only: never updates ``last_used_alias``.
        """
        if not self.registry.profiles.aliases:
            return None
        token = self.tool.active_token()
        if token is None:
            return None
        return self.registry.alias_for_fingerprint(fingerprint(token.strip()))

    def state(self) -> ProfileState:
        count = len(self.registry.profiles.aliases)
        if count == 0:
            return ProfileState.NO_PROFILES
        if count == 1:
            return ProfileState.SINGLE_PROFILE
        if self.current() is None:
            return ProfileState.MULTI_PROFILE_UNKNOWN_CURRENT
        return ProfileState.MULTI_PROFILE_KNOWN_CURRENT

    def _handoff(self, alias: str) -> None:
        token = self.registry.secrets.retrieve(alias)
        try:
            self.tool.login_with_token(token)
        except ExternalToolUnavailable as e:
            raise ExternalToolUnavailable(
                f"switching to alias '{alias}': {e}"
            ) from e
        self.registry.mark_used(alias)

    def use_explicit(self, alias: str) -> SwitchResult:
        if alias not in self.registry.profiles.aliases:
            raise AliasNotFound(alias)
        previous = self.registry.profiles.last_used_alias
        self._handoff(alias)
        logger.info("Switched gh token to alias %r", alias)
        return SwitchResult(alias=alias, previous=previous, implicit_cycle=False)

    def use_cycle(self) -> SwitchResult:
        aliases = self.registry.list()
        if len(aliases) < 2:
            raise NeedsAtLeastTwoProfiles(len(aliases))
        previous = self.registry.profiles.last_used_alias
        current = self.current()
        target = choose_next_alias(aliases, current)
        logger.debug("Cycling from %r to %r", current, target)

        self._handoff(target)
        logger.info("Cycled gh token to alias %r", target)
        if self.notifier is not None:
            self.notifier.notify_switch(target, implicit_cycle=True)
        return SwitchResult(alias=target, previous=previous, implicit_cycle=True)

    def use(self, alias: str | None = None) -> SwitchResult:
        if alias is None:
            return self.use_cycle()
        return self.use_explicit(alias)
