"""Alias lifecycle over the metadata file and the keychain.

The two stores cannot be updated atomically together, so every mutation
follows a fixed order and touches the keychain before the metadata:

  set:     store secret, then commit metadata
  rename:  store new key, erase old key, then commit metadata
  delete:  erase secret, then commit metadata

A keychain failure therefore never leaves metadata claiming a token that
does not exist. A metadata write failure after a keychain step can leave
an orphaned or missing keychain entry; rerunning the same command
converges.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Literal

from gh_token_switch.config import MetadataStore, ProfileSet, validate_alias
from gh_token_switch.exceptions import (
    AliasExists,
    AliasNotFound,
    ConfigWriteError,
    EmptySecret,
    SecretNotFound,
)
from gh_token_switch.fingerprint import fingerprint
from gh_token_switch.secret_store import KeyringSecretStore

logger = logging.getLogger(__name__)

SetOutcome = Literal["created", "updated", "unchanged"]


class ProfileRegistry:
    """In-memory ProfileSet plus the keychain behind it."""

    def __init__(self, metadata: MetadataStore, secrets: KeyringSecretStore) -> None:
        self.metadata = metadata
        self.secrets = secrets
        self._profiles = metadata.load()

    @property
    def profiles(self) -> ProfileSet:
        return self._profiles

    def _commit(self, updated: ProfileSet, operation: str) -> None:
        if updated == self._profiles:
            return
        try:
            self.metadata.save(updated)
        except ConfigWriteError as e:
            raise ConfigWriteError(e.path, e.detail, operation) from e
        self._profiles = updated

    def _require(self, alias: str) -> None:
        if alias not in self._profiles.aliases:
            raise AliasNotFound(alias)

    def list(self) -> list[str]:
        return list(self._profiles.aliases)

    def set(self, alias: str, secret: str) -> SetOutcome:
        """Store *secret* for *alias*, creating the alias if needed."""
        validate_alias(alias)
        token = secret.strip()
        if not token:
            raise EmptySecret(alias)
        fp = fingerprint(token)

        self.secrets.store(alias, token)

        current = self._profiles
        if alias in current.aliases:
            outcome: SetOutcome = (
                "unchanged" if current.fingerprints.get(alias) == fp else "updated"
            )
            aliases = list(current.aliases)
        else:
            outcome = "created"
            aliases = [*current.aliases, alias]
        fingerprints = dict(current.fingerprints)
        fingerprints[alias] = fp

        self._commit(
            replace(current, aliases=aliases, fingerprints=fingerprints),
            f"set alias '{alias}'",
        )
        logger.info("Token for alias %r %s (fingerprint %s)", alias, outcome, fp)
        return outcome

    def rename(self, old: str, new: str) -> None:
        self._require(old)
        validate_alias(new)
        if new == old:
            return
        if new in self._profiles.aliases:
            raise AliasExists(new)

        token = self.secrets.retrieve(old)
        self.secrets.store(new, token)
        self.secrets.erase(old)

        current = self._profiles
        aliases = [new if a == old else a for a in current.aliases]
        fingerprints = {
            (new if a == old else a): fp for a, fp in current.fingerprints.items()
        }
        last_used = current.last_used_alias
        if last_used == old:
            last_used = new
        self._commit(
            replace(
                current,
                aliases=aliases,
                fingerprints=fingerprints,
                last_used_alias=last_used,
            ),
            f"rename alias '{old}' to '{new}'",
        )
        logger.info("Renamed alias %r -> %r", old, new)

    def delete(self, alias: str) -> None:
        self._require(alias)
        try:
            self.secrets.erase(alias)
        except SecretNotFound:
            logger.warning(
                "No keychain entry for alias %r; removing metadata only", alias
            )

        current = self._profiles
        fingerprints = dict(current.fingerprints)
        fingerprints.pop(alias, None)
        last_used = current.last_used_alias
        if last_used == alias:
            last_used = None
        self._commit(
            replace(
                current,
                aliases=[a for a in current.aliases if a != alias],
                fingerprints=fingerprints,
                last_used_alias=last_used,
            ),
            f"delete alias '{alias}'",
        )
        logger.info("Deleted alias %r", alias)

    def alias_for_fingerprint(self, fp: str) -> str | None:
        for alias in self._profiles.aliases:
            if self._profiles.fingerprints.get(alias) == fp:
                return alias
        return None

    def mark_used(self, alias: str) -> None:
        """Record *alias* as the last one switched to."""
        self._require(alias)
        self._commit(
            replace(self._profiles, last_used_alias=alias),
            f"record alias '{alias}' as last used",
        )
