"""One-way token fingerprints used to recognise the active gh token.

Fingerprints are unsalted so that a token read back from ``gh`` on any run
or machine maps to the same value stored at ``set`` time. Changing
``FINGERPRINT_HEX_LENGTH`` invalidates every fingerprint already written to
user config files.
"""

from __future__ import annotations

import hashlib
import re

FINGERPRINT_HEX_LENGTH = 16

_FINGERPRINT_RE = re.compile(rf"^[0-9a-f]{{{FINGERPRINT_HEX_LENGTH}}}$")


def fingerprint(secret: bytes | str) -> str:
    """Return the truncated SHA-256 hex digest of *secret*."""
    if isinstance(secret, str):
        secret = secret.encode("utf-8")
    return hashlib.sha256(secret).hexdigest()[:FINGERPRINT_HEX_LENGTH]


def is_fingerprint(value: object) -> bool:
    return isinstance(value, str) and _FINGERPRINT_RE.fullmatch(value) is not None
