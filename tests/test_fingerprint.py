"""Tests for token fingerprints."""

from __future__ import annotations

import random

from gh_token_switch.fingerprint import (
    FINGERPRINT_HEX_LENGTH,
    fingerprint,
    is_fingerprint,
)


def test_fingerprint_is_stable_and_truncated():
    fp = fingerprint("abc")
    assert fp == "ba7816bf8f01cfea"
    assert len(fp) == FINGERPRINT_HEX_LENGTH


def test_fingerprint_accepts_bytes_and_str_equally():
    assert fingerprint(b"ghp_token") == fingerprint("ghp_token")


def test_fingerprint_is_deterministic():
    secret = b"\x00\xffsome-token\n"
    assert fingerprint(secret) == fingerprint(secret)


def test_fingerprint_has_no_collisions_across_random_sample():
    rng = random.Random(20240601)
    secrets = {rng.randbytes(rng.randint(1, 64)) for _ in range(20000)}
    fingerprints = {fingerprint(s) for s in secrets}
    assert len(fingerprints) == len(secrets)


def test_fingerprint_does_not_contain_secret():
    secret = "ghp_abcdef0123456789"
    assert secret not in fingerprint(secret)


def test_is_fingerprint_validates_shape():
    assert is_fingerprint(fingerprint("x"))
    assert not is_fingerprint("ABCDEF0123456789")
    assert not is_fingerprint("abc")
    assert not is_fingerprint(1234)
