"""Tests for salted profile commitments."""

from __future__ import annotations

import re

import pytest

from interest_signal.commitment import (
    FALLBACK_COMMITMENT,
    CommitmentError,
    CommitmentScheme,
    SaltedBlake2bCommitment,
    canonical_json,
    is_fallback,
)

PAYLOAD = {
    "tagCounts": {"shopping/apparel/purchase_intent": 1.4},
    "intentBoosts": {"shopping/apparel": 2.0},
    "ptaScore": 0.71,
    "geoBucket": "0x00",
    "timestamp": "2026-03-01T12:00:00+00:00",
}

HEX64 = re.compile(r"^[0-9a-f]{64}$")


class TestCanonicalJson:
    def test_key_order_irrelevant(self):
        assert canonical_json({"b": 1, "a": 2}) == canonical_json({"a": 2, "b": 1})

    def test_compact(self):
        assert canonical_json({"a": [1, 2]}) == b'{"a":[1,2]}'

    @pytest.mark.parametrize("payload", [{"x": float("nan")}, {"x": object()}])
    def test_unserializable_raises(self, payload):
        with pytest.raises(CommitmentError):
            canonical_json(payload)


class TestSaltedBlake2bCommitment:
    def test_fixed_format(self):
        assert HEX64.match(SaltedBlake2bCommitment().commit(PAYLOAD))

    def test_same_payload_unlinkable(self):
        scheme = SaltedBlake2bCommitment()
        assert scheme.commit(PAYLOAD) != scheme.commit(PAYLOAD)

    def test_opening_verifies(self):
        scheme = SaltedBlake2bCommitment()
        digest, nonce = scheme.commit_with_opening(PAYLOAD)
        assert scheme.verify(PAYLOAD, nonce, digest)

    def test_altered_payload_does_not_verify(self):
        scheme = SaltedBlake2bCommitment()
        digest, nonce = scheme.commit_with_opening(PAYLOAD)
        altered = dict(PAYLOAD, ptaScore=0.72)
        assert not scheme.verify(altered, nonce, digest)

    def test_unserializable_falls_back(self):
        digest = SaltedBlake2bCommitment().commit({"ptaScore": float("nan")})
        assert digest == FALLBACK_COMMITMENT
        assert is_fallback(digest)

    def test_verify_unserializable_is_false(self):
        assert not SaltedBlake2bCommitment().verify({"x": float("nan")}, b"0" * 16, FALLBACK_COMMITMENT)

    def test_short_nonce_rejected(self):
        with pytest.raises(ValueError):
            SaltedBlake2bCommitment(nonce_size=4)

    def test_satisfies_protocol(self):
        assert isinstance(SaltedBlake2bCommitment(), CommitmentScheme)
