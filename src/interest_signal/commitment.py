"""Hiding commitments over exported profiles.

A commitment binds the exact profile content while hiding it: the canonical
JSON of the payload is hashed together with a fresh random nonce, so two
exports of an unchanged profile are unlinkable.  Whoever holds the nonce
(the opening) can later prove which payload a digest refers to.

The scheme sits behind :class:`CommitmentScheme` so a different one-way
function can be swapped in without touching scoring code.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import secrets
from collections.abc import Mapping
from typing import Any, NamedTuple, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

DIGEST_SIZE = 32
NONCE_SIZE = 16
FALLBACK_COMMITMENT = "0" * (DIGEST_SIZE * 2)


class CommitmentError(Exception):
    """The payload could not be canonicalized for hashing."""


class Opening(NamedTuple):
    digest: str
    nonce: bytes


@runtime_checkable
class CommitmentScheme(Protocol):
    """Produces an opaque, fixed-format digest of a profile payload."""

    def commit(self, payload: Mapping[str, Any]) -> str: ...


def canonical_json(payload: Mapping[str, Any]) -> bytes:
    """Deterministic JSON encoding: sorted keys, no whitespace, no NaN."""
    try:
        return json.dumps(
            payload, sort_keys=True, separators=(",", ":"), allow_nan=False,
        ).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise CommitmentError(f"Profile payload is not serializable: {exc}") from exc


class SaltedBlake2bCommitment:
    """BLAKE2b-256 over ``nonce || canonical_json(payload)``.

    Output is 64 lowercase hex characters.  Serialization failures yield
    :data:`FALLBACK_COMMITMENT` from :meth:`commit`; the export must not fail.
    """

    def __init__(self, nonce_size: int = NONCE_SIZE) -> None:
        if nonce_size < 8:
            raise ValueError("nonce_size must be at least 8 bytes")
        self._nonce_size = nonce_size

    @staticmethod
    def _digest(nonce: bytes, body: bytes) -> str:
        h = hashlib.blake2b(digest_size=DIGEST_SIZE, person=b"interest-profile")
        h.update(nonce)
        h.update(body)
        return h.hexdigest()

    def commit_with_opening(self, payload: Mapping[str, Any]) -> Opening:
        """Commit and also return the nonce needed to open the commitment.

        Raises :class:`CommitmentError` if the payload cannot be serialized.
        """
        body = canonical_json(payload)
        nonce = secrets.token_bytes(self._nonce_size)
        return Opening(self._digest(nonce, body), nonce)

    def commit(self, payload: Mapping[str, Any]) -> str:
        try:
            return self.commit_with_opening(payload).digest
        except CommitmentError as exc:
            logger.warning("Commitment fell back to fixed digest: %s", exc)
            return FALLBACK_COMMITMENT

    def verify(self, payload: Mapping[str, Any], nonce: bytes, digest: str) -> bool:
        """True if *digest* commits to *payload* under *nonce*."""
        try:
            body = canonical_json(payload)
        except CommitmentError:
            return False
        return hmac.compare_digest(self._digest(nonce, body), digest)


def is_fallback(digest: str) -> bool:
    return digest == FALLBACK_COMMITMENT
