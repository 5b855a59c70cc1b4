"""
Nostr event signing (NIP-01) with a BIP-340 Schnorr key.

A ``Signer`` is the only object that holds the decrypted secret key. The rest
of the code receives ``signer.sign_event`` as a ``SignFunction``.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Callable
from typing import Any

from coincurve import PrivateKey, PublicKeyXOnly

from my2sats.errors import InvalidSecretKey
from my2sats.keys.codec import SECRET_KEY_LENGTH, encode_npub

SignFunction = Callable[[dict[str, Any]], dict[str, Any]]


def serialize_event(pubkey: str, created_at: int, kind: int, tags: list[list[str]], content: str) -> bytes:
    """Canonical NIP-01 serialization used for the event id."""
    return json.dumps(
        [0, pubkey, created_at, kind, tags, content],
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def event_id(pubkey: str, created_at: int, kind: int, tags: list[list[str]], content: str) -> str:
    return hashlib.sha256(serialize_event(pubkey, created_at, kind, tags, content)).hexdigest()


def verify_event(event: dict[str, Any]) -> bool:
    """Check an event's id and Schnorr signature."""
    try:
        expected = event_id(
            event["pubkey"], event["created_at"], event["kind"], event["tags"], event["content"]
        )
        if expected != event["id"]:
            return False
        pubkey = PublicKeyXOnly(bytes.fromhex(event["pubkey"]))
        return bool(pubkey.verify(bytes.fromhex(event["sig"]), bytes.fromhex(expected)))
    except (KeyError, TypeError, ValueError):
        return False


class Signer:
    """Signs Nostr event templates with one secret key."""

    def __init__(self, secret_key: bytes) -> None:
        if len(secret_key) != SECRET_KEY_LENGTH:
            raise InvalidSecretKey(f"Secret key must be {SECRET_KEY_LENGTH} bytes")
        try:
            self._key = PrivateKey(secret_key)
        except ValueError as e:
            raise InvalidSecretKey("Secret key is not a valid secp256k1 scalar") from e
        self.public_key = PublicKeyXOnly.from_secret(secret_key).format().hex()

    def __repr__(self) -> str:
        return f"Signer(public_key={self.public_key!r})"

    @property
    def npub(self) -> str:
        return encode_npub(self.public_key)

    def sign_event(self, template: dict[str, Any]) -> dict[str, Any]:
        """Finalize an event template ({kind, created_at, tags, content})."""
        created_at = int(template["created_at"])
        kind = int(template["kind"])
        tags = [list(tag) for tag in template.get("tags", [])]
        content = template.get("content", "")

        eid = event_id(self.public_key, created_at, kind, tags, content)
        sig = self._key.sign_schnorr(bytes.fromhex(eid))
        return {
            "id": eid,
            "pubkey": self.public_key,
            "created_at": created_at,
            "kind": kind,
            "tags": tags,
            "content": content,
            "sig": sig.hex(),
        }
