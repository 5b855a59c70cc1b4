"""
NIP-98 HTTP authentication.

Each outbound request carries a freshly signed kind-27235 event bound to its
URL, method and (when present) a SHA-256 of the exact body bytes. The event
is sent as ``Authorization: Nostr <base64(json)>``. Proofs are built
immediately before the request and never reused.
"""

from __future__ import annotations

import base64
import hashlib
import json
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from my2sats.keys.signer import SignFunction, verify_event

HTTP_AUTH_KIND = 27235
AUTH_SCHEME = "Nostr"

Clock = Callable[[], float]


@dataclass(frozen=True)
class AuthProof:
    """A signed NIP-98 event for exactly one request."""

    url: str
    method: str
    created_at: int
    payload_hash: str | None
    signature: str
    pubkey: str
    event: dict[str, Any]

    @property
    def token(self) -> str:
        raw = json.dumps(self.event, separators=(",", ":"), ensure_ascii=False)
        return base64.b64encode(raw.encode("utf-8")).decode("ascii")

    @property
    def header(self) -> str:
        return f"{AUTH_SCHEME} {self.token}"


def payload_hash(body: bytes) -> str:
    return hashlib.sha256(body).hexdigest()


def authenticate(
    method: str,
    url: str,
    sign: SignFunction,
    *,
    body: bytes | None = None,
    clock: Clock = time.time,
) -> AuthProof:
    """Sign a NIP-98 event for one request."""
    method = method.upper()
    tags = [["u", url], ["method", method]]
    digest = payload_hash(body) if body else None
    if digest:
        tags.append(["payload", digest])

    event = sign(
        {
            "kind": HTTP_AUTH_KIND,
            "created_at": int(clock()),
            "tags": tags,
            "content": "",
        }
    )
    return AuthProof(
        url=url,
        method=method,
        created_at=event["created_at"],
        payload_hash=digest,
        signature=event["sig"],
        pubkey=event["pubkey"],
        event=event,
    )


def decode_token(header: str) -> dict[str, Any]:
    """Decode an Authorization header value back into the event."""
    scheme, _, token = header.partition(" ")
    if scheme != AUTH_SCHEME or not token:
        raise ValueError(f"Not a {AUTH_SCHEME} authorization header")
    return dict(json.loads(base64.b64decode(token)))


def verify_proof(
    event: dict[str, Any],
    method: str,
    url: str,
    body: bytes | None = None,
    *,
    now: float | None = None,
    window: int = 60,
) -> bool:
    """Server-side check of a NIP-98 event against a concrete request."""
    if event.get("kind") != HTTP_AUTH_KIND or not verify_event(event):
        return False
    if now is not None and abs(int(now) - int(event["created_at"])) > window:
        return False

    tags = {tag[0]: tag[1] for tag in event.get("tags", []) if len(tag) >= 2}
    if tags.get("u") != url or tags.get("method") != method.upper():
        return False
    expected = payload_hash(body) if body else None
    return tags.get("payload") == expected
