"""
Secret key encodings: NIP-19 bech32 (nsec/npub) and 64-char hex.

Bech32 strings used by Nostr are not bound by the 90-character limit of
BIP-173 (an ncryptsec is 162 chars), so ``decode_bech32`` checks the checksum
with the ``bech32`` primitives directly instead of ``bech32_decode``.
"""

from __future__ import annotations

import re

from bech32 import CHARSET, bech32_encode, bech32_verify_checksum, convertbits

from my2sats.errors import InvalidSecretKey

NSEC_PREFIX = "nsec1"
SECRET_KEY_LENGTH = 32

_HEX_KEY = re.compile(r"^[0-9a-fA-F]{64}$")


def decode_secret_key(value: str) -> bytes:
    """Parse a secret key from nsec or hex. Returns exactly 32 bytes."""
    trimmed = value.strip()

    if trimmed.startswith(NSEC_PREFIX):
        decoded = decode_bech32(trimmed)
        if decoded is None:
            raise InvalidSecretKey("Invalid nsec format")
        hrp, data = decoded
        if hrp != "nsec" or len(data) != SECRET_KEY_LENGTH:
            raise InvalidSecretKey("Invalid nsec format")
        return data

    if not _HEX_KEY.match(trimmed):
        raise InvalidSecretKey()
    return bytes.fromhex(trimmed)


def encode_nsec(secret_key: bytes) -> str:
    return encode_bech32("nsec", secret_key)


def encode_npub(public_key: bytes | str) -> str:
    if isinstance(public_key, str):
        public_key = bytes.fromhex(public_key)
    return encode_bech32("npub", public_key)


def encode_bech32(hrp: str, payload: bytes) -> str:
    words = convertbits(payload, 8, 5, True)
    return bech32_encode(hrp, words)


def decode_bech32(value: str) -> tuple[str, bytes] | None:
    """Decode a bech32 string of any length. Returns (hrp, payload) or None."""
    if any(ord(c) < 33 or ord(c) > 126 for c in value):
        return None
    if value.lower() != value and value.upper() != value:
        return None
    value = value.lower()

    pos = value.rfind("1")
    if pos < 1 or pos + 7 > len(value):
        return None
    hrp = value[:pos]
    if any(c not in CHARSET for c in value[pos + 1 :]):
        return None
    words = [CHARSET.find(c) for c in value[pos + 1 :]]
    if not bech32_verify_checksum(hrp, words):
        return None

    data = convertbits(words[:-6], 5, 8, False)
    if data is None:
        return None
    return hrp, bytes(data)
