"""
Nostr key handling: parsing, encrypted storage and signing.

Public API:
    decode_secret_key(value)        → 32-byte key from nsec or hex
    seal(key, password)             → ncryptsec string
    unseal(ncryptsec, password)     → 32-byte key
    write_keyfile(path, ncryptsec)  → write the sealed key (chmod 600)
    open_keyfile(path, prompt)      → prompt for password and decrypt
    Signer(key)                     → NIP-01 event signing
"""

from __future__ import annotations

from my2sats.keys.codec import decode_secret_key, encode_npub, encode_nsec
from my2sats.keys.signer import SignFunction, Signer, verify_event
from my2sats.keys.vault import open_keyfile, read_keyfile, seal, unseal, write_keyfile

__all__ = [
    "SignFunction",
    "Signer",
    "decode_secret_key",
    "encode_npub",
    "encode_nsec",
    "open_keyfile",
    "read_keyfile",
    "seal",
    "unseal",
    "verify_event",
    "write_keyfile",
]
