"""Tests for NIP-01 event signing."""

import pytest

from my2sats.errors import InvalidSecretKey
from my2sats.keys.signer import Signer, event_id, verify_event

TEMPLATE = {"kind": 1, "created_at": 1700000000, "tags": [["t", "nostr"]], "content": "hello"}


class TestSigner:
    def test_public_key_is_xonly_hex(self, signer):
        assert len(signer.public_key) == 64
        int(signer.public_key, 16)

    def test_npub(self, signer):
        assert signer.npub.startswith("npub1")

    def test_sign_event_fields(self, signer):
        event = signer.sign_event(TEMPLATE)
        assert event["pubkey"] == signer.public_key
        assert event["kind"] == 1
        assert event["created_at"] == 1700000000
        assert event["tags"] == [["t", "nostr"]]
        assert event["content"] == "hello"
        assert len(event["sig"]) == 128
        assert event["id"] == event_id(signer.public_key, 1700000000, 1, [["t", "nostr"]], "hello")

    def test_signature_verifies(self, signer):
        assert verify_event(signer.sign_event(TEMPLATE))

    def test_tampered_content_fails(self, signer):
        event = signer.sign_event(TEMPLATE)
        event["content"] = "goodbye"
        assert not verify_event(event)

    def test_other_key_fails(self, signer):
        event = signer.sign_event(TEMPLATE)
        other = Signer(bytes.fromhex("11" * 32))
        event["pubkey"] = other.public_key
        assert not verify_event(event)

    def test_repr_hides_secret(self, signer, secret_key):
        assert secret_key.hex() not in repr(signer)

    def test_rejects_wrong_length(self):
        with pytest.raises(InvalidSecretKey):
            Signer(b"\x01" * 31)

    def test_rejects_zero_scalar(self):
        with pytest.raises(InvalidSecretKey):
            Signer(b"\x00" * 32)
