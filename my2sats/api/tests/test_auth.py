"""Tests for NIP-98 proof construction and binding."""

import base64
import hashlib
import json
from unittest.mock import MagicMock

import pytest

from my2sats.api.auth import (
    HTTP_AUTH_KIND,
    authenticate,
    decode_token,
    verify_proof,
)

URL = "https://my2sats.example/api/posts"
BODY = b'{"slug":"hello"}'


def _clock(ts=1_700_000_000):
    return lambda: ts


class TestAuthenticate:
    def test_event_shape(self, signer):
        proof = authenticate("post", URL, signer.sign_event, clock=_clock())
        assert proof.method == "POST"
        assert proof.url == URL
        assert proof.created_at == 1_700_000_000
        assert proof.payload_hash is None
        assert proof.event["kind"] == HTTP_AUTH_KIND
        assert proof.event["content"] == ""
        assert ["u", URL] in proof.event["tags"]
        assert ["method", "POST"] in proof.event["tags"]
        assert proof.pubkey == signer.public_key

    def test_payload_tag_for_body(self, signer):
        proof = authenticate("POST", URL, signer.sign_event, body=BODY, clock=_clock())
        digest = hashlib.sha256(BODY).hexdigest()
        assert proof.payload_hash == digest
        assert ["payload", digest] in proof.event["tags"]

    def test_header_encoding(self, signer):
        proof = authenticate("DELETE", URL, signer.sign_event, clock=_clock())
        scheme, token = proof.header.split(" ", 1)
        assert scheme == "Nostr"
        assert json.loads(base64.b64decode(token)) == proof.event
        assert decode_token(proof.header) == proof.event

    def test_timestamp_read_at_construction(self, signer):
        clock = MagicMock(side_effect=[100, 200])
        first = authenticate("GET", URL, signer.sign_event, clock=clock)
        second = authenticate("GET", URL, signer.sign_event, clock=clock)
        assert first.created_at == 100
        assert second.created_at == 200
        assert first.signature != second.signature

    def test_sign_called_once_per_proof(self):
        sign = MagicMock(
            side_effect=lambda t: {**t, "id": "0" * 64, "pubkey": "ab" * 32, "sig": "cd" * 64}
        )
        authenticate("GET", URL, sign, clock=_clock())
        authenticate("GET", URL, sign, clock=_clock())
        assert sign.call_count == 2


class TestBinding:
    def test_valid_proof_verifies(self, signer):
        proof = authenticate("PUT", URL, signer.sign_event, body=BODY, clock=_clock())
        assert verify_proof(proof.event, "PUT", URL, BODY)

    @pytest.mark.parametrize(
        "method,url,body",
        [
            ("POST", URL, BODY),
            ("PUT", URL + "/other", BODY),
            ("PUT", URL, b'{"slug":"evil"}'),
            ("PUT", URL, None),
        ],
    )
    def test_changing_any_part_invalidates(self, signer, method, url, body):
        proof = authenticate("PUT", URL, signer.sign_event, body=BODY, clock=_clock())
        assert not verify_proof(proof.event, method, url, body)

    def test_tampered_tag_breaks_signature(self, signer):
        proof = authenticate("GET", URL, signer.sign_event, clock=_clock())
        event = dict(proof.event)
        event["tags"] = [["u", URL + "/x"], ["method", "GET"]]
        assert not verify_proof(event, "GET", URL + "/x")

    def test_stale_proof_rejected(self, signer):
        proof = authenticate("GET", URL, signer.sign_event, clock=_clock(1000))
        assert verify_proof(proof.event, "GET", URL, now=1030)
        assert not verify_proof(proof.event, "GET", URL, now=1000 + 3600)

    def test_decode_token_rejects_other_scheme(self):
        with pytest.raises(ValueError):
            decode_token("Bearer abc")
