"""
Root-level shared test fixtures.

Inherited by the keys, api and publish test suites as well as tests/.
"""

from __future__ import annotations

import json

import httpx
import pytest

# NIP-19 test vector
TEST_NSEC = "nsec1vl029mgpspedva04g90vltkh6fvh240zqtv9k0t9af8935ke9laqsnlfe5"
TEST_SECRET_HEX = "67dea2ed018072d675f5415ecfaed7d2597555e202d85b3d65ea4e58d2d92ffa"


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler):
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            request.read()
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


def _default_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/api/uploads":
        return httpx.Response(
            200,
            json={"url": "https://cdn.example/x.png", "filename": "x.png", "size": 10, "type": "image/png"},
        )
    body = json.loads(request.content) if request.content else {}
    return httpx.Response(200, json={"ok": True, "method": request.method, "body": body})


@pytest.fixture
def secret_key() -> bytes:
    return bytes.fromhex(TEST_SECRET_HEX)


@pytest.fixture
def signer(secret_key):
    from my2sats.keys.signer import Signer

    return Signer(secret_key)


@pytest.fixture
def transport():
    """Records requests; uploads return https://cdn.example/x.png, posts echo the body."""
    return RecordingTransport(_default_handler)


@pytest.fixture
def make_transport():
    """Build a RecordingTransport around a custom handler."""
    return RecordingTransport


@pytest.fixture
def clean_env(monkeypatch):
    """Remove env vars that override configuration."""
    for key in ["API_URL", "KEYFILE_PATH", "MY2SATS_CONFIG"]:
        monkeypatch.delenv(key, raising=False)
