"""
Async client for the my2sats posts API.

Wraps httpx.AsyncClient. Every request is built first, its exact body bytes
are hashed into a fresh NIP-98 proof, and only then is it sent.

Usage:
    async with My2SatsClient(cfg.api_url, signer.sign_event) as client:
        await client.create_post(payload)
"""

from __future__ import annotations

import logging
import mimetypes
import time
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx

from my2sats.api.auth import Clock, authenticate
from my2sats.errors import ApiError, NetworkError
from my2sats.keys.signer import SignFunction
from my2sats.models import PostPayload, UpdatePayload, UploadResponse

logger = logging.getLogger(__name__)


class My2SatsClient:
    """Authenticated client for /api/posts and /api/uploads."""

    def __init__(
        self,
        api_url: str,
        sign: SignFunction,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Clock = time.time,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self._sign = sign
        self._clock = clock
        # No request timeout; uploads may be slow.
        self._client = httpx.AsyncClient(timeout=None, transport=transport)

    async def __aenter__(self) -> My2SatsClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def create_post(self, payload: PostPayload) -> Any:
        """POST /api/posts."""
        url = f"{self.api_url}/api/posts"
        logger.info("Posting to %s...", url)
        resp = await self._send("POST", url, json=payload.to_json())
        return _json_body(resp)

    async def update_post(self, slug: str, payload: UpdatePayload) -> Any:
        """PUT /api/posts/{slug}."""
        url = f"{self.api_url}/api/posts/{quote(slug, safe='')}"
        logger.info("Updating post at %s...", url)
        resp = await self._send("PUT", url, json=payload.to_json())
        return _json_body(resp)

    async def delete_post(self, slug: str) -> Any:
        """DELETE /api/posts/{slug}. A bodiless success returns None."""
        url = f"{self.api_url}/api/posts/{quote(slug, safe='')}"
        logger.info("Deleting post at %s...", url)
        resp = await self._send("DELETE", url)
        return _json_body(resp)

    async def upload_image(self, path: Path) -> UploadResponse:
        """POST /api/uploads as multipart with a single ``file`` field."""
        url = f"{self.api_url}/api/uploads"
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        files = {"file": (path.name, path.read_bytes(), content_type)}
        resp = await self._send("POST", url, files=files, error_prefix="Image upload failed: ")
        body = _json_body(resp)
        if not isinstance(body, dict):
            raise ApiError(resp.status_code, f"Image upload failed: unexpected response {resp.text!r}")
        return UploadResponse.model_validate(body)

    async def _send(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        files: Any = None,
        error_prefix: str = "",
    ) -> httpx.Response:
        request = self._client.build_request(method, url, json=json, files=files)
        body = request.read()
        # Sign the URL exactly as it goes on the wire.
        proof = authenticate(method, str(request.url), self._sign, body=body or None, clock=self._clock)
        request.headers["Authorization"] = proof.header

        try:
            resp = await self._client.send(request)
        except httpx.HTTPError as e:
            raise NetworkError(str(request.url), e) from e
        if not resp.is_success:
            raise ApiError(resp.status_code, f"{error_prefix}{resp.text}")
        return resp


def _json_body(resp: httpx.Response) -> Any:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError as e:
        raise ApiError(resp.status_code, f"Invalid JSON in response: {resp.text}") from e
