"""
Local image upload for post content.

Finds local images referenced from markdown (``![alt](path)``) and HTML
(``<img src="path">``), uploads each distinct path once, and rewrites the
content to point at the uploaded URLs. Uploads run one at a time in
discovery order; the first failure aborts the whole operation.
"""

from __future__ import annotations

import logging
import mimetypes
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from my2sats.config import Config
from my2sats.errors import ImageValidationError
from my2sats.models import UploadResponse

logger = logging.getLogger(__name__)

# Not in every platform's mime.types
mimetypes.add_type("image/webp", ".webp")

_MARKDOWN_IMAGE = re.compile(r'!\[[^\]]*\]\(([^)\s]+)(?:\s+"[^"]*")?\)')
_HTML_IMAGE = re.compile(r"""<img[^>]+src=["']([^"']+)["'][^>]*/?>""", re.IGNORECASE)


@dataclass(frozen=True)
class ImageReference:
    """One image mention in content."""

    original: str  # full match, e.g. "![alt](./image.png)"
    path: str  # e.g. "./image.png"
    start: int
    end: int
    path_start: int
    path_end: int


@dataclass(frozen=True)
class ProcessedImages:
    content: str
    featured_image_url: str | None


class ImageUploader(Protocol):
    async def upload_image(self, path: Path) -> UploadResponse: ...


def is_local_path(value: str) -> bool:
    return not value.startswith(("http://", "https://"))


def parse_image_references(content: str) -> list[ImageReference]:
    """Local image references, markdown first, then HTML, in order."""
    refs: list[ImageReference] = []
    for pattern in (_MARKDOWN_IMAGE, _HTML_IMAGE):
        for m in pattern.finditer(content):
            path = m.group(1)
            if path and is_local_path(path):
                refs.append(
                    ImageReference(
                        original=m.group(0),
                        path=path,
                        start=m.start(),
                        end=m.end(),
                        path_start=m.start(1),
                        path_end=m.end(1),
                    )
                )
    return refs


def resolve_image_path(path: str, base_path: str | Path) -> Path:
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    return Path(base_path) / candidate


def validate_image_file(path: str, base_path: str | Path, config: Config) -> Path:
    """Resolve and check an image before any network call for it."""
    full_path = resolve_image_path(path, base_path)

    if not full_path.is_file():
        raise ImageValidationError(f"Image not found: {full_path}")

    size = full_path.stat().st_size
    if size > config.max_image_size:
        limit_mb = config.max_image_size / 1024 / 1024
        raise ImageValidationError(
            f"Image exceeds maximum size of {limit_mb:g}MB: {full_path} ({size / 1024 / 1024:.2f}MB)"
        )

    mime_type = mimetypes.guess_type(full_path.name)[0] or ""
    if mime_type not in config.allowed_image_types:
        raise ImageValidationError(
            f"Invalid image type for {full_path}: {mime_type or 'unknown'}. "
            f"Allowed types: {', '.join(config.allowed_image_types)}"
        )
    return full_path


def rewrite_content(content: str, refs: list[ImageReference], uploaded: dict[str, str]) -> str:
    """Swap each reference's path for its uploaded URL. Unmapped paths stay."""
    parts: list[str] = []
    cursor = 0
    for ref in sorted(refs, key=lambda r: r.path_start):
        url = uploaded.get(ref.path)
        if not url or ref.path_start < cursor:
            continue
        parts.append(content[cursor : ref.path_start])
        parts.append(url)
        cursor = ref.path_end
    parts.append(content[cursor:])
    return "".join(parts)


async def process_images(
    content: str,
    featured_image: str | None,
    base_path: str | Path,
    uploader: ImageUploader,
    config: Config,
) -> ProcessedImages:
    """Upload local images once each and point the content at them."""
    refs = parse_image_references(content)

    # path -> uploaded URL, insertion ordered
    uploads: dict[str, str | None] = {}
    for ref in refs:
        uploads.setdefault(ref.path, None)
    featured_is_local = bool(featured_image) and is_local_path(featured_image or "")
    if featured_is_local:
        uploads.setdefault(featured_image or "", None)

    if not uploads:
        return ProcessedImages(content=content, featured_image_url=featured_image)

    logger.info("Found %d image(s) to upload...", len(uploads))

    for local_path in uploads:
        full_path = validate_image_file(local_path, base_path, config)
        logger.info("  Uploading: %s", full_path)
        result = await uploader.upload_image(full_path)
        uploads[local_path] = result.url
        logger.info("  -> %s", result.url)

    uploaded = {path: url for path, url in uploads.items() if url}
    featured_url = uploaded.get(featured_image or "") if featured_is_local else featured_image
    return ProcessedImages(
        content=rewrite_content(content, refs, uploaded),
        featured_image_url=featured_url,
    )
