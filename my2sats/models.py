"""Request and response models for the my2sats posts API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class Frontmatter(BaseModel):
    """Known front-matter keys of a post file. Unknown keys are dropped."""

    slug: str | None = None
    title: str | None = None
    author: str | None = None
    excerpt: str | None = None
    featured_image: str | None = None
    tags: list[str] | None = None


class PostPayload(BaseModel):
    """Body of POST /api/posts."""

    slug: str
    title: str
    content: str
    author: str
    excerpt: str | None = None
    featured_image: str | None = None
    tags: list[str] | None = None

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class UpdatePayload(BaseModel):
    """Body of PUT /api/posts/{slug}. Only set fields are sent."""

    slug: str | None = None
    title: str | None = None
    content: str | None = None
    excerpt: str | None = None
    featured_image: str | None = None
    author: str | None = None
    tags: list[str] | None = None

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)

    def is_empty(self) -> bool:
        return not self.to_json()


class UploadResponse(BaseModel):
    """Body returned by POST /api/uploads."""

    url: str
    filename: str = ""
    size: int = 0
    type: str = ""
