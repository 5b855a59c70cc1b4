"""
Assemble create/update payloads from front matter and CLI overrides.

Pure data merging: no file or network access. Image upload results are folded
in by the ``finalize_*`` helpers once ``process_images`` has run.
"""

from __future__ import annotations

from dataclasses import dataclass

from my2sats.errors import NoUpdatesProvided, ValidationError
from my2sats.models import Frontmatter, PostPayload, UpdatePayload
from my2sats.publish.images import ProcessedImages

REQUIRED_POST_FIELDS = ("slug", "title", "author")


@dataclass(frozen=True)
class UpdateOverrides:
    """Field values given on the command line. Empty means not given."""

    new_slug: str | None = None
    title: str | None = None
    content: str | None = None
    excerpt: str | None = None
    featured_image: str | None = None
    author: str | None = None
    tags: str | None = None  # comma-separated


@dataclass(frozen=True)
class UpdateDraft:
    """An update before image processing.

    ``content`` and ``featured_image`` are kept out of ``payload`` until their
    local images have been uploaded.
    """

    payload: UpdatePayload
    content: str | None = None
    featured_image: str | None = None

    @property
    def has_images_to_process(self) -> bool:
        return bool(self.content or self.featured_image)


def build_post_payload(frontmatter: Frontmatter, content: str) -> PostPayload:
    """Payload for a new post. Raises ValidationError naming every missing field."""
    missing = [name for name in REQUIRED_POST_FIELDS if not getattr(frontmatter, name)]
    if missing:
        raise ValidationError(missing)

    return PostPayload(
        slug=frontmatter.slug or "",
        title=frontmatter.title or "",
        author=frontmatter.author or "",
        content=content,
        excerpt=frontmatter.excerpt,
        featured_image=frontmatter.featured_image,
        tags=frontmatter.tags,
    )


def finalize_post_payload(payload: PostPayload, processed: ProcessedImages) -> PostPayload:
    return payload.model_copy(
        update={"content": processed.content, "featured_image": processed.featured_image_url}
    )


def parse_tags(value: str) -> list[str]:
    return [tag.strip() for tag in value.split(",") if tag.strip()]


def build_update_draft(
    overrides: UpdateOverrides,
    frontmatter: Frontmatter | None = None,
    file_content: str | None = None,
) -> UpdateDraft:
    """Merge file values with CLI overrides; overrides always win."""
    fields: dict[str, object] = {}
    content = file_content or None
    featured_image: str | None = None

    if frontmatter is not None:
        for name in ("slug", "title", "author", "excerpt"):
            value = getattr(frontmatter, name)
            if value:
                fields[name] = value
        if frontmatter.tags:
            fields["tags"] = frontmatter.tags
        featured_image = frontmatter.featured_image or None

    if overrides.new_slug:
        fields["slug"] = overrides.new_slug
    if overrides.title:
        fields["title"] = overrides.title
    if overrides.excerpt:
        fields["excerpt"] = overrides.excerpt
    if overrides.author:
        fields["author"] = overrides.author
    if overrides.tags:
        fields["tags"] = parse_tags(overrides.tags)
    if overrides.content:
        content = overrides.content
    if overrides.featured_image:
        featured_image = overrides.featured_image

    draft = UpdateDraft(payload=UpdatePayload(**fields), content=content, featured_image=featured_image)
    if draft.payload.is_empty() and not draft.has_images_to_process:
        raise NoUpdatesProvided()
    return draft


def finalize_update_payload(draft: UpdateDraft, processed: ProcessedImages | None = None) -> UpdatePayload:
    """Fold processed content and featured image into the update payload."""
    update: dict[str, object] = {}
    if draft.content:
        update["content"] = processed.content if processed else draft.content
    if draft.featured_image:
        update["featured_image"] = processed.featured_image_url if processed else draft.featured_image
    return draft.payload.model_copy(update=update)
