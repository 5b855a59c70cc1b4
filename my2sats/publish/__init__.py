"""Post publishing: front matter, payload assembly and image upload."""

from my2sats.publish.frontmatter import get_base_path, parse_frontmatter
from my2sats.publish.images import (
    ImageReference,
    ProcessedImages,
    is_local_path,
    parse_image_references,
    process_images,
    validate_image_file,
)
from my2sats.publish.payload import (
    UpdateDraft,
    UpdateOverrides,
    build_post_payload,
    build_update_draft,
    finalize_post_payload,
    finalize_update_payload,
)

__all__ = [
    "ImageReference",
    "ProcessedImages",
    "UpdateDraft",
    "UpdateOverrides",
    "build_post_payload",
    "build_update_draft",
    "finalize_post_payload",
    "finalize_update_payload",
    "get_base_path",
    "is_local_path",
    "parse_frontmatter",
    "parse_image_references",
    "process_images",
    "validate_image_file",
]
