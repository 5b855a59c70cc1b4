"""
Front-matter parsing for post files.

A post file is a ``---`` delimited block of ``key: value`` lines followed by
markdown::

    ---
    slug: my-post
    title: My Post: Part 1
    tags: [nostr, bitcoin]
    ---
    Body text.

Each line is split on its first colon and the value is kept as written, so
``0123``, ``yes`` and ``#1 post`` stay literal strings. Quoted values and
``[...]`` lists are read as YAML flow scalars with every item a string.

An empty block (``---`` immediately followed by ``---``) is not treated as
front matter; the whole input is returned as content.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from my2sats.errors import FrontmatterError
from my2sats.models import Frontmatter

_FRONTMATTER = re.compile(r"^---\n(.+?)\n---\n(.*)$", re.DOTALL)
_QUOTES = ('"', "'")


def parse_frontmatter(markdown: str) -> tuple[Frontmatter, str]:
    """Split a post file into (front matter, stripped content)."""
    match = _FRONTMATTER.match(markdown)
    if not match:
        return Frontmatter(), markdown

    block, content = match.group(1), match.group(2)
    return Frontmatter(**_known_fields(_parse_block(block))), content.strip()


def _parse_block(block: str) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for line in block.split("\n"):
        key, sep, value = line.partition(":")
        if not sep:
            continue
        data[key.strip()] = _parse_value(value.strip())
    return data


def _parse_value(value: str) -> Any:
    if value.startswith("[") and value.endswith("]"):
        try:
            return yaml.load(value, Loader=yaml.BaseLoader)
        except yaml.YAMLError as e:
            raise FrontmatterError(f"Invalid front matter list {value!r}: {e}") from e
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        try:
            return yaml.load(value, Loader=yaml.BaseLoader)
        except yaml.YAMLError:
            return value[1:-1]
    return value


def _known_fields(data: dict[Any, Any]) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for key in Frontmatter.model_fields:
        value = data.get(key)
        if value is None:
            continue
        if key == "tags":
            items = value if isinstance(value, list) else [value]
            fields[key] = [str(item).strip() for item in items if item is not None and str(item).strip()]
        else:
            fields[key] = str(value)
    return fields


def get_base_path(file_path: str | Path) -> str:
    """Directory that relative image paths in ``file_path`` resolve against."""
    return str(Path(file_path).parent)
