"""
Configuration for the my2sats CLI.

Values are resolved once at process start and passed explicitly to every
operation that needs them. Priority (highest first):

    1. Environment variables (API_URL, KEYFILE_PATH)
    2. JSON config file (~/.my2sats/config.json, or $MY2SATS_CONFIG)
    3. Defaults

Usage:
    from my2sats.config import load_config
    cfg = load_config()
    print(cfg.api_url)         # "http://localhost:3000"
    print(cfg.keyfile_path)    # "/home/user/.my2sats/nostr.key"
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from my2sats.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_DIR = Path.home() / ".my2sats"
DEFAULT_CONFIG_PATH = DEFAULT_DIR / "config.json"
DEFAULT_KEYFILE_PATH = DEFAULT_DIR / "nostr.key"
DEFAULT_API_URL = "http://localhost:3000"
DEFAULT_MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5MB
DEFAULT_ALLOWED_IMAGE_TYPES: tuple[str, ...] = (
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/gif",
)


@dataclass(frozen=True)
class Config:
    """Resolved my2sats configuration."""

    api_url: str = DEFAULT_API_URL
    keyfile_path: Path = field(default_factory=lambda: DEFAULT_KEYFILE_PATH)
    max_image_size: int = DEFAULT_MAX_IMAGE_SIZE
    allowed_image_types: tuple[str, ...] = DEFAULT_ALLOWED_IMAGE_TYPES
    config_path: Path = field(default_factory=lambda: DEFAULT_CONFIG_PATH)


def resolve_config_path(
    config_path: Path | str | None = None, env: Mapping[str, str] | None = None
) -> Path:
    """Config file location: explicit argument > $MY2SATS_CONFIG > default."""
    env = os.environ if env is None else env
    if config_path:
        return Path(config_path).expanduser()
    if env.get("MY2SATS_CONFIG"):
        return Path(env["MY2SATS_CONFIG"]).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config(
    config_path: Path | str | None = None, env: Mapping[str, str] | None = None
) -> Config:
    """Build the configuration from env vars, the config file and defaults."""
    env = os.environ if env is None else env
    path = resolve_config_path(config_path, env)
    file_cfg = _load_config_file(path)

    keyfile = env.get("KEYFILE_PATH") or file_cfg.get("keyfilePath")
    return Config(
        api_url=env.get("API_URL") or file_cfg.get("apiUrl") or DEFAULT_API_URL,
        keyfile_path=Path(keyfile).expanduser() if keyfile else DEFAULT_KEYFILE_PATH,
        max_image_size=file_cfg.get("maxImageSize", DEFAULT_MAX_IMAGE_SIZE),
        allowed_image_types=tuple(
            file_cfg.get("allowedImageTypes", DEFAULT_ALLOWED_IMAGE_TYPES)
        ),
        config_path=path,
    )


def _load_config_file(path: Path) -> dict[str, Any]:
    """Read and sanitize a config file. Missing file -> empty dict."""
    if not path.exists():
        logger.debug("No config file at %s, using defaults", path)
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    return _validate_config_file(data)


def _validate_config_file(data: Any) -> dict[str, Any]:
    """Keep only well-typed known fields; everything else is ignored."""
    if not isinstance(data, dict):
        return {}

    cfg: dict[str, Any] = {}
    if isinstance(data.get("apiUrl"), str):
        cfg["apiUrl"] = data["apiUrl"]
    if isinstance(data.get("keyfilePath"), str):
        cfg["keyfilePath"] = data["keyfilePath"]

    size = data.get("maxImageSize")
    # bool is an int subclass
    if isinstance(size, (int, float)) and not isinstance(size, bool) and size > 0:
        cfg["maxImageSize"] = int(size)

    types = data.get("allowedImageTypes")
    if isinstance(types, list) and all(isinstance(t, str) for t in types):
        cfg["allowedImageTypes"] = types
    return cfg


def create_default_config(config_path: Path | str | None = None, overwrite: bool = False) -> Path:
    """Write a config file with default values. Returns its path."""
    path = Path(config_path).expanduser() if config_path else DEFAULT_CONFIG_PATH
    if path.exists() and not overwrite:
        raise ConfigError(f"Config file already exists at {path}")

    path.parent.mkdir(parents=True, exist_ok=True)
    default = {"apiUrl": DEFAULT_API_URL, "keyfilePath": str(DEFAULT_KEYFILE_PATH)}
    path.write_text(json.dumps(default, indent=2) + "\n", encoding="utf-8")
    return path
