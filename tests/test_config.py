"""Tests for my2sats.config: env, file and default resolution."""

import json
from pathlib import Path

import pytest

from my2sats.config import (
    DEFAULT_ALLOWED_IMAGE_TYPES,
    DEFAULT_API_URL,
    DEFAULT_CONFIG_PATH,
    DEFAULT_KEYFILE_PATH,
    Config,
    create_default_config,
    load_config,
    resolve_config_path,
)
from my2sats.errors import ConfigError


@pytest.fixture(autouse=True)
def _env(clean_env):
    yield


def _write(path: Path, data) -> Path:
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return path


class TestDefaults:
    def test_no_config_file(self, tmp_path: Path):
        cfg = load_config(tmp_path / "nonexistent.json")
        assert cfg.api_url == "http://localhost:3000"
        assert cfg.keyfile_path == Path.home() / ".my2sats" / "nostr.key"
        assert cfg.max_image_size == 5 * 1024 * 1024
        assert cfg.allowed_image_types == ("image/jpeg", "image/png", "image/webp", "image/gif")

    def test_frozen(self):
        cfg = Config()
        with pytest.raises(AttributeError):
            cfg.api_url = "other"  # type: ignore[misc]


class TestConfigFile:
    def test_loads_all_fields(self, tmp_path: Path):
        path = _write(
            tmp_path / "config.json",
            {
                "apiUrl": "https://api.my2sats.com",
                "keyfilePath": "/custom/path/.nostr-key",
                "maxImageSize": 10 * 1024 * 1024,
                "allowedImageTypes": ["image/png"],
            },
        )
        cfg = load_config(path)
        assert cfg.api_url == "https://api.my2sats.com"
        assert cfg.keyfile_path == Path("/custom/path/.nostr-key")
        assert cfg.max_image_size == 10 * 1024 * 1024
        assert cfg.allowed_image_types == ("image/png",)
        assert cfg.config_path == path

    def test_partial_file_uses_defaults(self, tmp_path: Path):
        cfg = load_config(_write(tmp_path / "config.json", {"apiUrl": "https://x"}))
        assert cfg.api_url == "https://x"
        assert cfg.keyfile_path == DEFAULT_KEYFILE_PATH

    @pytest.mark.parametrize(
        "data",
        [
            {"apiUrl": 123},
            {"maxImageSize": -1},
            {"maxImageSize": "big"},
            {"maxImageSize": True},
            {"allowedImageTypes": "image/png"},
            {"allowedImageTypes": ["image/png", 1]},
            ["not", "an", "object"],
        ],
    )
    def test_invalid_fields_ignored(self, tmp_path: Path, data):
        cfg = load_config(_write(tmp_path / "config.json", data))
        assert cfg.api_url == DEFAULT_API_URL
        assert cfg.max_image_size == 5 * 1024 * 1024
        assert cfg.allowed_image_types == DEFAULT_ALLOWED_IMAGE_TYPES

    def test_invalid_json(self, tmp_path: Path):
        path = _write(tmp_path / "config.json", "{ not json")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_config(path)


class TestEnvOverrides:
    def test_env_beats_file(self, tmp_path: Path, monkeypatch):
        path = _write(tmp_path / "config.json", {"apiUrl": "https://file", "keyfilePath": "/file.key"})
        monkeypatch.setenv("API_URL", "https://env")
        monkeypatch.setenv("KEYFILE_PATH", "/env.key")
        cfg = load_config(path)
        assert cfg.api_url == "https://env"
        assert cfg.keyfile_path == Path("/env.key")

    def test_explicit_env_mapping(self, tmp_path: Path):
        cfg = load_config(tmp_path / "none.json", env={"API_URL": "https://mapped"})
        assert cfg.api_url == "https://mapped"

    def test_config_path_from_env(self, tmp_path: Path, monkeypatch):
        path = _write(tmp_path / "custom.json", {"apiUrl": "https://custom"})
        monkeypatch.setenv("MY2SATS_CONFIG", str(path))
        assert load_config().api_url == "https://custom"

    def test_resolve_priority(self, tmp_path: Path):
        assert resolve_config_path(tmp_path / "a.json", {"MY2SATS_CONFIG": "/b.json"}) == tmp_path / "a.json"
        assert resolve_config_path(None, {"MY2SATS_CONFIG": "/b.json"}) == Path("/b.json")
        assert resolve_config_path(None, {}) == DEFAULT_CONFIG_PATH


class TestCreateDefaultConfig:
    def test_creates_file_and_directory(self, tmp_path: Path):
        path = create_default_config(tmp_path / "nested" / "config.json")
        data = json.loads(path.read_text())
        assert data == {"apiUrl": DEFAULT_API_URL, "keyfilePath": str(DEFAULT_KEYFILE_PATH)}

    def test_refuses_to_overwrite(self, tmp_path: Path):
        path = _write(tmp_path / "config.json", {"apiUrl": "https://mine"})
        with pytest.raises(ConfigError, match="already exists"):
            create_default_config(path)
        assert json.loads(path.read_text())["apiUrl"] == "https://mine"

    def test_overwrite(self, tmp_path: Path):
        path = _write(tmp_path / "config.json", {"apiUrl": "https://mine"})
        create_default_config(path, overwrite=True)
        assert json.loads(path.read_text())["apiUrl"] == DEFAULT_API_URL

    def test_roundtrip_through_load(self, tmp_path: Path):
        path = create_default_config(tmp_path / "config.json")
        cfg = load_config(path)
        assert cfg.api_url == DEFAULT_API_URL
