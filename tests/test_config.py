"""Tests for startup configuration."""

import pytest

from catalog_types import ConfigurationError
from config import DEFAULT_IMAGE_BASE_URL, load_settings

BASE_ENV = {"TMDB_BASE_URL": "https://api.themoviedb.org/3", "TMDB_API_KEY": "abc123"}


def test_defaults():
    settings = load_settings(dict(BASE_ENV))

    assert settings.base_url == "https://api.themoviedb.org/3"
    assert settings.api_key == "abc123"
    assert settings.image_base_url == DEFAULT_IMAGE_BASE_URL
    assert settings.language == "en-US"
    assert settings.cache_ttl_seconds == 300.0
    assert settings.request_timeout_seconds == 10.0
    assert settings.search_debounce_seconds == 0.5
    assert settings.admin_token is None


def test_overrides():
    env = dict(BASE_ENV, CACHE_TTL_SECONDS="60", REQUEST_TIMEOUT_SECONDS="2.5", ADMIN_TOKEN="admin")

    settings = load_settings(env)

    assert settings.cache_ttl_seconds == 60.0
    assert settings.request_timeout_seconds == 2.5
    assert settings.admin_token == "admin"


@pytest.mark.parametrize("missing", ["TMDB_BASE_URL", "TMDB_API_KEY"])
def test_missing_required_is_fatal(missing):
    env = dict(BASE_ENV)
    env[missing] = "  "

    with pytest.raises(ConfigurationError, match=missing):
        load_settings(env)


@pytest.mark.parametrize("raw", ["soon", "0", "-5"])
def test_bad_ttl_is_fatal(raw):
    with pytest.raises(ConfigurationError, match="CACHE_TTL_SECONDS"):
        load_settings(dict(BASE_ENV, CACHE_TTL_SECONDS=raw))


def test_reads_process_environment(monkeypatch):
    monkeypatch.setattr("config.load_dotenv", lambda: False)
    monkeypatch.setenv("TMDB_BASE_URL", "https://env.example/3")
    monkeypatch.setenv("TMDB_API_KEY", "from-env")

    settings = load_settings()

    assert settings.base_url == "https://env.example/3"
    assert settings.api_key == "from-env"
