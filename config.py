# config.py
import os
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from catalog_types import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_BASE_URL = "https://image.tmdb.org/t/p"
DEFAULT_LANGUAGE = "en-US"


@dataclass(frozen=True)
class Settings:
    base_url: str
    api_key: str
    image_base_url: str = DEFAULT_IMAGE_BASE_URL
    language: str = DEFAULT_LANGUAGE
    cache_ttl_seconds: float = 300.0
    request_timeout_seconds: float = 10.0
    search_debounce_seconds: float = 0.5
    admin_token: Optional[str] = None


def _required(env: Mapping[str, str], name: str) -> str:
    value = (env.get(name) or "").strip()
    if not value:
        raise ConfigurationError(f"{name} is not configured")
    return value


def _seconds(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Read configuration once at startup.

    With no explicit mapping, `.env` is loaded into the process environment
    first. A missing base URL or API key is fatal.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    settings = Settings(
        base_url=_required(env, "TMDB_BASE_URL"),
        api_key=_required(env, "TMDB_API_KEY"),
        image_base_url=(env.get("TMDB_IMAGE_BASE_URL") or DEFAULT_IMAGE_BASE_URL).strip(),
        language=(env.get("TMDB_LANGUAGE") or DEFAULT_LANGUAGE).strip(),
        cache_ttl_seconds=_seconds(env, "CACHE_TTL_SECONDS", 300.0),
        request_timeout_seconds=_seconds(env, "REQUEST_TIMEOUT_SECONDS", 10.0),
        search_debounce_seconds=_seconds(env, "SEARCH_DEBOUNCE_SECONDS", 0.5),
        admin_token=env.get("ADMIN_TOKEN") or None,
    )
    logger.info(
        "SETTINGS → base_url=%s cache ttl=%ss timeout=%ss debounce=%ss admin_token? %s",
        settings.base_url,
        settings.cache_ttl_seconds,
        settings.request_timeout_seconds,
        settings.search_debounce_seconds,
        "yes" if settings.admin_token else "no",
    )
    return settings
