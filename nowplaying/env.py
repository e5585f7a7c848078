from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from auth.pkce import SPOTIFY_AUTHORIZE_URL, SPOTIFY_TOKEN_URL

from .constants import (
    DEFAULT_HOST,
    DEFAULT_NOTICE_SECONDS,
    DEFAULT_PORT,
    DEFAULT_REDIRECT_URI,
    DEFAULT_SETTLE_MS,
    ENV_FILE,
    LOGGER,
    SPOTIFY_API_BASE_URL,
    SPOTIFY_LOGOUT_URL,
)


_HTTP_URL = TypeAdapter(AnyHttpUrl)


@dataclass(frozen=True)
class Settings:
    client_id: str
    redirect_uri: str
    authorize_url: str = SPOTIFY_AUTHORIZE_URL
    token_url: str = SPOTIFY_TOKEN_URL
    api_base_url: str = SPOTIFY_API_BASE_URL
    logout_url: str = SPOTIFY_LOGOUT_URL
    http_timeout: float = 30.0
    settle_seconds: float = DEFAULT_SETTLE_MS / 1000
    notice_seconds: int = DEFAULT_NOTICE_SECONDS
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT


def is_truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_env_int(key: str, default: int) -> int:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be an integer value.")


def _get_env_float(key: str, default: float) -> float:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be a number.")


def _get_env_url(key: str, default: str) -> str:
    raw = os.getenv(key, "").strip() or default
    try:
        _HTTP_URL.validate_python(raw)
    except ValidationError as error:
        raise RuntimeError(f"{key} must be a valid http(s) URL, got {raw!r}.") from error
    return raw


def load_env(env_path: Path = ENV_FILE) -> None:
    if not env_path.exists():
        return
    load_dotenv(env_path, override=True)


def validate_env() -> None:
    if not os.getenv("SPOTIFY_CLIENT_ID", "").strip():
        raise RuntimeError(
            "Missing required environment variable SPOTIFY_CLIENT_ID "
            "(the client ID registered in the Spotify developer dashboard)."
        )


def load_settings() -> Settings:
    validate_env()
    return Settings(
        client_id=os.getenv("SPOTIFY_CLIENT_ID", "").strip(),
        redirect_uri=_get_env_url("SPOTIFY_REDIRECT_URI", DEFAULT_REDIRECT_URI),
        authorize_url=_get_env_url("SPOTIFY_AUTHORIZE_URL", SPOTIFY_AUTHORIZE_URL),
        token_url=_get_env_url("SPOTIFY_TOKEN_URL", SPOTIFY_TOKEN_URL),
        api_base_url=_get_env_url("SPOTIFY_API_BASE_URL", SPOTIFY_API_BASE_URL).rstrip("/"),
        logout_url=_get_env_url("SPOTIFY_LOGOUT_URL", SPOTIFY_LOGOUT_URL),
        http_timeout=_get_env_float("NOWPLAYING_HTTP_TIMEOUT", 30.0),
        settle_seconds=_get_env_int("NOWPLAYING_SETTLE_MS", DEFAULT_SETTLE_MS) / 1000,
        notice_seconds=_get_env_int("NOWPLAYING_NOTICE_SECONDS", DEFAULT_NOTICE_SECONDS),
        host=os.getenv("NOWPLAYING_HOST", DEFAULT_HOST),
        port=_get_env_int("NOWPLAYING_PORT", DEFAULT_PORT),
    )


def setup_logging() -> bool:
    debug_enabled = is_truthy(os.getenv("NOWPLAYING_DEBUG", "0"))
    if debug_enabled:
        logging.basicConfig(level=logging.INFO)
        LOGGER.setLevel(logging.INFO)
        logging.getLogger("nowplaying.auth").setLevel(logging.INFO)
    return debug_enabled
