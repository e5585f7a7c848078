from __future__ import annotations

import logging
from pathlib import Path

LOGGER = logging.getLogger("nowplaying.spotify")
APP_VERSION = "0.1.0"
AUTH_MODE = "pkce"

SPOTIFY_API_BASE_URL = "https://api.spotify.com/v1"
SPOTIFY_LOGOUT_URL = "https://www.spotify.com/logout/"

DEFAULT_REDIRECT_URI = "http://127.0.0.1:8888/"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8888
DEFAULT_SETTLE_MS = 500
DEFAULT_NOTICE_SECONDS = 5

ENV_FILE = Path(__file__).resolve().parent.parent / ".env"
