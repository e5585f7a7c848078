import os

import pytest


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    # A developer's .env or shell must not leak into configuration tests.
    for key in list(os.environ):
        if key.startswith(("SPOTIFY_", "NOWPLAYING_")):
            monkeypatch.delenv(key)
