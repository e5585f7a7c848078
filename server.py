from __future__ import annotations

import contextlib
import os
import webbrowser

import uvicorn
from starlette.applications import Starlette

from auth.authenticator import PkceAuthenticator
from auth.ephemeral_store import MemoryEphemeralStore
from nowplaying.constants import LOGGER
from nowplaying.env import is_truthy, load_env, load_settings, setup_logging
from nowplaying.http import build_http_client
from nowplaying.notices import NoticeBoard
from nowplaying.playback import PlaybackClient
from nowplaying.session import SessionManager
from nowplaying.web import NowPlayingApp


def create_app() -> Starlette:
    load_env()
    debug_enabled = setup_logging()
    settings = load_settings()

    http_client = build_http_client(timeout=settings.http_timeout, debug_enabled=debug_enabled)
    store = MemoryEphemeralStore()
    authenticator = PkceAuthenticator(
        client_id=settings.client_id,
        redirect_uri=settings.redirect_uri,
        store=store,
        authorize_url=settings.authorize_url,
        token_url=settings.token_url,
        http_client=http_client,
    )
    playback = PlaybackClient(
        SessionManager(),
        store,
        client=http_client,
        api_base_url=settings.api_base_url,
        logout_url=settings.logout_url,
    )
    now_playing = NowPlayingApp(
        authenticator=authenticator,
        playback=playback,
        notices=NoticeBoard(ttl_seconds=settings.notice_seconds),
        settle_seconds=settings.settle_seconds,
    )

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        del app
        try:
            yield
        finally:
            await http_client.aclose()

    app = Starlette(debug=debug_enabled, routes=now_playing.routes(), lifespan=lifespan)
    app.state.now_playing = now_playing
    app.state.settings = settings
    return app


def main() -> None:
    app = create_app()
    settings = app.state.settings
    LOGGER.info("Serving on http://%s:%s (redirect URI %s)", settings.host, settings.port, settings.redirect_uri)
    if is_truthy(os.getenv("NOWPLAYING_OPEN_BROWSER")):
        webbrowser.open(settings.redirect_uri)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
