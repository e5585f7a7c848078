from __future__ import annotations

import asyncio
import urllib.parse

from starlette.requests import Request
from starlette.responses import (
    HTMLResponse,
    JSONResponse,
    PlainTextResponse,
    RedirectResponse,
    Response,
)
from starlette.routing import Route

from auth.authenticator import PkceAuthenticator
from auth.errors import AuthError
from auth.urls import is_authorization_response, strip_auth_response_params

from .constants import APP_VERSION, AUTH_MODE, DEFAULT_SETTLE_MS, LOGGER
from .errors import ApiError, InsufficientPrivilegeError, NotAuthenticatedError, TokenExpiredError
from .notices import NoticeBoard
from .pages import render_dashboard, render_login
from .playback import PlaybackAction, PlaybackClient


def _origin_of(url: str) -> str:
    parsed = urllib.parse.urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


def _is_allowed_origin(origin: str | None, allowed_origins: set[str]) -> bool:
    return bool(origin and origin in allowed_origins)


def _api_error_payload(error: ApiError) -> tuple[dict, int]:
    if isinstance(error, NotAuthenticatedError):
        return {"error": "not_authenticated", "message": str(error)}, 401
    if isinstance(error, TokenExpiredError):
        return {"error": "token_expired", "message": str(error)}, 401
    if isinstance(error, InsufficientPrivilegeError):
        return {"error": "insufficient_privilege", "message": str(error)}, 403
    return {"error": "api_error", "message": str(error), "status": error.status_code}, 502


class NowPlayingApp:
    """Routes that tie the login flow and playback client to the browser."""

    def __init__(
        self,
        *,
        authenticator: PkceAuthenticator,
        playback: PlaybackClient,
        notices: NoticeBoard,
        settle_seconds: float = DEFAULT_SETTLE_MS / 1000,
        sleep=asyncio.sleep,
    ) -> None:
        self.authenticator = authenticator
        self.playback = playback
        self.session_manager = playback.session_manager
        self.notices = notices
        self.settle_seconds = settle_seconds
        self._sleep = sleep

    def routes(self) -> list[Route]:
        routes = [
            Route("/", self.index, methods=["GET"]),
            Route("/login", self.login, methods=["GET"]),
            Route("/logout", self.logout, methods=["GET"]),
            Route("/player/{action}", self.player, methods=["POST"]),
            Route("/api/track", self.api_track, methods=["GET"]),
            Route("/health", self.health, methods=["GET"]),
        ]
        callback_path = urllib.parse.urlparse(self.authenticator.redirect_uri).path or "/"
        if callback_path != "/":
            routes.append(Route(callback_path, self.index, methods=["GET"]))
        return routes

    # -- handlers --------------------------------------------------------------

    async def index(self, request: Request) -> Response:
        if is_authorization_response(request.query_params):
            await self._handle_callback(request)
            # Drop code/state from the address bar so a reload cannot replay them.
            return RedirectResponse(strip_auth_response_params(str(request.url)), status_code=303)

        if not self.session_manager.is_authenticated:
            return HTMLResponse(render_login(self.notices.current()))

        track = None
        try:
            track = await self.playback.get_current_track()
        except ApiError as error:
            self.notices.show(str(error))

        role = self.session_manager.role
        if role is None:
            return HTMLResponse(render_login(self.notices.current()))
        return HTMLResponse(render_dashboard(role, track, self.notices.current()))

    async def login(self, request: Request) -> Response:
        if not self._is_same_origin(request):
            return self._reject_cross_site(request)
        role = request.query_params.get("role", "viewer")
        try:
            authorization_url = self.authenticator.begin_login(role)
        except ValueError as error:
            self.notices.show(str(error))
            return RedirectResponse("/", status_code=303)
        return RedirectResponse(authorization_url, status_code=302)

    async def logout(self, request: Request) -> Response:
        if not self._is_same_origin(request):
            return self._reject_cross_site(request)
        self.notices.dismiss()
        return RedirectResponse(self.playback.logout(), status_code=302)

    async def player(self, request: Request) -> Response:
        if not self._is_same_origin(request):
            return self._reject_cross_site(request)
        try:
            action = PlaybackAction.parse(request.path_params["action"])
        except ValueError as error:
            return PlainTextResponse(str(error), status_code=404)

        try:
            await self.playback.control_playback(action)
        except ApiError as error:
            self.notices.show(str(error))
        else:
            # Spotify needs a moment before the new state is readable.
            await self._sleep(self.settle_seconds)
        return RedirectResponse("/", status_code=303)

    async def api_track(self, request: Request) -> Response:
        del request
        try:
            track = await self.playback.get_current_track()
        except ApiError as error:
            payload, status_code = _api_error_payload(error)
            return JSONResponse(payload, status_code=status_code)

        if track is None:
            return JSONResponse({"playing": False, "track": None})
        return JSONResponse({"playing": track.is_playing, "track": track.to_dict()})

    async def health(self, request: Request) -> Response:
        del request
        return JSONResponse(
            {
                "status": "ok",
                "version": APP_VERSION,
                "auth_mode": AUTH_MODE,
                "authenticated": self.session_manager.is_authenticated,
            }
        )

    # -- helpers ---------------------------------------------------------------

    def _is_same_origin(self, request: Request) -> bool:
        """Whether the browser sent this request from one of our own pages.

        The callback on ``/`` is not checked: it always arrives as a
        cross-site navigation from the authorization server.
        """
        fetch_site = request.headers.get("sec-fetch-site")
        if fetch_site is not None and fetch_site not in ("same-origin", "none"):
            return False

        allowed_origins = {
            _origin_of(str(request.base_url)),
            _origin_of(self.authenticator.redirect_uri),
        }
        origin = request.headers.get("origin")
        if origin is not None:
            return _is_allowed_origin(origin, allowed_origins)
        referer = request.headers.get("referer")
        if referer is not None:
            return _is_allowed_origin(_origin_of(referer), allowed_origins)
        return True

    def _reject_cross_site(self, request: Request) -> Response:
        LOGGER.warning("Rejected cross-site %s %s", request.method, request.url.path)
        self.notices.show("Request blocked: it did not come from this page.")
        return PlainTextResponse("Cross-site request rejected.", status_code=403)

    async def _handle_callback(self, request: Request) -> None:
        try:
            session = await self.authenticator.complete_login(request.query_params)
        except AuthError as error:
            LOGGER.warning("Login failed: %s", error)
            self.notices.show(str(error))
            return

        if session is not None:
            self.session_manager.start(session)
            self.notices.dismiss()
