from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum

import httpx

from auth.ephemeral_store import EphemeralStore

from .constants import LOGGER, SPOTIFY_API_BASE_URL, SPOTIFY_LOGOUT_URL
from .errors import ApiError, InsufficientPrivilegeError, TokenExpiredError
from .session import SessionManager


class PlaybackAction(str, Enum):
    PLAY = "play"
    PAUSE = "pause"
    NEXT = "next"
    PREVIOUS = "previous"

    @property
    def method(self) -> str:
        # play/pause set player state, next/previous trigger a skip.
        if self in (PlaybackAction.PLAY, PlaybackAction.PAUSE):
            return "PUT"
        return "POST"

    @classmethod
    def parse(cls, value: "PlaybackAction | str") -> "PlaybackAction":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown playback action {value!r}.") from None


@dataclass
class CurrentTrack:
    name: str
    artists: list[str] = field(default_factory=list)
    album: str = ""
    image_url: str | None = None
    is_playing: bool = False

    @property
    def artist_line(self) -> str:
        return ", ".join(self.artists)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_payload(cls, payload: dict) -> "CurrentTrack | None":
        if not isinstance(payload, dict):
            return None
        item = payload.get("item")
        if not isinstance(item, dict):
            return None

        album = item.get("album")
        if not isinstance(album, dict):
            album = {}
        images = album.get("images") or []
        image_url = None
        if images and isinstance(images[0], dict):
            image_url = images[0].get("url")

        return cls(
            name=item.get("name") or "",
            artists=[
                artist.get("name") or ""
                for artist in item.get("artists") or []
                if isinstance(artist, dict)
            ],
            album=album.get("name") or "",
            image_url=image_url,
            is_playing=bool(payload.get("is_playing")),
        )


class PlaybackClient:
    def __init__(
        self,
        session_manager: SessionManager,
        store: EphemeralStore,
        *,
        client: httpx.AsyncClient,
        api_base_url: str = SPOTIFY_API_BASE_URL,
        logout_url: str = SPOTIFY_LOGOUT_URL,
    ) -> None:
        self.session_manager = session_manager
        self.store = store
        self.api_base_url = api_base_url.rstrip("/")
        self.logout_url = logout_url
        self._client = client

    async def get_current_track(self) -> CurrentTrack | None:
        """Return the track being played, or ``None`` when nothing is playing."""
        response = await self._request("GET", "/me/player/currently-playing")
        if response.status_code == 204:
            return None
        self._raise_for_status(response)
        try:
            payload = response.json()
        except ValueError as error:
            raise ApiError("Spotify returned an unreadable track payload.") from error
        return CurrentTrack.from_payload(payload)

    async def control_playback(self, action: PlaybackAction | str) -> None:
        action = PlaybackAction.parse(action)
        response = await self._request(action.method, f"/me/player/{action.value}")
        if response.status_code == 403:
            raise InsufficientPrivilegeError()
        self._raise_for_status(response)

    def logout(self) -> str:
        self.session_manager.clear()
        self.store.clear()
        return self.logout_url

    async def _request(self, method: str, path: str) -> httpx.Response:
        session = self.session_manager.require()
        try:
            return await self._client.request(
                method,
                f"{self.api_base_url}{path}",
                headers={"Authorization": f"Bearer {session.access_token}"},
            )
        except httpx.HTTPError as error:
            raise ApiError(f"Could not reach Spotify: {error}") from error

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.status_code == 401:
            LOGGER.warning("Spotify rejected the access token; ending session.")
            self.session_manager.clear()
            self.store.clear()
            raise TokenExpiredError()
        if not response.is_success:
            raise ApiError(status_code=response.status_code)
