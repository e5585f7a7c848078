import httpx
import pytest

from auth.ephemeral_store import STATE_KEY, MemoryEphemeralStore
from auth.models import Role, Session
from nowplaying.errors import (
    ApiError,
    InsufficientPrivilegeError,
    NotAuthenticatedError,
    TokenExpiredError,
)
from nowplaying.playback import CurrentTrack, PlaybackAction, PlaybackClient
from nowplaying.session import SessionManager
from tests.spotify_helpers import TRACK_PAYLOAD

API = "https://api.spotify.com/v1"


def _make_handler(status: int, json: dict | None = None):
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if json is None:
            return httpx.Response(status, request=request)
        return httpx.Response(status, request=request, json=json)

    return handler, requests


def _build_client(handler, *, role: Role = Role.MANAGER, authenticated: bool = True):
    sessions = SessionManager()
    if authenticated:
        sessions.start(Session(access_token="T", role=role))
    store = MemoryEphemeralStore()
    store.put(STATE_KEY, "leftover")
    client = PlaybackClient(
        sessions,
        store,
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        api_base_url=API,
    )
    return client, sessions, store


@pytest.mark.asyncio
async def test_current_track_parsed() -> None:
    handler, requests = _make_handler(200, TRACK_PAYLOAD)
    client, _, _ = _build_client(handler)

    track = await client.get_current_track()

    assert track == CurrentTrack(
        name="Aguas de Marco",
        artists=["Elis Regina", "Tom Jobim"],
        album="Elis & Tom",
        image_url="https://i.scdn.co/image/cover-640",
        is_playing=True,
    )
    assert track.artist_line == "Elis Regina, Tom Jobim"
    assert requests[0].method == "GET"
    assert str(requests[0].url) == f"{API}/me/player/currently-playing"
    assert requests[0].headers["authorization"] == "Bearer T"


@pytest.mark.asyncio
async def test_current_track_204_is_nothing_playing() -> None:
    handler, _ = _make_handler(204)
    client, sessions, _ = _build_client(handler)

    assert await client.get_current_track() is None
    assert sessions.is_authenticated


@pytest.mark.asyncio
async def test_current_track_without_item_is_nothing_playing() -> None:
    handler, _ = _make_handler(200, {"is_playing": False, "item": None})
    client, _, _ = _build_client(handler)

    assert await client.get_current_track() is None


@pytest.mark.asyncio
async def test_current_track_without_album_images() -> None:
    payload = {"is_playing": False, "item": {"name": "Song", "artists": [], "album": {"name": "A", "images": []}}}
    handler, _ = _make_handler(200, payload)
    client, _, _ = _build_client(handler)

    track = await client.get_current_track()

    assert track.image_url is None
    assert track.is_playing is False


@pytest.mark.asyncio
async def test_current_track_tolerates_malformed_album_and_artists() -> None:
    payload = {
        "is_playing": True,
        "item": {"name": "Song", "artists": [{"name": None}, {"name": "B"}], "album": "Single"},
    }
    handler, _ = _make_handler(200, payload)
    client, _, _ = _build_client(handler)

    track = await client.get_current_track()

    assert track.album == ""
    assert track.image_url is None
    assert track.artists == ["", "B"]
    assert track.artist_line == ", B"


@pytest.mark.asyncio
async def test_current_track_401_tears_down_session() -> None:
    handler, _ = _make_handler(401, {"error": {"status": 401}})
    client, sessions, store = _build_client(handler)

    with pytest.raises(TokenExpiredError):
        await client.get_current_track()

    assert sessions.current is None
    assert len(store) == 0


@pytest.mark.asyncio
async def test_current_track_other_status_is_api_error() -> None:
    handler, _ = _make_handler(503, {"error": {"status": 503}})
    client, sessions, _ = _build_client(handler)

    with pytest.raises(ApiError) as excinfo:
        await client.get_current_track()

    assert type(excinfo.value) is ApiError
    assert excinfo.value.status_code == 503
    assert sessions.is_authenticated


@pytest.mark.asyncio
async def test_current_track_requires_session() -> None:
    handler, requests = _make_handler(200, TRACK_PAYLOAD)
    client, _, _ = _build_client(handler, authenticated=False)

    with pytest.raises(NotAuthenticatedError):
        await client.get_current_track()
    assert requests == []


@pytest.mark.asyncio
async def test_transport_failure_is_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    client, sessions, _ = _build_client(handler)

    with pytest.raises(ApiError, match="offline") as excinfo:
        await client.get_current_track()
    assert excinfo.value.status_code is None
    assert sessions.is_authenticated


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("action", "method"),
    [("play", "PUT"), ("pause", "PUT"), ("next", "POST"), ("previous", "POST")],
)
async def test_control_playback_verbs(action: str, method: str) -> None:
    handler, requests = _make_handler(204)
    client, _, _ = _build_client(handler)

    await client.control_playback(action)

    assert requests[0].method == method
    assert str(requests[0].url) == f"{API}/me/player/{action}"
    assert requests[0].headers["authorization"] == "Bearer T"


@pytest.mark.asyncio
async def test_control_playback_403_is_insufficient_privilege() -> None:
    handler, _ = _make_handler(403, {"error": {"status": 403, "reason": "PREMIUM_REQUIRED"}})
    client, sessions, _ = _build_client(handler)

    with pytest.raises(InsufficientPrivilegeError, match="Premium"):
        await client.control_playback("pause")
    assert sessions.is_authenticated


@pytest.mark.asyncio
async def test_control_playback_401_tears_down_session() -> None:
    handler, _ = _make_handler(401)
    client, sessions, _ = _build_client(handler)

    with pytest.raises(TokenExpiredError):
        await client.control_playback(PlaybackAction.NEXT)
    assert sessions.current is None


@pytest.mark.asyncio
async def test_control_playback_404_is_api_error() -> None:
    handler, _ = _make_handler(404, {"error": {"status": 404, "reason": "NO_ACTIVE_DEVICE"}})
    client, _, _ = _build_client(handler)

    with pytest.raises(ApiError, match="No active Spotify device"):
        await client.control_playback("play")


@pytest.mark.asyncio
async def test_control_playback_unknown_action() -> None:
    handler, requests = _make_handler(204)
    client, _, _ = _build_client(handler)

    with pytest.raises(ValueError, match="Unknown playback action"):
        await client.control_playback("shuffle")
    assert requests == []


@pytest.mark.asyncio
async def test_control_playback_requires_session() -> None:
    handler, requests = _make_handler(204)
    client, _, _ = _build_client(handler, authenticated=False)

    with pytest.raises(NotAuthenticatedError):
        await client.control_playback("play")
    assert requests == []


def test_logout_clears_session_and_store() -> None:
    handler, _ = _make_handler(204)
    client, sessions, store = _build_client(handler)

    destination = client.logout()

    assert destination == "https://www.spotify.com/logout/"
    assert sessions.current is None
    assert len(store) == 0
