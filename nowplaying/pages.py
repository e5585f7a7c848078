from __future__ import annotations

from html import escape

from auth.models import Role

from .notices import Notice
from .playback import CurrentTrack

_LAYOUT = """<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Now Playing</title>
</head>
<body>
{notice}
{body}
</body>
</html>
"""


def _notice_html(notice: Notice | None) -> str:
    if notice is None:
        return ""
    return f'<div class="notice notice-{escape(notice.level)}" role="alert">{escape(notice.message)}</div>'


def _track_html(track: CurrentTrack | None) -> str:
    if track is None:
        return (
            '<p class="no-track">Nothing is playing right now.</p>'
            '<p class="hint">Open Spotify and start a song.</p>'
        )

    cover = ""
    if track.image_url:
        cover = f'<img src="{escape(track.image_url)}" alt="Album cover" class="album-cover">'
    status = "playing" if track.is_playing else "paused"
    return (
        f'<div class="track-details">{cover}'
        f"<h3>{escape(track.name)}</h3>"
        f'<p class="artist">{escape(track.artist_line)}</p>'
        f'<p class="album">{escape(track.album)}</p>'
        f'<p class="status {status}">{status.capitalize()}</p>'
        "</div>"
    )


def _controls_html(track: CurrentTrack | None) -> str:
    toggle = "pause" if track is not None and track.is_playing else "play"
    buttons = [
        ("previous", "Previous"),
        (toggle, toggle.capitalize()),
        ("next", "Next"),
    ]
    forms = "".join(
        f'<form method="post" action="/player/{action}"><button type="submit">{label}</button></form>'
        for action, label in buttons
    )
    return f'<section id="controls-section">{forms}</section>'


def render_login(notice: Notice | None = None) -> str:
    body = (
        '<section id="login-screen">'
        "<h1>Now Playing</h1>"
        '<form method="get" action="/login">'
        '<label><input type="radio" name="role" value="viewer" checked> Viewer</label>'
        '<label><input type="radio" name="role" value="manager"> Manager</label>'
        '<button type="submit" id="login-btn">Log in with Spotify</button>'
        "</form>"
        "</section>"
    )
    return _LAYOUT.format(notice=_notice_html(notice), body=body)


def render_dashboard(role: Role, track: CurrentTrack | None, notice: Notice | None = None) -> str:
    controls = _controls_html(track) if role is Role.MANAGER else ""
    body = (
        '<section id="dashboard">'
        f'<p id="user-profile-type">{role.value.capitalize()}</p>'
        f'<div id="current-track">{_track_html(track)}</div>'
        '<a href="/" id="refresh-btn">Refresh</a>'
        f"{controls}"
        '<a href="/logout" id="logout-btn">Log out</a>'
        "</section>"
    )
    return _LAYOUT.format(notice=_notice_html(notice), body=body)
