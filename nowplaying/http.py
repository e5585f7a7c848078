from __future__ import annotations

import httpx

from .constants import LOGGER


def friendly_error_message(status_code: int | None) -> str:
    if status_code is None:
        return "Could not reach Spotify. Check your connection and try again."
    if status_code == 401:
        return "Your Spotify token expired. Please log in again."
    if status_code == 403:
        return "Playback controls require Spotify Premium and the manager role."
    if status_code == 404:
        return "No active Spotify device was found. Start playback in a Spotify app first."
    if status_code == 429:
        return "Spotify rate limit exceeded. Please wait a moment."
    if status_code >= 500:
        return "Spotify is experiencing issues. Please try again later."
    return f"Spotify API request failed with status {status_code}."


async def log_request(request: httpx.Request) -> None:
    LOGGER.info("Spotify request %s %s", request.method, request.url)


async def log_response(response: httpx.Response) -> None:
    LOGGER.info(
        "Spotify response %s %s -> %s",
        response.request.method,
        response.request.url,
        response.status_code,
    )
    if response.status_code >= 400:
        body = await response.aread()
        text = body.decode("utf-8", errors="replace")
        if len(text) > 1000:
            text = text[:1000] + "...<truncated>"
        LOGGER.warning("Spotify error body: %s", text)


def build_http_client(*, timeout: float, debug_enabled: bool) -> httpx.AsyncClient:
    event_hooks: dict[str, list] = {"request": [], "response": []}
    if debug_enabled:
        event_hooks["request"].append(log_request)
        event_hooks["response"].append(log_response)
    return httpx.AsyncClient(timeout=timeout, event_hooks=event_hooks)
