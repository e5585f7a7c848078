from __future__ import annotations

import base64
import hashlib
import secrets
import string
import urllib.parse
from dataclasses import dataclass

import httpx

from auth.errors import TokenExchangeError

SPOTIFY_AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"

UNRESERVED_CHARS = string.ascii_letters + string.digits + "-._~"
CODE_VERIFIER_LENGTH = 128
STATE_LENGTH = 16


@dataclass
class TokenResponse:
    access_token: str
    token_type: str = "Bearer"
    expires_in: int | None = None
    scope: str = ""

    @classmethod
    def from_payload(cls, payload: dict) -> "TokenResponse":
        if not isinstance(payload, dict):
            raise TokenExchangeError("Token response must be a JSON object.")

        access_token = payload.get("access_token")
        token_type = payload.get("token_type", "Bearer")
        expires_in = payload.get("expires_in")
        scope = payload.get("scope", "")

        if not isinstance(access_token, str) or not access_token:
            raise TokenExchangeError("Token response missing access_token.")
        if expires_in is not None and not isinstance(expires_in, int):
            raise TokenExchangeError("Token response expires_in must be an integer.")
        if not isinstance(scope, str):
            raise TokenExchangeError("Token response scope must be a string.")

        return cls(
            access_token=access_token,
            token_type=token_type if isinstance(token_type, str) else "Bearer",
            expires_in=expires_in,
            scope=scope,
        )


def generate_random_string(length: int) -> str:
    if length <= 0:
        raise ValueError("length must be a positive integer.")
    return "".join(secrets.choice(UNRESERVED_CHARS) for _ in range(length))


def generate_code_verifier(length: int = CODE_VERIFIER_LENGTH) -> str:
    if not 43 <= length <= 128:
        raise ValueError("PKCE code verifiers must be 43 to 128 characters long.")
    return generate_random_string(length)


def generate_state(length: int = STATE_LENGTH) -> str:
    return generate_random_string(length)


def base64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def generate_code_challenge(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("utf-8")).digest()
    return base64url_encode(digest)


def build_authorization_url(
    client_id: str,
    redirect_uri: str,
    scope: str,
    state: str,
    code_challenge: str,
    *,
    authorize_url: str = SPOTIFY_AUTHORIZE_URL,
) -> str:
    query = {
        "client_id": client_id,
        "response_type": "code",
        "redirect_uri": redirect_uri,
        "scope": scope,
        "code_challenge_method": "S256",
        "code_challenge": code_challenge,
        "state": state,
    }
    return f"{authorize_url}?{urllib.parse.urlencode(query)}"


async def exchange_code(
    client_id: str,
    code: str,
    redirect_uri: str,
    code_verifier: str,
    *,
    client: httpx.AsyncClient | None = None,
    token_url: str = SPOTIFY_TOKEN_URL,
) -> TokenResponse:
    """Trade an authorization code for an access token.

    Spotify treats PKCE clients as public clients, so no client secret is sent;
    the verifier is what proves this client started the flow.
    """
    payload = {
        "client_id": client_id,
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": redirect_uri,
        "code_verifier": code_verifier,
    }
    own_client = client is None
    http_client = client or httpx.AsyncClient()

    try:
        response = await http_client.post(token_url, data=payload)
        response.raise_for_status()
        body = response.json()
    except httpx.HTTPStatusError as error:
        detail = error.response.text
        raise TokenExchangeError(
            f"Token request failed with status {error.response.status_code}: {detail}",
            status_code=error.response.status_code,
        ) from error
    except httpx.HTTPError as error:
        raise TokenExchangeError(f"Token request failed: {error}") from error
    except ValueError as error:
        raise TokenExchangeError("Token response was not valid JSON.") from error
    finally:
        if own_client:
            await http_client.aclose()

    return TokenResponse.from_payload(body)
