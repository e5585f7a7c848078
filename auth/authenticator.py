from __future__ import annotations

import logging
import secrets
from collections.abc import Mapping

import httpx

from auth import pkce
from auth.ephemeral_store import ROLE_KEY, STATE_KEY, VERIFIER_KEY, EphemeralStore
from auth.errors import CsrfMismatchError, MissingVerifierError, RemoteAuthError
from auth.models import ROLE_SCOPES, PendingAuthRequest, Role, Session

LOGGER = logging.getLogger("nowplaying.auth")


def _states_match(received: str | None, expected: str | None) -> bool:
    if not received or not expected:
        return False
    return secrets.compare_digest(received.encode("utf-8"), expected.encode("utf-8"))


class PkceAuthenticator:
    """Runs the two halves of the Authorization Code + PKCE login.

    ``begin_login`` and ``complete_login`` are separate entry points because a
    full browser redirect to the authorization server sits between them.
    """

    def __init__(
        self,
        *,
        client_id: str,
        redirect_uri: str,
        store: EphemeralStore,
        authorize_url: str = pkce.SPOTIFY_AUTHORIZE_URL,
        token_url: str = pkce.SPOTIFY_TOKEN_URL,
        http_client: httpx.AsyncClient | None = None,
        exchange_code_fn=pkce.exchange_code,
    ) -> None:
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self.store = store
        self.authorize_url = authorize_url
        self.token_url = token_url
        self._http_client = http_client
        self._exchange_code_fn = exchange_code_fn

    def begin_login(self, role: Role | str) -> str:
        role = Role.parse(role)
        pending = PendingAuthRequest(
            code_verifier=pkce.generate_code_verifier(),
            state=pkce.generate_state(),
            role=role,
        )
        self.store.put(VERIFIER_KEY, pending.code_verifier)
        self.store.put(STATE_KEY, pending.state)
        self.store.put(ROLE_KEY, pending.role.value)

        LOGGER.info("Starting PKCE login role=%s", role.value)
        return pkce.build_authorization_url(
            client_id=self.client_id,
            redirect_uri=self.redirect_uri,
            scope=ROLE_SCOPES[role],
            state=pending.state,
            code_challenge=pkce.generate_code_challenge(pending.code_verifier),
            authorize_url=self.authorize_url,
        )

    async def complete_login(self, query_params: Mapping[str, str]) -> Session | None:
        """Finish the login from the parameters of an incoming page load.

        Returns ``None`` when the parameters are not an authorization response
        at all. Raises an ``AuthError`` subclass when they are one but the
        login cannot be completed.
        """
        error = query_params.get("error")
        if error:
            self._discard_pending(keep_role=False)
            LOGGER.warning("Authorization server returned error=%s", error)
            raise RemoteAuthError(error, query_params.get("error_description"))

        code = query_params.get("code")
        if not code:
            return None

        if not _states_match(query_params.get("state"), self.store.get(STATE_KEY)):
            self.store.clear()
            LOGGER.warning("Rejected authorization response with mismatched state.")
            raise CsrfMismatchError()

        code_verifier = self.store.get(VERIFIER_KEY)
        if not code_verifier:
            self._discard_pending(keep_role=False)
            raise MissingVerifierError()

        role = self._pending_role()
        exchanged = None
        try:
            exchanged = await self._exchange_code_fn(
                client_id=self.client_id,
                code=code,
                redirect_uri=self.redirect_uri,
                code_verifier=code_verifier,
                client=self._http_client,
                token_url=self.token_url,
            )
        finally:
            self._discard_pending(keep_role=exchanged is not None)

        LOGGER.info("PKCE login completed role=%s", role.value)
        return Session(access_token=exchanged.access_token, role=role)

    def _pending_role(self) -> Role:
        raw = self.store.get(ROLE_KEY)
        try:
            return Role.parse(raw) if raw else Role.VIEWER
        except ValueError:
            return Role.VIEWER

    def _discard_pending(self, *, keep_role: bool = True) -> None:
        # The role outlives a successful login only.
        self.store.delete(VERIFIER_KEY)
        self.store.delete(STATE_KEY)
        if not keep_role:
            self.store.delete(ROLE_KEY)
