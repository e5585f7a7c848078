from __future__ import annotations

from auth.models import Role, Session

from .errors import NotAuthenticatedError


class SessionManager:
    """Owns the single in-memory Session of this client.

    The token is never written anywhere else; dropping the manager (or the
    process) is the same as logging out locally.
    """

    def __init__(self) -> None:
        self._session: Session | None = None

    @property
    def current(self) -> Session | None:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def role(self) -> Role | None:
        return self._session.role if self._session else None

    def start(self, session: Session) -> None:
        self._session = session

    def require(self) -> Session:
        if self._session is None:
            raise NotAuthenticatedError()
        return self._session

    def clear(self) -> None:
        self._session = None
