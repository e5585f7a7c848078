from __future__ import annotations

from .http import friendly_error_message


class ApiError(RuntimeError):
    """A call to the Spotify Web API did not succeed."""

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message or friendly_error_message(status_code))
        self.status_code = status_code


class NotAuthenticatedError(ApiError):
    def __init__(self, message: str = "Not logged in. Log in with Spotify first.") -> None:
        super().__init__(message)


class TokenExpiredError(ApiError):
    def __init__(self, message: str | None = None) -> None:
        super().__init__(message, status_code=401)


class InsufficientPrivilegeError(ApiError):
    def __init__(self, message: str | None = None) -> None:
        super().__init__(message, status_code=403)
