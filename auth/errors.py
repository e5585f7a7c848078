from __future__ import annotations


class AuthError(RuntimeError):
    """Base class for failures while completing the PKCE login."""

    default_message = "Authentication failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class RemoteAuthError(AuthError):
    def __init__(self, error: str, description: str | None = None) -> None:
        self.error = error
        self.description = description
        message = f"Authorization was declined: {error}"
        if description:
            message = f"{message} ({description})"
        super().__init__(message)


class CsrfMismatchError(AuthError):
    default_message = "Security error: the login response state did not match (possible CSRF)."


class MissingVerifierError(AuthError):
    default_message = "Login could not be completed: the PKCE code verifier was not found."


class TokenExchangeError(AuthError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
