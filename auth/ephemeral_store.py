from __future__ import annotations

from abc import ABC, abstractmethod

VERIFIER_KEY = "pkce_verifier"
STATE_KEY = "auth_state"
ROLE_KEY = "user_profile"


class EphemeralStore(ABC):
    """Short-lived key/value storage for the in-flight login request.

    Lives only as long as the client process, like a browser tab's session
    storage. Nothing written here survives a restart.
    """

    @abstractmethod
    def put(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def get(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> None:
        raise NotImplementedError


class MemoryEphemeralStore(EphemeralStore):
    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def put(self, key: str, value: str) -> None:
        self._values[key] = value

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def clear(self) -> None:
        self._values.clear()

    def __len__(self) -> int:
        return len(self._values)
