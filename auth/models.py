from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType


class Role(str, Enum):
    VIEWER = "viewer"
    MANAGER = "manager"

    @classmethod
    def parse(cls, value: "Role | str") -> "Role":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown role {value!r}; expected 'viewer' or 'manager'.") from None


ROLE_SCOPES = MappingProxyType(
    {
        Role.VIEWER: "user-read-playback-state",
        Role.MANAGER: "user-read-playback-state user-modify-playback-state",
    }
)


@dataclass(frozen=True)
class PendingAuthRequest:
    code_verifier: str
    state: str
    role: Role


@dataclass(frozen=True)
class Session:
    access_token: str
    role: Role

    def __repr__(self) -> str:
        return f"Session(access_token='***', role={self.role.value!r})"
