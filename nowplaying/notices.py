from __future__ import annotations

import time
from dataclasses import dataclass

from .constants import DEFAULT_NOTICE_SECONDS


@dataclass
class Notice:
    message: str
    level: str
    expires_at: float


class NoticeBoard:
    """Holds the latest user-facing notice until it auto-dismisses."""

    def __init__(self, *, ttl_seconds: float = DEFAULT_NOTICE_SECONDS, clock=time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._notice: Notice | None = None

    def show(self, message: str, level: str = "error") -> Notice:
        self._notice = Notice(
            message=message,
            level=level,
            expires_at=self._clock() + self.ttl_seconds,
        )
        return self._notice

    def current(self) -> Notice | None:
        if self._notice is not None and self._clock() >= self._notice.expires_at:
            self._notice = None
        return self._notice

    def dismiss(self) -> None:
        self._notice = None
