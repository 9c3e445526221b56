"""In-process fixed window rate limiter."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass
class _Window:
    started_ms: float
    count: int


class RateLimiter:
    """Per-key fixed window counters.

    A window opens on the first request for a key and admits *requests*
    calls until *window_ms* has elapsed, after which the next call opens a
    fresh window.  Check and increment happen in one synchronous step.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._windows: dict[str, _Window] = {}

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def acquire(self, key: str, requests: int, window_ms: int) -> bool:
        """Try to take a slot for *key*. Returns True if allowed."""
        now = self._now_ms()
        window = self._windows.get(key)
        if window is None or now - window.started_ms >= window_ms:
            self._windows[key] = _Window(started_ms=now, count=1)
            return True
        if window.count < requests:
            window.count += 1
            return True
        return False

    def reset(self, key: str | None = None) -> None:
        """Forget the counter for *key*, or every counter."""
        if key is None:
            self._windows.clear()
        else:
            self._windows.pop(key, None)
