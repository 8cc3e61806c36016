from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Mapping

from ..game.errors import RateLimited


logger = logging.getLogger(__name__)


@dataclass
class _Window:
    started_at: float
    count: int = 0


class RateLimiter:
    """Fixed-window request counter keyed by ``(action, participant)``.

    Windows that have expired are evicted by :meth:`sweep`, which also runs
    on its own at most once per window length.
    """

    def __init__(
        self,
        limits: Mapping[str, int],
        window_sec: float = 60,
        default_limit: int = 30,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limits = dict(limits)
        self.window_sec = float(window_sec)
        self.default_limit = default_limit
        self._clock = clock
        self._lock = Lock()
        self._windows: dict[tuple[str, str], _Window] = {}
        self._last_sweep = clock()

    def limit_for(self, action: str) -> int:
        return self.limits.get(action, self.default_limit)

    def hit(self, action: str, key: str) -> int:
        """Count one request; returns how many are left in the window."""
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self.window_sec:
                self._sweep_locked(now)

            window = self._windows.get((action, key))
            if window is None or now - window.started_at >= self.window_sec:
                window = _Window(started_at=now)
                self._windows[(action, key)] = window

            limit = self.limit_for(action)
            if window.count >= limit:
                retry_after = math.ceil(window.started_at + self.window_sec - now)
                logger.warning("Rate limit hit: action=%s participant=%s", action, key)
                raise RateLimited(retry_after)

            window.count += 1
            return limit - window.count

    def sweep(self) -> int:
        with self._lock:
            return self._sweep_locked(self._clock())

    def _sweep_locked(self, now: float) -> int:
        expired = [k for k, w in self._windows.items() if now - w.started_at >= self.window_sec]
        for k in expired:
            del self._windows[k]
        self._last_sweep = now
        return len(expired)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)
