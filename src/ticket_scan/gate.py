from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True, slots=True)
class GateStats:
    admitted: int
    dropped_busy: int
    dropped_throttled: int


class FrameGate:
    """
    Single-slot admission gate for frame analysis.

    At most one frame is in flight; a frame offered while busy, or sooner than
    `min_interval_s` after the last admitted frame started, is dropped rather
    than queued. Safe to call from camera callback threads.
    """

    def __init__(self, min_interval_s: float = 0.5, *, clock: Callable[[], float] = time.monotonic) -> None:
        if min_interval_s < 0:
            raise ValueError("min_interval_s must be >= 0")
        self._min_interval_s = min_interval_s
        self._clock = clock
        self._slot = threading.Lock()
        self._stats_lock = threading.Lock()
        self._last_started: float | None = None
        self._admitted = 0
        self._dropped_busy = 0
        self._dropped_throttled = 0

    def try_admit(self) -> bool:
        if not self._slot.acquire(blocking=False):
            with self._stats_lock:
                self._dropped_busy += 1
            return False

        now = self._clock()
        if self._last_started is not None and now - self._last_started < self._min_interval_s:
            self._slot.release()
            with self._stats_lock:
                self._dropped_throttled += 1
            return False

        self._last_started = now
        with self._stats_lock:
            self._admitted += 1
        return True

    def release(self) -> None:
        self._slot.release()

    @property
    def min_interval_s(self) -> float:
        return self._min_interval_s

    @property
    def busy(self) -> bool:
        return self._slot.locked()

    def stats(self) -> GateStats:
        with self._stats_lock:
            return GateStats(
                admitted=self._admitted,
                dropped_busy=self._dropped_busy,
                dropped_throttled=self._dropped_throttled,
            )
