"""Monotonic time sources and run-time accounting.

Every duration in BigTimer is measured as a difference of two
``MonotonicClock.now()`` readings.  Wall-clock time is never used, so a
user changing the system clock (or a DST switch) cannot make a countdown
jump.

``RunClock`` is the shared accounting algorithm behind both state
machines::

    elapsed   = now - started_at - paused_total
    remaining = total - floor(elapsed)          (clamped to [0, total])

While paused, ``now`` is frozen at ``paused_at``.  On resume the pause
interval is folded into ``paused_total``.
"""

from __future__ import annotations

import math
import time


class MonotonicClock:
    """Seconds from ``time.monotonic()``.  Never decreases."""

    def now(self) -> float:
        return time.monotonic()


class RunClock:
    """Elapsed-time bookkeeping for one countdown run."""

    def __init__(self, clock: MonotonicClock) -> None:
        self._clock = clock
        self._started_at: float | None = None
        self._paused_at: float | None = None
        self._paused_total: float = 0.0

    # ── properties ────────────────────────────────────────────────────

    @property
    def started(self) -> bool:
        return self._started_at is not None

    @property
    def paused(self) -> bool:
        return self._paused_at is not None

    @property
    def paused_total(self) -> float:
        """Sum of all pause intervals in the current run (seconds)."""
        return self._paused_total

    # ── transitions ───────────────────────────────────────────────────

    def start(self) -> None:
        self._started_at = self._clock.now()
        self._paused_at = None
        self._paused_total = 0.0

    def pause(self) -> None:
        if self._started_at is None or self._paused_at is not None:
            return
        self._paused_at = self._clock.now()

    def resume(self) -> None:
        if self._paused_at is None:
            return
        self._paused_total += max(0.0, self._clock.now() - self._paused_at)
        self._paused_at = None

    def clear(self) -> None:
        self._started_at = None
        self._paused_at = None
        self._paused_total = 0.0

    # ── readings ──────────────────────────────────────────────────────

    def elapsed(self) -> float:
        """Running seconds since ``start()``, excluding pauses."""
        if self._started_at is None:
            return 0.0
        now = self._paused_at if self._paused_at is not None else self._clock.now()
        return max(0.0, now - self._started_at - self._paused_total)

    def remaining(self, total_seconds: int) -> int:
        """Whole seconds left of *total_seconds*, clamped to [0, total]."""
        left = total_seconds - math.floor(self.elapsed())
        return max(0, min(total_seconds, left))


def format_clock(seconds: int | float) -> str:
    """``M:SS`` label for a countdown display."""
    safe = max(0, int(seconds))
    return f"{safe // 60}:{safe % 60:02d}"
