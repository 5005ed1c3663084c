"""Non-blocking sampling gate used to throttle per-container stats."""

from __future__ import annotations

import math
import time
from collections.abc import Callable

from dockerstats.core.constants import DEFAULT_RESOLUTION


class SamplingGate:
    """A periodic ticker that is polled instead of waited on.

    Ticks fall every ``resolution`` seconds, starting one period after the
    gate is created. ``check()`` consumes all ticks that happened since the
    last positive result, so it returns True at most once per period and
    never waits for the next tick. Callers drop whatever arrives in between.

    Not thread-safe; each attachment owns its own gate.

    Example:
        ```python
        gate = SamplingGate(10)
        for stats in stream:
            if gate.check():
                forward(stats)
        ```
    """

    def __init__(
        self,
        resolution: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the gate.

        Args:
            resolution: Period in seconds; 0 or None uses DEFAULT_RESOLUTION
            clock: Monotonic time source in seconds
        """
        self.resolution = float(resolution or DEFAULT_RESOLUTION)
        self._clock = clock
        self._next_tick = clock() + self.resolution

    def check(self) -> bool:
        """Return True if a tick fired since the last positive check."""
        now = self._clock()
        if now < self._next_tick:
            return False

        # Coalesce missed ticks, keeping them aligned to the original schedule.
        missed = math.floor((now - self._next_tick) / self.resolution)
        self._next_tick += (missed + 1) * self.resolution
        return True

    def __repr__(self) -> str:
        return f"SamplingGate(resolution={self.resolution})"
