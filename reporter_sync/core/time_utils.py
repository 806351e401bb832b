"""
Timing utilities for polite, sequential API access.
"""

import time
from typing import Callable, Optional


class Throttle:
    """
    Minimum-interval throttle between consecutive write-triggering requests.

    Usage:
        throttle = Throttle(0.1)
        throttle.wait()
        fetch_and_write()
        throttle.mark()
    """

    def __init__(
        self,
        min_interval: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if min_interval < 0:
            raise ValueError(f"min_interval must be non-negative, got {min_interval}")

        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_mark: Optional[float] = None

    def wait(self) -> float:
        """
        Block until `min_interval` has passed since the last mark.

        Returns:
            Seconds slept (0.0 when no wait was needed)
        """
        if self._last_mark is None:
            return 0.0

        elapsed = self._clock() - self._last_mark
        remaining = self.min_interval - elapsed
        if remaining <= 0:
            return 0.0

        self._sleep(remaining)
        return remaining

    def mark(self) -> None:
        """Record that a throttled request just completed."""
        self._last_mark = self._clock()
