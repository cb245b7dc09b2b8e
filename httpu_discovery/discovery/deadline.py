"""Absolute deadline shared by the send and collection phases."""

import time
from typing import Callable, Optional


class Deadline:
    """A fixed point in time, ``timeout`` seconds after start()."""

    def __init__(self, timeout: float, clock: Callable[[], float] = time.monotonic):
        """Initialize deadline.

        Args:
            timeout: Seconds from start() until the deadline.
            clock: Monotonic time source.
        """
        self.timeout = timeout
        self._clock = clock
        self._start_time: Optional[float] = None

    def start(self) -> float:
        """Start the timer and return the absolute expiry time."""
        self._start_time = self._clock()
        return self.expires_at

    @property
    def expires_at(self) -> float:
        if self._start_time is None:
            raise RuntimeError("Deadline has not been started")
        return self._start_time + self.timeout

    @property
    def elapsed(self) -> float:
        """Seconds elapsed since start."""
        if self._start_time is None:
            return 0.0
        return self._clock() - self._start_time

    @property
    def remaining(self) -> float:
        """Seconds remaining before the deadline."""
        return max(0.0, self.timeout - self.elapsed)

    @property
    def is_expired(self) -> bool:
        return self._start_time is not None and self.elapsed >= self.timeout
