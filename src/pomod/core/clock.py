"""Time sources for the session and the phase scheduler."""

import threading
import time
from typing import Protocol


class Clock(Protocol):
    """Source of time and of cancellable waits."""

    def now(self) -> float:
        """Current time in seconds from an arbitrary monotonic origin."""
        ...

    def wait(self, seconds: float, cancelled: threading.Event) -> bool:
        """Wait for ``seconds`` unless ``cancelled`` is set first.

        Returns:
            True if the full duration elapsed, False if cancelled
        """
        ...


class SystemClock:
    """Clock backed by the monotonic system clock."""

    def now(self) -> float:
        return time.monotonic()

    def wait(self, seconds: float, cancelled: threading.Event) -> bool:
        deadline = time.monotonic() + max(seconds, 0)
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return not cancelled.is_set()
            # Event.wait overflows above TIMEOUT_MAX
            if cancelled.wait(timeout=min(remaining, threading.TIMEOUT_MAX)):
                return False
