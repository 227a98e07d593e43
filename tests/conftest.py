"""Pytest configuration and shared fixtures."""

import threading
import time
from typing import Callable

import pytest  # type: ignore[import-not-found]


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest."""
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")


class ManualClock:
    """Deterministic clock that only moves when advanced.

    ``wait()`` blocks until the clock is advanced past the deadline or the
    cancel event is set.
    """

    def __init__(self, start: float = 1000.0):
        self._now = start
        self._cond = threading.Condition()
        self.wait_calls = 0

    def now(self) -> float:
        with self._cond:
            return self._now

    def advance(self, seconds: float) -> None:
        with self._cond:
            self._now += seconds
            self._cond.notify_all()

    def wait(self, seconds: float, cancelled: threading.Event) -> bool:
        with self._cond:
            deadline = self._now + seconds
            self.wait_calls += 1
            self._cond.notify_all()
            while self._now < deadline:
                if cancelled.is_set():
                    return False
                self._cond.wait(timeout=0.01)
            return not cancelled.is_set()

    def wait_for_waits(self, count: int, timeout: float = 2.0) -> bool:
        """Block until ``wait()`` has been entered ``count`` times."""
        with self._cond:
            return self._cond.wait_for(lambda: self.wait_calls >= count, timeout)


def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    """Poll ``predicate`` until it is true or ``timeout`` expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


@pytest.fixture
def clock() -> ManualClock:
    """Create a manual clock."""
    return ManualClock()


@pytest.fixture(name="wait_until")
def wait_until_fixture() -> Callable[..., bool]:
    """Expose the polling helper to tests."""
    return wait_until
