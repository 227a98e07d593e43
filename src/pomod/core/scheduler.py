"""Background scheduler that drives session phase transitions."""

import logging
import threading
from typing import Optional, Protocol

from pomod.core.clock import Clock
from pomod.core.models import Phase
from pomod.core.session import SessionManager

logger = logging.getLogger(__name__)


class PhaseNotifier(Protocol):
    """Receives the new phase after every transition."""

    def notify(self, phase: Phase) -> None:
        ...


class PhaseScheduler:
    """Waits out each phase and asks the session to transition.

    One wait loop runs at a time, on its own thread. A loop owns a cancel
    event; it is only ever set while holding the fire lock, and a loop only
    transitions and notifies while holding the fire lock after checking the
    event. A cancelled loop therefore has no further side effects.
    """

    def __init__(
        self,
        manager: SessionManager,
        notifier: Optional[PhaseNotifier] = None,
        clock: Optional[Clock] = None,
    ):
        """Initialize scheduler.

        Args:
            manager: Session to drive
            notifier: Collaborator told about each new phase
            clock: Time source for waits (default: the session's clock)
        """
        self.manager = manager
        self.notifier = notifier
        self.clock = clock or manager.clock
        self._fire_lock = threading.RLock()
        self._cancelled: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        """Whether a wait loop is armed."""
        with self._fire_lock:
            return self._cancelled is not None and not self._cancelled.is_set()

    def start(self, initial_wait_seconds: int) -> None:
        """Start a wait loop, replacing any running one.

        Args:
            initial_wait_seconds: Length of the first wait
        """
        with self._fire_lock:
            self._cancel_locked()
            cancelled = threading.Event()
            self._cancelled = cancelled
            self._thread = threading.Thread(
                target=self._run,
                args=(initial_wait_seconds, cancelled),
                name="pomod-scheduler",
                daemon=True,
            )
            self._thread.start()
        logger.debug(f"Scheduler armed for {initial_wait_seconds}s")

    def stop(self) -> None:
        """Cancel the running wait loop, if any."""
        with self._fire_lock:
            self._cancel_locked()

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the current loop thread to exit."""
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _cancel_locked(self) -> None:
        if self._cancelled is not None and not self._cancelled.is_set():
            self._cancelled.set()
            logger.debug("Scheduler cancelled")
        self._cancelled = None

    def _run(self, wait_seconds: int, cancelled: threading.Event) -> None:
        """Wait loop body.

        A loop that fails stops the session so it is never left running
        without a scheduler.
        """
        next_wait: Optional[int] = wait_seconds
        try:
            while next_wait is not None:
                if not self.clock.wait(next_wait, cancelled):
                    return
                next_wait = self._fire(cancelled)
        except Exception as e:
            logger.error(f"Scheduler loop failed, stopping session: {e}")
            with self._fire_lock:
                if cancelled.is_set():
                    return
                if self._cancelled is cancelled:
                    self._cancelled = None
                cancelled.set()
                self.manager.stop()

    def _fire(self, cancelled: threading.Event) -> Optional[int]:
        """Run one transition unless cancelled.

        Returns:
            Seconds until the next transition, or None to end the loop
        """
        with self._fire_lock:
            if cancelled.is_set():
                logger.debug("Wait elapsed after cancellation, not transitioning")
                return None

            outcome = self.manager.transition()
            self._notify(outcome.phase)

            if outcome.ended:
                if self._cancelled is cancelled:
                    self._cancelled = None
                cancelled.set()
                return None
            return outcome.seconds

    def _notify(self, phase: Phase) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify(phase)
        except Exception as e:
            logger.error(f"Failed to deliver notification for {phase.label}: {e}")
