"""Pomodoro session state machine."""

import logging
import threading
from dataclasses import replace
from typing import Optional, Tuple

from pomod.core.clock import Clock, SystemClock
from pomod.core.models import (
    Phase,
    SessionParams,
    SessionSnapshot,
    TransitionOutcome,
)

logger = logging.getLogger(__name__)


class SessionState:
    """The state of the pomodoro session.

    Holds the current phase, the parameters of the running (or last) session
    and the bookkeeping needed to compute remaining time. This class performs
    no locking and never waits; see SessionManager for shared access.

    Attributes:
        phase: Current phase
        params: Session parameters
        current_len: Length in seconds of the current phase (None when stopped)
        current_started_at: Clock time the current phase began (None when stopped)
        short_breaks_done: Short breaks completed in the current cycle
    """

    def __init__(self, clock: Optional[Clock] = None):
        """Initialize a stopped session.

        Args:
            clock: Time source (default: SystemClock)
        """
        self.clock: Clock = clock or SystemClock()
        self.phase = Phase.STOPPED
        self.params = SessionParams()
        self.current_len: Optional[int] = None
        self.current_started_at: Optional[float] = None
        self.short_breaks_done = 0

    def start(self, params: SessionParams) -> None:
        """Start a session with the given parameters.

        Any running session is overwritten; callers check the phase first.
        """
        self.phase = Phase.WORKING
        self.current_len = params.work_len
        self.current_started_at = self.clock.now()
        self.short_breaks_done = 0
        # Periods are consumed in place; keep the caller's params untouched
        self.params = replace(params, periods=params.periods.copy())

    def transition(self) -> TransitionOutcome:
        """Advance to the next phase of the session.

        The session is stopped automatically when it ends.

        Returns:
            Ended, or the phase that was entered and its length
        """
        if self.phase is Phase.SHORT_BREAK:
            self.short_breaks_done += 1
        elif self.phase is Phase.WORKING:
            self.params.periods.decrement()
            if self.params.periods.done:
                self.stop()
                return TransitionOutcome.end()

        next_phase = self._next_phase()
        if next_phase is None:
            self.stop()
            return TransitionOutcome.end()

        phase, length = next_phase
        self.phase = phase
        self.current_len = length
        self.current_started_at = self.clock.now()
        return TransitionOutcome.continues_after(length, phase)

    def _next_phase(self) -> Optional[Tuple[Phase, int]]:
        """Phase following the current one and its length, None to end."""
        if self.phase is Phase.WORKING:
            if self.short_breaks_done == self.params.short_breaks_before_long:
                return Phase.LONG_BREAK, self.params.long_break_len
            return Phase.SHORT_BREAK, self.params.short_break_len
        if self.phase in (Phase.SHORT_BREAK, Phase.LONG_BREAK):
            return Phase.WORKING, self.params.work_len
        return None

    def stop(self) -> None:
        """Stop the session and reset to the default stopped record."""
        self.phase = Phase.STOPPED
        self.params = SessionParams()
        self.current_len = None
        self.current_started_at = None
        self.short_breaks_done = 0

    def remaining_seconds(self) -> Optional[int]:
        """Seconds left in the current phase, or None without a session.

        Clamped to zero when the phase has overrun its length.
        """
        if self.current_started_at is None or self.current_len is None:
            return None
        elapsed = int(self.clock.now() - self.current_started_at)
        return max(self.current_len - elapsed, 0)

    def snapshot(self) -> SessionSnapshot:
        """Build an immutable view of the session."""
        return SessionSnapshot(
            phase=self.phase,
            time_remaining_seconds=self.remaining_seconds() or 0,
            periods_kind=self.params.periods.kind,
            periods_value=self.params.periods.value_or(0),
        )


class SessionManager:
    """Serializes access to the process-wide SessionState.

    Each method holds the lock for exactly one operation.
    """

    def __init__(self, state: Optional[SessionState] = None, clock: Optional[Clock] = None):
        """Initialize session manager.

        Args:
            state: Session state to guard (default: new stopped session)
            clock: Time source for a new session state
        """
        self._state = state or SessionState(clock)
        self._lock = threading.Lock()

    @property
    def clock(self) -> Clock:
        return self._state.clock

    def start(self, params: SessionParams) -> None:
        """Start a session."""
        with self._lock:
            self._state.start(params)
        logger.info(
            f"Session started: work={params.work_len}s short={params.short_break_len}s "
            f"long={params.long_break_len}s periods={params.periods!r}"
        )

    def transition(self) -> TransitionOutcome:
        """Advance the session by one phase."""
        with self._lock:
            outcome = self._state.transition()
        if outcome.ended:
            logger.info("Session ended")
        else:
            logger.info(f"Entered {outcome.phase.label} for {outcome.seconds}s")
        return outcome

    def stop(self) -> None:
        """Stop the session. Safe to call when already stopped."""
        with self._lock:
            was_active = self._state.phase.is_active
            self._state.stop()
        if was_active:
            logger.info("Session stopped")

    def remaining_seconds(self) -> Optional[int]:
        with self._lock:
            return self._state.remaining_seconds()

    @property
    def phase(self) -> Phase:
        with self._lock:
            return self._state.phase

    def snapshot(self) -> SessionSnapshot:
        """Get a consistent snapshot of the session."""
        with self._lock:
            return self._state.snapshot()
