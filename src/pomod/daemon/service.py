"""Session operations exposed to clients over IPC."""

import logging
import threading
from typing import Any, Dict, Optional

from pomod.core.models import SessionDefaults, SessionParams
from pomod.core.scheduler import PhaseScheduler
from pomod.core.session import SessionManager
from pomod.daemon.ipc import INVALID_PARAMS, RPCError

logger = logging.getLogger(__name__)

ALREADY_RUNNING = -32001

# Start parameters are unsigned 32-bit values
MAX_PARAM_VALUE = 2**32 - 1

START_PARAMS = (
    "periods",
    "work_time",
    "short_break_time",
    "long_break_time",
    "short_breaks_before_long",
)


class AlreadyRunningError(RPCError):
    """A session is already in progress."""

    code = ALREADY_RUNNING


class InvalidParamsError(RPCError):
    """Request parameters are malformed."""

    code = INVALID_PARAMS


class PomodoroService:
    """Handles start, stop and get_state requests.

    Calls are serialized so that starting the session and arming the
    scheduler (or stopping both) happen as one step.
    """

    def __init__(
        self,
        manager: SessionManager,
        scheduler: PhaseScheduler,
        defaults: Optional[SessionDefaults] = None,
    ):
        """Initialize service.

        Args:
            manager: Process-wide session
            scheduler: Scheduler driving the session
            defaults: Values substituted for zero start parameters
        """
        self.manager = manager
        self.scheduler = scheduler
        self.defaults = defaults or SessionDefaults()
        self._call_lock = threading.Lock()

    def start(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Start a session.

        Args:
            params: Request parameters (minutes and counts, 0 means default)

        Returns:
            Effective session parameters

        Raises:
            AlreadyRunningError: If a session is in progress
            InvalidParamsError: If a parameter is not an unsigned 32-bit integer
        """
        session = self._parse_start_params(params)

        with self._call_lock:
            phase = self.manager.phase
            if phase.is_active:
                raise AlreadyRunningError(f"a pomodoro is already in progress ({phase.label})")
            self.manager.start(session)
            self.scheduler.start(session.work_len)

        return {"started": True, **session.to_dict()}

    def stop(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Stop the session. Always succeeds."""
        with self._call_lock:
            self.scheduler.stop()
            self.manager.stop()
        return {"stopped": True}

    def get_state(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Report the current phase, remaining time and periods."""
        with self._call_lock:
            return self.manager.snapshot().to_dict()

    def shutdown(self) -> None:
        """Stop the session and the scheduler before the daemon exits."""
        self.stop({})

    def _parse_start_params(self, params: Dict[str, Any]) -> SessionParams:
        values: Dict[str, int] = {}
        for name in START_PARAMS:
            value = params.get(name, 0)
            if value is None:
                value = 0
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidParamsError(f"{name} must be an integer, got {value!r}")
            if value > MAX_PARAM_VALUE:
                raise InvalidParamsError(f"{name} must be at most {MAX_PARAM_VALUE}, got {value}")
            values[name] = value

        try:
            return SessionParams.from_request(
                periods=values["periods"],
                work_time_min=values["work_time"],
                short_break_min=values["short_break_time"],
                long_break_min=values["long_break_time"],
                short_breaks_before_long=values["short_breaks_before_long"],
                defaults=self.defaults,
            )
        except ValueError as e:
            raise InvalidParamsError(str(e))
