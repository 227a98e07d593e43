"""Core session state machine and scheduling."""

from pomod.core.clock import Clock, SystemClock
from pomod.core.models import (
    Phase,
    RemainingPeriods,
    SessionDefaults,
    SessionParams,
    SessionSnapshot,
    TransitionOutcome,
)
from pomod.core.scheduler import PhaseNotifier, PhaseScheduler
from pomod.core.session import SessionManager, SessionState

__all__ = [
    "Clock",
    "SystemClock",
    "Phase",
    "RemainingPeriods",
    "SessionDefaults",
    "SessionParams",
    "SessionSnapshot",
    "TransitionOutcome",
    "PhaseNotifier",
    "PhaseScheduler",
    "SessionManager",
    "SessionState",
]
