"""Core data models for pomodoro sessions."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

ONE_MINUTE = 60


class Phase(Enum):
    """Phases a pomodoro session can be in."""

    STOPPED = "stopped"
    WORKING = "working"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    @property
    def is_active(self) -> bool:
        """Whether a session is in progress in this phase."""
        return self is not Phase.STOPPED

    @property
    def label(self) -> str:
        """Human readable phase name."""
        return self.value.replace("_", " ")


class RemainingPeriods:
    """How many work periods remain in a session.

    A session is either unlimited or bounded to ``N(k)`` work periods.
    ``N(0)`` means the session is complete.
    """

    def __init__(self, count: Optional[int] = None):
        """Initialize remaining periods.

        Args:
            count: Number of work periods left, or None for unlimited

        Raises:
            ValueError: If count is negative
        """
        if count is not None and count < 0:
            raise ValueError(f"Remaining periods cannot be negative: {count}")
        self._count = count

    @classmethod
    def unlimited(cls) -> "RemainingPeriods":
        return cls(None)

    @classmethod
    def limited(cls, count: int) -> "RemainingPeriods":
        return cls(count)

    @property
    def is_unlimited(self) -> bool:
        return self._count is None

    @property
    def kind(self) -> str:
        """Wire name of the period kind ('unlimited' or 'limited')."""
        return "unlimited" if self._count is None else "limited"

    @property
    def done(self) -> bool:
        """Whether the bounded session has no work periods left."""
        return self._count == 0

    def value_or(self, default: int) -> int:
        """Number of periods left, or default when unlimited."""
        return default if self._count is None else self._count

    def decrement(self) -> None:
        """Consume one work period. No-op for unlimited sessions."""
        if self._count:
            self._count -= 1

    def copy(self) -> "RemainingPeriods":
        return RemainingPeriods(self._count)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RemainingPeriods):
            return NotImplemented
        return self._count == other._count

    def __repr__(self) -> str:
        if self._count is None:
            return "RemainingPeriods.unlimited()"
        return f"RemainingPeriods.limited({self._count})"


@dataclass(frozen=True)
class SessionDefaults:
    """Default values substituted for zero session parameters.

    Attributes:
        work_time: Work period length in minutes
        short_break_time: Short break length in minutes
        long_break_time: Long break length in minutes
        short_breaks_before_long: Short breaks taken before a long break
    """

    work_time: int = 25
    short_break_time: int = 4
    long_break_time: int = 20
    short_breaks_before_long: int = 3

    @classmethod
    def from_config(cls, config: Any) -> "SessionDefaults":
        """Build defaults from the ``session`` section of a ConfigManager."""
        base = cls()
        return cls(
            work_time=config.get("session.work_time", base.work_time),
            short_break_time=config.get("session.short_break_time", base.short_break_time),
            long_break_time=config.get("session.long_break_time", base.long_break_time),
            short_breaks_before_long=config.get(
                "session.short_breaks_before_long", base.short_breaks_before_long
            ),
        )


DEFAULTS = SessionDefaults()


def _or_default(value: int, default: int, name: str) -> int:
    if value < 0:
        raise ValueError(f"{name} cannot be negative: {value}")
    return value if value else default


@dataclass
class SessionParams:
    """Parameters of one pomodoro session. Lengths are in seconds.

    Attributes:
        periods: Work periods left in the session
        work_len: Length of a work period
        short_break_len: Length of a short break
        long_break_len: Length of a long break
        short_breaks_before_long: Short breaks taken before a long break
    """

    periods: RemainingPeriods = field(default_factory=RemainingPeriods.unlimited)
    work_len: int = DEFAULTS.work_time * ONE_MINUTE
    short_break_len: int = DEFAULTS.short_break_time * ONE_MINUTE
    long_break_len: int = DEFAULTS.long_break_time * ONE_MINUTE
    short_breaks_before_long: int = DEFAULTS.short_breaks_before_long

    @classmethod
    def from_request(
        cls,
        periods: int = 0,
        work_time_min: int = 0,
        short_break_min: int = 0,
        long_break_min: int = 0,
        short_breaks_before_long: int = 0,
        defaults: SessionDefaults = DEFAULTS,
    ) -> "SessionParams":
        """Build session parameters from a start request.

        Durations are whole minutes. A zero value means "use the default";
        zero periods means an unlimited session.

        Raises:
            ValueError: If any value is negative
        """
        if periods < 0:
            raise ValueError(f"periods cannot be negative: {periods}")
        return cls(
            periods=RemainingPeriods.limited(periods) if periods else RemainingPeriods.unlimited(),
            work_len=_or_default(work_time_min, defaults.work_time, "work_time") * ONE_MINUTE,
            short_break_len=_or_default(
                short_break_min, defaults.short_break_time, "short_break_time"
            )
            * ONE_MINUTE,
            long_break_len=_or_default(long_break_min, defaults.long_break_time, "long_break_time")
            * ONE_MINUTE,
            short_breaks_before_long=_or_default(
                short_breaks_before_long,
                defaults.short_breaks_before_long,
                "short_breaks_before_long",
            ),
        )

    def length_of(self, phase: Phase) -> Optional[int]:
        """Configured length of a phase in seconds, None for STOPPED."""
        if phase is Phase.WORKING:
            return self.work_len
        if phase is Phase.SHORT_BREAK:
            return self.short_break_len
        if phase is Phase.LONG_BREAK:
            return self.long_break_len
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "periods_kind": self.periods.kind,
            "periods_value": self.periods.value_or(0),
            "work_len": self.work_len,
            "short_break_len": self.short_break_len,
            "long_break_len": self.long_break_len,
            "short_breaks_before_long": self.short_breaks_before_long,
        }


@dataclass(frozen=True)
class TransitionOutcome:
    """Result of advancing a session by one phase.

    Either the session ended (and was reset to STOPPED), or it continues in
    ``phase`` and the next transition is due after ``seconds``.
    """

    ended: bool
    seconds: Optional[int] = None
    phase: Phase = Phase.STOPPED

    @classmethod
    def end(cls) -> "TransitionOutcome":
        return cls(ended=True)

    @classmethod
    def continues_after(cls, seconds: int, phase: Phase) -> "TransitionOutcome":
        return cls(ended=False, seconds=seconds, phase=phase)


@dataclass(frozen=True)
class SessionSnapshot:
    """Consistent view of the session taken under the session lock."""

    phase: Phase
    time_remaining_seconds: int
    periods_kind: str
    periods_value: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to the GetState response payload."""
        return {
            "phase": self.phase.value,
            "time_remaining_seconds": self.time_remaining_seconds,
            "periods_kind": self.periods_kind,
            "periods_value": self.periods_value,
        }
