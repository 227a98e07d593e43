"""Tests for session data models."""

import pytest  # type: ignore[import-not-found]

from pomod.core.models import (
    Phase,
    RemainingPeriods,
    SessionDefaults,
    SessionParams,
    SessionSnapshot,
    TransitionOutcome,
)


class TestPhase:
    """Test Phase enum."""

    def test_values(self) -> None:
        """Test wire values of phases."""
        assert Phase.STOPPED.value == "stopped"
        assert Phase.WORKING.value == "working"
        assert Phase.SHORT_BREAK.value == "short_break"
        assert Phase.LONG_BREAK.value == "long_break"

    def test_is_active(self) -> None:
        """Test only STOPPED is inactive."""
        assert not Phase.STOPPED.is_active
        assert Phase.WORKING.is_active
        assert Phase.SHORT_BREAK.is_active
        assert Phase.LONG_BREAK.is_active

    def test_label(self) -> None:
        assert Phase.SHORT_BREAK.label == "short break"


class TestRemainingPeriods:
    """Test RemainingPeriods."""

    def test_unlimited(self) -> None:
        """Test unlimited periods never finish."""
        periods = RemainingPeriods.unlimited()

        periods.decrement()

        assert periods.is_unlimited
        assert periods.kind == "unlimited"
        assert not periods.done
        assert periods.value_or(0) == 0

    def test_limited_counts_down_to_done(self) -> None:
        """Test bounded periods reach done at zero."""
        periods = RemainingPeriods.limited(2)
        assert periods.kind == "limited"
        assert periods.value_or(0) == 2

        periods.decrement()
        assert not periods.done
        assert periods.value_or(0) == 1

        periods.decrement()
        assert periods.done

    def test_decrement_does_not_go_negative(self) -> None:
        periods = RemainingPeriods.limited(0)
        periods.decrement()
        assert periods.value_or(99) == 0

    def test_negative_count_rejected(self) -> None:
        with pytest.raises(ValueError, match="negative"):
            RemainingPeriods.limited(-1)

    def test_equality_and_copy(self) -> None:
        periods = RemainingPeriods.limited(3)
        copied = periods.copy()
        copied.decrement()

        assert periods == RemainingPeriods.limited(3)
        assert copied == RemainingPeriods.limited(2)
        assert RemainingPeriods.unlimited() != RemainingPeriods.limited(0)


class TestSessionParams:
    """Test SessionParams construction."""

    def test_defaults(self) -> None:
        """Test default parameters match the documented defaults."""
        params = SessionParams()

        assert params.periods.is_unlimited
        assert params.work_len == 25 * 60
        assert params.short_break_len == 4 * 60
        assert params.long_break_len == 20 * 60
        assert params.short_breaks_before_long == 3

    def test_from_request_zero_means_default(self) -> None:
        """Test zero inputs are replaced with defaults."""
        params = SessionParams.from_request()

        assert params == SessionParams()

    def test_from_request_converts_minutes(self) -> None:
        """Test explicit values are converted from minutes to seconds."""
        params = SessionParams.from_request(
            periods=4,
            work_time_min=50,
            short_break_min=10,
            long_break_min=30,
            short_breaks_before_long=2,
        )

        assert params.periods == RemainingPeriods.limited(4)
        assert params.work_len == 3000
        assert params.short_break_len == 600
        assert params.long_break_len == 1800
        assert params.short_breaks_before_long == 2

    def test_from_request_uses_custom_defaults(self) -> None:
        """Test zero inputs fall back to the given defaults."""
        defaults = SessionDefaults(work_time=45, short_break_time=5)

        params = SessionParams.from_request(short_break_min=7, defaults=defaults)

        assert params.work_len == 45 * 60
        assert params.short_break_len == 7 * 60
        assert params.long_break_len == 20 * 60

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"periods": -1},
            {"work_time_min": -5},
            {"short_break_min": -1},
            {"long_break_min": -1},
            {"short_breaks_before_long": -2},
        ],
    )
    def test_from_request_rejects_negative(self, kwargs) -> None:
        with pytest.raises(ValueError, match="negative"):
            SessionParams.from_request(**kwargs)

    def test_length_of(self) -> None:
        params = SessionParams.from_request(work_time_min=1, short_break_min=2, long_break_min=3)

        assert params.length_of(Phase.WORKING) == 60
        assert params.length_of(Phase.SHORT_BREAK) == 120
        assert params.length_of(Phase.LONG_BREAK) == 180
        assert params.length_of(Phase.STOPPED) is None

    def test_to_dict(self) -> None:
        data = SessionParams.from_request(periods=2).to_dict()

        assert data["periods_kind"] == "limited"
        assert data["periods_value"] == 2
        assert data["work_len"] == 1500


class TestSessionDefaults:
    """Test SessionDefaults."""

    def test_from_config(self) -> None:
        """Test defaults are read from the session config section."""
        values = {"session.work_time": 30, "session.short_breaks_before_long": 4}

        class FakeConfig:
            def get(self, key, default=None):
                return values.get(key, default)

        defaults = SessionDefaults.from_config(FakeConfig())

        assert defaults.work_time == 30
        assert defaults.short_break_time == 4
        assert defaults.long_break_time == 20
        assert defaults.short_breaks_before_long == 4


class TestTransitionOutcome:
    """Test TransitionOutcome constructors."""

    def test_end(self) -> None:
        outcome = TransitionOutcome.end()
        assert outcome.ended
        assert outcome.seconds is None
        assert outcome.phase is Phase.STOPPED

    def test_continues_after(self) -> None:
        outcome = TransitionOutcome.continues_after(240, Phase.SHORT_BREAK)
        assert not outcome.ended
        assert outcome.seconds == 240
        assert outcome.phase is Phase.SHORT_BREAK


def test_snapshot_to_dict() -> None:
    """Test GetState payload shape."""
    snapshot = SessionSnapshot(
        phase=Phase.LONG_BREAK,
        time_remaining_seconds=42,
        periods_kind="limited",
        periods_value=3,
    )

    assert snapshot.to_dict() == {
        "phase": "long_break",
        "time_remaining_seconds": 42,
        "periods_kind": "limited",
        "periods_value": 3,
    }
