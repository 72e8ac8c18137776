"""Tests for CurveFittingPacer."""

from __future__ import annotations

import math

import pytest

from varload._internal.errors import ConfigError
from varload.pacing.curve_fitting import CurveFittingPacer
from varload.pacing.locator import locate
from varload.profile.models import LoadProfile, RateSegment
from varload.profile.parser import parse_curve_string


@pytest.fixture
def curve_profile() -> LoadProfile:
    """Rate points 10 and 100 spread over 20 seconds."""
    return parse_curve_string("10,100", 20.0)


class TestConstruction:
    """Tests for argument validation and properties."""

    def test_points_get_equal_windows(self, curve_profile: LoadProfile):
        assert [s.duration for s in curve_profile.segments] == [10.0, 10.0]

    def test_non_positive_duration_rejected(self, curve_profile: LoadProfile):
        with pytest.raises(ConfigError, match="duration must be positive"):
            CurveFittingPacer(curve_profile, duration=0)

    def test_negative_slope_rejected(self, curve_profile: LoadProfile):
        with pytest.raises(ConfigError, match="slope must be non-negative"):
            CurveFittingPacer(curve_profile, duration=20.0, slope=-1.0)

    def test_durations(self, curve_profile: LoadProfile):
        pacer = CurveFittingPacer(curve_profile, duration=20.0)
        assert pacer.total_duration == 20.0
        assert pacer.attack_duration == 21.0
        assert pacer.slope == 1.0

    def test_describe_includes_slope(self, curve_profile: LoadProfile):
        text = CurveFittingPacer(curve_profile, duration=20.0, slope=2.5).describe()
        assert text.startswith("CurveFittingPacer Rates{")
        assert "2 rates" in text
        assert "slope=2.5" in text


class TestExpectedHits:
    """Tests for the quadratic hit curve."""

    def test_default_slope(self, curve_profile: LoadProfile):
        """With a=1 and b=10, ten seconds in the target is 50 + 100."""
        pacer = CurveFittingPacer(curve_profile, duration=20.0)
        assert pacer.expected_hits(10.0, curve_profile.segments[0]) == pytest.approx(150.0)

    def test_zero_slope_is_linear(self, curve_profile: LoadProfile):
        pacer = CurveFittingPacer(curve_profile, duration=20.0, slope=0.0)
        point = curve_profile.segments[1]
        assert pacer.expected_hits(4.0, point) == pytest.approx(400.0)
        assert pacer.instantaneous_rate(4.0, point) == pytest.approx(100.0)

    def test_zero_at_start(self, curve_profile: LoadProfile):
        pacer = CurveFittingPacer(curve_profile, duration=20.0)
        assert pacer.expected_hits(0.0, curve_profile.segments[0]) == 0.0

    def test_negative_elapsed(self, curve_profile: LoadProfile):
        pacer = CurveFittingPacer(curve_profile, duration=20.0)
        assert pacer.expected_hits(-1.0, curve_profile.segments[0]) == 0.0


class TestPace:
    """Tests for CurveFittingPacer.pace."""

    def test_first_hit_is_immediate(self, curve_profile: LoadProfile):
        pace = CurveFittingPacer(curve_profile, duration=20.0).pace(0.0, 0)
        assert pace.immediate
        assert not pace.stop

    @pytest.mark.parametrize("elapsed", [0.5, 5.0, 10.5, 11.5, 15.0, 20.9, 25.0, 60.0])
    @pytest.mark.parametrize("deficit", [1, 5, 50])
    def test_behind_schedule_is_immediate(
        self, curve_profile: LoadProfile, elapsed: float, deficit: int
    ):
        """Fewer hits than the curve expects means dispatch now, remainder included."""
        pacer = CurveFittingPacer(curve_profile, duration=20.0)
        point = locate(curve_profile, elapsed).segment
        hits = max(math.ceil(pacer.expected_hits(elapsed, point)) - deficit, 0)
        pace = pacer.pace(elapsed, hits)
        assert pace.delay_ns <= 0
        assert not pace.stop

    def test_ahead_of_schedule_waits(self, curve_profile: LoadProfile):
        """At t=1 with a=1, b=10 the target is 10.5 hits at 11 hits/s."""
        pace = CurveFittingPacer(curve_profile, duration=20.0).pace(1.0, 100)
        assert not pace.stop
        assert pace.delay == pytest.approx((101 - 10.5) / 11, rel=1e-6)

    def test_overflow_stops(self):
        """A hit count whose next delay cannot be represented ends the attack."""
        profile = LoadProfile(segments=(RateSegment(rate=1, duration=10.0),))
        pace = CurveFittingPacer(profile, duration=10.0, slope=0.0).pace(1.0, 10**10)
        assert pace.stop

    def test_zero_rate_waits_for_next_point(self):
        profile = LoadProfile(
            segments=(RateSegment(rate=0, duration=5.0), RateSegment(rate=10, duration=5.0)),
        )
        pace = CurveFittingPacer(profile, duration=10.0, slope=0.0).pace(2.0, 1)
        assert pace.delay_ns == 4_000_000_000

    def test_transitions_between_points(self, curve_profile: LoadProfile):
        pacer = CurveFittingPacer(curve_profile, duration=20.0)
        pacer.pace(5.0, 0)
        assert pacer.reporter.active_segment == curve_profile.segments[0]
        pacer.pace(15.0, 0)
        assert pacer.reporter.active_segment == curve_profile.segments[1]
