"""Curve-fitting pacing: a linearly growing rate chasing target rate points.

The instantaneous rate is ``a*t + b`` where ``a`` is the slope (hits/s²)
and ``b`` is the rate of the currently active point.  Integrating from 0
to ``t`` gives the target hit count ``a*t²/2 + b*t``.  Rate points are
modelled as :class:`~varload.profile.models.RateSegment` values that split
the total attack duration evenly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from varload._internal.errors import ConfigError
from varload.pacing.base import DISPATCH_NOW, MAX_DELAY_NS, STOP, Pace, Pacer, wait_out
from varload.pacing.locator import locate
from varload.pacing.reporter import SegmentTransitionReporter

if TYPE_CHECKING:
    from varload.profile.models import LoadProfile, RateSegment

DEFAULT_SLOPE = 1.0


class CurveFittingPacer(Pacer):
    """Chase a set of target rates spread over a total duration.

    Args:
        profile: Rate points, typically from
            :func:`~varload.profile.parser.parse_curve_string`.
        duration: Total attack duration in seconds.  Must be > 0.
        slope: Rate of change of the rate, in hits per second².
            Must be >= 0.  Defaults to 1.
        reporter: Transition reporter for this attack.  A fresh one is
            created when omitted.

    Raises:
        ConfigError: If *duration* or *slope* is out of range.
    """

    def __init__(
        self,
        profile: LoadProfile,
        duration: float,
        slope: float = DEFAULT_SLOPE,
        reporter: SegmentTransitionReporter | None = None,
    ) -> None:
        if duration <= 0:
            msg = f"duration must be positive, got {duration}"
            raise ConfigError(msg)
        if slope < 0:
            msg = f"slope must be non-negative, got {slope}"
            raise ConfigError(msg)
        self._profile = profile
        self._duration = duration
        self._slope = slope
        self._reporter = reporter or SegmentTransitionReporter()

    @property
    def profile(self) -> LoadProfile:
        return self._profile

    @property
    def reporter(self) -> SegmentTransitionReporter:
        return self._reporter

    @property
    def attack_duration(self) -> float:
        return self._profile.total_duration

    @property
    def total_duration(self) -> float:
        """Duration the rate points were spread over, in seconds."""
        return self._duration

    @property
    def slope(self) -> float:
        """Slope ``a`` of the rate function."""
        return self._slope

    def expected_hits(self, elapsed: float, point: RateSegment) -> float:
        """Target cumulative hits after *elapsed* seconds while chasing *point*.

        Args:
            elapsed: Seconds since the attack started.
            point: Active rate point supplying the intercept ``b``.

        Returns:
            ``a*t²/2 + b*t``, or 0 for negative elapsed times.
        """
        if elapsed < 0:
            return 0.0
        return (self._slope * elapsed**2) / 2 + point.rate * elapsed

    def instantaneous_rate(self, elapsed: float, point: RateSegment) -> float:
        """Hits per second the attack should be sending at *elapsed*."""
        return self._slope * elapsed + point.rate

    def pace(self, elapsed: float, hits: int) -> Pace:
        location = locate(self._profile, elapsed)
        self._reporter.observe(location, elapsed)

        expected = self.expected_hits(elapsed, location.segment)
        if hits == 0 or hits < expected:
            # Behind schedule
            return DISPATCH_NOW

        rate = self.instantaneous_rate(elapsed, location.segment)
        if rate <= 0:
            return wait_out(location, elapsed)

        interval = round(1e9 / rate)
        if interval != 0 and MAX_DELAY_NS // interval < hits:
            # The next wait would overflow the delay representation
            return STOP

        delay_ns = round(interval * ((hits + 1) - expected))
        if delay_ns > MAX_DELAY_NS:
            return STOP
        return Pace(delay_ns=delay_ns)

    def describe(self) -> str:
        return (
            f"CurveFittingPacer Rates{{{self._profile.name}: {len(self._profile)} rates, "
            f"slope={self._slope:g}}}"
        )
