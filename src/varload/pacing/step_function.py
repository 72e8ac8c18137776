"""Step-function pacing: a constant rate within each profile segment."""

from __future__ import annotations

from typing import TYPE_CHECKING

from varload._internal.durations import NANOSECONDS_PER_SECOND
from varload.pacing.base import DISPATCH_NOW, Pace, Pacer, wait_out
from varload.pacing.locator import locate
from varload.pacing.reporter import SegmentTransitionReporter
from varload.profile.models import LEAD_IN_SECONDS

if TYPE_CHECKING:
    from varload.profile.models import LoadProfile


class StepFunctionPacer(Pacer):
    """Play back a profile as a staircase of constant rates.

    The target hit count is the exact integral of the piecewise-constant
    rate function over the same boundaries the locator uses: the first
    segment also covers the one-second lead-in, and the last rate continues
    indefinitely.  The attack runs for the profile's
    ``total_duration``; this pacer never asks to stop.

    Args:
        profile: Profile to play back.
        reporter: Transition reporter for this attack.  A fresh one is
            created when omitted.

    Example::

        profile = parse_step_string("10s@10,10s@50")
        pacer = StepFunctionPacer(profile)
        pacer.expected_hits(15.0)  # 10*11 + 50*4 = 310.0
    """

    def __init__(
        self,
        profile: LoadProfile,
        reporter: SegmentTransitionReporter | None = None,
    ) -> None:
        self._profile = profile
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

    def expected_hits(self, elapsed: float) -> float:
        """Target cumulative hit count after *elapsed* seconds.

        Args:
            elapsed: Seconds since the attack started.

        Returns:
            Sum of ``rate * seconds`` over every fully elapsed segment plus
            the elapsed part of the current one.  Segment ``i`` spans
            ``[1 + S(i-1), 1 + S(i)]`` where ``S`` is the running sum of
            durations; the first segment starts at 0.
        """
        if elapsed <= 0:
            return 0.0

        hits = 0.0
        start = 0.0
        end = LEAD_IN_SECONDS
        for segment in self._profile.segments:
            # The locator never selects an all-zero segment
            if segment.is_unset:
                continue
            end += segment.duration
            if elapsed <= end:
                return hits + segment.rate * (elapsed - start)
            hits += segment.rate * (end - start)
            start = end
        return hits + self._profile.last_segment.rate * (elapsed - start)

    def pace(self, elapsed: float, hits: int) -> Pace:
        location = locate(self._profile, elapsed)
        self._reporter.observe(location, elapsed)

        expected = self.expected_hits(elapsed)
        if hits == 0 or hits < expected:
            # Behind schedule
            return DISPATCH_NOW

        rate = location.segment.rate
        if rate == 0:
            return wait_out(location, elapsed)

        ns_per_hit = round(NANOSECONDS_PER_SECOND / rate)
        hits_to_wait = (hits + 1) - expected
        return Pace(delay_ns=round(ns_per_hit * hits_to_wait))

    def describe(self) -> str:
        return f"StepFunctionPacer Rates{{{self._profile.name}: {len(self._profile)} rates}}"
