"""HDR histogram for request latencies.

Thin wrapper around ``hdrh.histogram.HdrHistogram`` that accepts and returns
milliseconds.  Values are stored as integer microseconds because the HDR
histogram only records integers.
"""

from __future__ import annotations

from hdrh.histogram import HdrHistogram  # type: ignore[import-untyped]

# 1 microsecond to 5 minutes, generous enough for any configured timeout
_LOWEST_TRACKABLE_US = 1
_HIGHEST_TRACKABLE_US = 300_000_000
_SIGNIFICANT_DIGITS = 3


class LatencyHistogram:
    """Latency distribution for one metrics accumulator.

    Latencies outside the trackable range are clamped to its bounds rather
    than dropped, so every hit is counted.
    """

    def __init__(
        self,
        lowest_us: int = _LOWEST_TRACKABLE_US,
        highest_us: int = _HIGHEST_TRACKABLE_US,
        significant_digits: int = _SIGNIFICANT_DIGITS,
    ) -> None:
        self.lowest_us = lowest_us
        self.highest_us = highest_us
        self._histogram: HdrHistogram = HdrHistogram(  # type: ignore[no-any-unimported]
            lowest_us, highest_us, significant_digits
        )

    def record(self, latency_ms: float) -> None:
        """Record one latency in milliseconds."""
        value_us = int(latency_ms * 1000)
        value_us = max(self.lowest_us, min(value_us, self.highest_us))
        self._histogram.record_value(value_us)

    @property
    def count(self) -> int:
        """Number of recorded latencies."""
        return int(self._histogram.total_count)

    def percentile(self, percentile: float) -> float:
        """Latency in milliseconds at *percentile* (0-100), 0.0 when empty."""
        if self.count == 0:
            return 0.0
        return float(self._histogram.get_value_at_percentile(percentile)) / 1000.0

    def min(self) -> float:
        """Smallest recorded latency in milliseconds, 0.0 when empty."""
        if self.count == 0:
            return 0.0
        return float(self._histogram.get_min_value()) / 1000.0

    def max(self) -> float:
        """Largest recorded latency in milliseconds, 0.0 when empty."""
        if self.count == 0:
            return 0.0
        return float(self._histogram.get_max_value()) / 1000.0

    def mean(self) -> float:
        """Mean latency in milliseconds, 0.0 when empty."""
        if self.count == 0:
            return 0.0
        return float(self._histogram.get_mean_value()) / 1000.0

    def reset(self) -> None:
        """Discard every recorded latency."""
        self._histogram.reset()
