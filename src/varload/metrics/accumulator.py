"""Metrics accumulator for hit results.

A :class:`Metrics` instance collects :class:`HitResult` objects and is
*closed* into a :class:`MetricsSummary`.  One instance covers the whole
attack; the transition reporter keeps another one per profile segment.

Instances are not thread-safe.  Callers that share one across threads must
serialize access themselves.
"""

from __future__ import annotations

import math
from collections import Counter
from typing import TYPE_CHECKING

from varload.metrics.histogram import LatencyHistogram
from varload.metrics.models import MetricsSummary

if TYPE_CHECKING:
    from varload.metrics.models import HitResult


class Metrics:
    """Accumulates hit results until :meth:`close` is called."""

    def __init__(self) -> None:
        self._latencies = LatencyHistogram()
        self.reset()

    def reset(self) -> None:
        """Forget every recorded hit."""
        self._latencies.reset()
        self._requests = 0
        self._successes = 0
        self._bytes_in = 0
        # Sentinels until the first hit; close() ignores them while empty
        self._earliest = math.inf
        self._latest = -math.inf
        self._end = -math.inf
        self._status_codes: Counter[str] = Counter()
        self._errors: dict[str, None] = {}

    @property
    def requests(self) -> int:
        """Number of hits recorded since the last reset."""
        return self._requests

    def add(self, result: HitResult) -> None:
        """Record one hit result.

        Args:
            result: Outcome of a single request.
        """
        self._requests += 1
        self._latencies.record(result.latency_ms)
        self._bytes_in += result.bytes_in
        self._status_codes[str(result.status_code)] += 1
        if result.succeeded:
            self._successes += 1
        if result.error is not None:
            self._errors.setdefault(result.error, None)

        self._earliest = min(self._earliest, result.timestamp)
        self._latest = max(self._latest, result.timestamp)
        self._end = max(self._end, result.timestamp + result.latency_ms / 1000.0)

    def close(self) -> MetricsSummary:
        """Compute the summary of everything recorded so far.

        Closing does not reset the accumulator; more hits may be added and
        the instance closed again.

        Returns:
            Aggregated summary.  All fields are zero when nothing was
            recorded.
        """
        if self._requests == 0:
            return MetricsSummary()

        duration = self._latest - self._earliest
        wait = max(self._end - self._latest, 0.0)
        rate = self._requests / duration if duration > 0 else 0.0
        total = duration + wait
        throughput = self._successes / total if total > 0 else 0.0

        return MetricsSummary(
            requests=self._requests,
            rate=rate,
            throughput=throughput,
            success=self._successes / self._requests,
            duration=duration,
            wait=wait,
            latency_min=self._latencies.min(),
            latency_mean=self._latencies.mean(),
            latency_p50=self._latencies.percentile(50.0),
            latency_p90=self._latencies.percentile(90.0),
            latency_p95=self._latencies.percentile(95.0),
            latency_p99=self._latencies.percentile(99.0),
            latency_max=self._latencies.max(),
            bytes_in_total=self._bytes_in,
            bytes_in_mean=self._bytes_in / self._requests,
            status_codes=dict(sorted(self._status_codes.items())),
            errors=list(self._errors),
        )
