"""Metric dataclasses for varload."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from varload.profile.models import RateSegment

__all__ = [
    "HitResult",
    "MetricsSummary",
    "SegmentReport",
]


@dataclass
class HitResult:
    """Outcome of a single request issued by the attacker.

    Attributes:
        timestamp: Wall-clock time (``time.time()``) the request was sent.
        latency_ms: Response time in milliseconds.
        status_code: HTTP status code, 0 if the request failed.
        bytes_in: Response body size in bytes.
        error: Error message if the request failed or returned a
            non-success status, None otherwise.
        seq: Sequence number of the hit within the attack.
    """

    timestamp: float
    latency_ms: float
    status_code: int
    bytes_in: int = 0
    error: str | None = None
    seq: int = 0

    @property
    def succeeded(self) -> bool:
        """True for a 2xx/3xx response without a transport error."""
        return self.error is None and 200 <= self.status_code < 400  # noqa: PLR2004


@dataclass
class MetricsSummary:
    """Closed, aggregated metrics for a set of hits.

    Attributes:
        requests: Number of hits recorded.
        rate: Hits sent per second over the attack window.
        throughput: Successful hits per second, including the wait for the
            last response.
        success: Fraction of hits that succeeded (0.0 to 1.0).
        duration: Seconds between the first and last hit.
        wait: Seconds between the last hit and its response.
        latency_min: Minimum latency in milliseconds.
        latency_mean: Mean latency in milliseconds.
        latency_p50: 50th percentile latency (ms).
        latency_p90: 90th percentile latency (ms).
        latency_p95: 95th percentile latency (ms).
        latency_p99: 99th percentile latency (ms).
        latency_max: Maximum latency in milliseconds.
        bytes_in_total: Total response bytes.
        bytes_in_mean: Mean response bytes per hit.
        status_codes: Hit count keyed by status code (``"0"`` for failures).
        errors: Distinct error messages in first-seen order.
    """

    requests: int = 0
    rate: float = 0.0
    throughput: float = 0.0
    success: float = 0.0
    duration: float = 0.0
    wait: float = 0.0
    latency_min: float = 0.0
    latency_mean: float = 0.0
    latency_p50: float = 0.0
    latency_p90: float = 0.0
    latency_p95: float = 0.0
    latency_p99: float = 0.0
    latency_max: float = 0.0
    bytes_in_total: int = 0
    bytes_in_mean: float = 0.0
    status_codes: dict[str, int] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)


@dataclass
class SegmentReport:
    """Metrics snapshot for one segment of a load profile.

    Emitted by the transition reporter when the active segment changes and
    once more for the final segment when the attack ends.

    Attributes:
        segment: The segment the hits were attributed to.
        index: Position of the segment in the profile.
        started_at: Elapsed seconds when the segment became active.
        ended_at: Elapsed seconds when the next segment took over.
        summary: Closed metrics for hits sent during the segment.
    """

    segment: RateSegment
    index: int
    started_at: float
    ended_at: float
    summary: MetricsSummary
