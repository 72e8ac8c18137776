"""Per-attack pacing state and segment transition reporting.

The dispatch engine may call a pacer from several workers at once.  All
bookkeeping about the active segment lives in a :class:`PacerRuntimeState`
owned by one :class:`SegmentTransitionReporter`, which is owned by one
attack.  Nothing here is module-global, so sequential or parallel attacks
never see each other's segments or metrics.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from varload._internal.durations import format_duration
from varload._internal.logging import get_logger
from varload.metrics.accumulator import Metrics
from varload.metrics.models import SegmentReport

if TYPE_CHECKING:
    from collections.abc import Callable

    from varload.metrics.models import HitResult
    from varload.pacing.locator import Location
    from varload.profile.models import RateSegment

logger = get_logger("pacing.reporter")


@dataclass
class PacerRuntimeState:
    """Mutable state for the lifetime of one attack.

    Attributes:
        active_segment: Segment currently being paced, None before the
            first pace call.
        active_index: Profile position of *active_segment*, -1 if none.
        segment_started_at: Elapsed seconds when *active_segment* took over.
        segment_metrics: Accumulator for hits attributed to the active
            segment.  Reset on every transition.
        remainder_announced: Whether the remainder-rate notice was logged.
    """

    active_segment: RateSegment | None = None
    active_index: int = -1
    segment_started_at: float = 0.0
    segment_metrics: Metrics = field(default_factory=Metrics)
    remainder_announced: bool = False


class SegmentTransitionReporter:
    """Detects active-segment changes and snapshots per-segment metrics.

    Every method takes an internal lock, so a transition closes and emits
    the previous segment's metrics exactly once even when several dispatch
    workers pace concurrently.  The ``on_report`` callback runs outside the
    lock and may call back into the reporter.

    Args:
        on_report: Optional callback invoked with each finished
            :class:`SegmentReport`.
    """

    def __init__(self, on_report: Callable[[SegmentReport], None] | None = None) -> None:
        self._state = PacerRuntimeState()
        self._lock = threading.Lock()
        self._on_report = on_report
        self._reports: list[SegmentReport] = []

    @property
    def active_segment(self) -> RateSegment | None:
        """Segment currently being paced."""
        with self._lock:
            return self._state.active_segment

    @property
    def reports(self) -> list[SegmentReport]:
        """Reports emitted so far, in emission order."""
        with self._lock:
            return list(self._reports)

    def observe(self, location: Location, elapsed: float) -> bool:
        """Record that *location* is active at *elapsed* seconds.

        A location whose segment equals the active one is a no-op, as is a
        stale location that points before the active segment.

        Args:
            location: Result of :func:`~varload.pacing.locator.locate`.
            elapsed: Seconds since the attack started.

        Returns:
            True if this call performed a transition.
        """
        with self._lock:
            state = self._state
            if location.remainder and not state.remainder_announced:
                state.remainder_announced = True
                logger.info(
                    "Setting default rate of %d req/sec for remainder of attack",
                    location.segment.rate,
                    extra={"rate": location.segment.rate, "elapsed": elapsed},
                )

            if state.active_segment == location.segment or location.index < state.active_index:
                return False

            report = self._close_segment(elapsed)
            state.active_segment = location.segment
            state.active_index = location.index
            state.segment_started_at = elapsed

        suffix = f" ({format_duration(elapsed)} elapsed)" if elapsed >= 1 else ""
        logger.info(
            "Attacking at a rate of %s%s",
            location.segment,
            suffix,
            extra={
                "rate": location.segment.rate,
                "segment_duration": location.segment.duration,
                "elapsed": elapsed,
            },
        )
        if report is not None:
            self._emit(report)
        return True

    def record(self, result: HitResult) -> None:
        """Attribute a hit result to the active segment."""
        with self._lock:
            self._state.segment_metrics.add(result)

    def flush(self, elapsed: float) -> SegmentReport | None:
        """Close the active segment at the end of an attack.

        Args:
            elapsed: Seconds since the attack started.

        Returns:
            The final segment's report, or None if it recorded no hits.
        """
        with self._lock:
            report = self._close_segment(elapsed)
        if report is not None:
            self._emit(report)
        return report

    def _close_segment(self, elapsed: float) -> SegmentReport | None:
        """Snapshot and reset the active segment's metrics.  Caller holds the lock."""
        state = self._state
        metrics = state.segment_metrics
        if state.active_segment is None or metrics.requests == 0:
            return None

        report = SegmentReport(
            segment=state.active_segment,
            index=state.active_index,
            started_at=state.segment_started_at,
            ended_at=elapsed,
            summary=metrics.close(),
        )
        metrics.reset()
        self._reports.append(report)
        return report

    def _emit(self, report: SegmentReport) -> None:
        logger.debug(
            "Segment %d closed: %d requests, p95=%.1fms",
            report.index + 1,
            report.summary.requests,
            report.summary.latency_p95,
        )
        if self._on_report is not None:
            self._on_report(report)
