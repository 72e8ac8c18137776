"""Rich renderings of metrics summaries."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.table import Table

from varload._internal.durations import format_duration

if TYPE_CHECKING:
    from varload.metrics.models import MetricsSummary, SegmentReport


def _ms(value: float) -> str:
    return format_duration(value / 1000.0)


def render_text_report(summary: MetricsSummary, *, title: str | None = None) -> Table:
    """Build the classic text report for *summary*.

    Rows: requests (total, rate, throughput), duration (total, attack,
    wait), latencies, bytes in, success ratio, status codes and the error
    set.

    Args:
        summary: Closed metrics to render.
        title: Optional table title.

    Returns:
        A Rich table ready to print.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan", expand=True)
    table.add_column("Metric", style="bold")
    table.add_column("Breakdown")
    table.add_column("Values", justify="right")

    table.add_row(
        "Requests",
        escape("[total, rate, throughput]"),
        f"{summary.requests}, {summary.rate:.2f}, {summary.throughput:.2f}",
    )
    table.add_row(
        "Duration",
        escape("[total, attack, wait]"),
        ", ".join(
            format_duration(value)
            for value in (summary.duration + summary.wait, summary.duration, summary.wait)
        ),
    )
    table.add_row(
        "Latencies",
        escape("[min, mean, 50, 90, 95, 99, max]"),
        ", ".join(
            _ms(value)
            for value in (
                summary.latency_min,
                summary.latency_mean,
                summary.latency_p50,
                summary.latency_p90,
                summary.latency_p95,
                summary.latency_p99,
                summary.latency_max,
            )
        ),
    )
    table.add_row(
        "Bytes In",
        escape("[total, mean]"),
        f"{summary.bytes_in_total}, {summary.bytes_in_mean:.2f}",
    )
    table.add_row("Success", escape("[ratio]"), f"{summary.success * 100:.2f}%")
    table.add_row(
        "Status Codes",
        escape("[code:count]"),
        " ".join(f"{code}:{count}" for code, count in summary.status_codes.items()),
    )
    table.add_row("Error Set", "", escape("\n".join(summary.errors)))
    return table


def render_segment_report(report: SegmentReport) -> Table:
    """Build the text report for one finished profile segment.

    Args:
        report: Snapshot emitted by the transition reporter.

    Returns:
        A Rich table titled with the segment and the window it covered.
    """
    title = (
        f"Segment {report.index + 1}: {report.segment} "
        f"({format_duration(report.started_at)} to {format_duration(report.ended_at)})"
    )
    return render_text_report(report.summary, title=title)
