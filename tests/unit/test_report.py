"""Tests for the Rich metrics reports."""

from __future__ import annotations

from rich.console import Console

from varload.metrics.models import MetricsSummary, SegmentReport
from varload.metrics.report import render_segment_report, render_text_report
from varload.profile.models import RateSegment


def _render(table: object) -> str:
    console = Console(width=160, record=True, color_system=None)
    console.print(table)
    return console.export_text()


def _summary() -> MetricsSummary:
    return MetricsSummary(
        requests=100,
        rate=10.0,
        throughput=9.5,
        success=0.95,
        duration=10.0,
        wait=0.01,
        latency_min=1.0,
        latency_mean=5.0,
        latency_p50=4.0,
        latency_p90=8.0,
        latency_p95=9.0,
        latency_p99=12.0,
        latency_max=20.0,
        bytes_in_total=2000,
        bytes_in_mean=20.0,
        status_codes={"200": 95, "500": 5},
        errors=["500 Internal Server Error"],
    )


class TestTextReport:
    """Tests for render_text_report."""

    def test_rows(self):
        text = _render(render_text_report(_summary(), title="Attack Summary"))
        assert "Attack Summary" in text
        assert "100, 10.00, 9.50" in text
        assert "10.01s, 10s, 10ms" in text
        assert "1ms, 5ms, 4ms, 8ms, 9ms, 12ms, 20ms" in text
        assert "2000, 20.00" in text
        assert "95.00%" in text
        assert "200:95 500:5" in text
        assert "500 Internal Server Error" in text

    def test_empty_summary(self):
        text = _render(render_text_report(MetricsSummary()))
        assert "0, 0.00, 0.00" in text
        assert "0.00%" in text


def test_segment_report_title():
    report = SegmentReport(
        segment=RateSegment(rate=50, duration=10.0),
        index=1,
        started_at=11.0,
        ended_at=21.0,
        summary=_summary(),
    )
    text = _render(render_segment_report(report))
    assert "Segment 2: 50 req/s for 10s (11s to 21s)" in text
