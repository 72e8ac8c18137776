"""Tests for the breaker rate search."""

from __future__ import annotations

import pytest

from varload._internal.errors import ConfigError
from varload.engine.breaker import find_max_rate


def _threshold_probe(limit: int, calls: list[int]):
    """Probe that answers in 10ms up to *limit* req/s and 2s above it."""

    def _probe(rate: int) -> float:
        calls.append(rate)
        return 10.0 if rate <= limit else 2000.0

    return _probe


class TestFindMaxRate:
    """Tests for find_max_rate."""

    def test_doubles_then_bisects(self):
        calls: list[int] = []
        result = find_max_rate(_threshold_probe(100, calls), sla_ms=1000.0, start_rate=20)

        assert result.max_rate == 100
        assert calls[:4] == [20, 40, 80, 160]
        assert not result.hit_ceiling
        assert [p.rate for p in result.probes] == calls

    def test_first_probe_fails(self):
        """When even the start rate breaks the SLA the search goes down to 1."""
        calls: list[int] = []
        result = find_max_rate(_threshold_probe(5, calls), sla_ms=1000.0, start_rate=20)
        assert result.max_rate == 5
        assert calls[0] == 20

    def test_nothing_passes(self):
        calls: list[int] = []
        result = find_max_rate(_threshold_probe(0, calls), sla_ms=1000.0, start_rate=4)
        assert result.max_rate == 0
        assert all(not p.ok for p in result.probes)

    def test_ceiling(self):
        calls: list[int] = []
        result = find_max_rate(
            _threshold_probe(10**9, calls), sla_ms=1000.0, start_rate=20, ceiling=100
        )
        assert result.max_rate == 100
        assert result.hit_ceiling
        assert calls == [20, 40, 80, 100]

    def test_probe_records_latency(self):
        result = find_max_rate(_threshold_probe(30, []), sla_ms=1000.0, start_rate=20)
        assert result.probes[0].latency_p95_ms == 10.0
        assert result.probes[0].ok
        assert result.sla_ms == 1000.0

    @pytest.mark.parametrize(
        ("kwargs", "match"),
        [
            ({"sla_ms": 0.0}, "sla must be positive"),
            ({"sla_ms": 100.0, "start_rate": 0}, "start_rate must be >= 1"),
            ({"sla_ms": 100.0, "start_rate": 50, "ceiling": 10}, "ceiling must be >= start_rate"),
        ],
    )
    def test_invalid_arguments(self, kwargs: dict[str, float], match: str):
        with pytest.raises(ConfigError, match=match):
            find_max_rate(lambda _rate: 0.0, **kwargs)  # type: ignore[arg-type]
