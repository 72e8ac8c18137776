"""Find the highest constant request rate a target sustains within a latency SLA.

The search doubles the rate until a probe fails, then binary-searches
between the last passing and the first failing rate.  Every probe is an
independent attack with its own pacer and runtime state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from varload._internal.durations import format_duration
from varload._internal.errors import ConfigError
from varload._internal.logging import get_logger
from varload.engine.attacker import run_attack
from varload.pacing.step_function import StepFunctionPacer
from varload.profile.models import LoadProfile, RateSegment

if TYPE_CHECKING:
    from collections.abc import Callable

logger = get_logger("engine.breaker")

DEFAULT_START_RATE = 20
DEFAULT_STEP_DURATION = 15.0
DEFAULT_CEILING = 100_000


@dataclass(frozen=True)
class Probe:
    """One measured rate.

    Attributes:
        rate: Requests per second attempted.
        latency_p95_ms: Observed 95th percentile latency in milliseconds.
        ok: Whether the latency met the SLA.
    """

    rate: int
    latency_p95_ms: float
    ok: bool


@dataclass
class BreakerResult:
    """Outcome of a breaker search.

    Attributes:
        max_rate: Highest rate that met the SLA, 0 if none did.
        sla_ms: The latency SLA in milliseconds.
        probes: Every probe in the order it ran.
        hit_ceiling: True if the search stopped at the ceiling without
            finding a failing rate.
    """

    max_rate: int
    sla_ms: float
    probes: list[Probe] = field(default_factory=list)
    hit_ceiling: bool = False


def constant_rate_probe(
    url: str,
    *,
    step_duration: float = DEFAULT_STEP_DURATION,
    max_in_flight: int = 1000,
    timeout: float = 30.0,
) -> Callable[[int], float]:
    """Build a probe that attacks *url* at a constant rate.

    Args:
        url: Target URL.
        step_duration: Seconds each probe attacks for.
        max_in_flight: Maximum outstanding requests per probe.
        timeout: Per-request timeout in seconds.

    Returns:
        A callable mapping a rate to the observed p95 latency in ms.
    """

    def _probe(rate: int) -> float:
        profile = LoadProfile(
            name=f"breaker {rate} req/s",
            segments=(RateSegment(rate=rate, duration=step_duration),),
        )
        result = run_attack(
            url,
            StepFunctionPacer(profile),
            duration=step_duration,
            max_in_flight=max_in_flight,
            timeout=timeout,
        )
        return result.summary.latency_p95

    return _probe


def find_max_rate(
    probe: Callable[[int], float],
    *,
    sla_ms: float,
    start_rate: int = DEFAULT_START_RATE,
    ceiling: int = DEFAULT_CEILING,
) -> BreakerResult:
    """Search for the highest rate whose p95 latency stays within *sla_ms*.

    Args:
        probe: Runs an attack at the given rate and returns the p95 latency
            in milliseconds.
        sla_ms: Latency SLA in milliseconds.  Must be > 0.
        start_rate: First rate tried.  Must be >= 1.
        ceiling: Highest rate the doubling phase may try.

    Returns:
        The search result.

    Raises:
        ConfigError: If an argument is out of range.
    """
    if sla_ms <= 0:
        msg = f"sla must be positive, got {sla_ms}"
        raise ConfigError(msg)
    if start_rate < 1:
        msg = f"start_rate must be >= 1, got {start_rate}"
        raise ConfigError(msg)
    if ceiling < start_rate:
        msg = f"ceiling must be >= start_rate ({start_rate}), got {ceiling}"
        raise ConfigError(msg)

    result = BreakerResult(max_rate=0, sla_ms=sla_ms)

    def _test(rate: int) -> bool:
        latency = probe(rate)
        ok = latency <= sla_ms
        result.probes.append(Probe(rate=rate, latency_p95_ms=latency, ok=ok))
        verdict = "Success" if ok else "Failed"
        logger.info(
            "%s at %d req/sec (latency %s)",
            verdict,
            rate,
            format_duration(latency / 1000.0),
            extra={"rate": rate},
        )
        return ok

    ok_rate = 0
    rate = start_rate
    while True:
        if not _test(rate):
            nok_rate = rate
            break
        ok_rate = rate
        if rate >= ceiling:
            result.max_rate = ok_rate
            result.hit_ceiling = True
            logger.warning("Reached the %d req/sec ceiling without a failure", ceiling)
            return result
        rate = min(rate * 2, ceiling)

    while nok_rate - ok_rate > 1:
        rate = (nok_rate + ok_rate) // 2
        if _test(rate):
            ok_rate = rate
        else:
            nok_rate = rate

    result.max_rate = ok_rate
    logger.info("Maximum working rate: %d req/sec", ok_rate)
    return result
