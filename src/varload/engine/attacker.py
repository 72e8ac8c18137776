"""Paced HTTP attack against a single target URL.

The :class:`Attacker` asks its pacer how long to wait before each hit,
sleeps that long, and fires the request without waiting for earlier ones
to complete.  A semaphore bounds the number of outstanding requests.
"""

from __future__ import annotations

import asyncio
import contextlib
import signal
import sys
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING

import aiohttp

from varload._internal.config import validate_url
from varload._internal.durations import format_duration
from varload._internal.errors import AttackError
from varload._internal.logging import get_logger
from varload.metrics.accumulator import Metrics
from varload.metrics.models import HitResult, MetricsSummary, SegmentReport

if TYPE_CHECKING:
    from collections.abc import Callable

    from varload.pacing.base import Pacer

logger = get_logger("engine.attacker")

# Seconds to wait for in-flight requests after the attack window closes
_DRAIN_TIMEOUT = 5.0


class AttackState(Enum):
    """State machine for an attack."""

    CREATED = auto()
    RUNNING = auto()
    STOPPING = auto()
    COMPLETED = auto()
    FAILED = auto()


@dataclass
class AttackResult:
    """Complete result of one attack.

    Attributes:
        name: Profile name.
        url: Target URL.
        pacer_description: Human-readable pacer description.
        duration_seconds: Wall-clock duration of the attack.
        hits: Number of requests dispatched.
        stopped_by_pacer: True if the pacer signalled stop.
        interrupted: True if SIGINT/SIGTERM ended the attack early.
        summary: Metrics over every hit of the attack.
        segments: Per-segment reports in profile order.
    """

    name: str
    url: str
    pacer_description: str
    duration_seconds: float
    hits: int
    stopped_by_pacer: bool = False
    interrupted: bool = False
    summary: MetricsSummary = field(default_factory=MetricsSummary)
    segments: list[SegmentReport] = field(default_factory=list)


class Attacker:
    """Issues GET requests paced by a :class:`~varload.pacing.base.Pacer`.

    State machine: CREATED -> RUNNING -> STOPPING -> COMPLETED
                                      -> FAILED (on error)

    Args:
        url: Absolute http(s) URL to attack.
        pacer: Pacer for this attack.  It must not be shared with another
            attack.
        duration: Attack duration in seconds.  Defaults to the pacer's
            ``attack_duration``.
        max_in_flight: Maximum number of outstanding requests.
        timeout: Per-request timeout in seconds.
        method: HTTP method.
        on_result: Optional callback invoked with every hit result.
        handle_signals: Install SIGINT/SIGTERM handlers for graceful stop.

    Raises:
        ConfigError: If *url* is not an absolute http(s) URL.
    """

    def __init__(
        self,
        url: str,
        pacer: Pacer,
        *,
        duration: float | None = None,
        max_in_flight: int = 1000,
        timeout: float = 30.0,
        method: str = "GET",
        on_result: Callable[[HitResult], None] | None = None,
        handle_signals: bool = True,
    ) -> None:
        self._url = validate_url(url)
        self._pacer = pacer
        self._duration = duration if duration is not None else pacer.attack_duration
        self._max_in_flight = max_in_flight
        self._timeout = timeout
        self._method = method
        self._on_result = on_result
        self._handle_signals = handle_signals

        self._state = AttackState.CREATED
        self._metrics = Metrics()
        self._stop_event = asyncio.Event()
        self._interrupted = False

    @property
    def state(self) -> AttackState:
        """Return the current attack state."""
        return self._state

    def stop(self) -> None:
        """Request a graceful stop after the current hit."""
        if self._state == AttackState.RUNNING:
            logger.info("Graceful shutdown requested")
            self._state = AttackState.STOPPING
            self._stop_event.set()

    async def run(self) -> AttackResult:
        """Execute the attack.

        Returns:
            AttackResult with the whole-attack summary and segment reports.

        Raises:
            AttackError: If the attack loop fails unexpectedly.
        """
        profile = self._pacer.profile
        logger.info(
            "Starting variable load test against %r with %d load profiles for %s",
            self._url,
            len(profile),
            format_duration(self._duration),
            extra={"url": self._url},
        )

        if self._handle_signals:
            self._install_signal_handlers()

        self._state = AttackState.RUNNING
        start = time.monotonic()
        hits = 0
        stopped_by_pacer = False

        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                connector=aiohttp.TCPConnector(limit=self._max_in_flight),
            ) as session:
                in_flight: set[asyncio.Task[None]] = set()
                slots = asyncio.Semaphore(self._max_in_flight)

                while not self._stop_event.is_set():
                    elapsed = time.monotonic() - start
                    if elapsed >= self._duration:
                        break

                    pace = self._pacer.pace(elapsed, hits)
                    if pace.stop:
                        logger.warning(
                            "Pacer stopped the attack after %d hits (%s elapsed)",
                            hits,
                            format_duration(elapsed),
                            extra={"hits": hits, "elapsed": elapsed},
                        )
                        stopped_by_pacer = True
                        break

                    if not pace.immediate:
                        await self._sleep(min(pace.delay, self._duration - elapsed))
                        if self._stop_event.is_set():
                            break
                        if time.monotonic() - start >= self._duration:
                            break

                    await slots.acquire()
                    hits += 1
                    task = asyncio.create_task(
                        self._hit(session, hits, slots),
                        name=f"hit-{hits}",
                    )
                    in_flight.add(task)
                    task.add_done_callback(in_flight.discard)
                    # Let the request start before pacing the next one
                    await asyncio.sleep(0)

                if self._state == AttackState.RUNNING:
                    self._state = AttackState.STOPPING
                await self._drain(in_flight)

        except Exception as exc:
            self._state = AttackState.FAILED
            logger.exception("Attack failed")
            msg = f"attack against {self._url!r} failed"
            raise AttackError(msg) from exc
        finally:
            if self._handle_signals:
                self._remove_signal_handlers()

        total_duration = time.monotonic() - start
        self._pacer.reporter.flush(total_duration)
        summary = self._metrics.close()
        self._state = AttackState.COMPLETED

        logger.info(
            "Variable load test against %r completed in %s (%d requests, p95=%s)",
            self._url,
            format_duration(total_duration),
            summary.requests,
            format_duration(summary.latency_p95 / 1000.0),
            extra={"url": self._url, "hits": hits},
        )

        return AttackResult(
            name=profile.name,
            url=self._url,
            pacer_description=self._pacer.describe(),
            duration_seconds=total_duration,
            hits=hits,
            stopped_by_pacer=stopped_by_pacer,
            interrupted=self._interrupted,
            summary=summary,
            segments=self._pacer.reporter.reports,
        )

    async def _sleep(self, seconds: float) -> None:
        """Sleep up to *seconds*, waking early if a stop is requested."""
        if seconds <= 0:
            return
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)

    async def _hit(
        self,
        session: aiohttp.ClientSession,
        seq: int,
        slots: asyncio.Semaphore,
    ) -> None:
        """Send one request and record its outcome."""
        sent_at = time.time()
        began = time.monotonic()
        status_code = 0
        bytes_in = 0
        error: str | None = None

        try:
            async with session.request(self._method, self._url) as resp:
                body = await resp.read()
                status_code = resp.status
                bytes_in = len(body)
                if not 200 <= status_code < 400:  # noqa: PLR2004
                    error = f"{status_code} {resp.reason or ''}".strip()
        except (aiohttp.ClientError, TimeoutError) as exc:
            error = f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__
        finally:
            slots.release()

        result = HitResult(
            timestamp=sent_at,
            latency_ms=(time.monotonic() - began) * 1000,
            status_code=status_code,
            bytes_in=bytes_in,
            error=error,
            seq=seq,
        )
        self._metrics.add(result)
        self._pacer.reporter.record(result)
        if self._on_result is not None:
            self._on_result(result)

    async def _drain(self, in_flight: set[asyncio.Task[None]]) -> None:
        """Wait for outstanding requests, cancelling any that overrun."""
        if not in_flight:
            return
        _done, pending = await asyncio.wait(set(in_flight), timeout=_DRAIN_TIMEOUT)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.wait(pending, timeout=2.0)
            logger.warning("Cancelled %d requests still in flight at shutdown", len(pending))

    def _install_signal_handlers(self) -> None:
        """Install SIGINT and SIGTERM handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()

        def _signal_handler() -> None:
            logger.info("Signal received, initiating graceful shutdown")
            self._interrupted = True
            self._state = AttackState.STOPPING
            self._stop_event.set()

        if sys.platform != "win32":
            loop.add_signal_handler(signal.SIGINT, _signal_handler)
            loop.add_signal_handler(signal.SIGTERM, _signal_handler)
        else:
            signal.signal(signal.SIGINT, lambda _s, _f: _signal_handler())
            signal.signal(signal.SIGTERM, lambda _s, _f: _signal_handler())

    def _remove_signal_handlers(self) -> None:
        """Remove custom signal handlers, restoring defaults."""
        if sys.platform != "win32":
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)
        else:
            signal.signal(signal.SIGINT, signal.default_int_handler)
            signal.signal(signal.SIGTERM, signal.SIG_DFL)


def run_attack(
    url: str,
    pacer: Pacer,
    *,
    duration: float | None = None,
    max_in_flight: int = 1000,
    timeout: float = 30.0,
    on_result: Callable[[HitResult], None] | None = None,
) -> AttackResult:
    """Run one attack to completion on a fresh event loop.

    Args:
        url: Absolute http(s) URL to attack.
        pacer: Pacer for this attack.
        duration: Attack duration in seconds; defaults to the pacer's.
        max_in_flight: Maximum number of outstanding requests.
        timeout: Per-request timeout in seconds.
        on_result: Optional callback invoked with every hit result.

    Returns:
        The attack result.

    Raises:
        ConfigError: If *url* is invalid.
        AttackError: If the attack fails.
    """
    attacker = Attacker(
        url,
        pacer,
        duration=duration,
        max_in_flight=max_in_flight,
        timeout=timeout,
        on_result=on_result,
    )
    return asyncio.run(attacker.run())
