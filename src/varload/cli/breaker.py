"""The ``varload breaker`` command: find the maximum rate a target serves within an SLA."""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from varload._internal.config import load_config, validate_url
from varload._internal.durations import format_duration, parse_duration
from varload._internal.errors import VarloadError
from varload._internal.logging import setup_logging
from varload.engine.breaker import (
    DEFAULT_CEILING,
    DEFAULT_START_RATE,
    constant_rate_probe,
    find_max_rate,
)

console = Console(stderr=True)


def breaker_cmd(
    url: str | None = typer.Option(
        None,
        "--url",
        "-u",
        help="The URL to attack (default: $VARLOAD_URL or http://localhost:8080/).",
    ),
    sla: str = typer.Option(
        "1s",
        "--sla",
        help="Maximum acceptable p95 latency, e.g. '1s' or '250ms'.",
    ),
    start_rate: int = typer.Option(
        DEFAULT_START_RATE,
        "--start-rate",
        help="First rate (req/s) to probe.",
        min=1,
    ),
    step_duration: str = typer.Option(
        "15s",
        "--step-duration",
        help="How long each probe attacks for.",
    ),
    ceiling: int = typer.Option(
        DEFAULT_CEILING,
        "--ceiling",
        help="Highest rate (req/s) to probe.",
        min=1,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging.",
    ),
) -> None:
    """Double the rate until the SLA breaks, then binary-search the limit."""
    setup_logging(logging.DEBUG if verbose else logging.INFO)

    try:
        config = load_config()
        target = validate_url(url or config.url)
        sla_ms = parse_duration(sla) * 1000.0
        probe = constant_rate_probe(
            target,
            step_duration=parse_duration(step_duration),
            max_in_flight=config.max_in_flight,
            timeout=config.request_timeout,
        )
        result = find_max_rate(probe, sla_ms=sla_ms, start_rate=start_rate, ceiling=ceiling)
    except VarloadError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    table = Table(title="Breaker Probes", show_header=True, header_style="bold cyan")
    table.add_column("Rate (req/s)", justify="right")
    table.add_column("p95 Latency", justify="right")
    table.add_column("Result")
    for probe_result in result.probes:
        table.add_row(
            str(probe_result.rate),
            format_duration(probe_result.latency_p95_ms / 1000.0),
            "[green]ok[/green]" if probe_result.ok else "[red]failed[/red]",
        )
    console.print(table)

    suffix = " (ceiling reached)" if result.hit_ceiling else ""
    console.print(f"[bold]Maximum working rate:[/bold] {result.max_rate} req/sec{suffix}")
