"""The ``varload attack`` command: run a paced attack following a load profile."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from varload._internal.config import load_config, validate_url
from varload._internal.durations import format_duration, parse_duration
from varload._internal.errors import VarloadError
from varload._internal.logging import setup_logging
from varload.engine.attacker import run_attack
from varload.metrics.report import render_segment_report, render_text_report
from varload.pacing.curve_fitting import DEFAULT_SLOPE
from varload.pacing.factory import PacerKind, build_pacer, load_profile
from varload.pacing.reporter import SegmentTransitionReporter

if TYPE_CHECKING:
    from varload.metrics.models import SegmentReport

console = Console(stderr=True)


def _fail(message: str) -> typer.Exit:
    console.print(f"[red]Error:[/red] {escape(message)}")
    return typer.Exit(code=1)


def attack_cmd(
    pacer: str = typer.Option(
        ...,
        "--pacer",
        "-p",
        help="Pacer governing the load rate: step-function or curve-fitting.",
    ),
    url: str | None = typer.Option(
        None,
        "--url",
        "-u",
        help="The URL to attack (default: $VARLOAD_URL or http://localhost:8080/).",
    ),
    file: Path | None = typer.Option(
        None,
        "--file",
        "-f",
        help="CSV file describing the pace.",
        dir_okay=False,
    ),
    pacing: str | None = typer.Option(
        None,
        "--pacing",
        help="String describing the pace, e.g. '30s@50,1m@200' or '50,100,200'.",
    ),
    duration: str | None = typer.Option(
        None,
        "--duration",
        "-d",
        help="Total duration of the test, e.g. '5m'. Required for curve-fitting.",
    ),
    slope: float = typer.Option(
        DEFAULT_SLOPE,
        "--slope",
        help="Curve-fitting: rate of change of the rate, in hits/s².",
        min=0.0,
    ),
    max_in_flight: int | None = typer.Option(
        None,
        "--max-in-flight",
        help="Maximum outstanding requests (default: $VARLOAD_MAX_IN_FLIGHT or 1000).",
        min=1,
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        help="Per-request timeout in seconds (default: $VARLOAD_TIMEOUT or 30).",
        min=0.001,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Emit structured JSON log lines.",
    ),
) -> None:
    """Attack a URL at a rate that follows a load profile."""
    setup_logging(logging.DEBUG if verbose else logging.INFO, json_format=json_logs)

    def _on_report(report: SegmentReport) -> None:
        console.print(render_segment_report(report))

    try:
        config = load_config()
        target = validate_url(url or config.url)
        kind = PacerKind.parse(pacer)
        total = parse_duration(duration) if duration else None
        profile = load_profile(kind, file=file, pacing=pacing, duration=total)
        attack_pacer = build_pacer(
            kind,
            profile,
            duration=total,
            slope=slope,
            reporter=SegmentTransitionReporter(on_report=_on_report),
        )
    except VarloadError as exc:
        raise _fail(str(exc)) from exc

    console.print(
        Panel(
            f"[bold]Target:[/bold]   {escape(target)}\n"
            f"[bold]Pacer:[/bold]    {attack_pacer.describe()}\n"
            f"[bold]Duration:[/bold] {format_duration(attack_pacer.attack_duration)}\n"
            f"[bold]Profile:[/bold]  {escape(profile.describe())}",
            title="varload",
            border_style="cyan",
        )
    )

    try:
        result = run_attack(
            target,
            attack_pacer,
            max_in_flight=max_in_flight or config.max_in_flight,
            timeout=timeout or config.request_timeout,
        )
    except VarloadError as exc:
        console.print(f"[red]Attack failed:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    console.print(render_text_report(result.summary, title="Attack Summary"))

    if result.stopped_by_pacer:
        console.print(
            f"[yellow]Pacer stopped the attack after {result.hits} hits "
            "to avoid overflowing the next delay.[/yellow]"
        )
    console.print(
        f"[green]Variable load test against {escape(repr(result.url))} completed in "
        f"{format_duration(result.duration_seconds)}.[/green]"
    )
