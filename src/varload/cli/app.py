"""Main Typer application, the entry point for the ``varload`` CLI."""

from __future__ import annotations

import typer

from varload import __version__
from varload.cli.attack import attack_cmd
from varload.cli.breaker import breaker_cmd

app = typer.Typer(
    name="varload",
    help="Attack an HTTP target at a rate that follows a load profile.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("attack", help="Run a paced attack following a load profile.")(attack_cmd)
app.command("breaker", help="Find the maximum rate a target serves within a latency SLA.")(
    breaker_cmd
)


def _version_callback(value: bool) -> None:
    """Print version and exit.

    Args:
        value: True if --version was passed.
    """
    if value:
        typer.echo(f"varload {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """varload: paced HTTP attacks that follow a load profile."""
