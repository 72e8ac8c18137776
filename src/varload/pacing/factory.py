"""Pacer selection: pick a strategy by name, parse its profile, build it."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from varload._internal.errors import ConfigError
from varload.pacing.curve_fitting import DEFAULT_SLOPE, CurveFittingPacer
from varload.pacing.step_function import StepFunctionPacer
from varload.profile.models import DEFAULT_PROFILE_NAME
from varload.profile.parser import (
    parse_curve_csv,
    parse_curve_string,
    parse_step_csv,
    parse_step_string,
)

if TYPE_CHECKING:
    from varload.pacing.base import Pacer
    from varload.pacing.reporter import SegmentTransitionReporter
    from varload.profile.models import LoadProfile


class PacerKind(str, Enum):
    """The available pacing strategies, keyed by their CLI name."""

    STEP_FUNCTION = "step-function"
    CURVE_FITTING = "curve-fitting"

    @classmethod
    def parse(cls, name: str | PacerKind) -> PacerKind:
        """Return the kind called *name*.

        Raises:
            ConfigError: If *name* is not a known pacer.
        """
        try:
            return cls(name)
        except ValueError:
            choices = ", ".join(kind.value for kind in cls)
            msg = f"unknown pacer type: {name!r} (choose from: {choices})"
            raise ConfigError(msg) from None


def _require_duration(kind: PacerKind, duration: float | None) -> float:
    if duration is None or duration <= 0:
        msg = f"{kind.value!r} pacer requires a positive duration"
        raise ConfigError(msg)
    return duration


def load_profile(
    kind: PacerKind | str,
    *,
    file: str | Path | None = None,
    pacing: str | None = None,
    duration: float | None = None,
    name: str = DEFAULT_PROFILE_NAME,
) -> LoadProfile:
    """Parse a profile from exactly one of a CSV file or an inline string.

    Args:
        kind: Pacing strategy; decides the grammar.
        file: Path to a CSV profile.
        pacing: Inline pacing string.
        duration: Total attack duration in seconds.  Required for
            curve-fitting, ignored for step-function.
        name: Profile name.

    Returns:
        The parsed profile.

    Raises:
        ConfigError: If neither or both sources are given, the pacer name is
            unknown, the file cannot be read, or curve-fitting lacks a
            duration.
        ProfileParseError: If the description is malformed.
    """
    kind = PacerKind.parse(kind)
    if file is not None and pacing:
        msg = "a profile file and a pacing string cannot both be provided"
        raise ConfigError(msg)

    if file is not None:
        try:
            text = Path(file).read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"cannot read profile file {str(file)!r}: {exc.strerror or exc}"
            raise ConfigError(msg) from exc
    elif pacing:
        text = pacing
    else:
        msg = "a profile file or a pacing string must be provided"
        raise ConfigError(msg)

    if kind is PacerKind.STEP_FUNCTION:
        if file is not None:
            return parse_step_csv(text, name=name)
        return parse_step_string(text, name=name)

    total = _require_duration(kind, duration)
    if file is not None:
        return parse_curve_csv(text, total, name=name)
    return parse_curve_string(text, total, name=name)


def build_pacer(
    kind: PacerKind | str,
    profile: LoadProfile,
    *,
    duration: float | None = None,
    slope: float = DEFAULT_SLOPE,
    reporter: SegmentTransitionReporter | None = None,
) -> Pacer:
    """Construct the pacer for *kind*.

    Args:
        kind: Pacing strategy.
        profile: Parsed load profile.
        duration: Total attack duration; required for curve-fitting.
        slope: Curve-fitting slope in hits per second².
        reporter: Transition reporter for the attack.  Each attack must
            get its own; a fresh one is created when omitted.

    Returns:
        A ready-to-use pacer.

    Raises:
        ConfigError: If the kind is unknown or a required value is missing.
    """
    kind = PacerKind.parse(kind)
    if kind is PacerKind.STEP_FUNCTION:
        return StepFunctionPacer(profile, reporter=reporter)
    return CurveFittingPacer(
        profile,
        duration=_require_duration(kind, duration),
        slope=slope,
        reporter=reporter,
    )
