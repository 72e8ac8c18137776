"""Parsers for tabular (CSV) and inline load profile descriptions.

Step-function profiles list ``rate, duration`` rows or ``duration@rate``
tokens.  Curve-fitting profiles list bare rate points; each point is given
an equal share of the total attack duration.

Parsing is all-or-nothing: the first malformed row or token raises
:class:`~varload._internal.errors.ProfileParseError` and no profile is
returned.
"""

from __future__ import annotations

import csv
import io
import math

from varload._internal.durations import parse_duration
from varload._internal.errors import ConfigError, ProfileParseError
from varload.profile.models import DEFAULT_PROFILE_NAME, LoadProfile, RateSegment


def _parse_rate(text: str, *, line: int | None = None) -> int:
    raw = text.strip()
    try:
        rate = int(raw)
    except ValueError:
        msg = f"invalid rate {text!r}{_where(line)}: expected a non-negative integer"
        raise ProfileParseError(msg, token=text, line=line) from None
    if rate < 0:
        msg = f"invalid rate {text!r}{_where(line)}: must be non-negative"
        raise ProfileParseError(msg, token=text, line=line)
    return rate


def _where(line: int | None) -> str:
    return f" on line {line}" if line is not None else ""


def _segment(rate: int, duration: float, token: str, line: int | None) -> RateSegment:
    segment = RateSegment(rate=rate, duration=duration)
    if segment.is_unset:
        msg = f"invalid pacing descriptor {token!r}{_where(line)}: rate and duration are both zero"
        raise ProfileParseError(msg, token=token, line=line)
    return segment


def _rows(text: str) -> list[tuple[int, list[str]]]:
    """Return ``(line_number, cells)`` for every non-blank CSV row."""
    reader = csv.reader(io.StringIO(text), skipinitialspace=True)
    rows = []
    for cells in reader:
        if not any(cell.strip() for cell in cells):
            continue
        rows.append((reader.line_num, cells))
    return rows


def _build(segments: list[RateSegment], name: str, source: str) -> LoadProfile:
    if not segments:
        msg = f"{source} does not contain any rates"
        raise ProfileParseError(msg)
    return LoadProfile(name=name, segments=tuple(segments))


def duration_per_point(total_duration: float, points: int) -> float:
    """Seconds allotted to each rate point of a curve-fitting profile.

    Args:
        total_duration: Total attack duration in seconds.  Must be > 0.
        points: Number of rate points.  Must be >= 1.

    Returns:
        ``ceil(total_duration / points)`` as whole seconds.

    Raises:
        ConfigError: If either argument is out of range.
    """
    if total_duration <= 0:
        msg = f"total duration must be positive, got {total_duration}"
        raise ConfigError(msg)
    if points < 1:
        msg = f"points must be >= 1, got {points}"
        raise ConfigError(msg)
    return float(math.ceil(total_duration / points))


def parse_step_csv(text: str, *, name: str = DEFAULT_PROFILE_NAME) -> LoadProfile:
    """Parse ``rate, duration`` rows into a step-function profile.

    Args:
        text: CSV content, e.g. ``"10,5s\\n20,5s"``.
        name: Profile name.

    Returns:
        The parsed profile.

    Raises:
        ProfileParseError: On a malformed row or an empty document.
    """
    segments: list[RateSegment] = []
    for line, cells in _rows(text):
        raw = ",".join(cells)
        if len(cells) < 2:  # noqa: PLR2004
            msg = f"invalid row {raw!r} on line {line}: expected 'rate, duration'"
            raise ProfileParseError(msg, token=raw, line=line)
        rate = _parse_rate(cells[0], line=line)
        try:
            duration = parse_duration(cells[1])
        except ProfileParseError as exc:
            msg = f"invalid row {raw!r} on line {line}: {exc}"
            raise ProfileParseError(msg, token=raw, line=line) from exc
        segments.append(_segment(rate, duration, raw, line))
    return _build(segments, name, "step-function CSV")


def parse_step_string(text: str, *, name: str = DEFAULT_PROFILE_NAME) -> LoadProfile:
    """Parse ``duration@rate`` tokens such as ``"30s@50,1m@200"``.

    Args:
        text: Comma-separated pacing descriptors.
        name: Profile name.

    Returns:
        The parsed profile.

    Raises:
        ProfileParseError: On a token without ``@``, with an empty side,
            or with an unparseable rate or duration.
    """
    segments: list[RateSegment] = []
    for token in text.split(","):
        if "@" not in token:
            msg = f"invalid pacing descriptor {token!r}: expected 'duration@rate'"
            raise ProfileParseError(msg, token=token)
        duration_text, rate_text = token.split("@", 1)
        if not duration_text.strip() or not rate_text.strip():
            msg = f"invalid pacing descriptor {token!r}: expected 'duration@rate'"
            raise ProfileParseError(msg, token=token)
        try:
            duration = parse_duration(duration_text)
            rate = _parse_rate(rate_text)
        except ProfileParseError as exc:
            msg = f"invalid pacing descriptor {token!r}: {exc}"
            raise ProfileParseError(msg, token=token) from exc
        segments.append(_segment(rate, duration, token, None))
    return _build(segments, name, "pacing string")


def _spread(rates: list[int], total_duration: float, name: str, source: str) -> LoadProfile:
    if not rates:
        msg = f"{source} does not contain any rates"
        raise ProfileParseError(msg)
    duration = duration_per_point(total_duration, len(rates))
    return _build([RateSegment(rate=r, duration=duration) for r in rates], name, source)


def parse_curve_csv(
    text: str,
    total_duration: float,
    *,
    name: str = DEFAULT_PROFILE_NAME,
) -> LoadProfile:
    """Parse one rate point per row; durations come from an even split.

    Only the first column is read.

    Args:
        text: CSV content, e.g. ``"10\\n100"``.
        total_duration: Total attack duration in seconds.
        name: Profile name.

    Returns:
        The parsed profile, every point lasting
        :func:`duration_per_point` seconds.

    Raises:
        ProfileParseError: On a non-numeric rate or an empty document.
    """
    rates = [_parse_rate(cells[0], line=line) for line, cells in _rows(text)]
    return _spread(rates, total_duration, name, "curve-fitting CSV")


def parse_curve_string(
    text: str,
    total_duration: float,
    *,
    name: str = DEFAULT_PROFILE_NAME,
) -> LoadProfile:
    """Parse comma-separated rate points such as ``"50,100,200"``.

    Args:
        text: Comma-separated integers.
        total_duration: Total attack duration in seconds.
        name: Profile name.

    Returns:
        The parsed profile with evenly split durations.

    Raises:
        ProfileParseError: If any token is not a non-negative integer.
    """
    rates: list[int] = []
    for token in text.split(","):
        try:
            rates.append(_parse_rate(token))
        except ProfileParseError as exc:
            msg = f"invalid pacing descriptor {token!r}: {exc}"
            raise ProfileParseError(msg, token=token) from exc
    return _spread(rates, total_duration, name, "pacing string")
