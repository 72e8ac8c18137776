"""Compact duration strings (``30s``, ``2m``, ``1m30s``) to seconds and back.

The grammar matches the one used by existing attack CSV files: one or more
``<decimal><unit>`` groups with units ``ns``, ``us``/``µs``, ``ms``, ``s``,
``m`` and ``h``.  A bare ``0`` is also accepted.
"""

from __future__ import annotations

import re

from varload._internal.errors import ProfileParseError

NANOSECONDS_PER_SECOND = 1_000_000_000

_UNIT_NS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": NANOSECONDS_PER_SECOND,
    "m": 60 * NANOSECONDS_PER_SECOND,
    "h": 3600 * NANOSECONDS_PER_SECOND,
}

_GROUP_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_FULL_RE = re.compile(rf"(?:{_GROUP_RE.pattern})+")

# Rounding ladder, coarsest first.
_ROUNDING_UNITS_NS = (
    3600 * NANOSECONDS_PER_SECOND,
    60 * NANOSECONDS_PER_SECOND,
    NANOSECONDS_PER_SECOND,
    1_000_000,
    1_000,
    1,
)


def parse_duration(text: str) -> float:
    """Parse a compact duration string into seconds.

    Args:
        text: Duration such as ``"30s"``, ``"1m30s"``, ``"1.5h"`` or ``"0"``.

    Returns:
        The duration in seconds.

    Raises:
        ProfileParseError: If *text* does not match the duration grammar.
    """
    raw = text.strip()
    if raw == "0":
        return 0.0
    if not raw or _FULL_RE.fullmatch(raw) is None:
        msg = f"invalid duration {text!r}"
        raise ProfileParseError(msg, token=text)

    total_ns = 0.0
    for number, unit in _GROUP_RE.findall(raw):
        total_ns += float(number) * _UNIT_NS[unit]
    return round(total_ns) / NANOSECONDS_PER_SECOND


def to_nanoseconds(seconds: float) -> int:
    """Convert seconds to integer nanoseconds."""
    return round(seconds * NANOSECONDS_PER_SECOND)


def _round_to(ns: int, multiple: int) -> int:
    quotient, remainder = divmod(ns, multiple)
    if remainder * 2 >= multiple:
        quotient += 1
    return quotient * multiple


def _decimal(value: int, unit: int) -> str:
    whole, fraction = divmod(value, unit)
    if not fraction:
        return str(whole)
    width = len(str(unit)) - 1
    return f"{whole}.{str(fraction).rjust(width, '0').rstrip('0')}"


def format_duration(seconds: float) -> str:
    """Render *seconds* rounded to the next most precise unit.

    ``90.1234`` becomes ``"1m30s"``, ``2.5`` stays ``"2.5s"`` and
    ``0.00025`` becomes ``"250µs"``.

    Args:
        seconds: Non-negative duration in seconds.

    Returns:
        A compact duration string.
    """
    ns = max(to_nanoseconds(seconds), 0)
    for i, unit in enumerate(_ROUNDING_UNITS_NS[:-1]):
        if ns >= unit:
            ns = _round_to(ns, _ROUNDING_UNITS_NS[i + 1])
            break

    if ns == 0:
        return "0s"
    if ns < 1_000:
        return f"{ns}ns"
    if ns < 1_000_000:
        return f"{_decimal(ns, 1_000)}µs"
    if ns < NANOSECONDS_PER_SECOND:
        return f"{_decimal(ns, 1_000_000)}ms"

    hours, rest = divmod(ns, 3600 * NANOSECONDS_PER_SECOND)
    minutes, rest = divmod(rest, 60 * NANOSECONDS_PER_SECOND)
    secs = f"{_decimal(rest, NANOSECONDS_PER_SECOND)}s"
    if hours:
        return f"{hours}h{minutes}m{secs}"
    if minutes:
        return f"{minutes}m{secs}"
    return secs
