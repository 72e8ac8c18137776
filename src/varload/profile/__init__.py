"""Load profile model and parsers.

A :class:`LoadProfile` is an ordered sequence of :class:`RateSegment`
values describing the intended load shape, in playback order.
"""

from __future__ import annotations

from varload.profile.models import DEFAULT_PROFILE_NAME, LoadProfile, RateSegment
from varload.profile.parser import (
    duration_per_point,
    parse_curve_csv,
    parse_curve_string,
    parse_step_csv,
    parse_step_string,
)

__all__ = [
    "DEFAULT_PROFILE_NAME",
    "LoadProfile",
    "RateSegment",
    "duration_per_point",
    "parse_curve_csv",
    "parse_curve_string",
    "parse_step_csv",
    "parse_step_string",
]
