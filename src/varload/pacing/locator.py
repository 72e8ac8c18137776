"""Find the active segment of a load profile for a given elapsed time."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from varload.profile.models import LEAD_IN_SECONDS

if TYPE_CHECKING:
    from varload.profile.models import LoadProfile, RateSegment


@dataclass(frozen=True)
class Location:
    """Where an elapsed time falls within a profile.

    Attributes:
        segment: The active segment.
        index: Position of *segment* in the profile.
        end: Elapsed seconds at which *segment* stops being active, or
            ``math.inf`` for the remainder rate.
        remainder: True once the nominal duration has passed and the last
            segment's rate applies indefinitely.
    """

    segment: RateSegment
    index: int
    end: float
    remainder: bool = False


def locate(profile: LoadProfile, elapsed: float) -> Location:
    """Return the segment active at *elapsed* seconds into the attack.

    Segment boundaries are accumulated from the one-second lead-in; the first
    segment whose running end is ``>= elapsed`` wins.  When the elapsed time
    is past every boundary, the last segment is returned with
    ``remainder=True``.  An all-zero segment never matches.

    Args:
        profile: Profile to search.
        elapsed: Seconds since the attack started.

    Returns:
        The active :class:`Location`.
    """
    aggregate = LEAD_IN_SECONDS
    for index, segment in enumerate(profile.segments):
        aggregate += segment.duration
        if elapsed <= aggregate and not segment.is_unset:
            return Location(segment=segment, index=index, end=aggregate)

    return Location(
        segment=profile.last_segment,
        index=len(profile.segments) - 1,
        end=math.inf,
        remainder=True,
    )
