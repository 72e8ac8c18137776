"""Rate segments and load profiles."""

from __future__ import annotations

from dataclasses import dataclass, field

from varload._internal.durations import format_duration
from varload._internal.errors import ConfigError

DEFAULT_PROFILE_NAME = "Variable Load Test"

# Added in front of every profile to absorb warm-up and measurement skew.
# Existing profile files are written with this pad in mind.
LEAD_IN_SECONDS = 1.0


def _validate_non_negative(value: float, name: str) -> None:
    """Raise :class:`ConfigError` if *value* is negative.

    Args:
        value: The numeric value to validate.
        name: Parameter name used in the error message.

    Raises:
        ConfigError: If *value* is < 0.
    """
    if value < 0:
        msg = f"{name} must be non-negative, got {value}"
        raise ConfigError(msg)


@dataclass(frozen=True)
class RateSegment:
    """One phase of a load profile: *rate* requests/second for *duration*.

    Two segments are equal iff both fields are equal; the pacers rely on
    this exact comparison to detect that the active segment changed.

    Attributes:
        rate: Target requests per second.
        duration: Length of the phase in seconds.
    """

    rate: int
    duration: float

    def __post_init__(self) -> None:
        if isinstance(self.rate, bool) or not isinstance(self.rate, int):
            msg = f"rate must be an integer, got {self.rate!r}"
            raise ConfigError(msg)
        _validate_non_negative(self.rate, "rate")
        _validate_non_negative(self.duration, "duration")

    @property
    def is_unset(self) -> bool:
        """True for the all-zero segment, which never appears in a parsed profile."""
        return self.rate == 0 and self.duration == 0

    def __str__(self) -> str:
        return f"{self.rate} req/s for {format_duration(self.duration)}"


@dataclass(frozen=True)
class LoadProfile:
    """A named, ordered sequence of rate segments.

    Segment order is playback order.  The last segment doubles as the
    remainder rate once the nominal duration has elapsed.

    Args:
        name: Attack name used in logs and reports.
        segments: Segments in playback order.  Must not be empty.

    Raises:
        ConfigError: If *segments* is empty.

    Example::

        profile = LoadProfile(
            name="warmup then peak",
            segments=(RateSegment(rate=10, duration=30.0), RateSegment(rate=50, duration=60.0)),
        )
        profile.total_duration  # 91.0
    """

    name: str = DEFAULT_PROFILE_NAME
    segments: tuple[RateSegment, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "segments", tuple(self.segments))
        if not self.segments:
            msg = f"load profile {self.name!r} must contain at least one rate segment"
            raise ConfigError(msg)

    @property
    def total_duration(self) -> float:
        """Nominal attack length in seconds, including the one-second lead-in."""
        return LEAD_IN_SECONDS + sum(segment.duration for segment in self.segments)

    @property
    def last_segment(self) -> RateSegment:
        """The segment applied for the remainder of the attack."""
        return self.segments[-1]

    def __len__(self) -> int:
        return len(self.segments)

    def describe(self) -> str:
        """Return a human-readable description.

        Returns:
            Header line followed by one line per segment.
        """
        header = (
            f"{self.name}: {len(self.segments)} rates, "
            f"{format_duration(self.total_duration)} total"
        )
        lines = [f"  {i + 1}. {segment}" for i, segment in enumerate(self.segments)]
        return "\n".join([header, *lines])
