"""The pacer interface shared by the step-function and curve-fitting pacers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from varload._internal.durations import NANOSECONDS_PER_SECOND, to_nanoseconds

if TYPE_CHECKING:
    from varload.pacing.locator import Location
    from varload.pacing.reporter import SegmentTransitionReporter
    from varload.profile.models import LoadProfile

# Largest delay the dispatch engine can represent, in nanoseconds.
MAX_DELAY_NS = 2**63 - 1

# Delay returned while the active rate is zero and no segment end is known.
IDLE_POLL_NS = NANOSECONDS_PER_SECOND


@dataclass(frozen=True)
class Pace:
    """Decision returned by :meth:`Pacer.pace`.

    Attributes:
        delay_ns: Nanoseconds to wait before the next hit.  Zero or
            negative means dispatch immediately.
        stop: True when the attack must end now.
    """

    delay_ns: int
    stop: bool = False

    @property
    def delay(self) -> float:
        """Delay in seconds, never negative."""
        return max(self.delay_ns, 0) / NANOSECONDS_PER_SECOND

    @property
    def immediate(self) -> bool:
        """True when the next hit should go out without waiting."""
        return self.delay_ns <= 0


DISPATCH_NOW = Pace(delay_ns=0)
STOP = Pace(delay_ns=0, stop=True)


class Pacer(ABC):
    """Decides how long to wait before each hit of an attack.

    A pacer is created for exactly one attack and carries that attack's
    :class:`~varload.pacing.reporter.SegmentTransitionReporter`.  ``pace``
    may be called concurrently from several dispatch workers; it never
    blocks or performs I/O beyond logging.
    """

    @property
    @abstractmethod
    def profile(self) -> LoadProfile:
        """The load profile being played back."""

    @property
    @abstractmethod
    def reporter(self) -> SegmentTransitionReporter:
        """Transition reporter owning this attack's runtime state."""

    @property
    @abstractmethod
    def attack_duration(self) -> float:
        """Seconds the dispatch engine should run the attack for."""

    @abstractmethod
    def pace(self, elapsed: float, hits: int) -> Pace:
        """Return the wait before the next hit.

        Args:
            elapsed: Seconds since the attack started.
            hits: Hits dispatched so far.

        Returns:
            The :class:`Pace` decision.
        """

    @abstractmethod
    def describe(self) -> str:
        """Return a short human-readable description for logs and reports."""


def wait_out(location: Location, elapsed: float) -> Pace:
    """Sleep through a zero-rate stretch of the profile.

    Waits until the active segment ends, or polls once a second when the
    zero rate is the remainder rate.
    """
    if location.remainder:
        return Pace(delay_ns=IDLE_POLL_NS)
    return Pace(delay_ns=max(to_nanoseconds(location.end - elapsed), 1))
