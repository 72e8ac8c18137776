"""Attack HTTP targets at rates that follow a load profile."""

from __future__ import annotations

from varload.pacing.base import Pace, Pacer
from varload.pacing.curve_fitting import CurveFittingPacer
from varload.pacing.factory import PacerKind, build_pacer, load_profile
from varload.pacing.step_function import StepFunctionPacer
from varload.profile.models import LoadProfile, RateSegment

__version__ = "0.1.0"

__all__ = [
    "CurveFittingPacer",
    "LoadProfile",
    "Pace",
    "Pacer",
    "PacerKind",
    "RateSegment",
    "StepFunctionPacer",
    "build_pacer",
    "load_profile",
]
