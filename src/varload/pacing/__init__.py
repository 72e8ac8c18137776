"""Pacing strategies that turn a load profile into per-hit delays.

Two strategies exist: :class:`StepFunctionPacer` (constant rate within each
segment) and :class:`CurveFittingPacer` (linearly growing rate).  Both
answer :meth:`Pacer.pace` with a :class:`Pace` decision.
"""

from __future__ import annotations

from varload.pacing.base import MAX_DELAY_NS, Pace, Pacer
from varload.pacing.curve_fitting import CurveFittingPacer
from varload.pacing.factory import PacerKind, build_pacer, load_profile
from varload.pacing.locator import Location, locate
from varload.pacing.reporter import PacerRuntimeState, SegmentTransitionReporter
from varload.pacing.step_function import StepFunctionPacer

__all__ = [
    "MAX_DELAY_NS",
    "CurveFittingPacer",
    "Location",
    "Pace",
    "Pacer",
    "PacerKind",
    "PacerRuntimeState",
    "SegmentTransitionReporter",
    "StepFunctionPacer",
    "build_pacer",
    "load_profile",
    "locate",
]
