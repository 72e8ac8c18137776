"""Tests for pacer selection and profile loading."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from varload._internal.errors import ConfigError, ProfileParseError
from varload.pacing.curve_fitting import CurveFittingPacer
from varload.pacing.factory import PacerKind, build_pacer, load_profile
from varload.pacing.reporter import SegmentTransitionReporter
from varload.pacing.step_function import StepFunctionPacer
from varload.profile.models import RateSegment

if TYPE_CHECKING:
    from pathlib import Path


class TestPacerKind:
    """Tests for PacerKind.parse."""

    def test_known_names(self):
        assert PacerKind.parse("step-function") is PacerKind.STEP_FUNCTION
        assert PacerKind.parse("curve-fitting") is PacerKind.CURVE_FITTING
        assert PacerKind.parse(PacerKind.CURVE_FITTING) is PacerKind.CURVE_FITTING

    def test_unknown_name(self):
        with pytest.raises(ConfigError, match="unknown pacer type: 'linear'"):
            PacerKind.parse("linear")


class TestLoadProfile:
    """Tests for load_profile."""

    def test_step_string(self):
        profile = load_profile("step-function", pacing="5s@10")
        assert profile.segments == (RateSegment(rate=10, duration=5.0),)

    def test_step_file(self, tmp_path: Path):
        path = tmp_path / "profile.csv"
        path.write_text("10,5s\n20,5s\n")
        profile = load_profile(PacerKind.STEP_FUNCTION, file=path, name="from file")
        assert len(profile) == 2
        assert profile.name == "from file"

    def test_curve_string_requires_duration(self):
        with pytest.raises(ConfigError, match="requires a positive duration"):
            load_profile("curve-fitting", pacing="10,100")

    def test_curve_string(self):
        profile = load_profile("curve-fitting", pacing="10,100", duration=20.0)
        assert [s.duration for s in profile.segments] == [10.0, 10.0]

    def test_curve_file(self, tmp_path: Path):
        path = tmp_path / "points.csv"
        path.write_text("10\n20\n30\n")
        profile = load_profile("curve-fitting", file=path, duration=30.0)
        assert [s.rate for s in profile.segments] == [10, 20, 30]

    def test_neither_source(self):
        with pytest.raises(ConfigError, match="must be provided"):
            load_profile("step-function")

    def test_empty_pacing_string_counts_as_missing(self):
        with pytest.raises(ConfigError, match="must be provided"):
            load_profile("curve-fitting", pacing="", duration=10.0)

    def test_both_sources(self, tmp_path: Path):
        path = tmp_path / "profile.csv"
        path.write_text("10,5s\n")
        with pytest.raises(ConfigError, match="cannot both be provided"):
            load_profile("step-function", file=path, pacing="5s@10")

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="cannot read profile file"):
            load_profile("step-function", file=tmp_path / "missing.csv")

    def test_parse_errors_propagate(self):
        with pytest.raises(ProfileParseError):
            load_profile("step-function", pacing="nonsense")


class TestBuildPacer:
    """Tests for build_pacer."""

    def test_step_function(self):
        profile = load_profile("step-function", pacing="5s@10")
        reporter = SegmentTransitionReporter()
        pacer = build_pacer("step-function", profile, reporter=reporter)
        assert isinstance(pacer, StepFunctionPacer)
        assert pacer.reporter is reporter

    def test_curve_fitting(self):
        profile = load_profile("curve-fitting", pacing="10,100", duration=20.0)
        pacer = build_pacer("curve-fitting", profile, duration=20.0, slope=2.0)
        assert isinstance(pacer, CurveFittingPacer)
        assert pacer.slope == 2.0

    def test_curve_fitting_without_duration(self):
        profile = load_profile("curve-fitting", pacing="10,100", duration=20.0)
        with pytest.raises(ConfigError):
            build_pacer("curve-fitting", profile)

    def test_fresh_reporter_per_pacer(self):
        profile = load_profile("step-function", pacing="5s@10")
        first = build_pacer("step-function", profile)
        second = build_pacer("step-function", profile)
        assert first.reporter is not second.reporter
