"""Tests for the single-file review pipeline and report builder."""

import asyncio

import pytest

from codesentinel.config import ReviewConfig
from codesentinel.models import Issue, Severity, ValidationResult
from codesentinel.pipeline.review import build_report, review_code
from codesentinel.pipeline.validator import SelfCorrectionValidator
from codesentinel.tools import EngineError


CODE = "def div(a, b):\n    return a / b\n"


class TestBuildReport:
    """Tests for the Report builder."""

    def test_issues_sorted_critical_first(self):
        """Given [low, critical, medium, high], report should order critical..low."""
        # Given
        result = ValidationResult(
            issues=(
                Issue(title="l", severity=Severity.LOW),
                Issue(title="c", severity=Severity.CRITICAL),
                Issue(title="m", severity=Severity.MEDIUM),
                Issue(title="h", severity=Severity.HIGH),
            ),
            confidence=85,
        )

        # When
        report = build_report(result, CODE, "python", latency_ms=12)

        # Then
        assert [i.title for i in report.issues] == ["c", "h", "m", "l"]
        assert report.risk_score == 80
        assert report.counts.critical == 1
        assert report.metadata.latency_ms == 12
        assert report.metadata.code_lines == 3

    def test_to_dict_shape(self):
        """The JSON shape should be keyed by metadata, summary and issues."""
        # Given
        result = ValidationResult(
            issues=(Issue(title="h", severity=Severity.HIGH),),
            confidence=70,
            summary="Found 1 issue(s) across all agents",
            validation_warning="Re-analysis failed, using initial results",
        )

        # When
        data = build_report(result, CODE, "python", latency_ms=5).to_dict()

        # Then
        assert set(data) >= {"metadata", "summary", "issues"}
        assert data["summary"]["high"] == 1
        assert data["summary"]["riskScore"] == 25
        assert data["summary"]["totalIssues"] == 1
        assert data["metadata"]["confidence"] == 70
        assert data["validationWarning"] == "Re-analysis failed, using initial results"
        assert data["validationNotes"] == "Found 1 issue(s) across all agents"


class TestReviewCode:
    """End-to-end single-file review with a scripted engine."""

    def test_confident_review(self, make_engine, make_analysis, config):
        """Given confident agents, should produce a merged report without a second pass."""
        # Given
        engine = make_engine(
            primary=make_analysis(
                [{"type": "bug", "severity": "high", "title": "Division by zero"}], confidence=90),
            security=make_analysis([], confidence=96),
        )

        # When
        report = asyncio.run(review_code(CODE, "python", engine, config))

        # Then
        assert report.metadata.confidence == 93
        assert report.metadata.self_correction_applied is False
        assert [i.title for i in report.issues] == ["Division by zero"]
        assert len(engine.calls) == 2

    def test_low_confidence_triggers_self_correction(self, make_engine, wrap_fenced, config):
        """Given heuristic (70) agent replies below threshold, should re-analyze."""
        # Given
        engine = make_engine(
            primary="HIGH: division by zero when b == 0",
            security="Nothing obviously exploitable here.",
            second_pass=wrap_fenced(
                '{"verifiedIssues": [], "newIssues": [], "confidence": 88, '
                '"validationNotes": "fine"}'
            ),
        )

        # When
        report = asyncio.run(review_code(CODE, "python", engine, config))

        # Then
        assert report.metadata.self_correction_applied is True
        assert report.metadata.iterations == 1
        assert report.metadata.confidence == 88
        assert report.validation_notes == "fine"
        assert len(engine.calls_for("second_pass")) == 1

    def test_first_pass_failure_propagates(self, make_engine, make_analysis, config):
        """Given a failing first-pass agent, the original error should reach the caller."""
        engine = make_engine(
            primary=EngineError("quota exceeded"),
            security=make_analysis([], confidence=90),
        )

        with pytest.raises(EngineError, match="quota exceeded"):
            asyncio.run(review_code(CODE, "python", engine, config))

    def test_failure_cancels_the_other_agent(self, make_engine, config):
        """Given the general agent failing first, the slower security call should be cancelled."""
        # Given
        engine = make_engine(
            primary=EngineError("primary boom"),
            security=EngineError("security boom"),
            delays={"security": 0.05},
        )

        # When
        with pytest.raises(EngineError, match="primary boom"):
            asyncio.run(review_code(CODE, "python", engine, config))

        # Then
        assert engine.cancelled == ["security"]
        assert engine.in_flight == 0

    def test_agents_run_concurrently(self, make_engine, make_analysis, config):
        """Both first-pass calls should be in flight at the same time."""
        # Given
        engine = make_engine(
            primary=make_analysis([], confidence=90),
            security=make_analysis([], confidence=90),
            delays={"primary": 0.02, "security": 0.02},
        )

        # When
        asyncio.run(review_code(CODE, "python", engine, config))

        # Then
        assert engine.peak_in_flight == 2

    def test_empty_code_is_rejected(self, make_engine, config):
        with pytest.raises(ValueError):
            asyncio.run(review_code("   \n", "python", make_engine(), config))

    def test_shared_validator_accumulates_iterations(self, make_engine, config):
        """Reusing a validator across reviews keeps counting second passes."""
        # Given
        engine = make_engine(
            primary="just prose",
            security="more prose",
            second_pass=["also prose", "still prose"],
        )
        validator = SelfCorrectionValidator(engine, config)

        # When
        first = asyncio.run(review_code(CODE, "python", engine, config, validator=validator))
        second = asyncio.run(review_code(CODE, "python", engine, config, validator=validator))

        # Then
        assert first.metadata.iterations == 1
        assert second.metadata.iterations == 2


class TestReviewConfig:
    """Tests for configuration loading."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("CODESENTINEL_CONFIDENCE_THRESHOLD", "65")
        monkeypatch.setenv("CODESENTINEL_VALIDATOR_AGENT", "false")
        monkeypatch.setenv("CODESENTINEL_MAX_PARALLEL_FILES", "3")

        config = ReviewConfig.from_env()

        assert config.confidence_threshold == 65
        assert config.validator_agent_enabled is False
        assert config.security_agent_enabled is True
        assert config.max_parallel_files == 3

    def test_values_are_clamped(self):
        config = ReviewConfig(confidence_threshold=150, max_parallel_files=0)

        assert config.confidence_threshold == 100
        assert config.max_parallel_files == 1
