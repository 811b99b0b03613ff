"""Self-correction validator: confidence gate, second pass and reconciliation."""

import time
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ..config import ReviewConfig, DEFAULT_CONFIG
from ..models import AnalysisResult, Issue, IssueSource, ValidationResult
from ..tools import AnalysisEngine
from ..utils import elapsed_ms, get_logger, record_metric
from .confidence import ConfidenceAggregator
from .normalizer import normalize_second_pass
from .reconcile import reconcile_issues
from .risk import sort_by_severity


REANALYSIS_FAILED_WARNING = "Re-analysis failed, using initial results"

SECOND_PASS_SYSTEM_PROMPT = """You are a senior code reviewer performing SECOND-PASS verification.

A previous analysis found these issues:
{previous_issues}

Your task:
1. **Verify** if these issues are TRUE POSITIVES or FALSE POSITIVES
2. **Find MISSED issues** that the first pass didn't catch
3. **Re-assess severity** levels
4. **Provide higher confidence** by cross-checking with code context

Be more thorough than the first pass. Question each finding.

Return JSON:
{{
  "verifiedIssues": [
    {{
      "original": "Issue title from first pass",
      "verified": true,
      "reason": "Why it's valid or invalid",
      "correctedSeverity": "critical|high|medium|low"
    }}
  ],
  "newIssues": [
    {{
      "type": "bug|security|performance|style",
      "severity": "critical|high|medium|low",
      "line": 10,
      "title": "New issue found",
      "description": "Detailed explanation"
    }}
  ],
  "confidence": 95,
  "validationNotes": "Overall assessment"
}}"""


class ValidationState(Enum):
    """Terminal states of one validate() call."""
    MERGED = "merged"                   # Confident enough, or validator disabled
    RECONCILED = "reconciled"           # Second pass succeeded
    DEGRADED_MERGED = "degraded_merged"  # Second pass failed


@dataclass
class ReviewSession:
    """
    Per-session state shared across validate() calls.

    `iterations` counts second passes and only grows until reset().
    `last_state` is the state the latest validate() on this session ended in.
    """
    iterations: int = 0
    last_state: Optional[ValidationState] = None

    def reset(self) -> None:
        self.iterations = 0
        self.last_state = None


class SelfCorrectionValidator:
    """
    Validates combined agent results and re-analyzes when confidence is low.

    Features:
    - Confidence gate against config.confidence_threshold
    - Second, more skeptical engine pass over the first-pass findings
    - Reconciliation of verdicts and new findings
    - Degraded fallback when the second pass fails
    """

    def __init__(
        self,
        engine: AnalysisEngine,
        config: Optional[ReviewConfig] = None,
        aggregator: Optional[ConfidenceAggregator] = None,
    ):
        self.engine = engine
        self.config = config or DEFAULT_CONFIG
        self.aggregator = aggregator or ConfidenceAggregator()
        self.session = ReviewSession()
        self.logger = get_logger("codesentinel.validator")

    @property
    def last_state(self) -> Optional[ValidationState]:
        """State reached by the latest validate() on the default session."""
        return self.session.last_state

    def reset_counter(self) -> None:
        """Start a new review session on the default session."""
        self.session.reset()

    async def validate(
        self,
        primary: AnalysisResult,
        security: AnalysisResult,
        code: str,
        language: str,
        session: Optional[ReviewSession] = None,
    ) -> ValidationResult:
        """
        Validate results and trigger re-analysis if confidence is low.

        Args:
            primary: PrimaryAgent result
            security: SecurityAgent result
            code: The code that was analyzed
            language: Language id
            session: Iteration counter to use (defaults to this validator's own)

        Returns:
            ValidationResult; the state reached is stored on the session
        """
        if session is None:
            session = self.session
        self.logger.debug("Validator validating results...")

        if not self.config.validator_agent_enabled:
            self.logger.debug("Validator Agent disabled, skipping validation")
            merged = self._merge(primary, security, session)
            return self._finish(session, ValidationState.MERGED, merged)

        overall = self.aggregator.combine([primary.confidence, security.confidence])
        threshold = self.config.confidence_threshold
        self.logger.debug(f"Overall confidence: {overall}%, Threshold: {threshold}%")

        if overall >= threshold:
            self.logger.info(f"Confidence {overall}% meets threshold, validation passed")
            merged = self._merge(primary, security, session)
            return self._finish(session, ValidationState.MERGED, merged)

        self.logger.warning(
            f"Confidence {overall}% below threshold {threshold}% - triggering self-correction"
        )
        start = time.perf_counter()

        try:
            result = await self._reanalyze(primary, security, code, language, overall, session)
        except Exception as e:
            self.logger.error(f"Re-analysis failed, returning original results: {e}")
            merged = self._merge(primary, security, session)
            return self._finish(
                session,
                ValidationState.DEGRADED_MERGED,
                ValidationResult(
                    issues=merged.issues,
                    confidence=merged.confidence,
                    summary=merged.summary,
                    iterations=merged.iterations,
                    validation_warning=REANALYSIS_FAILED_WARNING,
                ),
            )

        record_metric(
            "ValidatorAgent.validate",
            elapsed_ms(start),
            initial_confidence=overall,
            final_confidence=result.confidence,
            reanalysis_triggered=True,
        )
        return self._finish(session, ValidationState.RECONCILED, result)

    def _finish(
        self,
        session: ReviewSession,
        state: ValidationState,
        result: ValidationResult,
    ) -> ValidationResult:
        session.last_state = state
        return result

    async def _reanalyze(
        self,
        primary: AnalysisResult,
        security: AnalysisResult,
        code: str,
        language: str,
        previous_confidence: int,
        session: ReviewSession,
    ) -> ValidationResult:
        """Second pass with a skeptical prompt; raises if the engine fails."""
        first_pass = _tagged(primary, security)

        session.iterations += 1
        self.logger.info(f"Self-correction loop iteration {session.iterations}...")

        system_prompt = SECOND_PASS_SYSTEM_PROMPT.format(
            previous_issues=format_previous_issues(first_pass),
        )
        prompt = (
            f"RE-ANALYZE this {language} code with higher scrutiny:\n"
            f"```{language}\n{code}\n```\n\n"
            f"Previous confidence was only {previous_confidence}%. "
            f"Provide more thorough analysis."
        )

        response = await self.engine.generate(
            prompt,
            system_prompt=system_prompt,
            max_tokens=self.config.max_tokens,
        )
        second = normalize_second_pass(response)

        issues = reconcile_issues(first_pass, second.verified_issues, second.new_issues)
        confirmed = sum(1 for record in second.verified_issues if record.verified)

        return ValidationResult(
            issues=tuple(issues),
            confidence=second.confidence,
            summary=(
                f"Re-analyzed: {len(issues)} issues confirmed "
                f"({confirmed} verified, {len(second.new_issues)} newly found)"
            ),
            self_correction_applied=True,
            iterations=session.iterations,
            validation_notes=second.validation_notes or None,
        )

    def _merge(
        self,
        primary: AnalysisResult,
        security: AnalysisResult,
        session: ReviewSession,
    ) -> ValidationResult:
        issues = sort_by_severity(_tagged(primary, security))
        return ValidationResult(
            issues=tuple(issues),
            confidence=self.aggregator.combine([primary.confidence, security.confidence]),
            summary=f"Found {len(issues)} issue(s) across all agents",
            self_correction_applied=False,
            iterations=session.iterations,
        )


def _tagged(primary: AnalysisResult, security: AnalysisResult) -> List[Issue]:
    return (
        [issue.with_source(IssueSource.PRIMARY) for issue in primary.issues]
        + [issue.with_source(IssueSource.SECURITY) for issue in security.issues]
    )


def format_previous_issues(issues: List[Issue]) -> str:
    """Bullet list of first-pass findings for the second-pass prompt."""
    if not issues:
        return "- (none)"
    lines = []
    for issue in issues:
        line = f"- [{issue.severity.value}] {issue.title}"
        if issue.description:
            line += f": {issue.description}"
        lines.append(line)
    return "\n".join(lines)
