"""Single-file review: agents -> validator -> report."""

import asyncio
import time
from datetime import datetime, timezone
from typing import Optional

from ..config import ReviewConfig, DEFAULT_CONFIG
from ..models import Report, ReportMetadata, SeverityCounts, ValidationResult
from ..tools import AnalysisEngine
from ..utils import elapsed_ms, get_logger
from .agents import PrimaryAgent, SecurityAgent
from .risk import file_risk_score, sort_by_severity
from .validator import ReviewSession, SelfCorrectionValidator


def build_report(
    result: ValidationResult,
    code: str,
    language: str,
    latency_ms: int,
) -> Report:
    """
    Turn a validated result into the terminal Report for one file.

    Issues are re-sorted by severity (critical first, stable for ties) and
    counted into the summary histogram and risk score.
    """
    issues = sort_by_severity(result.issues)
    counts = SeverityCounts.from_issues(issues)

    metadata = ReportMetadata(
        language=language,
        latency_ms=latency_ms,
        confidence=result.confidence,
        iterations=result.iterations,
        timestamp=datetime.now(timezone.utc).isoformat(),
        code_lines=len(code.split("\n")),
        code_length=len(code),
        self_correction_applied=result.self_correction_applied,
    )

    return Report(
        metadata=metadata,
        counts=counts,
        risk_score=file_risk_score(counts),
        issues=tuple(issues),
        validation_notes=result.validation_notes or result.summary,
        validation_warning=result.validation_warning,
    )


async def review_code(
    code: str,
    language: str,
    engine: AnalysisEngine,
    config: Optional[ReviewConfig] = None,
    validator: Optional[SelfCorrectionValidator] = None,
    session: Optional[ReviewSession] = None,
) -> Report:
    """
    Run the full multi-agent review on one piece of code.

    Both agents run concurrently. A failure in either first-pass call
    propagates with its original error and cancels the other one;
    second-pass failures are absorbed by the validator.

    Args:
        code: Source text to review
        language: Language id
        engine: Analysis engine shared by all agents
        config: Review configuration
        validator: Validator to reuse across calls (keeps its session count)
        session: Iteration counter for this review session

    Returns:
        Report with severity-sorted issues and risk score

    Raises:
        ValueError: If code is empty
    """
    if not code or not code.strip():
        raise ValueError("No code to review")

    config = config or DEFAULT_CONFIG
    validator = validator or SelfCorrectionValidator(engine, config)
    logger = get_logger()
    start = time.perf_counter()

    line_count = code.count("\n") + 1
    logger.info(f"Starting multi-agent code review ({language}, {line_count} lines)")

    tasks = [
        asyncio.create_task(PrimaryAgent(engine, config).analyze(code, language)),
        asyncio.create_task(SecurityAgent(engine, config).analyze(code, language)),
    ]
    try:
        primary, security = await asyncio.gather(*tasks)
    except BaseException:
        # First failure wins; the sibling call is cancelled and collected
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    logger.info(
        f"Agents completed: {len(primary.issues)} general issue(s) "
        f"(confidence: {primary.confidence}%), {len(security.issues)} security issue(s)"
    )

    validated = await validator.validate(primary, security, code, language, session=session)
    if validated.self_correction_applied:
        logger.info(f"Self-correction applied ({validated.iterations} iteration(s))")

    report = build_report(validated, code, language, elapsed_ms(start))
    logger.info(
        f"Review complete: {len(report.issues)} issue(s), "
        f"confidence {report.metadata.confidence}%, risk {report.risk_score}/100"
    )
    return report


# Synchronous wrapper for non-async contexts
def review_code_sync(
    code: str,
    language: str,
    engine: AnalysisEngine,
    config: Optional[ReviewConfig] = None,
) -> Report:
    """Synchronous wrapper for review_code."""
    return asyncio.run(review_code(code, language, engine, config))
