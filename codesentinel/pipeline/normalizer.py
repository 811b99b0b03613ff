"""Response normalizer: free-form model text -> structured results.

Structured extraction is tried first (a fenced JSON block, then the whole
text as JSON). When both fail the heuristic line parser takes over and the
result carries a fixed, low confidence so callers can tell the two apart.
"""

import json
import math
import re
from typing import Any, Dict, List, Optional

from ..models import (
    AnalysisResult,
    Issue,
    IssueKind,
    IssueSource,
    SecondPassResult,
    Severity,
    VerificationRecord,
)
from ..utils import get_logger


FALLBACK_CONFIDENCE = 70
SECOND_PASS_FALLBACK_CONFIDENCE = 60

_FENCED_BLOCK = re.compile(r"```[ \t]*(?:json|JSON)?[ \t]*\r?\n?(.*?)```", re.DOTALL)
_SEVERITY_KEYWORD = re.compile(r"\b(critical|high|medium|low)\b", re.IGNORECASE)

logger = get_logger("codesentinel.normalizer")


def normalize(raw_text: str, source: Optional[IssueSource] = None) -> AnalysisResult:
    """
    Convert raw model output into an AnalysisResult. Never raises.

    Args:
        raw_text: The engine's reply
        source: Agent tag stamped on every extracted issue

    Returns:
        AnalysisResult; heuristic results always have confidence 70
    """
    raw_text = raw_text if isinstance(raw_text, str) else str(raw_text or "")

    payload = _extract_json(raw_text, ("issues", "vulnerabilities"))
    if payload is not None:
        return _from_payload(payload, source)

    logger.debug("JSON parse failed, using heuristic text parsing")
    issues = _parse_text(raw_text, source)
    return AnalysisResult(
        issues=tuple(issues),
        confidence=FALLBACK_CONFIDENCE,
        summary=f"Analysis completed ({len(issues)} issue(s) found)",
    )


def normalize_second_pass(raw_text: str) -> SecondPassResult:
    """
    Convert the validator's re-analysis reply into a SecondPassResult.

    Same JSON strategy as normalize(); the fallback has no verdicts, no new
    issues and confidence 60. Never raises.
    """
    raw_text = raw_text if isinstance(raw_text, str) else str(raw_text or "")

    payload = _extract_json(raw_text, ("verifiedIssues", "newIssues"))
    if payload is None:
        logger.warning("Failed to parse validation response, using fallback")
        return SecondPassResult(
            confidence=SECOND_PASS_FALLBACK_CONFIDENCE,
            validation_notes="Validation parsing failed",
        )

    records = [
        VerificationRecord.from_dict(item)
        for item in _dict_items(payload.get("verifiedIssues"))
    ]
    new_issues = [
        Issue.from_dict(item, source=IssueSource.VALIDATOR)
        for item in _dict_items(payload.get("newIssues"))
    ]
    notes = payload.get("validationNotes")
    return SecondPassResult(
        verified_issues=tuple(records),
        new_issues=tuple(new_issues),
        confidence=clamp_confidence(
            payload.get("confidence"), SECOND_PASS_FALLBACK_CONFIDENCE
        ),
        validation_notes=str(notes) if notes is not None else "",
        structured=True,
    )


def clamp_confidence(value: Any, default: int = FALLBACK_CONFIDENCE) -> int:
    """Coerce a model-reported confidence into an int in [0, 100]."""
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if not math.isfinite(number):
        return default
    return max(0, min(100, int(number + 0.5)))


def _extract_json(raw_text: str, keys) -> Optional[Dict[str, Any]]:
    """Return the first JSON object carrying one of `keys`, or None."""
    candidates = [match.group(1) for match in _FENCED_BLOCK.finditer(raw_text)]
    candidates.append(raw_text)

    for candidate in candidates:
        try:
            parsed = json.loads(candidate.strip())
        except (ValueError, RecursionError):
            # malformed, or nested deeper than the parser allows
            continue
        if not isinstance(parsed, dict):
            continue
        for key in keys:
            if isinstance(parsed.get(key), list):
                return parsed
    return None


def _from_payload(payload: Dict[str, Any], source: Optional[IssueSource]) -> AnalysisResult:
    if isinstance(payload.get("issues"), list):
        items = _dict_items(payload["issues"])
    else:
        items = [_from_vulnerability(v) for v in _dict_items(payload.get("vulnerabilities"))]

    issues = [Issue.from_dict(item, source=source) for item in items]
    summary = payload.get("summary")
    return AnalysisResult(
        issues=tuple(issues),
        confidence=clamp_confidence(payload.get("confidence")),
        summary=str(summary) if summary is not None else "",
    )


def _from_vulnerability(item: Dict[str, Any]) -> Dict[str, Any]:
    """Reshape a security-style finding into the issue shape."""
    data = dict(item)
    vuln_type = data.pop("type", None)
    if not data.get("title"):
        data["title"] = vuln_type or data.get("description", "")
    data.setdefault("kind", IssueKind.SECURITY)
    return data


def _dict_items(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _parse_text(raw_text: str, source: Optional[IssueSource]) -> List[Issue]:
    """Heuristic fallback: every line naming a severity opens a new issue."""
    issues: List[Issue] = []
    current: Optional[Dict[str, Any]] = None

    for line in raw_text.split("\n"):
        trimmed = line.strip()
        match = _SEVERITY_KEYWORD.search(trimmed)

        if match:
            if current:
                issues.append(_flush(current, source))
            current = {
                "severity": Severity.coerce(match.group(1)),
                "title": trimmed[:100],
                "description": [],
            }
        elif current and len(trimmed) > 10:
            current["description"].append(trimmed)

    if current:
        issues.append(_flush(current, source))

    if not issues:
        issues.append(Issue(
            title="Code Analysis",
            kind=IssueKind.GENERAL,
            severity=Severity.MEDIUM,
            description=raw_text[:500],
            suggestion="Review the analysis above",
            source=source,
        ))

    return issues


def _flush(current: Dict[str, Any], source: Optional[IssueSource]) -> Issue:
    return Issue(
        title=current["title"],
        kind=IssueKind.GENERAL,
        severity=current["severity"],
        description=" ".join(current["description"]),
        source=source,
    )
