"""Data models for agent and validator outputs."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .issue import Issue, Severity


@dataclass(frozen=True)
class AnalysisResult:
    """Output of one agent's one call. Issues keep discovery order."""
    issues: Tuple[Issue, ...] = ()
    confidence: int = 0
    summary: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "issues": [issue.to_dict() for issue in self.issues],
            "confidence": self.confidence,
            "summary": self.summary,
        }


@dataclass(frozen=True)
class ValidationResult(AnalysisResult):
    """Validator output: an AnalysisResult plus self-correction bookkeeping."""
    self_correction_applied: bool = False
    iterations: int = 0
    validation_notes: Optional[str] = None
    validation_warning: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["selfCorrectionApplied"] = self.self_correction_applied
        data["iterations"] = self.iterations
        if self.validation_notes is not None:
            data["validationNotes"] = self.validation_notes
        if self.validation_warning is not None:
            data["validationWarning"] = self.validation_warning
        return data


@dataclass(frozen=True)
class VerificationRecord:
    """Second-pass verdict on one first-pass issue."""
    original: str
    verified: bool = True
    reason: Optional[str] = None
    corrected_severity: Optional[Severity] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VerificationRecord":
        verified = data.get("verified", True)
        if isinstance(verified, str):
            verified = verified.strip().lower() not in ("false", "no", "0")
        corrected = data.get("correctedSeverity", data.get("corrected_severity"))
        reason = data.get("reason")
        return cls(
            original=str(data.get("original") or ""),
            verified=bool(verified),
            reason=str(reason) if reason is not None else None,
            corrected_severity=Severity.coerce(corrected) if corrected else None,
        )


@dataclass(frozen=True)
class SecondPassResult:
    """Normalized response of the validator's re-analysis call."""
    verified_issues: Tuple[VerificationRecord, ...] = ()
    new_issues: Tuple[Issue, ...] = ()
    confidence: int = 60
    validation_notes: str = ""
    structured: bool = field(default=False, compare=False)
