"""Data models for code review."""

from .issue import Severity, IssueKind, IssueSource, Issue
from .analysis import (
    AnalysisResult,
    ValidationResult,
    VerificationRecord,
    SecondPassResult,
)
from .report import (
    SeverityCounts,
    ReportMetadata,
    Report,
    FileResult,
    FileRisk,
    Recommendation,
    FolderReport,
)

__all__ = [
    "Severity",
    "IssueKind",
    "IssueSource",
    "Issue",
    "AnalysisResult",
    "ValidationResult",
    "VerificationRecord",
    "SecondPassResult",
    "SeverityCounts",
    "ReportMetadata",
    "Report",
    "FileResult",
    "FileRisk",
    "Recommendation",
    "FolderReport",
]
