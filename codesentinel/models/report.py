"""Data models for file and folder reports."""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .issue import Issue, Severity


@dataclass(frozen=True)
class SeverityCounts:
    """Histogram of issue severities."""
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0

    @classmethod
    def from_issues(cls, issues: Iterable[Issue]) -> "SeverityCounts":
        counts = {severity: 0 for severity in Severity}
        for issue in issues:
            counts[issue.severity] += 1
        return cls(
            critical=counts[Severity.CRITICAL],
            high=counts[Severity.HIGH],
            medium=counts[Severity.MEDIUM],
            low=counts[Severity.LOW],
        )

    @property
    def total(self) -> int:
        return self.critical + self.high + self.medium + self.low

    def __add__(self, other: "SeverityCounts") -> "SeverityCounts":
        return SeverityCounts(
            critical=self.critical + other.critical,
            high=self.high + other.high,
            medium=self.medium + other.medium,
            low=self.low + other.low,
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "critical": self.critical,
            "high": self.high,
            "medium": self.medium,
            "low": self.low,
        }


@dataclass(frozen=True)
class ReportMetadata:
    """Context for one file review."""
    language: str
    latency_ms: int
    confidence: int
    iterations: int
    timestamp: str = ""
    code_lines: int = 0
    code_length: int = 0
    self_correction_applied: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "language": self.language,
            "latency": self.latency_ms,
            "codeLines": self.code_lines,
            "codeLength": self.code_length,
            "confidence": self.confidence,
            "selfCorrectionApplied": self.self_correction_applied,
            "iterations": self.iterations,
        }


@dataclass(frozen=True)
class Report:
    """Terminal artifact for one file. Issues are sorted critical first."""
    metadata: ReportMetadata
    counts: SeverityCounts
    risk_score: int
    issues: Tuple[Issue, ...] = ()
    validation_notes: Optional[str] = None
    validation_warning: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        summary: Dict[str, Any] = {"totalIssues": len(self.issues)}
        summary.update(self.counts.to_dict())
        summary["riskScore"] = self.risk_score
        data: Dict[str, Any] = {
            "metadata": self.metadata.to_dict(),
            "summary": summary,
            "issues": [issue.to_dict() for issue in self.issues],
        }
        if self.validation_notes is not None:
            data["validationNotes"] = self.validation_notes
        if self.validation_warning is not None:
            data["validationWarning"] = self.validation_warning
        return data


@dataclass(frozen=True)
class FileResult:
    """Outcome of reviewing one file during a folder walk."""
    file: str                   # path relative to the folder root
    full_path: str
    issues: Tuple[Issue, ...] = ()
    lines_of_code: int = 0
    confidence: int = 0
    language: str = "plaintext"
    error: Optional[str] = None

    @property
    def counts(self) -> SeverityCounts:
        return SeverityCounts.from_issues(self.issues)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "file": self.file,
            "fullPath": self.full_path,
            "issues": [issue.to_dict() for issue in self.issues],
            "linesOfCode": self.lines_of_code,
            "confidence": self.confidence,
            "language": self.language,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class FileRisk:
    """Row of the folder's files-by-risk ranking."""
    file: str
    full_path: str
    issues: int
    counts: SeverityCounts

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "file": self.file,
            "fullPath": self.full_path,
            "issues": self.issues,
        }
        data.update(self.counts.to_dict())
        return data


@dataclass(frozen=True)
class Recommendation:
    """Rule-based remediation advice for a folder."""
    severity: str
    title: str
    description: str
    action: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "severity": self.severity,
            "title": self.title,
            "description": self.description,
            "action": self.action,
        }


@dataclass(frozen=True)
class FolderReport:
    """Aggregate of many file reviews."""
    folder_path: str
    results: Tuple[FileResult, ...]
    counts: SeverityCounts
    risk_score: int
    files_by_risk: Tuple[FileRisk, ...] = ()
    recommendations: Tuple[Recommendation, ...] = ()
    latency_ms: int = 0
    timestamp: str = ""
    cancelled: bool = False

    @property
    def total_files(self) -> int:
        return len(self.results)

    @property
    def total_issues(self) -> int:
        return sum(len(r.issues) for r in self.results)

    @property
    def total_loc(self) -> int:
        return sum(r.lines_of_code for r in self.results)

    def all_issues(self) -> List[Dict[str, Any]]:
        """Every issue tagged with its file, most severe first."""
        tagged = []
        for result in self.results:
            for issue in result.issues:
                tagged.append((issue.severity.rank, result, issue))
        tagged.sort(key=lambda entry: entry[0])

        issues = []
        for _, result, issue in tagged:
            data = issue.to_dict()
            data["file"] = result.file
            data["filePath"] = result.full_path
            issues.append(data)
        return issues

    def to_dict(self) -> Dict[str, Any]:
        summary: Dict[str, Any] = {
            "folderPath": self.folder_path,
            "totalFiles": self.total_files,
            "totalIssues": self.total_issues,
            "totalLOC": self.total_loc,
        }
        summary.update(self.counts.to_dict())
        summary["riskScore"] = self.risk_score
        return {
            "metadata": {
                "timestamp": self.timestamp,
                "language": "multiple",
                "latency": self.latency_ms,
                "codeLines": self.total_loc,
                "selfCorrectionApplied": False,
                "cancelled": self.cancelled,
            },
            "summary": summary,
            "issues": self.all_issues(),
            "folderInfo": {
                "folderPath": self.folder_path,
                "totalFiles": self.total_files,
                "filesByRisk": [row.to_dict() for row in self.files_by_risk],
                "recommendations": [r.to_dict() for r in self.recommendations],
            },
            "filesByRisk": [row.to_dict() for row in self.files_by_risk],
            "allResults": [r.to_dict() for r in self.results],
        }
