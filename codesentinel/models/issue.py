"""Data models for issues."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional


class Severity(Enum):
    """Issue severity levels, ordered most to least severe."""
    CRITICAL = "critical"   # Security, data loss
    HIGH = "high"           # Bugs, serious performance
    MEDIUM = "medium"       # Code quality
    LOW = "low"             # Style, suggestions

    @property
    def rank(self) -> int:
        """Sort key: critical sorts first."""
        return _SEVERITY_RANK[self]

    @classmethod
    def coerce(cls, value: Any) -> "Severity":
        """Map free-form model output onto a severity, unknown -> MEDIUM."""
        if isinstance(value, Severity):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.MEDIUM


_SEVERITY_RANK = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 1,
    Severity.MEDIUM: 2,
    Severity.LOW: 3,
}


class IssueKind:
    """Well-known issue kinds. The set is open: any non-empty tag is allowed."""
    BUG = "bug"
    PERFORMANCE = "performance"
    STYLE = "style"
    SECURITY = "security"
    GENERAL = "general"

    @staticmethod
    def coerce(value: Any) -> str:
        if isinstance(value, str) and value.strip():
            return value.strip().lower()
        return IssueKind.GENERAL


class IssueSource(Enum):
    """Which agent produced an issue."""
    PRIMARY = "primary"
    SECURITY = "security"
    VALIDATOR = "validator"


@dataclass(frozen=True)
class Issue:
    """A single finding."""
    title: str
    kind: str = IssueKind.GENERAL
    severity: Severity = Severity.MEDIUM
    line: Optional[int] = None  # None/0 means whole file
    description: str = ""
    suggestion: str = ""
    source: Optional[IssueSource] = None
    verified: Optional[bool] = None
    verification_notes: Optional[str] = None
    discovered_in_second_pass: bool = False

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        source: Optional[IssueSource] = None,
    ) -> "Issue":
        """Build an issue from a loosely-shaped model dict, coercing every field."""
        description = _text(data.get("description"))
        kind = IssueKind.coerce(data.get("kind", data.get("type")))
        title = _text(data.get("title")).strip()
        if not title:
            title = (description or kind).strip()[:100] or "Untitled issue"

        return cls(
            title=title,
            kind=kind,
            severity=Severity.coerce(data.get("severity")),
            line=_line(data.get("line")),
            description=description,
            suggestion=_text(data.get("suggestion", data.get("fix"))),
            source=source,
        )

    def with_source(self, source: IssueSource) -> "Issue":
        return replace(self, source=source)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "kind": self.kind,
            "severity": self.severity.value,
            "line": self.line or 0,
            "title": self.title,
            "description": self.description,
            "suggestion": self.suggestion,
            "source": self.source.value if self.source else None,
            "discoveredInSecondPass": self.discovered_in_second_pass,
        }
        if self.verified is not None:
            data["verified"] = self.verified
        if self.verification_notes is not None:
            data["verificationNotes"] = self.verification_notes
        return data


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _line(value: Any) -> Optional[int]:
    # bool is an int subclass; "true" is not a line number
    if isinstance(value, bool):
        return None
    try:
        line = int(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return line if line > 0 else None
