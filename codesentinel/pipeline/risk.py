"""Risk scoring and severity ordering.

Single source of truth for severity weights; renderers should call these
helpers instead of re-deriving the numbers.
"""

import math
from typing import Iterable, List

from ..models import Issue, SeverityCounts


FILE_WEIGHTS = {"critical": 40, "high": 25, "medium": 10, "low": 5}
FOLDER_WEIGHTS = {"critical": 10, "high": 5, "medium": 2, "low": 1}
FOLDER_POINTS_PER_FILE = 50
RANK_WEIGHTS = {"critical": 10, "high": 5, "medium": 1, "low": 0}


def _weighted(counts: SeverityCounts, weights) -> int:
    return (
        counts.critical * weights["critical"]
        + counts.high * weights["high"]
        + counts.medium * weights["medium"]
        + counts.low * weights["low"]
    )


def file_risk_score(counts: SeverityCounts) -> int:
    """File-level risk: weighted severity sum capped at 100."""
    return min(100, _weighted(counts, FILE_WEIGHTS))


def folder_risk_score(counts: SeverityCounts, total_files: int) -> int:
    """Folder-level risk: weighted sum over a 50-points-per-file budget, capped at 100."""
    if total_files <= 0 or counts.total == 0:
        return 0
    ratio = _weighted(counts, FOLDER_WEIGHTS) / (total_files * FOLDER_POINTS_PER_FILE)
    return min(100, int(math.floor(100 * ratio + 0.5)))


def file_rank_weight(counts: SeverityCounts) -> int:
    """Ordering key for the files-by-risk list (higher is riskier)."""
    return _weighted(counts, RANK_WEIGHTS)


def sort_by_severity(issues: Iterable[Issue]) -> List[Issue]:
    """Critical first; ties keep discovery order."""
    return sorted(issues, key=lambda issue: issue.severity.rank)
