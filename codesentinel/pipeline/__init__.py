"""Review pipeline stages."""

from .normalizer import normalize, normalize_second_pass
from .agents import AnalysisAgent, PrimaryAgent, SecurityAgent, quick_scan
from .confidence import ConfidenceAggregator
from .reconcile import reconcile_issues
from .validator import (
    SelfCorrectionValidator,
    ReviewSession,
    ValidationState,
)
from .risk import (
    file_risk_score,
    folder_risk_score,
    file_rank_weight,
    sort_by_severity,
)
from .review import build_report, review_code, review_code_sync
from .folder import (
    FolderReviewer,
    aggregate_results,
    build_recommendations,
    review_folder,
    review_folder_sync,
)

__all__ = [
    "normalize",
    "normalize_second_pass",
    "AnalysisAgent",
    "PrimaryAgent",
    "SecurityAgent",
    "quick_scan",
    "ConfidenceAggregator",
    "reconcile_issues",
    "SelfCorrectionValidator",
    "ReviewSession",
    "ValidationState",
    "file_risk_score",
    "folder_risk_score",
    "file_rank_weight",
    "sort_by_severity",
    "build_report",
    "review_code",
    "review_code_sync",
    "FolderReviewer",
    "aggregate_results",
    "build_recommendations",
    "review_folder",
    "review_folder_sync",
]
