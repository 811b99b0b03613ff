"""Issue reconciliation across analysis passes."""

from dataclasses import replace
from typing import Iterable, List, Optional, Sequence

from ..models import Issue, IssueSource, VerificationRecord
from ..utils import get_logger


logger = get_logger("codesentinel.reconcile")


def find_verification(
    issue: Issue,
    records: Sequence[VerificationRecord],
) -> Optional[VerificationRecord]:
    """
    First record whose `original` text contains the issue title, ignoring case.

    Substring matching is approximate: a short title can match a record meant
    for another issue, and only the first match is ever used.
    """
    title = issue.title.lower()
    for record in records:
        if title in record.original.lower():
            return record
    return None


def reconcile_issues(
    first_pass: Iterable[Issue],
    verified: Sequence[VerificationRecord],
    new_issues: Iterable[Issue],
) -> List[Issue]:
    """
    Merge first-pass issues with second-pass verdicts and findings.

    Args:
        first_pass: Source-tagged issues from the initial agents
        verified: Verification records from the re-analysis
        new_issues: Issues the re-analysis found on its own

    Returns:
        Kept first-pass issues in original order, then new issues.
        Not severity-sorted.
    """
    final: List[Issue] = []

    for issue in first_pass:
        record = find_verification(issue, verified)

        if record is None:
            final.append(replace(issue, verified=False))
        elif record.verified:
            final.append(replace(
                issue,
                verified=True,
                verification_notes=record.reason,
                severity=record.corrected_severity or issue.severity,
            ))
        else:
            logger.debug(f"Filtered out false positive: {issue.title}")

    for issue in new_issues:
        final.append(replace(
            issue,
            source=IssueSource.VALIDATOR,
            discovered_in_second_pass=True,
        ))

    return final
