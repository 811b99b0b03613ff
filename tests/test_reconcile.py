"""Tests for cross-pass issue reconciliation."""

from codesentinel.models import Issue, IssueSource, Severity, VerificationRecord
from codesentinel.pipeline.reconcile import find_verification, reconcile_issues


def _issue(title, severity=Severity.MEDIUM, source=IssueSource.PRIMARY):
    return Issue(title=title, severity=severity, source=source)


class TestReconcileIssues:
    """Tests for reconcile_issues."""

    def test_unmatched_issue_is_kept_unverified(self):
        """Given no verdict for an issue, should keep it with verified=False."""
        # When
        final = reconcile_issues([_issue("Off by one")], [], [])

        # Then
        assert len(final) == 1
        assert final[0].verified is False

    def test_confirmed_issue_takes_corrected_severity(self):
        """Given a confirming verdict with a corrected severity, should apply it."""
        # Given
        records = [VerificationRecord(
            original="Off by one in loop bound",
            verified=True,
            reason="Reproduced",
            corrected_severity=Severity.CRITICAL,
        )]

        # When
        final = reconcile_issues([_issue("off by one", Severity.LOW)], records, [])

        # Then
        assert final[0].severity == Severity.CRITICAL
        assert final[0].verified is True
        assert final[0].verification_notes == "Reproduced"

    def test_rejected_issue_is_dropped(self):
        """Given an explicit rejection, should drop the issue."""
        # Given
        records = [VerificationRecord(original="Naming", verified=False, reason="Project style")]

        # When
        final = reconcile_issues([_issue("Naming"), _issue("Leak")], records, [])

        # Then
        assert [i.title for i in final] == ["Leak"]

    def test_new_issues_are_appended_and_tagged(self):
        """Given second-pass findings, should append them after kept issues."""
        # Given
        new = [_issue("Race condition", Severity.HIGH, source=None)]

        # When
        final = reconcile_issues([_issue("Leak", Severity.LOW)], [], new)

        # Then - no severity sort here
        assert [i.title for i in final] == ["Leak", "Race condition"]
        assert final[1].source == IssueSource.VALIDATOR
        assert final[1].discovered_in_second_pass is True
        assert final[0].discovered_in_second_pass is False

    def test_first_match_wins_on_ambiguous_titles(self):
        """Given two records containing the title, only the first is used.

        Substring matching is approximate; this pins the current behavior.
        """
        # Given
        records = [
            VerificationRecord(original="Unused import os", verified=False),
            VerificationRecord(original="Unused import", verified=True),
        ]

        # When
        final = reconcile_issues([_issue("Unused import")], records, [])

        # Then - the rejection came first, so the issue is dropped
        assert final == []

    def test_short_title_can_match_unrelated_record(self):
        """Given a short title, substring matching may pick another issue's verdict."""
        # Given
        records = [VerificationRecord(original="SQL injection in login", verified=False)]

        # When
        match = find_verification(_issue("SQL"), records)

        # Then
        assert match is records[0]

    def test_reconcile_is_idempotent(self):
        """Running twice with the same verdicts keeps the same issues."""
        # Given
        first_pass = [_issue("A"), _issue("B"), _issue("C")]
        records = [
            VerificationRecord(original="b", verified=False),
            VerificationRecord(original="c", verified=True, corrected_severity=Severity.HIGH),
        ]

        # When
        once = reconcile_issues(first_pass, records, [])
        twice = reconcile_issues(once, records, [])

        # Then
        assert [i.title for i in once] == [i.title for i in twice] == ["A", "C"]
        assert [i.severity for i in once] == [i.severity for i in twice]
