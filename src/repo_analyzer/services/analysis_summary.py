"""Summary builder — aggregate findings into counts and a 0-100 score."""

from __future__ import annotations

from collections import Counter
from typing import Sequence

from repo_analyzer.domain.entities import AnalysisSummary, Finding, Severity

MAX_TOP_FINDINGS = 5

SEVERITY_PENALTY: dict[Severity, int] = {
    Severity.HIGH: 10,
    Severity.MEDIUM: 5,
    Severity.LOW: 3,
    Severity.INFO: 1,
}

_TOP_SEVERITIES = frozenset({Severity.HIGH, Severity.MEDIUM})


def overall_score(counts_by_severity: dict[Severity, int]) -> int:
    """Start at 100 and deduct per finding, never going below 0."""
    score = 100 - sum(
        SEVERITY_PENALTY[severity] * count for severity, count in counts_by_severity.items()
    )
    return max(0, min(score, 100))


def build_summary(findings: Sequence[Finding]) -> AnalysisSummary:
    """Count findings by severity and category and pick the top titles."""
    by_severity = Counter(f.severity for f in findings)
    by_category = Counter(f.category for f in findings)

    top = [f.title for f in findings if f.severity in _TOP_SEVERITIES][:MAX_TOP_FINDINGS]

    return AnalysisSummary(
        total_findings=len(findings),
        counts_by_severity=dict(by_severity),
        counts_by_category=dict(by_category),
        overall_score=overall_score(dict(by_severity)),
        top_findings=tuple(top),
    )
