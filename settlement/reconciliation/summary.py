"""Summary Aggregator - folds match results into settlement totals."""

from collections import Counter
from typing import Iterable

from ..models import LABEL_CARRY_OVER, MatchResult, MatchStatus, SettlementSummary


def summarize(results: Iterable[MatchResult]) -> SettlementSummary:
    """Count results per status and total the amounts."""
    results = list(results)
    counts = Counter(r.status for r in results)

    total_expected = sum(r.expected_amount for r in results)
    total_actual = sum(r.actual_amount for r in results)

    return SettlementSummary(
        total_excel_rows=sum(r.excel_group.row_count for r in results if r.excel_group),
        total_db_groups=sum(1 for r in results if r.db_group is not None),
        normal=counts[MatchStatus.NORMAL],
        warning=counts[MatchStatus.WARNING],
        error=counts[MatchStatus.ERROR],
        partial_refund=counts[MatchStatus.PARTIAL_REFUND],
        cancelled=counts[MatchStatus.CANCELLED],
        completed=counts[MatchStatus.COMPLETED],
        excluded=counts[MatchStatus.EXCLUDED],
        carry_over=sum(1 for r in results if r.status_label == LABEL_CARRY_OVER),
        total_expected=total_expected,
        total_actual=total_actual,
        total_diff=sum(r.amount_diff for r in results),
    )
