"""
Excel Grouper - collapses settlement rows into per-customer clusters.

Platforms split one order across several export lines, sometimes with
receipt dates a day apart. Rows of one customer are chained while each new
row falls within the merge window of the cluster's latest date; the
cluster reports its earliest date.
"""

from typing import List, Optional, Sequence

import structlog

from ..config import Settings, get_settings
from ..models import ExcelGroup, SettlementRow
from ..utils.dates import days_between
from ..utils.text import normalize_name

logger = structlog.get_logger()


def _sort_key(row: SettlementRow):
    key_date = row.date_key
    return (
        normalize_name(row.customer_name),
        key_date is None,
        key_date.toordinal() if key_date else 0,
    )


def _build_group(rows: List[SettlementRow], settings: Settings) -> ExcelGroup:
    first = rows[0]

    options: List[str] = []
    for row in rows:
        if row.option and row.option not in options:
            options.append(row.option)

    total_amount = sum(r.platform_amount for r in rows)
    has_negative_row = any(r.platform_amount < 0 for r in rows)
    has_cancel_text = any(
        settings.is_cancellation_text(r.status) or settings.is_cancellation_text(r.product_name)
        for r in rows
    )

    key_date = first.date_key
    receipt_dates = [r.receipt_date for r in rows if r.receipt_date is not None]
    return ExcelGroup(
        group_id=f"{normalize_name(first.customer_name)}|{key_date.isoformat() if key_date else ''}",
        customer_name=first.customer_name,
        tour_date=first.tour_date,
        receipt_date=min(receipt_dates) if receipt_dates else None,
        option=" + ".join(options),
        total_amount=total_amount,
        total_pax=sum(r.pax for r in rows),
        adult_count=sum(r.adult_count for r in rows),
        child_count=sum(r.child_count for r in rows),
        rows=tuple(rows),
        is_partial_refund=total_amount > 0 and (has_negative_row or has_cancel_text),
        is_full_cancellation=total_amount <= 0 and has_cancel_text,
    )


def group_excel_rows(
    rows: Sequence[SettlementRow],
    settings: Optional[Settings] = None,
) -> List[ExcelGroup]:
    """
    Group settlement rows by customer with consecutive-date merging.

    Rows are ordered by normalized name, then receipt date (tour date when the
    receipt date is missing). A row joins the open cluster when the names
    match and its date is within the merge window of the cluster's latest
    date; otherwise it opens a new cluster.
    """
    settings = settings or get_settings()
    window = settings.excel_merge_window_days

    clusters: List[List[SettlementRow]] = []
    last_date = None

    for row in sorted(rows, key=_sort_key):
        row_date = row.date_key
        current = clusters[-1] if clusters else None

        mergeable = (
            current is not None
            and normalize_name(current[0].customer_name) == normalize_name(row.customer_name)
            and row_date is not None
            and last_date is not None
            and days_between(row_date, last_date) <= window
        )

        if mergeable:
            current.append(row)
            last_date = max(last_date, row_date)
        else:
            clusters.append([row])
            last_date = row_date

    groups = [_build_group(cluster, settings) for cluster in clusters]

    logger.debug("Excel rows grouped", rows=len(rows), groups=len(groups))
    return groups
