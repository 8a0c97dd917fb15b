"""
Amount Validator - compares the platform charge with the catalog price.

Precedence of verdicts:
1. Reservation already settled or excluded
2. On-site payment (shortfall explained by a DB note marker)
3. Partial refund flagged by the platform
4. No catalog product, so no expected amount
5. Diff policy: exact -> normal, within the error threshold -> warning,
   beyond it -> error (capped at warning when receipt dates agree)
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from ..config import Settings
from ..models import (
    ExcelGroup,
    MatchStatus,
    MergedReservation,
    ProductPrice,
    SettlementStatus,
    STATUS_LABELS,
    LABEL_AMOUNT_ERROR,
    LABEL_ONSITE_PAYMENT,
    LABEL_UNKNOWN_PRODUCT,
)


@dataclass(frozen=True)
class AmountVerdict:
    """Outcome of amount validation for one pair."""
    status: MatchStatus
    status_label: str
    expected_amount: int
    actual_amount: int
    amount_diff: int
    diff_percent: float
    notes: Tuple[str, ...] = ()


def expected_amount(db_group: MergedReservation, product: Optional[ProductPrice]) -> int:
    """Catalog price for the DB party; 0 without a product."""
    if product is None:
        return 0
    return product.price_for(db_group.adult_count, db_group.child_count)


def diff_percent(diff: int, expected: int) -> float:
    """Diff as a percentage of the expected amount; 0 when nothing is expected."""
    if expected == 0:
        return 0.0
    return diff / expected * 100


def _verdict(status: MatchStatus, label: str, expected: int, actual: int, *notes: str) -> AmountVerdict:
    diff = actual - expected
    return AmountVerdict(
        status=status,
        status_label=label,
        expected_amount=expected,
        actual_amount=actual,
        amount_diff=diff,
        diff_percent=diff_percent(diff, expected),
        notes=tuple(notes),
    )


def validate_amount(
    excel_group: ExcelGroup,
    db_group: MergedReservation,
    product: Optional[ProductPrice],
    settings: Settings,
) -> AmountVerdict:
    """
    Classify the charge of a matched pair.

    Args:
        excel_group: Platform side (actual amount)
        db_group: Reservation side (headcount and notes)
        product: Classified catalog product, or None

    Returns:
        AmountVerdict with status, label and amounts
    """
    expected = expected_amount(db_group, product)
    actual = excel_group.total_amount
    diff = actual - expected

    if db_group.settlement_status == SettlementStatus.COMPLETED:
        return _verdict(
            MatchStatus.COMPLETED, STATUS_LABELS[MatchStatus.COMPLETED], expected, actual,
            "이미 정산 확정된 내역입니다.",
        )
    if db_group.settlement_status == SettlementStatus.EXCLUDED:
        return _verdict(
            MatchStatus.EXCLUDED, STATUS_LABELS[MatchStatus.EXCLUDED], expected, actual,
            "정산 제외 처리된 내역입니다.",
        )

    if diff < 0 and settings.is_onsite_payment_note(f"{db_group.note} {db_group.pickup_location}"):
        return _verdict(
            MatchStatus.NORMAL, LABEL_ONSITE_PAYMENT, expected, actual,
            f"🟢 현장 추가결제 건으로 승인 (부족분 {-diff:,}원)",
        )

    if excel_group.is_partial_refund and 0 < actual < expected:
        return _verdict(
            MatchStatus.PARTIAL_REFUND, STATUS_LABELS[MatchStatus.PARTIAL_REFUND], expected, actual,
            "부분 환불 내역이 포함되어 있습니다.",
        )

    if product is None:
        return _verdict(MatchStatus.WARNING, LABEL_UNKNOWN_PRODUCT, expected, actual)

    percent = diff_percent(diff, expected)
    if diff == 0 or (expected and abs(percent) <= settings.amount_normal_tolerance_pct):
        return _verdict(MatchStatus.NORMAL, STATUS_LABELS[MatchStatus.NORMAL], expected, actual)

    note = f"⚠️ 금액 차이 {diff:+,}원 ({percent:+.1f}%)"
    receipt_confirmed = (
        excel_group.receipt_date is not None
        and excel_group.receipt_date == db_group.receipt_date
    )
    if abs(percent) > settings.amount_error_threshold_pct and not receipt_confirmed:
        return _verdict(MatchStatus.ERROR, LABEL_AMOUNT_ERROR, expected, actual, note)
    return _verdict(MatchStatus.WARNING, STATUS_LABELS[MatchStatus.WARNING], expected, actual, note)
