"""Enumerations for the settlement reconciliation system."""

from enum import Enum


class MatchStatus(str, Enum):
    """
    Verdict of a single reconciliation row.

    NORMAL: Amount and identity line up (or the gap is explained)
    WARNING: Matched, but something needs a human look
    ERROR: No counterpart found or the amount is far off
    PARTIAL_REFUND: Platform refunded part of the booking
    CANCELLED: Platform refunded the whole booking
    COMPLETED: Reservation was already settled in an earlier run
    EXCLUDED: Reservation was excluded from settlement by an admin
    """
    NORMAL = "normal"
    WARNING = "warning"
    ERROR = "error"
    PARTIAL_REFUND = "partial_refund"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    EXCLUDED = "excluded"


class SettlementStatus(str, Enum):
    """Settlement state stored on a reservation record."""
    COMPLETED = "completed"
    EXCLUDED = "excluded"


class MatchStrategy(str, Enum):
    """Strategy of the matching cascade that paired an excel group."""
    EXACT_TOUR_DATE = "exact_tour_date"
    EXACT_RECEIPT_DATE = "exact_receipt_date"
    FUZZY_RECEIPT_DATE = "fuzzy_receipt_date"
    TOUR_DATE_TOLERANCE = "tour_date_tolerance"


class NoteSeverity(str, Enum):
    """Weight of a diagnostic note produced while matching."""
    INFO = "info"
    WARNING = "warning"


class AuditAction(str, Enum):
    """Type of audit action."""
    CATALOG_LOADED = "catalog_loaded"
    RESERVATIONS_MERGED = "reservations_merged"
    PAIR_MATCHED = "pair_matched"
    EXCEL_UNMATCHED = "excel_unmatched"
    DB_UNMATCHED = "db_unmatched"
    CARRY_OVER = "carry_over"
    SUMMARY_COMPUTED = "summary_computed"


# Korean labels shown next to each verdict
STATUS_LABELS = {
    MatchStatus.NORMAL: "정상",
    MatchStatus.WARNING: "확인필요",
    MatchStatus.ERROR: "확인필요",
    MatchStatus.PARTIAL_REFUND: "부분환불",
    MatchStatus.CANCELLED: "취소",
    MatchStatus.COMPLETED: "정산완료",
    MatchStatus.EXCLUDED: "정산제외",
}

LABEL_ONSITE_PAYMENT = "현장결제"
LABEL_CARRY_OVER = "이월대기"
LABEL_UNKNOWN_PRODUCT = "상품미확인"
LABEL_AMOUNT_ERROR = "금액오류"
