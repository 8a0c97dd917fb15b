"""Data models for the settlement reconciliation system."""

from .enums import (
    MatchStatus,
    SettlementStatus,
    MatchStrategy,
    NoteSeverity,
    AuditAction,
    STATUS_LABELS,
    LABEL_ONSITE_PAYMENT,
    LABEL_CARRY_OVER,
    LABEL_UNKNOWN_PRODUCT,
    LABEL_AMOUNT_ERROR,
)
from .records import (
    SettlementRow,
    Reservation,
    ProductPrice,
)
from .groups import (
    TourDates,
    ExcelGroup,
    MergedReservation,
)
from .reconciliation import (
    ClassifierResult,
    MatchResult,
    SettlementSummary,
    AuditEntry,
    SettlementReport,
)

__all__ = [
    # Enums
    "MatchStatus",
    "SettlementStatus",
    "MatchStrategy",
    "NoteSeverity",
    "AuditAction",
    "STATUS_LABELS",
    "LABEL_ONSITE_PAYMENT",
    "LABEL_CARRY_OVER",
    "LABEL_UNKNOWN_PRODUCT",
    "LABEL_AMOUNT_ERROR",
    # Records
    "SettlementRow",
    "Reservation",
    "ProductPrice",
    # Groups
    "TourDates",
    "ExcelGroup",
    "MergedReservation",
    # Reconciliation
    "ClassifierResult",
    "MatchResult",
    "SettlementSummary",
    "AuditEntry",
    "SettlementReport",
]
