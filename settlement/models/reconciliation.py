"""Reconciliation result models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Dict, Any, Tuple
from uuid import uuid4

from .enums import AuditAction, MatchStatus, MatchStrategy
from .groups import ExcelGroup, MergedReservation
from .records import ProductPrice


@dataclass(frozen=True)
class ClassifierResult:
    """Canonical product for a booking's option text."""
    product_name: str
    matched_product: Optional[ProductPrice] = None
    is_anomaly: bool = False
    notes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MatchResult:
    """One reconciliation verdict; either side may be missing."""
    status: MatchStatus
    status_label: str
    classified_product_name: str = ""
    excel_group: Optional[ExcelGroup] = None
    db_group: Optional[MergedReservation] = None
    matched_product: Optional[ProductPrice] = None
    expected_amount: int = 0
    actual_amount: int = 0
    amount_diff: int = 0
    diff_percent: float = 0.0
    notes: Tuple[str, ...] = ()
    strategy: Optional[MatchStrategy] = None

    @property
    def is_paired(self) -> bool:
        """Check if both an excel group and a DB group are present."""
        return self.excel_group is not None and self.db_group is not None

    @property
    def reservation_ids(self) -> Tuple[str, ...]:
        return self.db_group.reservation_ids if self.db_group else ()


@dataclass(frozen=True)
class SettlementSummary:
    """Summary statistics of one reconciliation run."""
    # Counts
    total_excel_rows: int = 0
    total_db_groups: int = 0
    normal: int = 0
    warning: int = 0
    error: int = 0
    partial_refund: int = 0
    cancelled: int = 0
    completed: int = 0
    excluded: int = 0
    carry_over: int = 0

    # Amounts (KRW)
    total_expected: int = 0
    total_actual: int = 0
    total_diff: int = 0

    @property
    def total_results(self) -> int:
        return (
            self.normal + self.warning + self.error + self.partial_refund
            + self.cancelled + self.completed + self.excluded
        )

    @property
    def normal_rate(self) -> float:
        """Percentage of results that reconciled cleanly."""
        if self.total_results == 0:
            return 0.0
        return (self.normal / self.total_results) * 100


@dataclass
class AuditEntry:
    """An entry in the audit log."""
    id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=datetime.utcnow)

    action: AuditAction = AuditAction.PAIR_MATCHED
    message: str = ""
    reservation_ids: List[str] = field(default_factory=list)
    details: Dict[str, Any] = field(default_factory=dict)
    success: bool = True


@dataclass
class SettlementReport:
    """Complete output of a reconciliation run."""
    results: List[MatchResult] = field(default_factory=list)
    summary: SettlementSummary = field(default_factory=SettlementSummary)
    audit_log: List[AuditEntry] = field(default_factory=list)
    audit_summary: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
