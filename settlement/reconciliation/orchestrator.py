"""
Settlement Orchestrator - runs one reconciliation from raw collaborator data.

1. Catalog validation
2. Virtual merge of reservation records
3. Settlement matching
4. Summary and audit trail
"""

from typing import Any, Dict, Iterable, Optional, Sequence, Union
from uuid import uuid4

import structlog

from ..config import Settings, get_settings
from ..ingestion import load_product_catalog
from ..models import (
    AuditAction,
    LABEL_CARRY_OVER,
    MatchStatus,
    ProductPrice,
    Reservation,
    SettlementReport,
    SettlementRow,
)
from ..utils.audit_logger import AuditLogger
from .matcher import match_settlement_data
from .summary import summarize
from .virtual_merge import build_merged_reservations

logger = structlog.get_logger()


class SettlementOrchestrator:
    """
    Coordinates catalog loading, virtual merge, matching and the summary.

    Holds only read-only settings; each run() builds its own state.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def run(
        self,
        excel_rows: Sequence[SettlementRow],
        reservations: Iterable[Reservation],
        catalog: Iterable[Union[ProductPrice, Dict[str, Any]]],
        run_id: Optional[str] = None,
    ) -> SettlementReport:
        """
        Execute a full reconciliation.

        Args:
            excel_rows: Parsed platform rows
            reservations: Raw reservation records from the store
            catalog: Product price catalog entries

        Returns:
            SettlementReport with results, summary and audit trail

        Raises:
            CatalogError: If the catalog is malformed
        """
        audit = AuditLogger(run_id or str(uuid4()))

        catalog_result = load_product_catalog(catalog)
        audit.record(
            AuditAction.CATALOG_LOADED,
            f"Loaded {len(catalog_result.products)} active products",
            skipped_inactive=catalog_result.skipped_inactive,
        )

        merged = build_merged_reservations(reservations, settings=self.settings)
        audit.record(
            AuditAction.RESERVATIONS_MERGED,
            f"Merged reservations into {len(merged)} groups",
        )

        results = match_settlement_data(
            excel_rows, merged, catalog_result.products, settings=self.settings
        )

        for result in results:
            ids = list(result.reservation_ids)
            if result.is_paired:
                audit.record(
                    AuditAction.PAIR_MATCHED,
                    f"{result.excel_group.customer_name}: {result.status_label}",
                    reservation_ids=ids,
                    strategy=result.strategy.value if result.strategy else None,
                    status=result.status.value,
                    amount_diff=result.amount_diff,
                )
            elif result.status_label == LABEL_CARRY_OVER:
                audit.record(
                    AuditAction.CARRY_OVER,
                    "Carry-over pending",
                    reservation_ids=ids,
                )
            elif result.excel_group is not None:
                audit.record(
                    AuditAction.EXCEL_UNMATCHED,
                    f"{result.excel_group.customer_name}: no reservation",
                    success=result.status != MatchStatus.ERROR,
                )
            else:
                audit.record(
                    AuditAction.DB_UNMATCHED,
                    f"{result.db_group.name}: not in settlement export",
                    reservation_ids=ids,
                    success=result.status != MatchStatus.ERROR,
                )

        summary = summarize(results)
        audit.record(
            AuditAction.SUMMARY_COMPUTED,
            "Settlement summary computed",
            normal=summary.normal,
            warning=summary.warning,
            error=summary.error,
            total_diff=summary.total_diff,
        )

        return SettlementReport(
            results=results,
            summary=summary,
            audit_log=audit.entries,
            audit_summary=audit.summary(),
            warnings=list(catalog_result.warnings),
        )
