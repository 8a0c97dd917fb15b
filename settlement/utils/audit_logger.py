"""
Audit logging for reconciliation decisions.
"""

from collections import Counter
from typing import List, Optional

import structlog

from ..models import AuditAction, AuditEntry

logger = structlog.get_logger()


class AuditLogger:
    """
    In-memory audit trail for one reconciliation run.
    Every entry is mirrored to structlog.
    """

    def __init__(self, run_id: str):
        self.run_id = run_id
        self.entries: List[AuditEntry] = []

    def log(self, entry: AuditEntry) -> None:
        """Add an audit entry."""
        self.entries.append(entry)

        logger.info(
            entry.message,
            run_id=self.run_id,
            action=entry.action.value,
            reservation_ids=entry.reservation_ids,
            success=entry.success,
        )

    def record(
        self,
        action: AuditAction,
        message: str,
        reservation_ids: Optional[List[str]] = None,
        success: bool = True,
        **details,
    ) -> AuditEntry:
        """Build and log an entry in one call."""
        entry = AuditEntry(
            action=action,
            message=message,
            reservation_ids=list(reservation_ids or []),
            details=details,
            success=success,
        )
        self.log(entry)
        return entry

    def summary(self) -> dict:
        """Get summary statistics of audit log."""
        action_counts = Counter(e.action.value for e in self.entries)
        success_count = sum(1 for e in self.entries if e.success)

        return {
            "run_id": self.run_id,
            "total_entries": len(self.entries),
            "success_count": success_count,
            "error_count": len(self.entries) - success_count,
            "action_counts": dict(action_counts),
        }
