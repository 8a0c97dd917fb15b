"""Reconciliation engine components."""

from .classifier import classify_product
from .virtual_merge import build_merged_reservations, select_unsettled_before
from .grouping import group_excel_rows
from .strategies import STRATEGY_CASCADE, Strategy, find_match
from .amount import validate_amount
from .matcher import match_settlement_data
from .summary import summarize
from .orchestrator import SettlementOrchestrator

__all__ = [
    "classify_product",
    "build_merged_reservations",
    "select_unsettled_before",
    "group_excel_rows",
    "STRATEGY_CASCADE",
    "Strategy",
    "find_match",
    "validate_amount",
    "match_settlement_data",
    "summarize",
    "SettlementOrchestrator",
]
