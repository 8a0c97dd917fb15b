"""Tour settlement reconciliation engine."""

from .ingestion import CatalogError, load_product_catalog
from .reconciliation import (
    SettlementOrchestrator,
    build_merged_reservations,
    classify_product,
    group_excel_rows,
    match_settlement_data,
    summarize,
)
from .logging_config import setup_logging
from .utils.text import normalize_pickup

__all__ = [
    "CatalogError",
    "load_product_catalog",
    "SettlementOrchestrator",
    "build_merged_reservations",
    "classify_product",
    "group_excel_rows",
    "match_settlement_data",
    "summarize",
    "normalize_pickup",
    "setup_logging",
]
