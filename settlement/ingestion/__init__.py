"""Boundary validation for collaborator-supplied data."""

from .catalog import CatalogError, CatalogLoadResult, load_product_catalog

__all__ = ["CatalogError", "CatalogLoadResult", "load_product_catalog"]
