"""
Product price catalog loader.

Validates admin-maintained catalog entries before they reach the matcher,
which trusts its inputs.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Union

import structlog

from ..models import ProductPrice

logger = structlog.get_logger()


class CatalogError(ValueError):
    """Raised when the product catalog is malformed."""


@dataclass
class CatalogLoadResult:
    """Result of loading a catalog."""
    products: List[ProductPrice]
    skipped_inactive: int = 0
    warnings: List[str] = field(default_factory=list)


def _price(entry: Dict[str, Any], key: str, position: int) -> int:
    value = entry.get(key, 0)
    if value in (None, ""):
        return 0
    if isinstance(value, bool):
        raise CatalogError(f"entry {position}: {key} must be a number, got {value!r}")
    try:
        price = int(round(float(str(value).replace(",", ""))))
    except ValueError as exc:
        raise CatalogError(f"entry {position}: {key} must be a number, got {value!r}") from exc
    if price < 0:
        raise CatalogError(f"entry {position}: {key} must not be negative ({price})")
    return price


def _to_product(entry: Union[ProductPrice, Dict[str, Any]], position: int) -> ProductPrice:
    if isinstance(entry, ProductPrice):
        entry = {
            "id": entry.id,
            "product_name": entry.product_name,
            "match_keywords": entry.match_keywords,
            "adult_price": entry.adult_price,
            "child_price": entry.child_price,
            "tier_group": entry.tier_group,
            "is_active": entry.is_active,
        }

    name = str(entry.get("product_name") or "").strip()
    if not name:
        raise CatalogError(f"entry {position}: product_name is required")

    return ProductPrice(
        id=str(entry.get("id") or ""),
        product_name=name,
        match_keywords=str(entry.get("match_keywords") or ""),
        adult_price=_price(entry, "adult_price", position),
        child_price=_price(entry, "child_price", position),
        tier_group=str(entry.get("tier_group") or ""),
        is_active=bool(entry.get("is_active", True)),
    )


def load_product_catalog(
    entries: Iterable[Union[ProductPrice, Dict[str, Any]]],
) -> CatalogLoadResult:
    """
    Validate catalog entries and keep the active ones, in their given order.

    Args:
        entries: Raw catalog rows (dicts as stored) or ProductPrice objects

    Returns:
        CatalogLoadResult with the active products

    Raises:
        CatalogError: missing name, bad price, or no usable keywords at all
    """
    products: List[ProductPrice] = []
    skipped = 0
    warnings: List[str] = []

    for position, entry in enumerate(entries):
        product = _to_product(entry, position)
        if not product.is_active:
            skipped += 1
            continue
        if not product.keywords:
            warnings.append(f"'{product.product_name}' has no match keywords")
        products.append(product)

    if products and not any(p.keywords for p in products):
        raise CatalogError("no active product has match keywords")

    logger.info(
        "Product catalog loaded",
        active=len(products),
        skipped_inactive=skipped,
        warnings=len(warnings),
    )

    return CatalogLoadResult(
        products=products,
        skipped_inactive=skipped,
        warnings=warnings,
    )
