"""Input records for the settlement reconciliation system."""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, List, Dict, Any, Union

from ..utils.dates import coerce_date
from .enums import SettlementStatus


def _freeze_date(instance, name: str) -> None:
    object.__setattr__(instance, name, coerce_date(getattr(instance, name)))


@dataclass(frozen=True)
class SettlementRow:
    """
    One normalized line from a platform settlement export.
    Produced by the platform parsers; amounts are in KRW.
    """
    reservation_id: str = ""
    product_name: str = ""
    tour_date: Optional[date] = None
    pax: int = 0
    adult_count: int = 0
    child_count: int = 0
    platform_amount: int = 0
    customer_name: str = ""
    status: str = ""
    option: str = ""  # raw option text, e.g. "09:00 (1부)"
    receipt_date: Optional[date] = None  # often derived from the reservation id
    raw_data: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        _freeze_date(self, "tour_date")
        _freeze_date(self, "receipt_date")
        if self.option is None:
            object.__setattr__(self, "option", "")

    @property
    def date_key(self) -> Optional[date]:
        """Date used to order and chain rows: receipt date, else tour date."""
        return self.receipt_date or self.tour_date


@dataclass(frozen=True)
class Reservation:
    """
    One internal reservation record as the reservation store returns it.
    """
    id: str = ""
    name: str = ""
    receipt_date: Optional[date] = None
    tour_date: Optional[date] = None
    option: str = ""
    pax: Union[int, str] = 0  # free text like "3명" is accepted
    child_count: int = 0
    source: str = ""
    status: str = ""
    contact: str = ""
    note: str = ""
    pickup_location: str = ""
    settlement_status: Optional[SettlementStatus] = None

    def __post_init__(self):
        _freeze_date(self, "receipt_date")
        _freeze_date(self, "tour_date")
        if self.settlement_status:
            object.__setattr__(
                self, "settlement_status", SettlementStatus(self.settlement_status)
            )
        else:
            object.__setattr__(self, "settlement_status", None)


@dataclass(frozen=True)
class ProductPrice:
    """Catalog entry with per-head prices and match keywords."""
    id: str = ""
    product_name: str = ""
    match_keywords: str = ""  # comma-separated
    adult_price: int = 0
    child_price: int = 0
    tier_group: str = ""
    is_active: bool = True

    @property
    def keywords(self) -> List[str]:
        """Lower-cased, non-empty keywords."""
        return [
            keyword.strip().lower()
            for keyword in self.match_keywords.split(",")
            if keyword.strip()
        ]

    def price_for(self, adult_count: int, child_count: int) -> int:
        """Expected charge for a party."""
        return adult_count * self.adult_price + child_count * self.child_price
