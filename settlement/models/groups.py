"""Aggregates built from settlement rows and reservation records."""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Iterable, Iterator, Optional, Tuple

from ..utils.dates import DateLike, coerce_date, days_between
from .enums import SettlementStatus
from .records import SettlementRow


class TourDates:
    """
    Immutable, ascending set of tour dates with a closest-date query.

    A merged reservation can span several tour dates (one booking split
    across days); matching picks whichever member lies closest to the
    platform's tour date.
    """

    __slots__ = ("_dates",)

    def __init__(self, dates: Iterable[DateLike] = ()):
        coerced = {coerce_date(d) for d in dates}
        coerced.discard(None)
        self._dates: Tuple[date, ...] = tuple(sorted(coerced))

    def __iter__(self) -> Iterator[date]:
        return iter(self._dates)

    def __len__(self) -> int:
        return len(self._dates)

    def __contains__(self, value) -> bool:
        return coerce_date(value) in self._dates

    def __eq__(self, other) -> bool:
        if isinstance(other, TourDates):
            return self._dates == other._dates
        if isinstance(other, (list, tuple)):
            return self._dates == TourDates(other)._dates
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._dates)

    def __repr__(self) -> str:
        return f"TourDates({[d.isoformat() for d in self._dates]})"

    @property
    def earliest(self) -> Optional[date]:
        return self._dates[0] if self._dates else None

    def closest_to(self, target: date) -> Optional[date]:
        """Member with the smallest day distance to target; ties go to the earlier date."""
        if not self._dates:
            return None
        return min(self._dates, key=lambda d: (days_between(d, target), d))

    def distance_to(self, target: date) -> Optional[int]:
        """Smallest day distance between any member and target."""
        closest = self.closest_to(target)
        return None if closest is None else days_between(closest, target)


@dataclass(frozen=True)
class ExcelGroup:
    """
    One or more settlement rows for the same customer on adjacent dates.
    receipt_date is the minimum date of the cluster.
    """
    group_id: str
    customer_name: str
    tour_date: Optional[date]
    receipt_date: Optional[date] = None
    option: str = ""  # unique raw option texts joined with " + "
    total_amount: int = 0
    total_pax: int = 0
    adult_count: int = 0
    child_count: int = 0
    rows: Tuple[SettlementRow, ...] = ()
    is_partial_refund: bool = False
    is_full_cancellation: bool = False

    @property
    def product_name(self) -> str:
        return self.rows[0].product_name if self.rows else ""

    @property
    def row_count(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class MergedReservation:
    """
    Virtual merge of reservation records for one customer and receipt date.

    tour_date is the representative date (earliest of all_tour_dates by
    default); a match may report a closer member through with_tour_date().
    """
    group_key: str
    name: str
    receipt_date: Optional[date] = None
    tour_date: Optional[date] = None
    all_tour_dates: TourDates = field(default_factory=TourDates)
    merged_option: str = ""
    original_options: Tuple[str, ...] = ()
    total_pax: int = 0
    adult_count: int = 0
    child_count: int = 0
    reservation_ids: Tuple[str, ...] = ()
    source: str = ""
    status: str = ""
    contact: str = ""
    note: str = ""
    pickup_location: str = ""
    settlement_status: Optional[SettlementStatus] = None

    def __post_init__(self):
        object.__setattr__(self, "receipt_date", coerce_date(self.receipt_date))
        object.__setattr__(self, "tour_date", coerce_date(self.tour_date))
        dates = self.all_tour_dates
        if not isinstance(dates, TourDates):
            dates = TourDates(dates or ())
        if not dates and self.tour_date is not None:
            dates = TourDates([self.tour_date])
        object.__setattr__(self, "all_tour_dates", dates)
        if self.tour_date is None:
            object.__setattr__(self, "tour_date", dates.earliest)
        object.__setattr__(self, "original_options", tuple(self.original_options))
        object.__setattr__(self, "reservation_ids", tuple(self.reservation_ids))
        if self.settlement_status:
            object.__setattr__(
                self, "settlement_status", SettlementStatus(self.settlement_status)
            )
        else:
            object.__setattr__(self, "settlement_status", None)

    def with_tour_date(self, tour_date: date) -> "MergedReservation":
        """Copy reporting a different representative tour date."""
        return replace(self, tour_date=tour_date)

    @property
    def is_settled(self) -> bool:
        return self.settlement_status is not None
