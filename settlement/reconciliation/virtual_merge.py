"""
Virtual Merge Builder - collapses reservation records into matchable groups.

One customer often books several options (or several days) in a single
order; the store keeps one record per option. Records sharing a customer and
receipt date are merged so the platform's single settlement line can be
compared against the whole order.
"""

import re
from collections import OrderedDict
from datetime import date
from typing import Dict, Iterable, List, Optional

import structlog

from ..config import Settings, get_settings
from ..models import MergedReservation, Reservation, TourDates
from ..utils.text import extract_child_count, normalize_name, normalize_pickup, parse_pax

logger = structlog.get_logger()

# "(2/6)" or "( 02 / 06 )" in a note moves the tour to that day
_DATE_OVERRIDE = re.compile(r"\(\s*(\d{1,2})\s*/\s*(\d{1,2})\s*\)")


def extract_date_override(note: str, tour_date: Optional[date]) -> Optional[date]:
    """
    Read a rescheduled tour day from a note.

    The year is taken from the record's tour date. Impossible days
    (e.g. 2/30) are ignored.
    """
    match = _DATE_OVERRIDE.search(note or "")
    if not match or tour_date is None:
        return None
    try:
        return date(tour_date.year, int(match.group(1)), int(match.group(2)))
    except ValueError:
        return None


def matching_date(record: Reservation) -> Optional[date]:
    """Tour date used for matching, after applying a note override."""
    override = extract_date_override(record.note, record.tour_date)
    # An override equal to the receipt date is a booking memo, not a reschedule
    if override is not None and override != record.receipt_date:
        return override
    return record.tour_date


def group_key(record: Reservation, tour_day: Optional[date]) -> str:
    name = normalize_name(record.name)
    if record.receipt_date is not None:
        return f"{name}|RD:{record.receipt_date.isoformat()}"
    return f"{name}|TD:{tour_day.isoformat() if tour_day else ''}"


def _merge_group(key: str, records: List[Reservation], tour_days: List[Optional[date]]) -> MergedReservation:
    first = records[0]

    options: List[str] = []
    for record in records:
        option = (record.option or "").strip()
        if option and option not in options:
            options.append(option)

    total_pax = 0
    adult_count = 0
    child_count = 0
    for record in records:
        pax = parse_pax(record.pax)
        child = extract_child_count(f"{record.note} {record.pickup_location}") or record.child_count
        total_pax += pax
        child_count += child
        adult_count += max(0, pax - child)

    pickups = {normalize_pickup(r.pickup_location) for r in records if r.pickup_location}
    if len(pickups) > 1:
        logger.warning(
            "Merged reservations have different pickups",
            group_key=key,
            pickups=sorted(pickups),
        )

    all_tour_dates = TourDates(tour_days)

    return MergedReservation(
        group_key=key,
        name=first.name,
        receipt_date=first.receipt_date,
        tour_date=all_tour_dates.earliest,
        all_tour_dates=all_tour_dates,
        merged_option=" + ".join(options),
        original_options=tuple(options),
        total_pax=total_pax,
        adult_count=adult_count,
        child_count=child_count,
        reservation_ids=tuple(str(r.id) for r in records),
        source=first.source,
        status=first.status,
        contact=first.contact,
        note=first.note,
        pickup_location=first.pickup_location,
        settlement_status=first.settlement_status,
    )


def build_merged_reservations(
    records: Iterable[Reservation],
    drop_cancelled: bool = True,
    settings: Optional[Settings] = None,
) -> List[MergedReservation]:
    """
    Group reservation records by customer name and receipt date.

    Args:
        records: Raw reservation records in store order
        drop_cancelled: Skip records whose status carries a cancellation marker

    Returns:
        One MergedReservation per (name, receipt date), in first-seen order
    """
    settings = settings or get_settings()
    groups: Dict[str, List[Reservation]] = OrderedDict()
    tour_days: Dict[str, List[Optional[date]]] = {}
    dropped = 0

    for record in records:
        if drop_cancelled and settings.is_cancellation_text(record.status):
            dropped += 1
            continue
        tour_day = matching_date(record)
        key = group_key(record, tour_day)
        groups.setdefault(key, []).append(record)
        tour_days.setdefault(key, []).append(tour_day)

    merged = [_merge_group(key, group, tour_days[key]) for key, group in groups.items()]

    logger.info(
        "Virtual merge complete",
        groups=len(merged),
        dropped_cancelled=dropped,
    )
    return merged


def select_unsettled_before(
    records: Iterable[Reservation],
    cutoff: date,
    settings: Optional[Settings] = None,
) -> List[MergedReservation]:
    """
    Merge past reservations that were never settled.

    Used to surface carry-over bookings from earlier cycles: tour date before
    cutoff, no settlement status, not cancelled.
    """
    pending = [
        record for record in records
        if record.tour_date is not None
        and record.tour_date < cutoff
        and record.settlement_status is None
    ]
    return build_merged_reservations(pending, drop_cancelled=True, settings=settings)
