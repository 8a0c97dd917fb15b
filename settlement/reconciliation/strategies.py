"""
Matching strategies - the ordered cascade that pairs excel groups with
merged reservations.

Each strategy is an independent unit: a gate on the excel group and a
resolver that, for one same-name DB group, either rejects it or returns the
tour date to report plus any diagnostic notes. STRATEGY_CASCADE fixes the
order; the first strategy with at least one candidate wins, and candidates
within a strategy are ranked by the day distance of their chosen date.
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional, Sequence, Tuple

import structlog

from ..config import Settings
from ..models import ExcelGroup, MatchStrategy, MergedReservation, NoteSeverity
from ..utils.dates import days_between, format_short
from ..utils.text import normalize_name

logger = structlog.get_logger()


@dataclass(frozen=True)
class MatchNote:
    """Diagnostic note attached to a pairing."""
    text: str
    severity: NoteSeverity = NoteSeverity.INFO


@dataclass(frozen=True)
class StrategyOutcome:
    """Accepted candidate: the date to report and what was noticed."""
    chosen_date: Optional[date]
    notes: Tuple[MatchNote, ...] = ()

    @property
    def has_warning(self) -> bool:
        return any(n.severity == NoteSeverity.WARNING for n in self.notes)


Resolver = Callable[[ExcelGroup, MergedReservation, Settings], Optional[StrategyOutcome]]


@dataclass(frozen=True)
class Strategy:
    """One step of the cascade."""
    name: MatchStrategy
    resolve: Resolver
    applies: Callable[[ExcelGroup], bool] = lambda group: True


@dataclass(frozen=True)
class CascadeMatch:
    """Winning candidate of the cascade."""
    strategy: MatchStrategy
    db_index: int
    db_group: MergedReservation
    outcome: StrategyOutcome


def names_match(excel_group: ExcelGroup, db_group: MergedReservation) -> bool:
    excel_name = normalize_name(excel_group.customer_name)
    return bool(excel_name) and excel_name == normalize_name(db_group.name)


def _closest_date(excel_group: ExcelGroup, db_group: MergedReservation) -> Optional[date]:
    if excel_group.tour_date is None:
        return db_group.tour_date
    return db_group.all_tour_dates.closest_to(excel_group.tour_date) or db_group.tour_date


def receipt_drift_note(
    excel_group: ExcelGroup,
    db_group: MergedReservation,
    settings: Settings,
) -> Optional[MatchNote]:
    """Warn when both receipt dates exist and differ within the tolerance."""
    if excel_group.receipt_date is None or db_group.receipt_date is None:
        return None
    drift = days_between(excel_group.receipt_date, db_group.receipt_date)
    if drift == 0 or drift > settings.receipt_date_tolerance_days:
        return None
    return MatchNote(
        f"⚠️ 접수일 {drift}일 차이 "
        f"(엑셀: {format_short(excel_group.receipt_date)} vs DB: {format_short(db_group.receipt_date)})",
        NoteSeverity.WARNING,
    )


def _tour_mismatch_note(excel_group: ExcelGroup, chosen: Optional[date], prefix: str) -> MatchNote:
    return MatchNote(
        f"⚠️ {prefix}투어일 불일치 "
        f"(엑셀: {format_short(excel_group.tour_date)} vs DB: {format_short(chosen)})",
        NoteSeverity.WARNING,
    )


def resolve_exact_tour_date(
    excel_group: ExcelGroup,
    db_group: MergedReservation,
    settings: Settings,
) -> Optional[StrategyOutcome]:
    if excel_group.tour_date is None or excel_group.tour_date not in db_group.all_tour_dates:
        return None
    drift = receipt_drift_note(excel_group, db_group, settings)
    return StrategyOutcome(excel_group.tour_date, (drift,) if drift else ())


def resolve_exact_receipt_date(
    excel_group: ExcelGroup,
    db_group: MergedReservation,
    settings: Settings,
) -> Optional[StrategyOutcome]:
    if db_group.receipt_date is None or excel_group.receipt_date != db_group.receipt_date:
        return None
    chosen = _closest_date(excel_group, db_group)
    if excel_group.tour_date is not None and chosen != excel_group.tour_date:
        return StrategyOutcome(chosen, (_tour_mismatch_note(excel_group, chosen, "접수일 일치하나 "),))
    return StrategyOutcome(chosen)


def resolve_fuzzy_receipt_date(
    excel_group: ExcelGroup,
    db_group: MergedReservation,
    settings: Settings,
) -> Optional[StrategyOutcome]:
    drift = receipt_drift_note(excel_group, db_group, settings)
    if drift is None:
        return None
    chosen = _closest_date(excel_group, db_group)
    notes = [drift]
    if (
        excel_group.tour_date is not None
        and chosen is not None
        and days_between(chosen, excel_group.tour_date) > settings.tour_date_tolerance_days
    ):
        notes.append(_tour_mismatch_note(excel_group, chosen, ""))
    return StrategyOutcome(chosen, tuple(notes))


def resolve_tour_date_tolerance(
    excel_group: ExcelGroup,
    db_group: MergedReservation,
    settings: Settings,
) -> Optional[StrategyOutcome]:
    # no note: the drift is accepted silently
    if excel_group.tour_date is None:
        return None
    distance = db_group.all_tour_dates.distance_to(excel_group.tour_date)
    if distance is None or distance > settings.tour_date_tolerance_days:
        return None
    return StrategyOutcome(db_group.all_tour_dates.closest_to(excel_group.tour_date))


STRATEGY_CASCADE: Tuple[Strategy, ...] = (
    Strategy(MatchStrategy.EXACT_TOUR_DATE, resolve_exact_tour_date),
    Strategy(
        MatchStrategy.EXACT_RECEIPT_DATE,
        resolve_exact_receipt_date,
        applies=lambda group: group.receipt_date is not None,
    ),
    Strategy(
        MatchStrategy.FUZZY_RECEIPT_DATE,
        resolve_fuzzy_receipt_date,
        applies=lambda group: group.receipt_date is not None,
    ),
    Strategy(
        MatchStrategy.TOUR_DATE_TOLERANCE,
        resolve_tour_date_tolerance,
        applies=lambda group: group.receipt_date is None,
    ),
)


def _rank(excel_group: ExcelGroup, index: int, outcome: StrategyOutcome):
    chosen = outcome.chosen_date
    if chosen is None or excel_group.tour_date is None:
        return (0, date.max, index)
    return (days_between(chosen, excel_group.tour_date), chosen, index)


def find_match(
    excel_group: ExcelGroup,
    db_groups: Sequence[MergedReservation],
    available: Sequence[bool],
    settings: Settings,
    cascade: Sequence[Strategy] = STRATEGY_CASCADE,
) -> Optional[CascadeMatch]:
    """
    Run the cascade for one excel group.

    Args:
        excel_group: Group to pair
        db_groups: All merged reservations
        available: Per DB group, whether it is still unpaired
        settings: Tolerances
        cascade: Strategies in priority order

    Returns:
        CascadeMatch for the winning candidate, or None
    """
    same_name = [
        (index, db_group)
        for index, db_group in enumerate(db_groups)
        if available[index] and names_match(excel_group, db_group)
    ]
    if not same_name:
        return None

    for strategy in cascade:
        if not strategy.applies(excel_group):
            continue

        candidates: List[Tuple[int, MergedReservation, StrategyOutcome]] = []
        for index, db_group in same_name:
            outcome = strategy.resolve(excel_group, db_group, settings)
            if outcome is not None:
                candidates.append((index, db_group, outcome))

        if candidates:
            index, db_group, outcome = min(
                candidates, key=lambda c: _rank(excel_group, c[0], c[2])
            )
            logger.debug(
                "Cascade matched",
                strategy=strategy.name.value,
                excel_group=excel_group.group_id,
                db_group=db_group.group_key,
                candidates=len(candidates),
            )
            return CascadeMatch(strategy.name, index, db_group, outcome)

    return None
