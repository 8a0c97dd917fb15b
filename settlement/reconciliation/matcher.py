"""
Settlement Matcher - main entry point of the reconciliation engine.

Pipeline for one run:
1. Group platform rows (consecutive-date merging)
2. Pair each group with at most one merged reservation via the cascade
3. Classify the product and validate the amount
4. Compose one result per excel group and per unpaired reservation

The matcher is a pure function of its inputs: no I/O, no clock, no state
kept between calls.
"""

from datetime import date
from typing import List, Optional, Sequence

import structlog

from ..config import Settings, get_settings
from ..models import (
    ExcelGroup,
    MatchResult,
    MatchStatus,
    MergedReservation,
    ProductPrice,
    SettlementRow,
    SettlementStatus,
    STATUS_LABELS,
    LABEL_CARRY_OVER,
)
from ..utils.dates import format_short
from .amount import validate_amount
from .classifier import classify_product
from .grouping import group_excel_rows
from .strategies import STRATEGY_CASCADE, CascadeMatch, Strategy, find_match

logger = structlog.get_logger()

WEEKDAY_NAMES = ("월", "화", "수", "목", "금", "토", "일")

NOTE_FULL_CANCELLATION = "전액 환불(취소)된 예약입니다."
NOTE_CANCELLED_BUT_ACTIVE = "DB 예약이 아직 유효합니다. 취소 반영 여부를 확인하세요."
NOTE_NO_DB_MATCH = "DB에서 해당 예약(이름+날짜)을 찾을 수 없습니다."
NOTE_NO_EXCEL_MATCH = "정산 엑셀에서 해당 예약을 찾을 수 없습니다."


def is_carry_over_day(tour_date: Optional[date], settings: Settings) -> bool:
    return tour_date is not None and tour_date.weekday() == settings.carry_over_weekday


def _carry_over_note(tour_date: date) -> str:
    weekday = WEEKDAY_NAMES[tour_date.weekday()]
    return f"🕒 {weekday}요일 투어 ({format_short(tour_date)}) - 다음 주 정산 확인 필요"


def _paired_result(
    excel_group: ExcelGroup,
    match: CascadeMatch,
    products: Sequence[ProductPrice],
    settings: Settings,
) -> MatchResult:
    outcome = match.outcome
    db_group = match.db_group
    if outcome.chosen_date is not None and outcome.chosen_date != db_group.tour_date:
        db_group = db_group.with_tour_date(outcome.chosen_date)

    classified = classify_product(
        excel_group.option,
        products,
        product_name=excel_group.product_name,
        fallback_texts=db_group.original_options,
        settings=settings,
    )
    notes = list(classified.notes) + [note.text for note in outcome.notes]

    if excel_group.is_full_cancellation:
        return MatchResult(
            status=MatchStatus.CANCELLED,
            status_label=STATUS_LABELS[MatchStatus.CANCELLED],
            classified_product_name=classified.product_name,
            excel_group=excel_group,
            db_group=db_group,
            matched_product=classified.matched_product,
            actual_amount=excel_group.total_amount,
            amount_diff=excel_group.total_amount,
            notes=tuple(notes + [NOTE_FULL_CANCELLATION, NOTE_CANCELLED_BUT_ACTIVE]),
            strategy=match.strategy,
        )

    verdict = validate_amount(excel_group, db_group, classified.matched_product, settings)
    status, label = verdict.status, verdict.status_label
    # Warning-severity date notes escalate a clean pair
    if outcome.has_warning and label == STATUS_LABELS[MatchStatus.NORMAL]:
        status, label = MatchStatus.WARNING, STATUS_LABELS[MatchStatus.WARNING]

    return MatchResult(
        status=status,
        status_label=label,
        classified_product_name=classified.product_name,
        excel_group=excel_group,
        db_group=db_group,
        matched_product=classified.matched_product,
        expected_amount=verdict.expected_amount,
        actual_amount=verdict.actual_amount,
        amount_diff=verdict.amount_diff,
        diff_percent=verdict.diff_percent,
        notes=tuple(notes + list(verdict.notes)),
        strategy=match.strategy,
    )


def _unpaired_excel_result(
    excel_group: ExcelGroup,
    products: Sequence[ProductPrice],
    settings: Settings,
) -> MatchResult:
    classified = classify_product(
        excel_group.option,
        products,
        product_name=excel_group.product_name,
        settings=settings,
    )

    if excel_group.is_full_cancellation:
        status, label, note = (
            MatchStatus.CANCELLED, STATUS_LABELS[MatchStatus.CANCELLED], NOTE_FULL_CANCELLATION
        )
    elif is_carry_over_day(excel_group.tour_date, settings):
        status, label, note = (
            MatchStatus.WARNING, LABEL_CARRY_OVER, _carry_over_note(excel_group.tour_date)
        )
    else:
        status, label, note = (
            MatchStatus.ERROR, STATUS_LABELS[MatchStatus.ERROR], NOTE_NO_DB_MATCH
        )

    return MatchResult(
        status=status,
        status_label=label,
        classified_product_name=classified.product_name,
        excel_group=excel_group,
        db_group=None,
        matched_product=classified.matched_product,
        actual_amount=excel_group.total_amount,
        amount_diff=excel_group.total_amount,
        notes=(note,),
    )


def _unpaired_db_result(
    db_group: MergedReservation,
    products: Sequence[ProductPrice],
    settings: Settings,
) -> MatchResult:
    classified = classify_product(db_group.original_options, products, settings=settings)

    if db_group.settlement_status == SettlementStatus.COMPLETED:
        status, label, note = (
            MatchStatus.COMPLETED, STATUS_LABELS[MatchStatus.COMPLETED], "이미 정산 확정된 내역입니다."
        )
    elif db_group.settlement_status == SettlementStatus.EXCLUDED:
        status, label, note = (
            MatchStatus.EXCLUDED, STATUS_LABELS[MatchStatus.EXCLUDED], "정산 제외 처리된 내역입니다."
        )
    elif is_carry_over_day(db_group.tour_date, settings):
        status, label, note = (
            MatchStatus.WARNING, LABEL_CARRY_OVER, _carry_over_note(db_group.tour_date)
        )
    else:
        status, label, note = (
            MatchStatus.ERROR, STATUS_LABELS[MatchStatus.ERROR], NOTE_NO_EXCEL_MATCH
        )

    return MatchResult(
        status=status,
        status_label=label,
        classified_product_name=classified.product_name,
        excel_group=None,
        db_group=db_group,
        matched_product=classified.matched_product,
        notes=(note,),
    )


def match_settlement_data(
    excel_rows: Sequence[SettlementRow],
    db_reservations: Sequence[MergedReservation],
    products: Sequence[ProductPrice],
    settings: Optional[Settings] = None,
    cascade: Sequence[Strategy] = STRATEGY_CASCADE,
) -> List[MatchResult]:
    """
    Reconcile platform settlement rows against merged reservations.

    Args:
        excel_rows: Parsed platform rows
        db_reservations: Virtually merged reservation groups
        products: Active catalog, in priority order
        settings: Tolerances and marker tokens (defaults to get_settings())
        cascade: Matching strategies in priority order

    Returns:
        One MatchResult per excel group, then one per unpaired reservation
    """
    settings = settings or get_settings()
    excel_groups = group_excel_rows(excel_rows, settings)
    available = [True] * len(db_reservations)
    results: List[MatchResult] = []

    logger.info(
        "Starting settlement match",
        excel_rows=len(excel_rows),
        excel_groups=len(excel_groups),
        db_groups=len(db_reservations),
        products=len(products),
    )

    for excel_group in excel_groups:
        match = find_match(excel_group, db_reservations, available, settings, cascade)
        if match is None:
            results.append(_unpaired_excel_result(excel_group, products, settings))
            continue
        available[match.db_index] = False
        results.append(_paired_result(excel_group, match, products, settings))

    for index, db_group in enumerate(db_reservations):
        if available[index]:
            results.append(_unpaired_db_result(db_group, products, settings))

    logger.info(
        "Settlement match complete",
        results=len(results),
        paired=sum(1 for r in results if r.is_paired),
        unpaired_db=sum(available),
    )
    return results
