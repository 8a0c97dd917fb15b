"""
Tests for the settlement matcher (end-to-end over the cascade).
"""

import pytest
from datetime import date

from settlement.config import Settings
from settlement.models import (
    LABEL_AMOUNT_ERROR,
    LABEL_CARRY_OVER,
    LABEL_ONSITE_PAYMENT,
    MatchStatus,
    MatchStrategy,
    ProductPrice,
    SettlementStatus,
)
from settlement.reconciliation.matcher import (
    NOTE_NO_DB_MATCH,
    NOTE_NO_EXCEL_MATCH,
    match_settlement_data,
)


def _has_date_note(notes):
    return any("불일치" in n or "차이" in n for n in notes)


class TestMatchScenarios:
    """Scenarios the engine must resolve exactly."""

    def test_exact_tour_date_with_note_override(self, make_row, make_db, turtle_product):
        """DB date already overridden by a (2/8) note matches the platform date."""
        db = make_db(tour_date="2026-02-08", note="(2/8)")
        row = make_row(tour_date="2026-02-08")

        results = match_settlement_data([row], [db], [turtle_product])

        assert len(results) == 1
        assert results[0].status == MatchStatus.NORMAL
        assert results[0].strategy == MatchStrategy.EXACT_TOUR_DATE

    def test_onsite_payment_exception(self, make_row, make_db, turtle_product):
        """Shortfall with an on-site marker in the DB note is approved."""
        db = make_db(name="Jane Doe", adult_count=2, child_count=0, note="($10 add)")
        row = make_row(customer_name="Jane Doe", adult_count=0, child_count=2, platform_amount=100)

        results = match_settlement_data([row], [db], [turtle_product])

        assert results[0].status == MatchStatus.NORMAL
        assert results[0].status_label == LABEL_ONSITE_PAYMENT
        assert results[0].expected_amount == 200
        assert results[0].amount_diff == -100

    def test_saturday_carry_over_for_unmatched_db_group(self, make_db, turtle_product):
        """Unmatched Saturday reservation rolls into the next cycle."""
        db = make_db(
            group_key="unmatched_sat",
            name="Saturday User",
            tour_date="2026-02-14",
            receipt_date="2026-02-01",
        )

        results = match_settlement_data([], [db], [turtle_product])

        assert len(results) == 1
        assert results[0].status_label == LABEL_CARRY_OVER
        assert results[0].status == MatchStatus.WARNING
        assert results[0].excel_group is None
        assert results[0].db_group is db

    def test_exact_receipt_date_with_different_tour_date(self, make_row, make_db, turtle_product):
        """Same receipt date pairs even when tour dates differ."""
        row = make_row(
            customer_name="Kang Ryu-ah",
            tour_date="2026-02-06",
            receipt_date="2026-02-01",
            adult_count=3,
            pax=3,
            platform_amount=300,
        )
        db = make_db(
            name="Kang Ryu-ah",
            tour_date="2026-02-07",
            receipt_date="2026-02-01",
            adult_count=3,
            total_pax=3,
            group_key="Kang Ryu-ah|2026-02-01",
        )

        results = match_settlement_data([row], [db], [turtle_product])

        assert results[0].strategy == MatchStrategy.EXACT_RECEIPT_DATE
        assert results[0].status in (MatchStatus.NORMAL, MatchStatus.WARNING)
        assert any("접수일 일치하나" in n for n in results[0].notes)
        assert results[0].db_group.tour_date == date(2026, 2, 7)

    def test_fuzzy_receipt_date_one_day_apart(self, make_row, make_db, turtle_product):
        """Receipt dates one day apart still pair, with a 1-day note."""
        row = make_row(
            customer_name="Hwang Hyo-jung",
            tour_date="2026-01-15",
            receipt_date="2025-12-04",
            adult_count=1,
            pax=1,
            platform_amount=100,
        )
        db = make_db(
            name="Hwang Hyo-jung",
            tour_date="2026-01-15",
            receipt_date="2025-12-03",
            adult_count=1,
            total_pax=1,
            group_key="Hwang Hyo-jung|2025-12-03",
        )

        results = match_settlement_data([row], [db], [turtle_product])

        assert results[0].is_paired
        assert results[0].status in (MatchStatus.NORMAL, MatchStatus.WARNING)
        assert any("1일 차이" in n for n in results[0].notes)

    def test_fuzzy_receipt_strategy_when_tour_dates_differ(self, make_row, make_db, turtle_product):
        row = make_row(tour_date="2026-01-16", receipt_date="2025-12-04", adult_count=1, platform_amount=100)
        db = make_db(tour_date="2026-01-15", receipt_date="2025-12-03", adult_count=1)

        results = match_settlement_data([row], [db], [turtle_product])

        assert results[0].strategy == MatchStrategy.FUZZY_RECEIPT_DATE
        assert results[0].status == MatchStatus.WARNING
        assert any("1일 차이" in n for n in results[0].notes)

    def test_tour_date_tolerance_without_receipt_is_silent(self, make_row, make_db, turtle_product):
        """No receipt date: a one-day tour drift is accepted without a note."""
        row = make_row(
            customer_name="Tolerance User",
            tour_date="2026-02-06",
            receipt_date="",
            platform_amount=100,
            adult_count=1,
            pax=1,
        )
        db = make_db(
            name="Tolerance User",
            tour_date="2026-02-07",
            receipt_date="2026-01-01",
            group_key="Tolerance User|2026-02-07",
            adult_count=1,
            total_pax=1,
        )

        results = match_settlement_data([row], [db], [turtle_product])

        assert results[0].status == MatchStatus.NORMAL
        assert results[0].strategy == MatchStrategy.TOUR_DATE_TOLERANCE
        assert not _has_date_note(results[0].notes)

    def test_consecutive_receipt_dates_use_minimum_date(self, make_row, make_db, turtle_product):
        """Rows on 1/4 and 1/5 merge; 1/4 lines up with the DB's 1/3."""
        rows = [
            make_row(customer_name="Park KM", receipt_date="2026-01-04", platform_amount=100, pax=5),
            make_row(customer_name="Park KM", receipt_date="2026-01-05", platform_amount=20, pax=1),
        ]
        db = make_db(
            name="Park KM",
            receipt_date="2026-01-03",
            tour_date="2026-02-10",
            total_pax=6,
            group_key="Park KM|2026-01-03",
        )

        results = match_settlement_data(rows, [db], [turtle_product])

        assert len(results) == 1
        result = results[0]
        assert result.status in (MatchStatus.NORMAL, MatchStatus.WARNING)
        assert result.excel_group.receipt_date == date(2026, 1, 4)
        assert result.excel_group.total_pax == 6
        assert result.excel_group.total_amount == 120
        assert any("1일 차이" in n for n in result.notes)

    def test_later_receipt_date_alone_does_not_match(self, make_row, make_db, turtle_product):
        """Two days apart is outside every strategy."""
        row = make_row(customer_name="Park KM", receipt_date="2026-01-05", platform_amount=20, pax=1)
        db = make_db(name="Park KM", receipt_date="2026-01-03", tour_date="2026-02-10")

        results = match_settlement_data([row], [db], [turtle_product])

        excel_result = results[0]
        assert excel_result.db_group is None
        assert excel_result.status == MatchStatus.ERROR
        assert NOTE_NO_DB_MATCH in excel_result.notes
        assert results[1].excel_group is None

    def test_simplified_product_name(self, make_row, make_db, turtle_product):
        long_name = ProductPrice(
            id="1", product_name="Long Turtle Name", match_keywords="turtle",
            adult_price=100, child_price=50,
        )
        row = make_row(customer_name="SimpleName", tour_date="2026-02-10", platform_amount=100)
        db = make_db(
            name="SimpleName", tour_date="2026-02-10",
            original_options=("Turtle",), group_key="SimpleName|2026-02-10",
        )

        results = match_settlement_data([row], [db], [long_name])

        assert results[0].classified_product_name == "1/2부"

    def test_cancelled_item_is_classified(self, make_row):
        long_name = ProductPrice(
            id="1", product_name="Long Turtle Name", match_keywords="turtle",
            adult_price=100, child_price=50,
        )
        row = make_row(
            customer_name="CancelledUser",
            product_name="Turtle Snorkeling",
            platform_amount=0,
            status="취소",
            pax=2,
        )

        results = match_settlement_data([row], [], [long_name])

        assert results[0].status == MatchStatus.CANCELLED
        assert results[0].classified_product_name == "1/2부"
        assert results[0].db_group is None

    def test_excel_option_retained_when_unmatched(self, make_row, turtle_product):
        row = make_row(
            customer_name="OptionFallback",
            product_name="Long Product Name",
            option="09:00 (1부)",
            platform_amount=100,
            status="전처리완료",
        )

        results = match_settlement_data([row], [], [turtle_product])

        assert results[0].excel_group.option == "09:00 (1부)"
        assert results[0].classified_product_name == "09:00 (1부)"

    def test_multi_date_group_reports_closest_date(self, make_row, make_db, turtle_product):
        row = make_row(
            customer_name="Jeon Yu-ra",
            tour_date="2026-01-30",
            receipt_date="2024-01-15",
            option="1부",
            platform_amount=200,
            pax=2,
        )
        db = make_db(
            name="Jeon Yu-ra",
            tour_date="2026-01-29",
            all_tour_dates=["2026-01-29", "2026-01-30"],
            merged_option="1부 + 패러",
            receipt_date="2024-01-15",
            group_key="Jeon Yu-ra|2024-01-15",
            total_pax=2,
            adult_count=2,
        )

        results = match_settlement_data([row], [db], [turtle_product])

        assert results[0].db_group.tour_date == date(2026, 1, 30)
        assert not _has_date_note(results[0].notes)
        assert results[0].status == MatchStatus.NORMAL
        # input left untouched
        assert db.tour_date == date(2026, 1, 29)


class TestMatchPolicies:
    """Cascade ordering, pairing and verdict policies."""

    def test_exact_receipt_never_errors(self, make_row, make_db, turtle_product):
        row = make_row(receipt_date="2026-01-01", platform_amount=1000)
        db = make_db(receipt_date="2026-01-01")

        results = match_settlement_data([row], [db], [turtle_product])

        assert results[0].status == MatchStatus.WARNING

    def test_large_uncorroborated_diff_is_error(self, make_row, make_db, turtle_product):
        row = make_row(platform_amount=1000)
        db = make_db()

        results = match_settlement_data([row], [db], [turtle_product])

        assert results[0].status == MatchStatus.ERROR
        assert results[0].status_label == LABEL_AMOUNT_ERROR
        assert results[0].diff_percent == pytest.approx(400.0)

    def test_error_threshold_is_configurable(self, make_row, make_db, turtle_product):
        row = make_row(platform_amount=260)
        db = make_db()

        default = match_settlement_data([row], [db], [turtle_product])
        strict = match_settlement_data(
            [row], [db], [turtle_product], settings=Settings(amount_error_threshold_pct=10)
        )

        assert default[0].status == MatchStatus.WARNING
        assert strict[0].status == MatchStatus.ERROR

    def test_db_group_pairs_only_once(self, make_row, make_db, turtle_product):
        rows = [
            make_row(reservation_id="a", tour_date="2026-02-08"),
            make_row(reservation_id="b", tour_date="2026-02-20"),
        ]
        db = make_db()

        results = match_settlement_data(rows, [db], [turtle_product])

        assert len(results) == 2
        assert results[0].db_group is not None
        assert results[1].db_group is None
        assert results[1].status == MatchStatus.ERROR

    def test_exact_tour_date_beats_tolerance(self, make_row, make_db, turtle_product):
        row = make_row(tour_date="2026-02-10")
        near = make_db(group_key="near", tour_date="2026-02-09", receipt_date="2026-01-02")
        exact = make_db(group_key="exact", tour_date="2026-02-10", receipt_date="2026-01-05")

        results = match_settlement_data([row], [near, exact], [turtle_product])

        assert results[0].db_group.group_key == "exact"
        assert results[0].strategy == MatchStrategy.EXACT_TOUR_DATE

    def test_tolerance_tie_goes_to_earlier_date(self, make_row, make_db, turtle_product):
        row = make_row(tour_date="2026-02-10")
        later = make_db(group_key="later", tour_date="2026-02-11", receipt_date="2026-01-01")
        earlier = make_db(group_key="earlier", tour_date="2026-02-09", receipt_date="2026-01-02")

        results = match_settlement_data([row], [later, earlier], [turtle_product])

        assert results[0].db_group.group_key == "earlier"
        assert results[1].db_group.group_key == "later"

    def test_names_compare_after_normalization(self, make_row, make_db, turtle_product):
        row = make_row(customer_name="  JOHN   doe ")
        db = make_db(name="John Doe")

        results = match_settlement_data([row], [db], [turtle_product])

        assert results[0].is_paired

    def test_partial_names_do_not_match(self, make_row, make_db, turtle_product):
        row = make_row(customer_name="John")
        db = make_db(name="John Doe")

        results = match_settlement_data([row], [db], [turtle_product])

        assert not results[0].is_paired

    def test_partial_refund(self, make_row, make_db, turtle_product):
        rows = [
            make_row(reservation_id="a", platform_amount=200),
            make_row(reservation_id="b", platform_amount=-50, status="부분취소"),
        ]

        results = match_settlement_data(rows, [make_db()], [turtle_product])

        assert len(results) == 1
        assert results[0].status == MatchStatus.PARTIAL_REFUND
        assert results[0].actual_amount == 150

    def test_full_cancellation_with_active_reservation(self, make_row, make_db, turtle_product):
        row = make_row(platform_amount=0, status="취소")

        results = match_settlement_data([row], [make_db()], [turtle_product])

        assert len(results) == 1
        assert results[0].status == MatchStatus.CANCELLED
        assert results[0].db_group is not None

    def test_saturday_unmatched_excel_is_carry_over(self, make_row, turtle_product):
        row = make_row(tour_date="2026-02-14")

        results = match_settlement_data([row], [], [turtle_product])

        assert results[0].status == MatchStatus.WARNING
        assert results[0].status_label == LABEL_CARRY_OVER

    def test_weekday_unmatched_db_group_is_error(self, make_db, turtle_product):
        db = make_db(tour_date="2026-02-10")

        results = match_settlement_data([], [db], [turtle_product])

        assert results[0].status == MatchStatus.ERROR
        assert results[0].notes == (NOTE_NO_EXCEL_MATCH,)

    def test_settled_reservation(self, make_row, make_db, turtle_product):
        db = make_db(settlement_status=SettlementStatus.COMPLETED)
        leftover = make_db(group_key="other", name="Other", settlement_status="excluded")

        results = match_settlement_data([make_row()], [db, leftover], [turtle_product])

        assert results[0].status == MatchStatus.COMPLETED
        assert results[1].status == MatchStatus.EXCLUDED

    def test_option_decides_product_over_package_name(self, make_row, make_db, turtle_product):
        parasail = ProductPrice(
            id="3", product_name="패러세일링", match_keywords="패러, parasail",
            adult_price=200, child_price=150,
        )
        row = make_row(
            option="Parasail",
            product_name="Jeju Turtle & Parasail Marine Package",
            platform_amount=400,
        )
        db = make_db(merged_option="패러", original_options=("패러",))

        results = match_settlement_data([row], [db], [turtle_product, parasail])

        assert results[0].matched_product.id == "3"
        assert results[0].classified_product_name == "패러"
        assert results[0].expected_amount == 400
        assert results[0].status == MatchStatus.NORMAL

    def test_unknown_product_is_warning(self, make_row, make_db):
        results = match_settlement_data([make_row()], [make_db()], [])

        assert results[0].status == MatchStatus.WARNING
        assert results[0].expected_amount == 0
        assert results[0].matched_product is None

    def test_is_deterministic(self, make_row, make_db, turtle_product):
        rows = [make_row(), make_row(customer_name="Jane", tour_date="2026-02-14")]
        dbs = [make_db(), make_db(group_key="k2", name="Nobody", tour_date="2026-02-14")]

        first = match_settlement_data(rows, dbs, [turtle_product])
        second = match_settlement_data(rows, dbs, [turtle_product])

        assert first == second


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
