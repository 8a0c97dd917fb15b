"""
Shared fixtures for settlement tests.
"""

import pytest

from settlement.config import Settings
from settlement.models import MergedReservation, ProductPrice, Reservation, SettlementRow


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def turtle_product():
    return ProductPrice(
        id="1",
        product_name="거북이 스노클링",
        match_keywords="turtle",
        adult_price=100,
        child_price=50,
        tier_group="Tier 1",
        is_active=True,
    )


@pytest.fixture
def make_row():
    """Factory for settlement rows with sensible defaults."""
    def _make(**overrides):
        values = dict(
            reservation_id="row1",
            product_name="Turtle",
            tour_date="2026-02-08",
            pax=2,
            adult_count=2,
            child_count=0,
            platform_amount=200,
            customer_name="John Doe",
            status="Confirmed",
            option="",
        )
        values.update(overrides)
        return SettlementRow(**values)
    return _make


@pytest.fixture
def make_db():
    """Factory for merged reservations with sensible defaults."""
    def _make(**overrides):
        values = dict(
            group_key="key1",
            name="John Doe",
            receipt_date="2026-01-01",
            tour_date="2026-02-08",
            merged_option="Turtle 1부",
            original_options=("Turtle", "1부"),
            total_pax=2,
            adult_count=2,
            child_count=0,
            reservation_ids=("id1",),
            source="M",
            status="Confirmed",
            contact="123",
            note="",
            pickup_location="Hotel",
        )
        values.update(overrides)
        return MergedReservation(**values)
    return _make


@pytest.fixture
def make_reservation():
    """Factory for raw reservation records."""
    def _make(**overrides):
        values = dict(
            id="r1",
            name="John Doe",
            receipt_date="2026-01-01",
            tour_date="2026-02-08",
            option="1부",
            pax=2,
            source="M",
            status="예약확정",
            contact="010-0000-0000",
            note="",
            pickup_location="Hotel",
        )
        values.update(overrides)
        return Reservation(**values)
    return _make
