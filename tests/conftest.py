from pathlib import Path
import sys

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from marginiq.schemas import FinancialPeriod


@pytest.fixture(name="make_period")
def make_period_fixture():
    """Factory for FinancialPeriod records; unspecified money fields are 0."""

    def _make(**overrides) -> FinancialPeriod:
        values = {"restaurant_id": 1, "month": "January", "year": 2025}
        values.update(overrides)
        return FinancialPeriod(**values)

    return _make


@pytest.fixture(name="healthy_period")
def healthy_period_fixture(make_period) -> FinancialPeriod:
    """A month sitting inside every UK benchmark band."""

    return make_period(
        revenue=50000,
        food_cost=14000,
        labour_cost=2500,
        energy_cost=2500,
        rent_cost=3500,
        marketing_cost=1000,
        supplies_cost=500,
        technology_cost=500,
        waste_cost=1000,
        delivery_revenue=10000,
        dine_in_revenue=35000,
        takeaway_revenue=5000,
        total_covers=1600,
        avg_ticket_size=31.25,
        repeat_customer_rate=40,
    )
