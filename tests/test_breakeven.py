import pytest

from marginiq.config.benchmarks import DEFAULT_BENCHMARKS
from marginiq.services.breakeven import (
    DANGER_ZONE,
    HEALTHY,
    TIGHT,
    breakeven_covers,
    classify_safety_margin,
    compute_breakeven,
    estimate_fte_staff,
)


@pytest.fixture(name="reference_period")
def reference_period_fixture(make_period):
    # fixed 5000 + energy 1000 = 6000; variable 3000 over 400 covers
    return make_period(
        revenue=10000,
        total_covers=400,
        avg_ticket_size=25,
        rent_cost=4000,
        technology_cost=500,
        marketing_cost=500,
        energy_cost=1000,
        food_cost=2500,
        waste_cost=200,
        supplies_cost=300,
    )


def test_reference_breakeven(reference_period) -> None:
    result = compute_breakeven(reference_period, benchmarks=DEFAULT_BENCHMARKS)

    assert result.fixed_costs + result.other_costs == pytest.approx(6000)
    assert result.variable_costs == pytest.approx(3000)
    assert result.variable_cost_per_cover == pytest.approx(7.5)
    assert result.contribution_margin_per_cover == pytest.approx(17.5)
    assert result.breakeven_monthly_covers == 343
    assert result.breakeven_daily_covers == 14
    assert result.breakeven_weekly_covers == 80
    assert result.breakeven_revenue == pytest.approx(343 * 25)
    assert result.safety_margin_percent == pytest.approx(14.25)
    assert result.safety_status == TIGHT
    assert result.breakeven_reachable is True


def test_scenarios_report_signed_change(reference_period) -> None:
    result = compute_breakeven(reference_period, benchmarks=DEFAULT_BENCHMARKS)
    scenarios = {scenario.key: scenario for scenario in result.scenarios}

    assert scenarios["avg-spend"].breakeven_monthly_covers == 308
    assert scenarios["avg-spend"].change_in_monthly_covers == -35
    assert scenarios["food-cost"].change_in_monthly_covers == -14
    assert scenarios["energy"].change_in_monthly_covers == 9
    assert scenarios["wage-rise"].change_in_monthly_covers == 0


def test_labour_split_sixty_forty(make_period) -> None:
    result = compute_breakeven(
        make_period(revenue=20000, total_covers=800, avg_ticket_size=25, labour_cost=5000),
        benchmarks=DEFAULT_BENCHMARKS,
    )

    assert result.fixed_costs == pytest.approx(3000)
    assert result.variable_costs == pytest.approx(2000)


@pytest.mark.parametrize("rent", [1000, 2000, 4000, 8000])
def test_more_fixed_cost_never_needs_fewer_covers(make_period, rent) -> None:
    base = compute_breakeven(
        make_period(revenue=10000, total_covers=400, avg_ticket_size=25, rent_cost=rent, food_cost=3000),
        benchmarks=DEFAULT_BENCHMARKS,
    )
    higher = compute_breakeven(
        make_period(revenue=10000, total_covers=400, avg_ticket_size=25, rent_cost=rent + 500, food_cost=3000),
        benchmarks=DEFAULT_BENCHMARKS,
    )

    assert higher.breakeven_monthly_covers >= base.breakeven_monthly_covers


@pytest.mark.parametrize("ticket", [15, 20, 25, 40])
def test_higher_ticket_never_needs_more_covers(make_period, ticket) -> None:
    low = compute_breakeven(
        make_period(revenue=10000, total_covers=400, avg_ticket_size=ticket, rent_cost=3000, food_cost=3000),
        benchmarks=DEFAULT_BENCHMARKS,
    )
    high = compute_breakeven(
        make_period(revenue=10000, total_covers=400, avg_ticket_size=ticket + 5, rent_cost=3000, food_cost=3000),
        benchmarks=DEFAULT_BENCHMARKS,
    )

    assert high.breakeven_monthly_covers <= low.breakeven_monthly_covers


def test_breakeven_strictly_moves_with_ticket_and_fixed_cost(reference_period) -> None:
    base = compute_breakeven(reference_period, benchmarks=DEFAULT_BENCHMARKS)
    dearer_ticket = compute_breakeven(
        reference_period.model_copy(update={"avg_ticket_size": 30}), benchmarks=DEFAULT_BENCHMARKS
    )
    higher_rent = compute_breakeven(
        reference_period.model_copy(update={"rent_cost": 4500}), benchmarks=DEFAULT_BENCHMARKS
    )

    # 6000 / 22.5 and 6500 / 17.5, rounded up
    assert dearer_ticket.breakeven_monthly_covers == 267
    assert higher_rent.breakeven_monthly_covers == 372
    assert dearer_ticket.breakeven_monthly_covers < base.breakeven_monthly_covers < higher_rent.breakeven_monthly_covers


def test_unreachable_when_margin_not_positive(make_period) -> None:
    result = compute_breakeven(
        make_period(revenue=2000, total_covers=400, avg_ticket_size=5, rent_cost=1000, food_cost=3000),
        benchmarks=DEFAULT_BENCHMARKS,
    )

    assert result.breakeven_reachable is False
    assert result.message
    assert result.breakeven_monthly_covers == 0
    assert result.safety_margin_percent is None
    assert result.safety_status == DANGER_ZONE
    assert all(scenario.change_in_monthly_covers is None for scenario in result.scenarios)


def test_zero_covers_defaults_to_one(make_period) -> None:
    result = compute_breakeven(make_period(revenue=5000, rent_cost=1000), benchmarks=DEFAULT_BENCHMARKS)

    assert result.covers_defaulted is True
    assert result.total_covers == 1
    assert result.avg_ticket_size == pytest.approx(5000)


def test_zero_revenue_has_zero_safety_margin(make_period) -> None:
    result = compute_breakeven(
        make_period(revenue=0, total_covers=10, avg_ticket_size=20, rent_cost=100),
        benchmarks=DEFAULT_BENCHMARKS,
    )

    assert result.safety_margin_percent == 0.0
    assert result.safety_status == DANGER_ZONE


@pytest.mark.parametrize(
    "margin,expected",
    [(15, HEALTHY), (30, HEALTHY), (14.99, TIGHT), (5, TIGHT), (4.9, DANGER_ZONE), (-10, DANGER_ZONE)],
)
def test_safety_margin_bands(margin, expected) -> None:
    assert classify_safety_margin(margin, DEFAULT_BENCHMARKS) == expected


def test_breakeven_covers_rounds_up() -> None:
    assert breakeven_covers(100, 30) == 4
    assert breakeven_covers(90, 30) == 3
    assert breakeven_covers(100, 0) is None


def test_fte_estimate_uses_current_wage() -> None:
    # 12.21 * 160 = 1953.6 per FTE
    assert estimate_fte_staff(19536, DEFAULT_BENCHMARKS) == 10
