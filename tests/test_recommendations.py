import pytest

from marginiq.config.benchmarks import DEFAULT_BENCHMARKS, BenchmarkTable
from marginiq.services.recommendations import (
    IMPACT_ORDER,
    PeriodRatios,
    delivery_rule,
    food_cost_rule,
    generate_recommendations,
)


def test_healthy_period_has_no_recommendations(healthy_period) -> None:
    assert generate_recommendations(healthy_period, benchmarks=DEFAULT_BENCHMARKS) == []


def test_food_cost_at_high_threshold_fires_with_saving(healthy_period) -> None:
    period = healthy_period.model_copy(update={"food_cost": 17500})

    recommendations = generate_recommendations(period, benchmarks=DEFAULT_BENCHMARKS)

    assert [rec.id for rec in recommendations] == ["food-cost-high"]
    food = recommendations[0]
    assert food.impact == "high"
    assert food.estimated_saving == 2500
    assert food.actions


def test_energy_above_eight_percent_fires(healthy_period) -> None:
    period = healthy_period.model_copy(update={"energy_cost": 4250})

    recommendations = generate_recommendations(period, benchmarks=DEFAULT_BENCHMARKS)

    assert [rec.id for rec in recommendations] == ["energy-high"]
    assert recommendations[0].impact == "medium"
    assert recommendations[0].estimated_saving == 1250


@pytest.fixture(name="struggling_period")
def struggling_period_fixture(make_period):
    return make_period(
        revenue=10000,
        food_cost=4000,
        labour_cost=3500,
        energy_cost=1000,
        waste_cost=500,
        rent_cost=1300,
        delivery_revenue=4000,
        dine_in_revenue=6000,
        total_covers=500,
        avg_ticket_size=20,
        repeat_customer_rate=20,
    )


def test_ranking_is_high_then_medium(struggling_period) -> None:
    recommendations = generate_recommendations(struggling_period, benchmarks=DEFAULT_BENCHMARKS)
    tiers = [IMPACT_ORDER[rec.impact] for rec in recommendations]

    assert tiers == sorted(tiers)
    assert [rec.id for rec in recommendations] == [
        "food-cost-high",
        "labour-high",
        "nlw-2026",
        "energy-high",
        "waste-high",
        "rent-high",
        "delivery-cost",
        "avg-ticket",
        "retention",
        "menu-engineering",
    ]


def test_savings_are_gap_to_target(struggling_period) -> None:
    by_id = {rec.id: rec for rec in generate_recommendations(struggling_period, benchmarks=DEFAULT_BENCHMARKS)}

    assert by_id["labour-high"].estimated_saving == 700
    assert by_id["energy-high"].estimated_saving == 400
    assert by_id["waste-high"].estimated_saving == 250
    assert by_id["rent-high"].estimated_saving == 500
    assert by_id["delivery-cost"].estimated_saving == 112
    assert by_id["avg-ticket"].estimated_saving == 2400
    assert by_id["retention"].estimated_saving == 1500
    assert by_id["menu-engineering"].estimated_saving == 250
    assert by_id["nlw-2026"].estimated_saving == 0


def test_rules_are_independent(struggling_period) -> None:
    alone = generate_recommendations(struggling_period, benchmarks=DEFAULT_BENCHMARKS, rules=(food_cost_rule,))
    together = generate_recommendations(struggling_period, benchmarks=DEFAULT_BENCHMARKS)

    assert alone[0] == next(rec for rec in together if rec.id == "food-cost-high")


def test_wage_policy_impact_tiers(make_period) -> None:
    medium = generate_recommendations(make_period(revenue=100000, labour_cost=9768), benchmarks=DEFAULT_BENCHMARKS)
    high = generate_recommendations(make_period(revenue=100000, labour_cost=19536), benchmarks=DEFAULT_BENCHMARKS)

    assert next(rec for rec in medium if rec.id == "nlw-2026").impact == "medium"
    assert next(rec for rec in high if rec.id == "nlw-2026").impact == "high"


def test_delivery_rule_is_two_way(healthy_period) -> None:
    low = healthy_period.model_copy(update={"delivery_revenue": 5000})
    none_at_all = healthy_period.model_copy(update={"delivery_revenue": 0, "dine_in_revenue": 0})

    grow = generate_recommendations(low, benchmarks=DEFAULT_BENCHMARKS)
    assert [rec.id for rec in grow] == ["delivery-grow"]
    assert grow[0].impact == "high"
    assert grow[0].estimated_saving == 3000
    assert all(rec.id != "delivery-grow" for rec in generate_recommendations(none_at_all, benchmarks=DEFAULT_BENCHMARKS))


def test_delivery_rule_never_fires_both(make_period) -> None:
    period = make_period(revenue=10000, delivery_revenue=5000, dine_in_revenue=5000)
    recommendation = delivery_rule(period, PeriodRatios.from_period(period), DEFAULT_BENCHMARKS)

    assert recommendation.id == "delivery-cost"


def test_zero_revenue_does_not_divide_by_zero(make_period) -> None:
    recommendations = generate_recommendations(make_period(revenue=0), benchmarks=DEFAULT_BENCHMARKS)

    ids = {rec.id for rec in recommendations}
    assert "menu-engineering" in ids
    assert "delivery-cost" not in ids


def test_thresholds_come_from_benchmark_table(healthy_period) -> None:
    relaxed = BenchmarkTable.model_validate({"uk": {"food_cost_pct": {"low": 25, "target": 30, "high": 40}}})
    period = healthy_period.model_copy(update={"food_cost": 17500})

    assert generate_recommendations(period, benchmarks=relaxed) == []
