"""Breakeven and contribution-margin analysis for a single period."""

from __future__ import annotations

import logging
from math import ceil, floor
from typing import List, Optional

from marginiq.config.benchmarks import BenchmarkTable, get_benchmarks
from marginiq.schemas import FinancialPeriod, ResultModel

logger = logging.getLogger(__name__)

HEALTHY = "Healthy"
TIGHT = "Tight"
DANGER_ZONE = "Danger Zone"

UNREACHABLE_MESSAGE = (
    "Contribution margin per cover is not positive: every extra cover loses money, "
    "so no volume of covers reaches breakeven."
)


class BreakevenScenario(ResultModel):
    key: str
    scenario: str
    favourable: bool
    breakeven_monthly_covers: Optional[int] = None
    change_in_monthly_covers: Optional[int] = None


class BreakevenResult(ResultModel):
    revenue: float
    total_covers: int
    covers_defaulted: bool
    avg_ticket_size: float
    fixed_costs: float
    variable_costs: float
    other_costs: float
    total_costs: float
    variable_cost_per_cover: float
    contribution_margin_per_cover: float
    breakeven_reachable: bool
    message: Optional[str] = None
    breakeven_monthly_covers: int
    breakeven_daily_covers: int
    breakeven_weekly_covers: int
    breakeven_revenue: float
    current_vs_breakeven: float
    current_daily_covers: float
    safety_margin_percent: Optional[float] = None
    safety_status: str
    covers_for_profit_step: int
    estimated_fte_staff: int
    wage_rise_monthly_impact: float
    wage_rise_annual_impact: float
    scenarios: List[BreakevenScenario]


def round_half_up(value: float) -> int:
    return int(floor(value + 0.5))


def estimate_fte_staff(labour_cost: float, benchmarks: BenchmarkTable) -> int:
    wages = benchmarks.wages
    return round_half_up(labour_cost / (wages.current_hourly_rate * wages.standard_monthly_hours))


def wage_rise_monthly_impact(labour_cost: float, benchmarks: BenchmarkTable) -> float:
    """Extra monthly payroll if headcount is paid the projected wage rate."""

    wages = benchmarks.wages
    staff = estimate_fte_staff(labour_cost, benchmarks)
    return staff * (wages.projected_hourly_rate - wages.current_hourly_rate) * wages.standard_monthly_hours


def breakeven_covers(fixed_total: float, contribution_margin: float) -> Optional[int]:
    """Covers needed to absorb ``fixed_total``; None when unreachable."""

    if contribution_margin <= 0:
        return None
    return ceil(fixed_total / contribution_margin)


def classify_safety_margin(safety_margin: Optional[float], benchmarks: BenchmarkTable) -> str:
    policy = benchmarks.breakeven
    if safety_margin is None:
        return DANGER_ZONE
    if safety_margin >= policy.healthy_safety_margin:
        return HEALTHY
    if safety_margin >= policy.tight_safety_margin:
        return TIGHT
    return DANGER_ZONE


def compute_breakeven(
    period: FinancialPeriod,
    *,
    benchmarks: Optional[BenchmarkTable] = None,
) -> BreakevenResult:
    """Split costs into fixed/variable buckets and derive breakeven targets."""

    table = benchmarks or get_benchmarks()
    policy = table.breakeven

    revenue = period.revenue
    covers_defaulted = period.total_covers <= 0
    total_covers = 1 if covers_defaulted else period.total_covers
    if covers_defaulted:
        logger.warning("Period %s %s has no covers recorded; breakeven per cover is not meaningful.",
                       period.month or period.week_number, period.year)
    avg_ticket = period.avg_ticket_size or revenue / total_covers

    labour_fixed = period.labour_cost * policy.labour_fixed_share
    fixed_costs = period.rent_cost + period.technology_cost + period.marketing_cost + labour_fixed
    variable_costs = (
        period.food_cost
        + period.waste_cost
        + period.supplies_cost
        + (period.labour_cost - labour_fixed)
    )
    other_costs = period.energy_cost
    total_costs = fixed_costs + variable_costs + other_costs

    variable_cost_per_cover = variable_costs / total_covers
    contribution_margin = avg_ticket - variable_cost_per_cover
    fixed_total = fixed_costs + other_costs

    baseline = breakeven_covers(fixed_total, contribution_margin)
    reachable = baseline is not None
    monthly = baseline or 0
    daily = ceil(monthly / policy.working_days_per_month)
    weekly = ceil(monthly / policy.weeks_per_month)
    breakeven_revenue = monthly * avg_ticket
    current_vs_breakeven = revenue - breakeven_revenue

    if not reachable:
        safety_margin: Optional[float] = None
    elif revenue > 0:
        safety_margin = current_vs_breakeven / revenue * 100
    else:
        safety_margin = 0.0

    wage_impact = wage_rise_monthly_impact(period.labour_cost, table)
    profit_step = breakeven_covers(policy.profit_step, contribution_margin) or 0

    scenarios = _build_scenarios(
        period,
        baseline=baseline,
        fixed_total=fixed_total,
        contribution_margin=contribution_margin,
        revenue_per_cover=revenue / total_covers,
        wage_impact=wage_impact,
        benchmarks=table,
    )

    return BreakevenResult(
        revenue=revenue,
        total_covers=total_covers,
        covers_defaulted=covers_defaulted,
        avg_ticket_size=avg_ticket,
        fixed_costs=fixed_costs,
        variable_costs=variable_costs,
        other_costs=other_costs,
        total_costs=total_costs,
        variable_cost_per_cover=variable_cost_per_cover,
        contribution_margin_per_cover=contribution_margin,
        breakeven_reachable=reachable,
        message=None if reachable else UNREACHABLE_MESSAGE,
        breakeven_monthly_covers=monthly,
        breakeven_daily_covers=daily,
        breakeven_weekly_covers=weekly,
        breakeven_revenue=breakeven_revenue,
        current_vs_breakeven=current_vs_breakeven,
        current_daily_covers=total_covers / policy.working_days_per_month,
        safety_margin_percent=safety_margin,
        safety_status=classify_safety_margin(safety_margin, table),
        covers_for_profit_step=profit_step,
        estimated_fte_staff=estimate_fte_staff(period.labour_cost, table),
        wage_rise_monthly_impact=wage_impact,
        wage_rise_annual_impact=wage_impact * 12,
        scenarios=scenarios,
    )


def _build_scenarios(
    period: FinancialPeriod,
    *,
    baseline: Optional[int],
    fixed_total: float,
    contribution_margin: float,
    revenue_per_cover: float,
    wage_impact: float,
    benchmarks: BenchmarkTable,
) -> List[BreakevenScenario]:
    policy = benchmarks.breakeven
    wages = benchmarks.wages
    spend_step = policy.scenario_avg_spend_increase
    food_step = policy.scenario_food_cost_reduction
    energy_step = policy.scenario_energy_increase

    candidates = [
        (
            "avg-spend",
            f"Raise average spend by £{spend_step:g}",
            True,
            fixed_total,
            contribution_margin + spend_step,
        ),
        (
            "food-cost",
            f"Reduce food cost by {food_step * 100:g}%",
            True,
            fixed_total,
            contribution_margin + revenue_per_cover * food_step,
        ),
        (
            "wage-rise",
            f"NLW rises to £{wages.projected_hourly_rate:.2f}/hr",
            False,
            fixed_total + wage_impact,
            contribution_margin,
        ),
        (
            "energy",
            f"Energy bills rise {energy_step * 100:g}%",
            False,
            fixed_total + period.energy_cost * energy_step,
            contribution_margin,
        ),
    ]

    scenarios: List[BreakevenScenario] = []
    for key, label, favourable, scenario_fixed, scenario_margin in candidates:
        covers = breakeven_covers(scenario_fixed, scenario_margin)
        change = covers - baseline if covers is not None and baseline is not None else None
        scenarios.append(
            BreakevenScenario(
                key=key,
                scenario=label,
                favourable=favourable,
                breakeven_monthly_covers=covers,
                change_in_monthly_covers=change,
            )
        )
    return scenarios


__all__ = [
    "BreakevenResult",
    "BreakevenScenario",
    "DANGER_ZONE",
    "HEALTHY",
    "TIGHT",
    "breakeven_covers",
    "classify_safety_margin",
    "compute_breakeven",
    "estimate_fte_staff",
    "round_half_up",
    "wage_rise_monthly_impact",
]
