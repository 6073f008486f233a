"""Cost-driver view: each cost line against its target share of revenue."""

from __future__ import annotations

from typing import List, Optional

from pydantic.alias_generators import to_camel

from marginiq.config.benchmarks import BenchmarkTable, get_benchmarks
from marginiq.schemas import FinancialPeriod, ResultModel
from marginiq.services.period_aggregator import percent_change

COST_LABELS = {
    "food_cost": ("Food & Ingredients", "direct"),
    "labour_cost": ("Labour", "direct"),
    "energy_cost": ("Energy & Utilities", "indirect"),
    "rent_cost": ("Rent & Rates", "overhead"),
    "marketing_cost": ("Marketing", "overhead"),
    "supplies_cost": ("Supplies", "indirect"),
    "technology_cost": ("Technology", "overhead"),
    "waste_cost": ("Food Waste", "indirect"),
}


class CostDriver(ResultModel):
    # camelCase name of the cost field, e.g. "foodCost"
    key: str
    label: str
    classification: str
    target: float
    current: float
    previous: Optional[float] = None
    pct_of_revenue: float
    pct_of_total: float
    change: Optional[float] = None
    variance: float
    status: str


class CostDriverReport(ResultModel):
    revenue: float
    total_cost: float
    drivers: List[CostDriver]
    over_budget: List[str]
    biggest_risers: List[str]
    potential_savings: float


def analyze_cost_drivers(
    latest: Optional[FinancialPeriod],
    previous: Optional[FinancialPeriod] = None,
    *,
    benchmarks: Optional[BenchmarkTable] = None,
) -> Optional[CostDriverReport]:
    if latest is None:
        return None

    policy = (benchmarks or get_benchmarks()).expenses
    revenue = latest.revenue
    total_cost = latest.total_costs

    drivers: List[CostDriver] = []
    for key, (label, classification) in COST_LABELS.items():
        current = getattr(latest, key)
        prior = getattr(previous, key) if previous is not None else None
        target = policy.targets.get(key, 0.0)
        pct_of_revenue = current / revenue * 100 if revenue else 0.0
        variance = pct_of_revenue - target
        if variance <= 0:
            status = "good"
        elif variance <= policy.warning_tolerance:
            status = "warning"
        else:
            status = "critical"
        drivers.append(
            CostDriver(
                key=to_camel(key),
                label=label,
                classification=classification,
                target=target,
                current=current,
                previous=prior,
                pct_of_revenue=pct_of_revenue,
                pct_of_total=current / total_cost * 100 if total_cost else 0.0,
                change=percent_change(current, prior),
                variance=variance,
                status=status,
            )
        )

    drivers.sort(key=lambda driver: driver.current, reverse=True)
    over_budget = [driver for driver in drivers if driver.variance > 0]
    risers = sorted(
        (d for d in drivers if d.change is not None and d.change > policy.riser_threshold),
        key=lambda d: d.change,
        reverse=True,
    )
    return CostDriverReport(
        revenue=revenue,
        total_cost=total_cost,
        drivers=drivers,
        over_budget=[driver.key for driver in over_budget],
        biggest_risers=[driver.key for driver in risers],
        potential_savings=sum(driver.current * driver.variance / 100 for driver in over_budget),
    )


__all__ = ["COST_LABELS", "CostDriver", "CostDriverReport", "analyze_cost_drivers"]
