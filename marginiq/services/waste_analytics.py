"""Food waste breakdowns computed on the fly from waste logs."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Sequence

from marginiq.schemas import FinancialPeriod, ResultModel, WasteLog

TOP_ITEMS_LIMIT = 10


class WasteBucket(ResultModel):
    name: str
    count: int
    cost: float


class MonthlyWaste(ResultModel):
    month: str
    cost: float


class WasteAnalytics(ResultModel):
    total_waste_cost: float
    total_purchases: float
    waste_percentage: float
    total_logs: int
    by_reason: List[WasteBucket]
    by_month: List[MonthlyWaste]
    top_wasted_items: List[WasteBucket]


def _bucket(logs: Sequence[WasteLog], key: str) -> List[WasteBucket]:
    counts: Dict[str, int] = defaultdict(int)
    costs: Dict[str, float] = defaultdict(float)
    for log in logs:
        name = getattr(log, key)
        counts[name] += 1
        costs[name] += log.total_cost
    buckets = [WasteBucket(name=name, count=counts[name], cost=costs[name]) for name in counts]
    buckets.sort(key=lambda bucket: bucket.cost, reverse=True)
    return buckets


def compute_waste_analytics(
    logs: Iterable[WasteLog],
    periods: Iterable[FinancialPeriod],
) -> WasteAnalytics:
    """Waste as a share of food purchases, by reason, month and item."""

    entries = list(logs)
    total_waste = sum(log.total_cost for log in entries)
    total_purchases = sum(period.food_cost for period in periods)

    by_month: Dict[str, float] = defaultdict(float)
    for log in entries:
        by_month[log.date.strftime("%Y-%m")] += log.total_cost

    return WasteAnalytics(
        total_waste_cost=total_waste,
        total_purchases=total_purchases,
        waste_percentage=total_waste / total_purchases * 100 if total_purchases > 0 else 0.0,
        total_logs=len(entries),
        by_reason=_bucket(entries, "reason"),
        by_month=[MonthlyWaste(month=month, cost=cost) for month, cost in sorted(by_month.items())],
        top_wasted_items=_bucket(entries, "item_name")[:TOP_ITEMS_LIMIT],
    )


__all__ = ["MonthlyWaste", "WasteAnalytics", "WasteBucket", "compute_waste_analytics"]
