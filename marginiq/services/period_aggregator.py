"""Aggregation of monthly/weekly records into quarter, half-year and week buckets."""

from __future__ import annotations

from dataclasses import dataclass
from math import ceil
from typing import Dict, Iterable, List, Optional, Sequence, Union

from marginiq.schemas import FinancialPeriod, ResultModel

ADDITIVE_FIELDS = (
    "revenue",
    "food_cost",
    "labour_cost",
    "energy_cost",
    "rent_cost",
    "marketing_cost",
    "supplies_cost",
    "technology_cost",
    "waste_cost",
    "delivery_revenue",
    "dine_in_revenue",
    "takeaway_revenue",
    "total_covers",
)

COMPARED_METRICS = (
    "revenue",
    "gp_percent",
    "food_cost_percent",
    "labour_cost_percent",
    "total_covers",
    "avg_ticket_size",
)

WEEKS_PER_YEAR = 52
WEEKLY_TREND_LENGTH = 8


class AggregatedPeriod(ResultModel):
    revenue: float
    food_cost: float
    labour_cost: float
    energy_cost: float
    rent_cost: float
    marketing_cost: float
    supplies_cost: float
    technology_cost: float
    waste_cost: float
    delivery_revenue: float
    dine_in_revenue: float
    takeaway_revenue: float
    total_covers: int
    total_costs: float
    avg_ticket_size: float
    repeat_customer_rate: float
    food_cost_percent: float
    labour_cost_percent: float
    gp_percent: float
    periods: int


class BucketSnapshot(ResultModel):
    """A bucket key paired with its aggregate (None when no records match)."""

    label: str
    year: int
    index: int
    data: Optional[AggregatedPeriod] = None


class MetricChanges(ResultModel):
    """Percent change per compared metric; None when either side has no data."""

    revenue: Optional[float] = None
    gp_percent: Optional[float] = None
    food_cost_percent: Optional[float] = None
    labour_cost_percent: Optional[float] = None
    total_covers: Optional[float] = None
    avg_ticket_size: Optional[float] = None


class PeriodComparison(ResultModel):
    current: BucketSnapshot
    previous: BucketSnapshot
    same_period_last_year: BucketSnapshot
    trend: List[BucketSnapshot]
    change_vs_previous: MetricChanges
    change_vs_last_year: MetricChanges


def quarter_of(month_index: int) -> int:
    return ceil((month_index + 1) / 3)


def half_of(month_index: int) -> int:
    return 1 if month_index < 6 else 2


@dataclass(frozen=True)
class QuarterRule:
    quarter: int
    year: int

    def __post_init__(self) -> None:
        if not 1 <= self.quarter <= 4:
            raise ValueError("quarter must be between 1 and 4")

    @property
    def label(self) -> str:
        return f"Q{self.quarter} {self.year}"

    @property
    def index(self) -> int:
        return self.quarter

    def matches(self, period: FinancialPeriod) -> bool:
        month_index = period.month_index
        if month_index is None or period.year != self.year:
            return False
        return quarter_of(month_index) == self.quarter

    def previous(self) -> "QuarterRule":
        if self.quarter == 1:
            return QuarterRule(4, self.year - 1)
        return QuarterRule(self.quarter - 1, self.year)

    def same_period_last_year(self) -> "QuarterRule":
        return QuarterRule(self.quarter, self.year - 1)

    def trend(self) -> List["QuarterRule"]:
        # Quarters after the requested one come from the previous year.
        return [QuarterRule(q, self.year if q <= self.quarter else self.year - 1) for q in range(1, 5)]


@dataclass(frozen=True)
class HalfRule:
    half: int
    year: int

    def __post_init__(self) -> None:
        if self.half not in (1, 2):
            raise ValueError("half must be 1 or 2")

    @property
    def label(self) -> str:
        return f"H{self.half} {self.year}"

    @property
    def index(self) -> int:
        return self.half

    def matches(self, period: FinancialPeriod) -> bool:
        month_index = period.month_index
        if month_index is None or period.year != self.year:
            return False
        return half_of(month_index) == self.half

    def previous(self) -> "HalfRule":
        if self.half == 1:
            return HalfRule(2, self.year - 1)
        return HalfRule(1, self.year)

    def same_period_last_year(self) -> "HalfRule":
        return HalfRule(self.half, self.year - 1)

    def trend(self) -> List["HalfRule"]:
        return [HalfRule(h, self.year if h <= self.half else self.year - 1) for h in (1, 2)]


@dataclass(frozen=True)
class WeekRule:
    week_number: int
    year: int

    def __post_init__(self) -> None:
        if not 1 <= self.week_number <= 53:
            raise ValueError("week_number must be between 1 and 53")

    @property
    def label(self) -> str:
        return f"W{self.week_number} {self.year}"

    @property
    def index(self) -> int:
        return self.week_number

    def matches(self, period: FinancialPeriod) -> bool:
        return period.week_number == self.week_number and period.year == self.year

    def previous(self) -> "WeekRule":
        if self.week_number == 1:
            return WeekRule(WEEKS_PER_YEAR, self.year - 1)
        return WeekRule(self.week_number - 1, self.year)

    def same_period_last_year(self) -> "WeekRule":
        return WeekRule(self.week_number, self.year - 1)

    def trend(self) -> List["WeekRule"]:
        rules: List[WeekRule] = []
        for offset in range(WEEKLY_TREND_LENGTH - 1, -1, -1):
            week = self.week_number - offset
            year = self.year
            if week <= 0:
                week += WEEKS_PER_YEAR
                year -= 1
            rules.append(WeekRule(week, year))
        return rules


BucketRule = Union[QuarterRule, HalfRule, WeekRule]


def summarize_periods(periods: Sequence[FinancialPeriod]) -> Optional[AggregatedPeriod]:
    """Sum additive fields and derive ratios from the totals.

    Returns None for an empty input: "no data" must never be reported as 0%.
    """

    if not periods:
        return None

    sums: Dict[str, float] = {field: 0 for field in ADDITIVE_FIELDS}
    for period in periods:
        for field in ADDITIVE_FIELDS:
            sums[field] += getattr(period, field)

    count = len(periods)
    total_costs = sum(period.total_costs for period in periods)
    revenue = sums["revenue"]

    return AggregatedPeriod(
        **sums,
        total_costs=total_costs,
        avg_ticket_size=sum(p.avg_ticket_size for p in periods) / count,
        repeat_customer_rate=sum(p.repeat_customer_rate for p in periods) / count,
        food_cost_percent=_ratio(sums["food_cost"], revenue),
        labour_cost_percent=_ratio(sums["labour_cost"], revenue),
        gp_percent=_ratio(revenue - total_costs, revenue),
        periods=count,
    )


def aggregate(periods: Iterable[FinancialPeriod], rule: BucketRule) -> Optional[AggregatedPeriod]:
    """Aggregate the records falling into ``rule``'s bucket."""

    return summarize_periods([period for period in periods if rule.matches(period)])


def percent_change(current: Optional[float], previous: Optional[float]) -> Optional[float]:
    """Relative change in percent; None when there is no usable baseline."""

    if current is None or not previous:
        return None
    return (current - previous) / previous * 100


def compare_aggregates(
    current: Optional[AggregatedPeriod],
    previous: Optional[AggregatedPeriod],
) -> MetricChanges:
    if current is None or previous is None:
        return MetricChanges()
    return MetricChanges(
        **{metric: percent_change(getattr(current, metric), getattr(previous, metric)) for metric in COMPARED_METRICS}
    )


def compare_periods(periods: Sequence[FinancialPeriod], rule: BucketRule) -> PeriodComparison:
    """Current vs previous bucket vs same bucket last year, with a trend."""

    records = list(periods)
    current = _snapshot(records, rule)
    previous = _snapshot(records, rule.previous())
    last_year = _snapshot(records, rule.same_period_last_year())
    return PeriodComparison(
        current=current,
        previous=previous,
        same_period_last_year=last_year,
        trend=[_snapshot(records, bucket) for bucket in rule.trend()],
        change_vs_previous=compare_aggregates(current.data, previous.data),
        change_vs_last_year=compare_aggregates(current.data, last_year.data),
    )


def latest_periods(periods: Iterable[FinancialPeriod], count: int = 2) -> List[FinancialPeriod]:
    """The most recent ``count`` records, newest first."""

    ordered = sorted(
        periods,
        key=lambda p: (p.year, p.month_index if p.month_index is not None else (p.week_number or 0)),
        reverse=True,
    )
    return ordered[:count]


def _snapshot(periods: Sequence[FinancialPeriod], rule: BucketRule) -> BucketSnapshot:
    return BucketSnapshot(label=rule.label, year=rule.year, index=rule.index, data=aggregate(periods, rule))


def _ratio(numerator: float, denominator: float) -> float:
    if not denominator:
        return 0.0
    return numerator / denominator * 100


__all__ = [
    "AggregatedPeriod",
    "BucketRule",
    "BucketSnapshot",
    "HalfRule",
    "MetricChanges",
    "PeriodComparison",
    "QuarterRule",
    "WeekRule",
    "aggregate",
    "compare_aggregates",
    "compare_periods",
    "half_of",
    "latest_periods",
    "percent_change",
    "quarter_of",
    "summarize_periods",
]
