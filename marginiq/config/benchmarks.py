"""UK industry benchmarks and business policy constants.

Every threshold used by the derivation services lives here so a benchmark
revision is a one-place change. The table is immutable; services receive it as
a keyword argument and fall back to :func:`get_benchmarks`.
"""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, model_validator

load_dotenv()

logger = logging.getLogger(__name__)

BENCHMARKS_FILE = os.getenv("MARGINIQ_BENCHMARKS_FILE")


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class BenchmarkBand(_Frozen):
    """Low / target / high reference points for one KPI."""

    low: float
    target: float
    high: float
    label: str = ""

    @model_validator(mode="after")
    def _check_order(self) -> "BenchmarkBand":
        if not self.low <= self.target <= self.high:
            raise ValueError(f"Benchmark band {self.label or '?'} must satisfy low <= target <= high.")
        return self


class UKBenchmarks(_Frozen):
    food_cost_pct: BenchmarkBand = BenchmarkBand(low=25, target=30, high=35, label="Food Cost %")
    labour_pct: BenchmarkBand = BenchmarkBand(low=24, target=28, high=32, label="Labour %")
    energy_pct: BenchmarkBand = BenchmarkBand(low=4, target=6, high=8, label="Energy %")
    rent_pct: BenchmarkBand = BenchmarkBand(low=5, target=8, high=12, label="Rent & Rates %")
    waste_pct: BenchmarkBand = BenchmarkBand(low=1, target=2.5, high=4, label="Food Waste %")
    gp_pct: BenchmarkBand = BenchmarkBand(low=55, target=65, high=75, label="Gross Profit %")
    net_pct: BenchmarkBand = BenchmarkBand(low=5, target=10, high=18, label="Net Profit %")
    repeat_customer: BenchmarkBand = BenchmarkBand(low=25, target=35, high=50, label="Repeat Customer Rate")
    avg_ticket: BenchmarkBand = BenchmarkBand(low=18, target=28, high=45, label="Avg Ticket Size (£)")


class WagePolicy(_Frozen):
    """National Living Wage assumptions (Apr 2025 rate vs projected Apr 2026)."""

    current_hourly_rate: float = Field(default=12.21, gt=0)
    projected_hourly_rate: float = Field(default=13.00, gt=0)
    standard_monthly_hours: float = Field(default=160, gt=0)
    materiality_threshold: float = Field(default=200, ge=0)
    high_impact_threshold: float = Field(default=1000, ge=0)


class DeliveryPolicy(_Frozen):
    high_share: float = Field(default=0.30, ge=0, le=1)
    low_share: float = Field(default=0.15, ge=0, le=1)
    estimated_commission: float = Field(default=0.28, ge=0, le=1)

    @model_validator(mode="after")
    def _check_shares(self) -> "DeliveryPolicy":
        # Trigger ranges of the two delivery rules must not overlap.
        if self.low_share > self.high_share:
            raise ValueError("Delivery low_share must not exceed high_share.")
        return self


class BreakevenPolicy(_Frozen):
    labour_fixed_share: float = Field(default=0.6, ge=0, le=1)
    working_days_per_month: int = Field(default=26, gt=0)
    weeks_per_month: float = Field(default=4.3, gt=0)
    healthy_safety_margin: float = 15
    tight_safety_margin: float = 5
    profit_step: float = Field(default=1000, gt=0)
    scenario_avg_spend_increase: float = 2.0
    scenario_food_cost_reduction: float = 0.03
    scenario_energy_increase: float = 0.15


class MenuPolicy(_Frozen):
    high_margin_gp_pct: float = 65


class ExpensePolicy(_Frozen):
    """Target share of revenue per cost line, used by the cost-driver view."""

    targets: Dict[str, float] = Field(
        default_factory=lambda: {
            "food_cost": 32,
            "labour_cost": 30,
            "energy_cost": 8,
            "rent_cost": 8,
            "marketing_cost": 4,
            "supplies_cost": 3,
            "technology_cost": 1,
            "waste_cost": 3,
        }
    )
    warning_tolerance: float = 2
    riser_threshold: float = 2


class BenchmarkTable(_Frozen):
    uk: UKBenchmarks = Field(default_factory=UKBenchmarks)
    wages: WagePolicy = Field(default_factory=WagePolicy)
    delivery: DeliveryPolicy = Field(default_factory=DeliveryPolicy)
    breakeven: BreakevenPolicy = Field(default_factory=BreakevenPolicy)
    menu: MenuPolicy = Field(default_factory=MenuPolicy)
    expenses: ExpensePolicy = Field(default_factory=ExpensePolicy)


DEFAULT_BENCHMARKS = BenchmarkTable()


def load_benchmarks(path: Optional[str] = None) -> BenchmarkTable:
    """Build a table from a JSON override file, or return the defaults."""

    if not path:
        return DEFAULT_BENCHMARKS
    source = Path(path)
    if not source.is_file():
        logger.warning("Benchmark override file %s not found, using defaults.", source)
        return DEFAULT_BENCHMARKS
    data = json.loads(source.read_text(encoding="utf-8"))
    table = BenchmarkTable.model_validate(data)
    logger.info("Loaded benchmark overrides from %s", source)
    return table


@lru_cache(maxsize=1)
def get_benchmarks() -> BenchmarkTable:
    """Process-wide benchmark table."""
    return load_benchmarks(BENCHMARKS_FILE)


__all__ = [
    "BenchmarkBand",
    "BenchmarkTable",
    "BreakevenPolicy",
    "DEFAULT_BENCHMARKS",
    "DeliveryPolicy",
    "ExpensePolicy",
    "MenuPolicy",
    "UKBenchmarks",
    "WagePolicy",
    "get_benchmarks",
    "load_benchmarks",
]
