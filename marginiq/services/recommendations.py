"""Rule-based recommendations scored against UK hospitality benchmarks.

Each rule looks at one signal of the latest period and either returns a
Recommendation or None. Rules never see each other's output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from marginiq.config.benchmarks import BenchmarkTable, get_benchmarks
from marginiq.schemas import FinancialPeriod, ResultModel
from marginiq.services.breakeven import estimate_fte_staff, wage_rise_monthly_impact

logger = logging.getLogger(__name__)

IMPACT_ORDER = {"high": 0, "medium": 1, "low": 2}


class Recommendation(ResultModel):
    id: str
    title: str
    description: str
    category: str
    impact: str
    estimated_saving: int
    actions: List[str]
    uk_context: Optional[str] = None


@dataclass(frozen=True)
class PeriodRatios:
    """Percent-of-revenue figures for one period."""

    revenue: float
    food_pct: float
    labour_pct: float
    energy_pct: float
    waste_pct: float
    rent_pct: float
    gp_pct: float
    net_margin_pct: float
    delivery_share: float

    @classmethod
    def from_period(cls, period: FinancialPeriod) -> "PeriodRatios":
        # Zero revenue would divide by zero; 1 keeps every ratio finite.
        base = period.revenue or 1

        def pct(value: float) -> float:
            return value / base * 100

        return cls(
            revenue=period.revenue,
            food_pct=pct(period.food_cost),
            labour_pct=pct(period.labour_cost),
            energy_pct=pct(period.energy_cost),
            waste_pct=pct(period.waste_cost),
            rent_pct=pct(period.rent_cost),
            gp_pct=pct(period.revenue - period.food_cost),
            net_margin_pct=pct(period.revenue - period.total_costs),
            delivery_share=pct(period.delivery_revenue),
        )


Rule = Callable[[FinancialPeriod, PeriodRatios, BenchmarkTable], Optional[Recommendation]]


def format_gbp(value: float) -> str:
    return f"£{round(value):,}"


def breaches(value: float, threshold: float) -> bool:
    """True when a lower-is-better ratio sits at or above ``threshold``.

    Ratios are rounded first so 17500/50000 counts as exactly 35%.
    """

    return round(value, 6) >= threshold


def falls_short(value: float, target: float) -> bool:
    return round(value, 6) < target


def saving_to_target(cost: float, revenue: float, target_pct: float) -> float:
    """What the cost line would drop by if it sat exactly on its target share."""

    return cost - revenue * (target_pct / 100)


def food_cost_rule(period: FinancialPeriod, ratios: PeriodRatios, table: BenchmarkTable) -> Optional[Recommendation]:
    band = table.uk.food_cost_pct
    if not breaches(ratios.food_pct, band.high):
        return None
    return Recommendation(
        id="food-cost-high",
        title=f"Food cost at {ratios.food_pct:.1f}% - UK target is 28-32%",
        description=(
            f"Your food cost is {ratios.food_pct - band.target:.1f}pp above the UK benchmark. "
            f"A 1% reduction in food cost = {format_gbp(period.revenue * 0.01)} extra profit per month."
        ),
        category="food-cost",
        impact="high",
        estimated_saving=round(saving_to_target(period.food_cost, period.revenue, band.target)),
        actions=[
            "Identify your 10 highest-cost ingredients and request alternative quotes from 2 suppliers",
            "Review portion sizes with kitchen scales, starting with proteins",
            "Design new dishes around ingredients already on your menu",
            "Implement daily prep sheets so nothing is over-prepared and wasted",
        ],
        uk_context=(
            "Top performing UK restaurants have returned food cost to 28-30% by dual-sourcing "
            "proteins and switching to seasonal menus quarterly."
        ),
    )


def labour_rule(period: FinancialPeriod, ratios: PeriodRatios, table: BenchmarkTable) -> Optional[Recommendation]:
    band = table.uk.labour_pct
    if not breaches(ratios.labour_pct, band.high):
        return None
    return Recommendation(
        id="labour-high",
        title=f"Labour at {ratios.labour_pct:.1f}% - UK benchmark is 25-30%",
        description=(
            f"At {ratios.labour_pct:.1f}% you are {ratios.labour_pct - band.target:.1f}pp above target. "
            "Tackling this now protects you from future National Living Wage rises."
        ),
        category="labour",
        impact="high",
        estimated_saving=round(saving_to_target(period.labour_cost, period.revenue, band.target)),
        actions=[
            "Map your busiest hours by day and check for overstaffing in quiet periods",
            "Cross-train staff so fewer people can cover more roles",
            "Consider a 4-day trading week if Mondays/Tuesdays are loss-making",
            "Review agency staff use, typically 20-30% more per hour",
        ],
        uk_context=(
            f"The National Living Wage is £{table.wages.current_hourly_rate:.2f}/hr with further rises expected."
        ),
    )


def wage_policy_rule(period: FinancialPeriod, ratios: PeriodRatios, table: BenchmarkTable) -> Optional[Recommendation]:
    wages = table.wages
    monthly_impact = wage_rise_monthly_impact(period.labour_cost, table)
    if monthly_impact <= wages.materiality_threshold:
        return None
    per_cover = monthly_impact / (period.total_covers or 1)
    return Recommendation(
        id="nlw-2026",
        title=f"National Living Wage: +£{monthly_impact:.0f}/month from April 2026",
        description=(
            f"About {estimate_fte_staff(period.labour_cost, table)} FTE staff moving from "
            f"£{wages.current_hourly_rate:.2f} to £{wages.projected_hourly_rate:.2f}/hr will cost approximately "
            f"{format_gbp(monthly_impact)} more per month ({format_gbp(monthly_impact * 12)}/year)."
        ),
        category="nlw",
        impact="high" if monthly_impact > wages.high_impact_threshold else "medium",
        estimated_saving=0,
        actions=[
            f"Raise average spend by {format_gbp(per_cover)} per cover to absorb the full increase",
            "Identify which roles are paid at NLW vs above NLW to quantify exact exposure",
            "Consider raising prices by 3-5% in advance of April to build a buffer",
            "Explore table tablets or QR ordering to reduce the cover-per-server ratio",
        ],
        uk_context="Hospitality employs the highest share of minimum wage workers in the UK economy.",
    )


def energy_rule(period: FinancialPeriod, ratios: PeriodRatios, table: BenchmarkTable) -> Optional[Recommendation]:
    band = table.uk.energy_pct
    if not breaches(ratios.energy_pct, band.high):
        return None
    return Recommendation(
        id="energy-high",
        title=f"Energy at {ratios.energy_pct:.1f}% - above the {band.target:g}% benchmark",
        description=f"At {ratios.energy_pct:.1f}% of revenue you have meaningful savings available.",
        category="energy",
        impact="medium",
        estimated_saving=round(saving_to_target(period.energy_cost, period.revenue, band.target)),
        actions=[
            "Get at least 2 energy broker quotes specialised in hospitality",
            "Install a smart energy monitor to identify peak consumption",
            "Implement equipment shutdown schedules for ovens and combi steamers",
            "Switch to LED lighting throughout the kitchen and dining room",
        ],
        uk_context="All restaurants are on market energy rates since the Energy Bill Discount Scheme ended.",
    )


def waste_rule(period: FinancialPeriod, ratios: PeriodRatios, table: BenchmarkTable) -> Optional[Recommendation]:
    band = table.uk.waste_pct
    if not breaches(ratios.waste_pct, band.high):
        return None
    return Recommendation(
        id="waste-high",
        title=f"Food waste at {ratios.waste_pct:.1f}% - UK average is 2-3%",
        description=f"Excess waste costs you {format_gbp(period.waste_cost)} per month.",
        category="waste",
        impact="medium",
        estimated_saving=round(saving_to_target(period.waste_cost, period.revenue, band.target)),
        actions=[
            "Introduce a daily special based on yesterday's over-prep",
            "Train kitchen staff on FIFO storage",
            "Track waste by station: prep, service or plate returns",
            "Reduce menu size by 15-20%",
        ],
        uk_context="Restaurants that formally track waste reduce it by an average of 27% within 6 months (WRAP).",
    )


def rent_rule(period: FinancialPeriod, ratios: PeriodRatios, table: BenchmarkTable) -> Optional[Recommendation]:
    band = table.uk.rent_pct
    if not breaches(ratios.rent_pct, band.high):
        return None
    return Recommendation(
        id="rent-high",
        title=f"Rent at {ratios.rent_pct:.1f}% of revenue - above the 8-10% target",
        description="Rent is largely fixed, but many landlords are willing to renegotiate with good tenants.",
        category="supplier",
        impact="medium",
        estimated_saving=round(saving_to_target(period.rent_cost, period.revenue, band.target)),
        actions=[
            "Approach your landlord 6 months before any lease break or renewal",
            "Benchmark your rent against comparable properties with a commercial surveyor",
            "Negotiate a turnover rent clause to reduce your fixed cost base",
            "Check eligibility for Business Rates Relief",
        ],
        uk_context="You can appeal your rateable value via the Valuation Office Agency for free.",
    )


def delivery_rule(period: FinancialPeriod, ratios: PeriodRatios, table: BenchmarkTable) -> Optional[Recommendation]:
    """Two-way rule: too much delivery erodes margin, too little leaves revenue behind."""

    policy = table.delivery
    if period.delivery_revenue > period.revenue * policy.high_share:
        platform_fees = period.delivery_revenue * policy.estimated_commission
        return Recommendation(
            id="delivery-cost",
            title=f"Delivery revenue is {ratios.delivery_share:.0f}% of total - check true net profit",
            description=(
                "Platforms charging 25-35% commission make delivery GP significantly lower than dine-in. "
                f"Estimated platform fees: {format_gbp(platform_fees)} per month."
            ),
            category="delivery",
            impact="medium",
            estimated_saving=round(platform_fees * 0.1),
            actions=[
                "Calculate true net profit per delivery order after fees, packaging and labour",
                "Remove your lowest-margin items from delivery menus",
                "Negotiate commission once you have volume with a platform",
                "Build a direct ordering channel and reward customers who order direct",
            ],
            uk_context="Operators with strong volume regularly achieve sub-25% commission rates.",
        )
    if period.delivery_revenue < period.revenue * policy.low_share and period.dine_in_revenue > 0:
        return Recommendation(
            id="delivery-grow",
            title="Delivery channel under-utilised - significant upside available",
            description=(
                f"Your delivery revenue is {ratios.delivery_share:.0f}% of total. "
                "Well-run UK restaurants often achieve a 20-35% delivery mix using existing kitchen capacity."
            ),
            category="delivery",
            impact="high",
            estimated_saving=round(period.revenue * 0.06),
            actions=[
                "Compare delivery platform coverage in your postcode and register on one",
                "Create a delivery menu of 8-12 items that travel well with good margins",
                "Set a minimum order value so delivery stays profitable after fees",
                "Photograph your top delivery dishes professionally",
            ],
            uk_context="The UK food delivery market grew 11% in 2024.",
        )
    return None


def avg_ticket_rule(period: FinancialPeriod, ratios: PeriodRatios, table: BenchmarkTable) -> Optional[Recommendation]:
    band = table.uk.avg_ticket
    if not falls_short(period.avg_ticket_size, band.target):
        return None
    gap = band.target - period.avg_ticket_size
    return Recommendation(
        id="avg-ticket",
        title=f"Average spend £{period.avg_ticket_size:.2f} - UK casual dining average is £28-35",
        description=(
            f"Increasing average spend by £{gap:.0f} per cover would generate "
            f"{format_gbp(period.total_covers * gap)} extra revenue per month with zero extra customers."
        ),
        category="revenue",
        impact="medium",
        estimated_saving=round(period.total_covers * gap * 0.6),
        actions=[
            "Train front of house on one specific upsell per shift",
            "Add a premium drink to the menu, drinks carry 70-80% GP",
            "Create a weekly board of 3 high-margin specials",
            "Suggest pairings with set menus",
        ],
        uk_context="Structured upselling training is the cheapest way to grow spend per head.",
    )


def retention_rule(period: FinancialPeriod, ratios: PeriodRatios, table: BenchmarkTable) -> Optional[Recommendation]:
    band = table.uk.repeat_customer
    if not falls_short(period.repeat_customer_rate, band.target):
        return None
    gap = band.target - period.repeat_customer_rate
    return Recommendation(
        id="retention",
        title=f"Repeat customer rate at {period.repeat_customer_rate:.0f}% - target is 35-50%",
        description="Acquiring a new customer costs 5-7x more than retaining an existing one.",
        category="marketing",
        impact="medium",
        estimated_saving=round(period.revenue * gap / 100),
        actions=[
            "Implement a stamp card or digital loyalty scheme",
            "Collect customer emails on booking and send a monthly update",
            "Reply to every online review within 24 hours",
            "Create a regulars programme with a small perk for your top 50 customers",
        ],
        uk_context="Restaurants with a structured loyalty programme see 2.4x higher return frequency (UKHospitality).",
    )


def menu_gp_rule(period: FinancialPeriod, ratios: PeriodRatios, table: BenchmarkTable) -> Optional[Recommendation]:
    band = table.uk.gp_pct
    if not falls_short(ratios.gp_pct, band.target):
        return None
    gap = band.target - ratios.gp_pct
    return Recommendation(
        id="menu-engineering",
        title=f"Gross Profit % at {ratios.gp_pct:.1f}% - target is 65-70% for UK restaurants",
        description=(
            "Below 65% usually means food costs are too high, prices too low, "
            "or the menu mix is skewed towards low-margin dishes."
        ),
        category="menu",
        impact="high" if ratios.gp_pct < band.low else "medium",
        estimated_saving=round(period.revenue * gap / 100 * 0.5),
        actions=[
            "Run the menu engineering matrix to find Stars, Plough Horses, Puzzles and Dogs",
            "Remove or reprice Dogs first",
            "Check that sides and desserts carry 70%+ GP",
            "Consider a 5-8% price increase on your top-selling dishes",
        ],
        uk_context="Operators applying menu engineering typically improve GP% by 3-8 points within 2 menu cycles.",
    )


RULES: Sequence[Rule] = (
    food_cost_rule,
    labour_rule,
    wage_policy_rule,
    energy_rule,
    waste_rule,
    rent_rule,
    delivery_rule,
    avg_ticket_rule,
    retention_rule,
    menu_gp_rule,
)


def generate_recommendations(
    period: FinancialPeriod,
    *,
    benchmarks: Optional[BenchmarkTable] = None,
    rules: Sequence[Rule] = RULES,
) -> List[Recommendation]:
    """Evaluate every rule and rank the fired ones high -> medium -> low.

    ``sorted`` is stable, so equal tiers keep rule-evaluation order.
    """

    table = benchmarks or get_benchmarks()
    ratios = PeriodRatios.from_period(period)
    fired: List[Recommendation] = []
    for rule in rules:
        recommendation = rule(period, ratios, table)
        if recommendation is not None:
            fired.append(recommendation)
    logger.debug("%d of %d recommendation rules fired", len(fired), len(rules))
    return sorted(fired, key=lambda rec: IMPACT_ORDER[rec.impact])


__all__ = [
    "IMPACT_ORDER",
    "PeriodRatios",
    "RULES",
    "Recommendation",
    "format_gbp",
    "generate_recommendations",
    "saving_to_target",
]
