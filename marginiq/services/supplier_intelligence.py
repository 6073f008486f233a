"""Franchise supplier price benchmarking.

Franchisees see their latest price per ingredient against the anonymised
average of the rest of the network; the franchisor sees the price spread per
ingredient across every location.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional, Sequence

from marginiq.schemas import ApprovedSupplier, FinancialPeriod, FranchiseLocation, ResultModel, SupplierPriceReport
from marginiq.services.period_aggregator import AggregatedPeriod, summarize_periods

ON_PAR_TOLERANCE = 2.0

NO_NETWORK_DATA = "no-network-data"
ON_PAR = "on-par"
ABOVE_AVERAGE = "above-average"
BELOW_AVERAGE = "below-average"


class IntelligenceRow(ResultModel):
    ingredient: str
    unit: str
    my_price: float
    my_supplier: str
    network_avg: Optional[float] = None
    difference: Optional[float] = None
    difference_percent: Optional[float] = None
    network_data_points: int
    verdict: str


class PriceVarianceRow(ResultModel):
    ingredient: str
    unit: str
    avg: float
    min: float
    max: float
    variance: float
    data_points: int


class LocationSummary(ResultModel):
    restaurant_id: Any
    name: Optional[str] = None
    summary: Optional[AggregatedPeriod] = None
    monthly_data_count: int


class FranchiseNetworkSummary(ResultModel):
    network_summary: Optional[AggregatedPeriod] = None
    locations: List[LocationSummary]
    price_intelligence: List[PriceVarianceRow]
    total_locations: int
    approved_suppliers: List[ApprovedSupplier] = []


class SupplierIntelligenceReport(ResultModel):
    intelligence: List[IntelligenceRow]
    approved_suppliers: List[ApprovedSupplier] = []


def latest_reports_by_ingredient(reports: Iterable[SupplierPriceReport]) -> Dict[str, SupplierPriceReport]:
    """Most recent report per ingredient; on equal timestamps the first seen wins."""

    latest: Dict[str, SupplierPriceReport] = {}
    for report in sorted(reports, key=lambda r: r.reported_at, reverse=True):
        latest.setdefault(report.ingredient_name, report)
    return latest


def price_verdict(my_price: float, network_avg: Optional[float]) -> str:
    if network_avg is None:
        return NO_NETWORK_DATA
    if not network_avg:
        # other sites reported a zero price, so there is no percentage to compare
        return ABOVE_AVERAGE if my_price > 0 else ON_PAR
    difference_percent = (my_price - network_avg) / network_avg * 100
    if abs(difference_percent) < ON_PAR_TOLERANCE:
        return ON_PAR
    return ABOVE_AVERAGE if difference_percent > 0 else BELOW_AVERAGE


def compute_supplier_intelligence(
    my_reports: Sequence[SupplierPriceReport],
    all_reports: Iterable[SupplierPriceReport],
    restaurant_id: Optional[Any] = None,
) -> List[IntelligenceRow]:
    """Compare my latest prices with the network average excluding my own reports.

    Rows are ordered by ``difference_percent`` descending so the most
    overpriced ingredients come first; rows without network data sort as 0.
    """

    if restaurant_id is not None:
        excluded = {str(restaurant_id)}
    else:
        excluded = {str(report.restaurant_id) for report in my_reports}

    network_prices: Dict[str, List[float]] = defaultdict(list)
    for report in all_reports:
        if str(report.restaurant_id) in excluded:
            continue
        network_prices[report.ingredient_name].append(report.unit_price)

    rows: List[IntelligenceRow] = []
    for ingredient, mine in latest_reports_by_ingredient(my_reports).items():
        prices = network_prices.get(ingredient, [])
        network_avg = sum(prices) / len(prices) if prices else None
        difference = mine.unit_price - network_avg if network_avg is not None else None
        difference_percent = difference / network_avg * 100 if network_avg else None
        rows.append(
            IntelligenceRow(
                ingredient=ingredient,
                unit=mine.unit,
                my_price=mine.unit_price,
                my_supplier=mine.supplier_name,
                network_avg=network_avg,
                difference=difference,
                difference_percent=difference_percent,
                network_data_points=len(prices),
                verdict=price_verdict(mine.unit_price, network_avg),
            )
        )

    rows.sort(key=lambda row: row.difference_percent or 0, reverse=True)
    return rows


def compute_network_price_variance(all_reports: Iterable[SupplierPriceReport]) -> List[PriceVarianceRow]:
    """Per-ingredient spread across every report; widest spread first."""

    grouped: Dict[str, List[SupplierPriceReport]] = defaultdict(list)
    for report in all_reports:
        grouped[report.ingredient_name].append(report)

    rows: List[PriceVarianceRow] = []
    for ingredient, reports in grouped.items():
        values = [report.unit_price for report in reports]
        low, high = min(values), max(values)
        rows.append(
            PriceVarianceRow(
                ingredient=ingredient,
                unit=reports[0].unit,
                avg=sum(values) / len(values),
                min=low,
                max=high,
                variance=high - low,
                data_points=len(values),
            )
        )

    rows.sort(key=lambda row: row.variance, reverse=True)
    return rows


def summarize_franchise_network(
    locations: Sequence[FranchiseLocation],
    reports: Iterable[SupplierPriceReport],
    approved_suppliers: Sequence[ApprovedSupplier] = (),
) -> FranchiseNetworkSummary:
    """Franchisor overview: each location's totals, network totals and price spread."""

    summaries = [
        LocationSummary(
            restaurant_id=location.restaurant_id,
            name=location.name,
            summary=summarize_periods(location.periods),
            monthly_data_count=len(location.periods),
        )
        for location in locations
    ]
    all_periods: List[FinancialPeriod] = [period for location in locations for period in location.periods]
    return FranchiseNetworkSummary(
        network_summary=summarize_periods(all_periods),
        locations=summaries,
        price_intelligence=compute_network_price_variance(reports),
        total_locations=len(summaries),
        approved_suppliers=list(approved_suppliers),
    )


__all__ = [
    "ABOVE_AVERAGE",
    "BELOW_AVERAGE",
    "FranchiseNetworkSummary",
    "IntelligenceRow",
    "LocationSummary",
    "NO_NETWORK_DATA",
    "ON_PAR",
    "PriceVarianceRow",
    "SupplierIntelligenceReport",
    "compute_network_price_variance",
    "compute_supplier_intelligence",
    "latest_reports_by_ingredient",
    "price_verdict",
    "summarize_franchise_network",
]
