"""Delivery platform cost comparison."""

from __future__ import annotations

from typing import List, Optional, Sequence

from marginiq.schemas import DeliveryPlatform, ResultModel
from marginiq.services.breakeven import round_half_up

DEFAULT_PLATFORMS = (
    DeliveryPlatform(name="Uber Eats", commission=30, delivery_fee=2.50, monthly_fee=0, order_share=40),
    DeliveryPlatform(name="Deliveroo", commission=25, delivery_fee=2.00, monthly_fee=49, order_share=30),
    DeliveryPlatform(name="Just Eat", commission=20, delivery_fee=1.50, monthly_fee=0, order_share=20),
    DeliveryPlatform(name="Own Website", commission=0, delivery_fee=0, monthly_fee=99, order_share=10),
)


class PlatformCost(ResultModel):
    name: str
    orders: int
    revenue: float
    commission_cost: float
    delivery_cost: float
    monthly_fee: float
    total_cost: float
    net_revenue: float
    effective_rate: float


class PlatformComparison(ResultModel):
    platforms: List[PlatformCost]
    total_revenue: float
    total_costs: float
    total_net: float
    blended_rate: float


def compare_delivery_platforms(
    avg_order_value: float,
    monthly_orders: int,
    platforms: Optional[Sequence[DeliveryPlatform]] = None,
) -> PlatformComparison:
    rows: List[PlatformCost] = []
    for platform in platforms or DEFAULT_PLATFORMS:
        orders = round_half_up(monthly_orders * platform.order_share / 100)
        revenue = orders * avg_order_value
        commission_cost = revenue * platform.commission / 100
        delivery_cost = orders * platform.delivery_fee
        total_cost = commission_cost + delivery_cost + platform.monthly_fee
        rows.append(
            PlatformCost(
                name=platform.name,
                orders=orders,
                revenue=revenue,
                commission_cost=commission_cost,
                delivery_cost=delivery_cost,
                monthly_fee=platform.monthly_fee,
                total_cost=total_cost,
                net_revenue=revenue - total_cost,
                effective_rate=total_cost / revenue * 100 if revenue > 0 else 0.0,
            )
        )

    total_revenue = sum(row.revenue for row in rows)
    total_costs = sum(row.total_cost for row in rows)
    return PlatformComparison(
        platforms=rows,
        total_revenue=total_revenue,
        total_costs=total_costs,
        total_net=sum(row.net_revenue for row in rows),
        blended_rate=total_costs / total_revenue * 100 if total_revenue > 0 else 0.0,
    )


__all__ = ["DEFAULT_PLATFORMS", "PlatformComparison", "PlatformCost", "compare_delivery_platforms"]
