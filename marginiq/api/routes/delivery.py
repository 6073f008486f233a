"""Delivery platform cost calculator; stateless, no storage access."""

from __future__ import annotations

from fastapi import APIRouter

from marginiq.schemas import DeliveryCalculatorPayload
from marginiq.services.delivery_platforms import PlatformComparison, compare_delivery_platforms

router = APIRouter(prefix="/api/delivery", tags=["delivery"])


@router.post("/platforms", response_model=PlatformComparison)
def delivery_platforms(payload: DeliveryCalculatorPayload) -> PlatformComparison:
    return compare_delivery_platforms(payload.avg_order_value, payload.monthly_orders, payload.platforms)
