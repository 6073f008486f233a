"""Franchise network endpoints: supplier price benchmarking and group analytics."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from marginiq.api.dependencies import get_finance_dao
from marginiq.services.finance_dao import SupabaseFinanceDAO
from marginiq.services.supplier_intelligence import (
    FranchiseNetworkSummary,
    SupplierIntelligenceReport,
    compute_supplier_intelligence,
    summarize_franchise_network,
)

router = APIRouter(prefix="/api/franchise", tags=["franchise"])
logger = logging.getLogger(__name__)


async def _ensure_member(dao: SupabaseFinanceDAO, group_id: str) -> None:
    if not await dao.is_franchise_member(group_id):
        logger.warning("Restaurant %s is not an active member of group %s", dao.restaurant_id, group_id)
        raise HTTPException(status_code=403, detail="Restaurant is not a member of this franchise group.")


@router.get("/{group_id}/supplier-intelligence", response_model=SupplierIntelligenceReport)
async def supplier_intelligence(
    group_id: str,
    dao: SupabaseFinanceDAO = Depends(get_finance_dao),
) -> SupplierIntelligenceReport:
    await _ensure_member(dao, group_id)
    my_reports = await dao.fetch_restaurant_price_reports(group_id)
    all_reports = await dao.fetch_supplier_price_reports(group_id)
    approved = await dao.fetch_approved_suppliers(group_id)
    return SupplierIntelligenceReport(
        intelligence=compute_supplier_intelligence(my_reports, all_reports, restaurant_id=dao.restaurant_id),
        approved_suppliers=approved,
    )


@router.get("/{group_id}/analytics", response_model=FranchiseNetworkSummary)
async def franchise_analytics(
    group_id: str,
    dao: SupabaseFinanceDAO = Depends(get_finance_dao),
) -> FranchiseNetworkSummary:
    await _ensure_member(dao, group_id)
    locations = await dao.fetch_franchise_locations(group_id)
    reports = await dao.fetch_supplier_price_reports(group_id)
    approved = await dao.fetch_approved_suppliers(group_id)
    return summarize_franchise_network(locations, reports, approved)
