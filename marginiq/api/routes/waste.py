"""Food waste analytics."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from marginiq.api.dependencies import get_finance_dao
from marginiq.services.finance_dao import SupabaseFinanceDAO
from marginiq.services.waste_analytics import WasteAnalytics, compute_waste_analytics

router = APIRouter(prefix="/api/waste", tags=["waste"])


@router.get("/analytics", response_model=WasteAnalytics)
async def waste_analytics(dao: SupabaseFinanceDAO = Depends(get_finance_dao)) -> WasteAnalytics:
    logs = await dao.fetch_waste_logs()
    periods = await dao.fetch_monthly_data()
    return compute_waste_analytics(logs, periods)
