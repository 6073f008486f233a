"""Breakeven, recommendations and cost drivers for the latest month."""

from __future__ import annotations

from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException

from marginiq.api.dependencies import get_finance_dao
from marginiq.schemas import FinancialPeriod
from marginiq.services.breakeven import BreakevenResult, compute_breakeven
from marginiq.services.expense_intelligence import CostDriverReport, analyze_cost_drivers
from marginiq.services.finance_dao import SupabaseFinanceDAO
from marginiq.services.period_aggregator import latest_periods
from marginiq.services.recommendations import Recommendation, generate_recommendations

router = APIRouter(prefix="/api/insights", tags=["insights"])


async def _latest_two(dao: SupabaseFinanceDAO) -> Tuple[FinancialPeriod, Optional[FinancialPeriod]]:
    recent = latest_periods(await dao.fetch_monthly_data(), count=2)
    if not recent:
        raise HTTPException(status_code=404, detail="No monthly data for this restaurant.")
    return recent[0], recent[1] if len(recent) > 1 else None


@router.get("/breakeven", response_model=BreakevenResult)
async def breakeven(dao: SupabaseFinanceDAO = Depends(get_finance_dao)) -> BreakevenResult:
    latest, _ = await _latest_two(dao)
    return compute_breakeven(latest)


@router.get("/recommendations", response_model=List[Recommendation])
async def recommendations(dao: SupabaseFinanceDAO = Depends(get_finance_dao)) -> List[Recommendation]:
    latest, _ = await _latest_two(dao)
    return generate_recommendations(latest)


@router.get("/cost-drivers", response_model=CostDriverReport)
async def cost_drivers(dao: SupabaseFinanceDAO = Depends(get_finance_dao)) -> CostDriverReport:
    latest, previous = await _latest_two(dao)
    return analyze_cost_drivers(latest, previous)
