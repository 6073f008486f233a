"""Quarter, half-year and week performance comparisons."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from marginiq.api.dependencies import get_finance_dao
from marginiq.services.finance_dao import SupabaseFinanceDAO
from marginiq.services.period_aggregator import (
    BucketRule,
    HalfRule,
    PeriodComparison,
    QuarterRule,
    WeekRule,
    compare_periods,
)

router = APIRouter(prefix="/api/comparisons", tags=["comparisons"])
logger = logging.getLogger(__name__)


def _build_rule(factory, *args) -> BucketRule:
    try:
        return factory(*args)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/quarterly", response_model=PeriodComparison)
async def quarterly_comparison(
    quarter: int = Query(..., ge=1, le=4),
    year: int = Query(...),
    dao: SupabaseFinanceDAO = Depends(get_finance_dao),
) -> PeriodComparison:
    periods = await dao.fetch_monthly_data()
    logger.debug("Quarterly comparison Q%s %s over %s monthly records", quarter, year, len(periods))
    return compare_periods(periods, _build_rule(QuarterRule, quarter, year))


@router.get("/half-yearly", response_model=PeriodComparison)
async def half_yearly_comparison(
    half: int = Query(..., ge=1, le=2),
    year: int = Query(...),
    dao: SupabaseFinanceDAO = Depends(get_finance_dao),
) -> PeriodComparison:
    periods = await dao.fetch_monthly_data()
    return compare_periods(periods, _build_rule(HalfRule, half, year))


@router.get("/weekly", response_model=PeriodComparison)
async def weekly_comparison(
    week_number: int = Query(..., ge=1, le=53),
    year: int = Query(...),
    dao: SupabaseFinanceDAO = Depends(get_finance_dao),
) -> PeriodComparison:
    periods = await dao.fetch_weekly_data()
    return compare_periods(periods, _build_rule(WeekRule, week_number, year))
