"""Menu engineering matrix."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from marginiq.api.dependencies import get_finance_dao
from marginiq.schemas import ResultModel
from marginiq.services.finance_dao import SupabaseFinanceDAO
from marginiq.services.menu_engineering import ClassifiedItem, MenuSummary, classify_menu, summarize_menu

router = APIRouter(prefix="/api/menu", tags=["menu"])


class MenuEngineeringResponse(ResultModel):
    items: List[ClassifiedItem]
    summary: MenuSummary


@router.get("/engineering", response_model=MenuEngineeringResponse)
async def menu_engineering(dao: SupabaseFinanceDAO = Depends(get_finance_dao)) -> MenuEngineeringResponse:
    # No sales feed yet: popularity falls back to the uniform stub.
    classified = classify_menu(await dao.fetch_menu_items())
    return MenuEngineeringResponse(items=classified, summary=summarize_menu(classified))
