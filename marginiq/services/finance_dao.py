"""PostgREST-backed access to the restaurant's financial records."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from marginiq.schemas import (
    ApprovedSupplier,
    FinancialPeriod,
    FranchiseLocation,
    IngredientPrice,
    MenuItem,
    RecipeLine,
    SupplierPriceReport,
    WasteLog,
)
from marginiq.services.menu_engineering import compute_recipe_cost
from marginiq.services.postgrest_client import create_postgrest_client, run_postgrest

logger = logging.getLogger(__name__)

PERIOD_COLUMNS = (
    "restaurant_id,year,revenue,food_cost,labour_cost,energy_cost,rent_cost,marketing_cost,"
    "supplies_cost,technology_cost,waste_cost,delivery_revenue,dine_in_revenue,takeaway_revenue,"
    "total_covers,avg_ticket_size,repeat_customer_rate"
)
PRICE_REPORT_COLUMNS = (
    "restaurant_id,franchise_group_id,ingredient_name,supplier_name,unit_price,unit,month,year,reported_at"
)


def _parse_rows(model, rows: Sequence[Dict[str, Any]], *, context: str) -> List[Any]:
    """Validate storage rows, skipping (and logging) the ones that do not fit the model."""

    parsed = []
    for row in rows:
        try:
            parsed.append(model.model_validate(row))
        except ValidationError as exc:
            logger.warning("Skipping invalid %s row %s: %s", context, row.get("id"), exc)
    return parsed


class SupabaseFinanceDAO:
    """Read-only DAO scoped to one restaurant."""

    def __init__(self, restaurant_id: str, access_token: str, *, api_key: Optional[str] = None):
        self.restaurant_id = str(restaurant_id)
        self.access_token = access_token
        self.api_key = api_key

    def _client(self):
        return create_postgrest_client(self.access_token, api_key=self.api_key)

    async def restaurant_exists(self) -> bool:
        def _request() -> bool:
            with self._client() as client:
                response = client.table("restaurants").select("id").eq("id", self.restaurant_id).limit(1).execute()
                return bool(response.data)

        return await run_postgrest(_request, context="restaurant access check")

    async def is_franchise_member(self, group_id: str) -> bool:
        def _request() -> bool:
            with self._client() as client:
                response = (
                    client.table("franchise_memberships")
                    .select("id")
                    .eq("franchise_group_id", group_id)
                    .eq("restaurant_id", self.restaurant_id)
                    .eq("is_active", True)
                    .limit(1)
                    .execute()
                )
                return bool(response.data)

        return await run_postgrest(_request, context="franchise membership check")

    async def fetch_monthly_data(self) -> List[FinancialPeriod]:
        def _request() -> List[Dict[str, Any]]:
            with self._client() as client:
                response = (
                    client.table("monthly_data")
                    .select(f"id,month,{PERIOD_COLUMNS}")
                    .eq("restaurant_id", self.restaurant_id)
                    .order("year")
                    .execute()
                )
                return response.data or []

        rows = await run_postgrest(_request, context="fetch monthly data")
        return _parse_rows(FinancialPeriod, rows, context="monthly_data")

    async def fetch_weekly_data(self) -> List[FinancialPeriod]:
        def _request() -> List[Dict[str, Any]]:
            with self._client() as client:
                response = (
                    client.table("weekly_data")
                    .select(f"id,week_number,{PERIOD_COLUMNS}")
                    .eq("restaurant_id", self.restaurant_id)
                    .order("year")
                    .order("week_number")
                    .execute()
                )
                return response.data or []

        rows = await run_postgrest(_request, context="fetch weekly data")
        return _parse_rows(FinancialPeriod, rows, context="weekly_data")

    async def fetch_menu_items(self) -> List[MenuItem]:
        """Active menu items with ``computed_cost`` derived from their recipe lines."""

        def _request() -> Dict[str, List[Dict[str, Any]]]:
            with self._client() as client:
                items = (
                    client.table("menu_items")
                    .select("id,name,category,selling_price,is_active")
                    .eq("restaurant_id", self.restaurant_id)
                    .eq("is_active", True)
                    .order("name")
                    .execute()
                ).data or []
                item_ids = [row["id"] for row in items if row.get("id") is not None]
                recipes: List[Dict[str, Any]] = []
                if item_ids:
                    recipes = (
                        client.table("menu_item_ingredients")
                        .select("menu_item_id,ingredient_id,quantity,unit")
                        .in_("menu_item_id", item_ids)
                        .execute()
                    ).data or []
                ingredients = (
                    client.table("ingredients")
                    .select("id,name,current_price")
                    .eq("restaurant_id", self.restaurant_id)
                    .execute()
                ).data or []
                return {"items": items, "recipes": recipes, "ingredients": ingredients}

        dataset = await run_postgrest(_request, context="fetch menu items")

        prices: List[IngredientPrice] = _parse_rows(IngredientPrice, dataset["ingredients"], context="ingredients")
        recipe_map: Dict[str, List[RecipeLine]] = defaultdict(list)
        for row in dataset["recipes"]:
            menu_item_id = row.get("menu_item_id")
            if menu_item_id is None:
                continue
            recipe_map[str(menu_item_id)].extend(_parse_rows(RecipeLine, [row], context="menu_item_ingredients"))

        items: List[MenuItem] = []
        for item in _parse_rows(MenuItem, dataset["items"], context="menu_items"):
            cost = compute_recipe_cost(recipe_map.get(str(item.id), []), prices)
            items.append(item.model_copy(update={"computed_cost": cost}))
        return items

    async def fetch_restaurant_price_reports(self, group_id: str) -> List[SupplierPriceReport]:
        def _request() -> List[Dict[str, Any]]:
            with self._client() as client:
                response = (
                    client.table("supplier_price_reports")
                    .select(PRICE_REPORT_COLUMNS)
                    .eq("franchise_group_id", group_id)
                    .eq("restaurant_id", self.restaurant_id)
                    .execute()
                )
                return response.data or []

        rows = await run_postgrest(_request, context="fetch own price reports")
        return _parse_rows(SupplierPriceReport, rows, context="supplier_price_reports")

    async def fetch_supplier_price_reports(self, group_id: str) -> List[SupplierPriceReport]:
        def _request() -> List[Dict[str, Any]]:
            with self._client() as client:
                response = (
                    client.table("supplier_price_reports")
                    .select(PRICE_REPORT_COLUMNS)
                    .eq("franchise_group_id", group_id)
                    .execute()
                )
                return response.data or []

        rows = await run_postgrest(_request, context="fetch network price reports")
        return _parse_rows(SupplierPriceReport, rows, context="supplier_price_reports")

    async def fetch_approved_suppliers(self, group_id: str) -> List[ApprovedSupplier]:
        def _request() -> List[Dict[str, Any]]:
            with self._client() as client:
                response = (
                    client.table("franchise_approved_suppliers")
                    .select(
                        "id,franchise_group_id,name,category,contact_info,ingredient_name,"
                        "contracted_price,unit,is_required,notes"
                    )
                    .eq("franchise_group_id", group_id)
                    .order("name")
                    .execute()
                )
                return response.data or []

        rows = await run_postgrest(_request, context="fetch approved suppliers")
        return _parse_rows(ApprovedSupplier, rows, context="franchise_approved_suppliers")

    async def fetch_franchise_locations(self, group_id: str) -> List[FranchiseLocation]:
        """Every active member of the group with its monthly history."""

        def _request() -> Dict[str, List[Dict[str, Any]]]:
            with self._client() as client:
                memberships = (
                    client.table("franchise_memberships")
                    .select("restaurant_id")
                    .eq("franchise_group_id", group_id)
                    .eq("is_active", True)
                    .execute()
                ).data or []
                member_ids = sorted({row["restaurant_id"] for row in memberships if row.get("restaurant_id") is not None})
                if not member_ids:
                    return {"restaurants": [], "periods": []}
                restaurants = (
                    client.table("restaurants").select("id,name").in_("id", member_ids).execute()
                ).data or []
                periods = (
                    client.table("monthly_data")
                    .select(f"id,month,{PERIOD_COLUMNS}")
                    .in_("restaurant_id", member_ids)
                    .execute()
                ).data or []
                return {"restaurants": restaurants, "periods": periods}

        dataset = await run_postgrest(_request, context="fetch franchise locations")

        periods_by_restaurant: Dict[str, List[FinancialPeriod]] = defaultdict(list)
        for period in _parse_rows(FinancialPeriod, dataset["periods"], context="monthly_data"):
            periods_by_restaurant[str(period.restaurant_id)].append(period)

        return [
            FranchiseLocation(
                restaurant_id=row["id"],
                name=row.get("name"),
                periods=periods_by_restaurant.get(str(row["id"]), []),
            )
            for row in dataset["restaurants"]
        ]

    async def fetch_waste_logs(self) -> List[WasteLog]:
        def _request() -> List[Dict[str, Any]]:
            with self._client() as client:
                response = (
                    client.table("waste_logs")
                    .select("id,item_name,quantity,unit,cost_per_unit,total_cost,reason,date,notes")
                    .eq("restaurant_id", self.restaurant_id)
                    .order("date", desc=True)
                    .execute()
                )
                return response.data or []

        rows = await run_postgrest(_request, context="fetch waste logs")
        return _parse_rows(WasteLog, rows, context="waste_logs")


__all__ = ["SupabaseFinanceDAO"]
