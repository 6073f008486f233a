"""Request-scoped dependencies shared by every router."""

from __future__ import annotations

from typing import Optional, Tuple

from fastapi import Depends, Header, HTTPException

from marginiq.config.supabase_client import SUPABASE_SERVICE_ROLE_KEY
from marginiq.services.finance_dao import SupabaseFinanceDAO
from marginiq.services.postgrest_client import extract_bearer_token


async def get_current_restaurant_id(
    x_restaurant_id: Optional[str] = Header(default=None, alias="X-Restaurant-Id"),
) -> str:
    """Resolve the restaurant identifier from the current request."""

    restaurant_id = (x_restaurant_id or "").strip()
    if not restaurant_id:
        raise HTTPException(status_code=401, detail="Restaurant not authenticated.")
    return restaurant_id


async def get_access_token(
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> str:
    return extract_bearer_token(authorization)


def _resolve_postgrest_credentials(access_token: str) -> Tuple[str, Optional[str]]:
    """Token/api key pair to use with PostgREST."""

    if SUPABASE_SERVICE_ROLE_KEY:
        return SUPABASE_SERVICE_ROLE_KEY, SUPABASE_SERVICE_ROLE_KEY
    return access_token, None


async def get_finance_dao(
    restaurant_id: str = Depends(get_current_restaurant_id),
    access_token: str = Depends(get_access_token),
) -> SupabaseFinanceDAO:
    # Access is always checked with the caller's own token.
    if not await SupabaseFinanceDAO(restaurant_id, access_token).restaurant_exists():
        raise HTTPException(status_code=403, detail="Access to this restaurant is denied.")
    db_token, api_key = _resolve_postgrest_credentials(access_token)
    return SupabaseFinanceDAO(restaurant_id, db_token, api_key=api_key)


__all__ = ["get_access_token", "get_current_restaurant_id", "get_finance_dao"]
