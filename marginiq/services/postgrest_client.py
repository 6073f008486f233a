"""Helpers for reaching the relational store through Supabase/PostgREST."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, Optional, TypeVar

from fastapi import HTTPException
from httpx import HTTPError as HttpxError
from postgrest import APIError as PostgrestAPIError
from postgrest import SyncPostgrestClient

from marginiq.config.supabase_client import SUPABASE_ANON_KEY, SUPABASE_URL

logger = logging.getLogger(__name__)

T = TypeVar("T")


def extract_bearer_token(header_value: Optional[str]) -> str:
    if not header_value:
        raise HTTPException(status_code=401, detail="Authentication required.")
    scheme, _, token = header_value.partition(" ")
    if scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid bearer token.")
    token = token.strip()
    if not token or " " in token:
        raise HTTPException(status_code=401, detail="Missing bearer token.")
    return token


def create_postgrest_client(access_token: str, *, api_key: Optional[str] = None) -> SyncPostgrestClient:
    """PostgREST client for ``/rest/v1`` authenticated as the caller."""

    resolved_api_key = api_key or SUPABASE_ANON_KEY
    if not SUPABASE_URL or not resolved_api_key:
        raise HTTPException(status_code=500, detail="Supabase is not configured.")

    headers: Dict[str, str] = {"apikey": resolved_api_key, "Accept": "application/json"}
    client = SyncPostgrestClient(f"{SUPABASE_URL.rstrip('/')}/rest/v1", headers=headers)
    client.auth(access_token)
    return client


def postgrest_status(exc: PostgrestAPIError) -> int:
    try:
        return int(exc.code) if exc.code else 502
    except (TypeError, ValueError):
        return 502


def raise_postgrest_error(exc: PostgrestAPIError, *, context: str) -> None:
    """Translate a PostgREST failure into the matching HTTP error."""

    status_code = postgrest_status(exc)
    detail = exc.message or "Upstream storage error."
    logger.error("%s failed (%s): %s", context, status_code, detail)
    if status_code == 401:
        raise HTTPException(status_code=401, detail="Supabase authentication required.") from exc
    if status_code == 403:
        raise HTTPException(status_code=403, detail="Access to this resource is denied.") from exc
    if status_code == 404:
        raise HTTPException(status_code=404, detail="Resource not found.") from exc
    raise HTTPException(status_code=502, detail="Upstream storage error.") from exc


async def run_postgrest(request: Callable[[], T], *, context: str) -> T:
    """Run a blocking PostgREST request off the event loop."""

    try:
        return await asyncio.to_thread(request)
    except PostgrestAPIError as exc:  # pragma: no cover - network interaction
        raise_postgrest_error(exc, context=context)
        raise
    except HttpxError as exc:  # pragma: no cover - network interaction
        logger.error("%s failed: %s", context, exc)
        raise HTTPException(status_code=503, detail="Supabase is temporarily unavailable.") from exc


__all__ = [
    "create_postgrest_client",
    "extract_bearer_token",
    "postgrest_status",
    "raise_postgrest_error",
    "run_postgrest",
]
