"""
Snapshot provider for PI Analytics.
Fetches table snapshots, RPC results and the table catalogue from Supabase.

Usage:
    from lib.snapshot_provider import SnapshotProvider

    provider = await SnapshotProvider.connect(settings)
    opportunities, stages = await provider.gather(
        provider.fetch("opportunities", select="id,status"),
        provider.fetch("pipeline_stages", order="pipeline_name,stage_position"),
    )
    issues = await provider.fetch_optional("data_quality_issues")
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Dict, List, Optional, Tuple

import aiohttp
import httpx
from postgrest.exceptions import APIError

from lib.config import Settings
from lib.errors import UpstreamError, ValidationError
from lib.logger import setup_logger

logger = setup_logger(__name__)


def split_filter(column: str, expression: str) -> Tuple[str, str]:
    """
    Split a PostgREST filter expression into operator and criteria.

    "eq.won" -> ("eq", "won"); "not.is.null" -> ("not", "is.null").
    """
    operator, sep, criteria = str(expression).partition(".")
    if not sep or not operator:
        raise ValidationError(
            f"Invalid filter for '{column}': expected 'operator.value', got '{expression}'",
            field=column,
        )
    return operator, criteria


def parse_order(order: Optional[str]) -> List[Tuple[str, bool, Optional[bool]]]:
    """
    Parse a PostgREST order expression into (column, desc, nullsfirst) terms.

    nullsfirst is True for "nullsfirst", False for "nullslast" and None when
    the expression leaves null placement to the store.

    "ghl_created_at.desc" -> [("ghl_created_at", True, None)]
    "a.desc.nullslast" -> [("a", True, False)]
    "pipeline_name,stage_position" -> two ascending terms
    """
    terms: List[Tuple[str, bool, Optional[bool]]] = []
    if not order:
        return terms
    for part in order.split(","):
        pieces = [p for p in part.strip().split(".") if p]
        if not pieces:
            continue
        column, modifiers = pieces[0], {p.lower() for p in pieces[1:]}
        if "nullsfirst" in modifiers:
            nullsfirst = True
        elif "nullslast" in modifiers:
            nullsfirst = False
        else:
            nullsfirst = None
        terms.append((column, "desc" in modifiers, nullsfirst))
    return terms


def describe_api_error(error: APIError) -> str:
    """PostgREST error as "[code] message (details; hint)"."""
    text = f"[{error.code}] {error.message}" if error.code else str(error.message)
    extra = "; ".join(str(part) for part in (error.details, error.hint) if part)
    return f"{text} ({extra})" if extra else text


def table_names_from_openapi(spec: Dict[str, Any]) -> List[str]:
    """Extract sorted table names from a PostgREST OpenAPI document."""
    return sorted(
        path[1:]
        for path in (spec.get("paths") or {})
        if path.startswith("/") and len(path) > 1 and "/rpc/" not in path
    )


class SnapshotProvider:
    """Read-only access to the backing store, one instance per process."""

    def __init__(self, settings: Settings, client=None):
        self.settings = settings
        self._client = client

    @classmethod
    async def connect(cls, settings: Settings) -> "SnapshotProvider":
        """Create an async Supabase client for the configured project."""
        from supabase import acreate_client

        client = await acreate_client(settings.supabase_url, settings.supabase_key)
        logger.info("Supabase client connected to %s", settings.supabase_url)
        return cls(settings, client)

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.settings.supabase_key,
            "Authorization": f"Bearer {self.settings.supabase_key}",
        }

    async def fetch(
        self,
        table: str,
        select: str = "*",
        filters: Optional[Dict[str, str]] = None,
        order: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Dict]:
        """
        Fetch rows from a table.

        Args:
            table: Table name.
            select: Column projection (default "*").
            filters: Column -> PostgREST expression, e.g. {"status": "eq.won"}.
            order: PostgREST order expression, e.g. "created_at.desc".
            limit: Max rows to return.
            offset: Rows to skip.

        Returns:
            List of row dicts.

        Raises:
            UpstreamError: the store rejected the query or was unreachable.
        """
        query = self._client.table(table).select(select)

        for column, expression in (filters or {}).items():
            operator, criteria = split_filter(column, expression)
            query = query.filter(column, operator, criteria)

        for column, desc, nullsfirst in parse_order(order):
            if nullsfirst is None:
                query = query.order(column, desc=desc)
            else:
                query = query.order(column, desc=desc, nullsfirst=nullsfirst)

        if limit:
            query = query.limit(limit)
        if offset:
            query = query.offset(offset)

        try:
            result = await query.execute()
        except APIError as e:
            raise UpstreamError(
                f"Supabase error on {table}: {describe_api_error(e)}",
                table=table, store_code=e.code,
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(
                f"Supabase request failed for {table}: {e}", table=table,
            ) from e

        rows = result.data or []
        logger.debug("Fetched %d rows from %s", len(rows), table)
        return rows

    async def fetch_optional(self, table: str, **kwargs) -> List[Dict]:
        """Fetch rows, degrading to an empty list when the table is unavailable."""
        try:
            return await self.fetch(table, **kwargs)
        except UpstreamError as e:
            logger.warning("Optional table %s unavailable, using []: %s", table, e)
            return []

    async def call_rpc(self, function: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Call a stored procedure and return its result payload.

        No view uses it yet; it is here for store-side aggregates exposed as
        Postgres functions.
        """
        try:
            result = await self._client.rpc(function, params or {}).execute()
        except APIError as e:
            raise UpstreamError(
                f"Supabase RPC error in {function}: {describe_api_error(e)}",
                store_code=e.code,
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Supabase RPC request failed for {function}: {e}") from e
        return result.data

    async def _fetch_openapi(self) -> Dict[str, Any]:
        url = f"{self.settings.supabase_url}/rest/v1/"
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(url, headers=self._headers()) as resp:
                    if resp.status != 200:
                        text = await resp.text()
                        logger.error("Table catalogue returned %d: %s", resp.status, text)
                        raise UpstreamError(
                            f"Failed to fetch tables: {resp.status}",
                            status_code=resp.status,
                        )
                    return await resp.json(content_type=None)
        except aiohttp.ClientError as e:
            raise UpstreamError(f"Failed to fetch tables: {e}") from e

    async def list_tables(self) -> List[str]:
        """List table names exposed by the store's REST schema."""
        return table_names_from_openapi(await self._fetch_openapi())

    @staticmethod
    async def gather(*fetches: Awaitable) -> List[Any]:
        """Run fetches concurrently; the first failure fails the whole batch."""
        return list(await asyncio.gather(*fetches))
