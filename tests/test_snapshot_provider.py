"""Tests for the Supabase snapshot provider."""
from unittest.mock import AsyncMock, MagicMock, call, patch

import httpx
import pytest
from postgrest.exceptions import APIError

from lib.config import Settings
from lib.errors import UpstreamError, ValidationError
from lib.snapshot_provider import (
    SnapshotProvider,
    parse_order,
    split_filter,
    table_names_from_openapi,
)

SETTINGS = Settings(supabase_url="https://example.supabase.co/", supabase_key="test-key")


def _client(rows=None, error=None):
    """Mock AsyncClient whose query builder chains back to itself."""
    query = MagicMock()
    for method in ("filter", "order", "limit", "offset"):
        getattr(query, method).return_value = query
    query.execute = AsyncMock(return_value=MagicMock(data=rows), side_effect=error)
    client = MagicMock()
    client.table.return_value.select.return_value = query
    return client, query


class TestExpressions:
    def test_split_filter(self):
        assert split_filter("status", "eq.won") == ("eq", "won")
        assert split_filter("email", "not.is.null") == ("not", "is.null")
        assert split_filter("name", "ilike.*smith*") == ("ilike", "*smith*")

    def test_split_filter_rejects_bare_value(self):
        with pytest.raises(ValidationError):
            split_filter("status", "won")

    def test_parse_order(self):
        assert parse_order("ghl_created_at.desc") == [("ghl_created_at", True, None)]
        assert parse_order("pipeline_name,stage_position") == [
            ("pipeline_name", False, None), ("stage_position", False, None),
        ]
        assert parse_order("a.desc.nullsfirst, b.asc") == [("a", True, True), ("b", False, None)]
        assert parse_order("a.desc.nullslast") == [("a", True, False)]
        assert parse_order(None) == []

    def test_table_names_from_openapi(self):
        spec = {"paths": {"/": {}, "/contacts": {}, "/rpc/refresh": {}, "/appointments": {}}}
        assert table_names_from_openapi(spec) == ["appointments", "contacts"]
        assert table_names_from_openapi({}) == []


class TestFetch:
    @pytest.mark.asyncio
    async def test_builds_query(self):
        client, query = _client(rows=[{"id": 1}])
        provider = SnapshotProvider(SETTINGS, client)

        rows = await provider.fetch(
            "opportunities", select="id,status", filters={"status": "eq.won"},
            order="ghl_created_at.desc", limit=100, offset=20,
        )

        assert rows == [{"id": 1}]
        client.table.assert_called_once_with("opportunities")
        client.table.return_value.select.assert_called_once_with("id,status")
        query.filter.assert_called_once_with("status", "eq", "won")
        query.order.assert_called_once_with("ghl_created_at", desc=True)
        query.limit.assert_called_once_with(100)
        query.offset.assert_called_once_with(20)

    @pytest.mark.asyncio
    async def test_explicit_null_placement_is_kept(self):
        client, query = _client(rows=[])
        await SnapshotProvider(SETTINGS, client).fetch(
            "contacts", order="created_at.desc.nullslast,email.nullsfirst",
        )
        assert query.order.call_args_list == [
            call("created_at", desc=True, nullsfirst=False),
            call("email", desc=False, nullsfirst=True),
        ]

    @pytest.mark.asyncio
    async def test_no_limit_or_offset_when_absent(self):
        client, query = _client(rows=None)
        rows = await SnapshotProvider(SETTINGS, client).fetch("contacts")
        assert rows == []
        query.limit.assert_not_called()
        query.offset.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_error_becomes_upstream_error(self):
        error = APIError({"message": "relation does not exist", "code": "42P01"})
        client, _ = _client(error=error)
        with pytest.raises(UpstreamError) as exc:
            await SnapshotProvider(SETTINGS, client).fetch("sf_contacts")
        assert "[42P01] relation does not exist" in str(exc.value)
        assert exc.value.table == "sf_contacts"
        assert exc.value.store_code == "42P01"
        assert exc.value.status_code is None

    @pytest.mark.asyncio
    async def test_transport_error_becomes_upstream_error(self):
        client, _ = _client(error=httpx.ConnectError("boom"))
        with pytest.raises(UpstreamError):
            await SnapshotProvider(SETTINGS, client).fetch("contacts")

    @pytest.mark.asyncio
    async def test_fetch_optional_degrades_to_empty(self):
        error = APIError({"message": "missing", "code": "PGRST205"})
        client, _ = _client(error=error)
        assert await SnapshotProvider(SETTINGS, client).fetch_optional("sf_contacts") == []


class TestRpcAndCatalogue:
    @pytest.mark.asyncio
    async def test_call_rpc(self):
        client = MagicMock()
        client.rpc.return_value.execute = AsyncMock(return_value=MagicMock(data={"ok": True}))
        result = await SnapshotProvider(SETTINGS, client).call_rpc("refresh_views", {"full": True})
        assert result == {"ok": True}
        client.rpc.assert_called_once_with("refresh_views", {"full": True})

    @pytest.mark.asyncio
    async def test_list_tables(self):
        provider = SnapshotProvider(SETTINGS)
        spec = {"paths": {"/contacts": {}, "/opportunities": {}, "/rpc/x": {}}}
        with patch.object(provider, "_fetch_openapi", AsyncMock(return_value=spec)):
            assert await provider.list_tables() == ["contacts", "opportunities"]

    @pytest.mark.asyncio
    async def test_gather_propagates_first_failure(self):
        async def ok():
            return [1]

        async def fail():
            raise UpstreamError("down")

        assert await SnapshotProvider.gather(ok(), ok()) == [[1], [1]]
        with pytest.raises(UpstreamError):
            await SnapshotProvider.gather(ok(), fail())

    def test_settings_strip_trailing_slash(self):
        assert SnapshotProvider(SETTINGS).settings.supabase_url == "https://example.supabase.co"
        assert not SnapshotProvider(SETTINGS).is_connected
