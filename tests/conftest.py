"""Shared fixtures: an in-memory snapshot provider and sample store rows."""
from __future__ import annotations

import copy
from typing import Dict, List

import pytest

from lib.config import Settings
from lib.errors import UpstreamError
from lib.snapshot_provider import SnapshotProvider


class FakeProvider(SnapshotProvider):
    """Serves canned tables; tables listed in ``failing`` raise UpstreamError."""

    def __init__(self, tables: Dict[str, List[dict]] = None, failing=()):
        super().__init__(Settings(supabase_url="https://example.supabase.co", supabase_key="test-key"))
        self.tables = tables or {}
        self.failing = set(failing)
        self.calls = []

    @property
    def is_connected(self) -> bool:
        return True

    async def fetch(self, table, select="*", filters=None, order=None, limit=None, offset=None):
        self.calls.append({
            "table": table, "select": select, "filters": filters,
            "order": order, "limit": limit, "offset": offset,
        })
        if table in self.failing or table not in self.tables:
            raise UpstreamError(
                f"Supabase error on {table}: [42P01] relation {table} does not exist",
                table=table, store_code="42P01",
            )
        return copy.deepcopy(self.tables[table])

    async def list_tables(self):
        return sorted(self.tables)

    def calls_for(self, table):
        return [call for call in self.calls if call["table"] == table]


@pytest.fixture
def stage_rows():
    return [
        {"ghl_pipeline_id": "p1", "pipeline_name": "Intake", "stage_id": "s1",
         "stage_name": "New Lead", "stage_position": 0},
        {"ghl_pipeline_id": "p1", "pipeline_name": "Intake", "stage_id": "s2",
         "stage_name": "Consult", "stage_position": 1},
        {"ghl_pipeline_id": "p1", "pipeline_name": "Intake", "stage_id": "s3",
         "stage_name": "Signed", "stage_position": 2},
        {"ghl_pipeline_id": "p2", "pipeline_name": "Referral", "stage_id": "r1",
         "stage_name": "Referred", "stage_position": 5},
    ]


@pytest.fixture
def opportunity_rows():
    return [
        {"id": "o1", "status": "open", "monetary_value": 1000, "pipeline_id": "p1",
         "pipeline_stage_id": "s1", "ghl_created_at": "2026-10-10T12:00:00Z",
         "ghl_contact_id": "c1",
         "contact": {"email": "ann@x.com", "phone": "555-0100", "tags": ["pi-qualified"]},
         "attributions": [
             {"utmSessionSource": "google", "medium": "cpc", "isFirst": True},
             {"utmSessionSource": "facebook", "medium": "social", "isLast": True},
         ]},
        {"id": "o2", "status": "won", "monetary_value": 2500, "pipeline_id": "p1",
         "pipeline_stage_id": "s2", "ghl_created_at": "2026-06-01T00:00:00Z",
         "ghl_contact_id": "c2",
         "attributions": [
             {"utmSessionSource": "google", "medium": "cpc", "isFirst": True, "isLast": True},
         ]},
        {"id": "o3", "status": "lost", "monetary_value": None, "pipeline_id": "p2",
         "pipeline_stage_id": "r1", "ghl_created_at": None, "attributions": None},
        {"id": "o4", "status": "won", "monetary_value": 500, "pipeline_id": "p1",
         "pipeline_stage_id": "missing-stage", "ghl_created_at": "2026-10-18T00:00:00Z",
         "ghl_contact_id": "c3", "attributions": [{"medium": "email"}]},
    ]


@pytest.fixture
def contact_rows():
    return [
        {"id": "c1", "email": "ann@x.com", "phone": "555-0100", "first_name": "Ann",
         "tags": ["pi-qualified", "vip"], "source": "Google Ads",
         "created_at": "2026-10-12T09:00:00Z"},
        {"id": "c2", "email": "ANN@X.COM", "phone": "555-0100", "last_name": "Lee",
         "tags": ["pi-disqualified"], "source": "Referral",
         "created_at": "2026-10-05T09:00:00Z"},
        {"id": "c3", "email": "", "phone": None, "tags": None, "source": None,
         "created_at": "2026-08-01T09:00:00Z"},
    ]
