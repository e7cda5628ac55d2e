"""
PI Analytics — Query Router
=============================
Raw escape hatch for inspecting tables without a dedicated view. No
aggregation happens here.

Endpoints:
  GET  /tables   - Table names exposed by the store
  POST /query    - {table, select?, filters?, order?, limit?, offset?}
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_provider
from api.envelope import envelope
from lib.errors import ValidationError
from lib.logger import setup_logger
from lib.snapshot_provider import SnapshotProvider
from models.query_models import QueryRequest

logger = setup_logger("query_router")

router = APIRouter(tags=["query"])


@router.get("/tables")
async def list_tables(provider: SnapshotProvider = Depends(get_provider)):
    """All table names from the store's REST schema."""
    try:
        tables = await provider.list_tables()
        return envelope({"count": len(tables), "tables": tables})
    except Exception as e:
        logger.error("List tables failed: %s", e)
        raise HTTPException(status_code=500, detail=f"Tables error: {e}")


@router.post("/query")
async def execute_query(
    req: QueryRequest,
    provider: SnapshotProvider = Depends(get_provider),
):
    """Run a passthrough query; filters are PostgREST expressions used verbatim."""
    if not req.table:
        raise HTTPException(status_code=400, detail="Missing required field: table")

    try:
        data = await provider.fetch(
            req.table,
            select=req.select or "*",
            filters=req.filters,
            order=req.order,
            limit=req.clamped_limit(),
            offset=req.effective_offset(),
        )
        return envelope({"table": req.table, "count": len(data), "data": data})
    except ValidationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error("Query on %s failed: %s", req.table, e)
        raise HTTPException(status_code=500, detail=f"Query error: {e}")
