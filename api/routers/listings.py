"""
PI Analytics — Listings Router
================================
Paginated opportunity and contact listings.

Endpoints:
  GET /analytics/opportunities  - ?status=X&pipeline=X&limit=N&offset=N
  GET /analytics/contacts       - ?tag=X&source=X&limit=N&offset=N
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from analytics import ListingEnricher
from api.dependencies import get_provider
from api.envelope import envelope
from lib.logger import setup_logger
from lib.snapshot_provider import SnapshotProvider
from models.entities import PipelineStage, parse_rows

logger = setup_logger("listings_router")

router = APIRouter(prefix="/analytics", tags=["listings"])

enricher = ListingEnricher()


@router.get("/opportunities")
async def list_opportunities(
    status: Optional[str] = Query(None, description="Filter by status"),
    pipeline: Optional[str] = Query(None, description="Filter by pipeline ID"),
    limit: Optional[int] = Query(None, description="Max results (default 100, max 500)"),
    offset: Optional[int] = Query(None, description="Pagination offset"),
    provider: SnapshotProvider = Depends(get_provider),
):
    """Opportunities with pipeline/stage names and flattened contact fields."""
    try:
        page_limit = enricher.clamp_limit(limit)
        page_offset = enricher.clamp_offset(offset)

        filters = {}
        if status:
            filters["status"] = f"eq.{status}"
        if pipeline:
            filters["pipeline_id"] = f"eq.{pipeline}"

        opp_rows, stage_rows = await provider.gather(
            provider.fetch(
                "opportunities",
                select="id,ghl_opportunity_id,name,status,monetary_value,source,pipeline_id,"
                       "pipeline_stage_id,contact,attributions,ghl_created_at,last_stage_change_at",
                filters=filters,
                order="ghl_created_at.desc",
                limit=page_limit,
                offset=page_offset,
            ),
            provider.fetch("pipeline_stages"),
        )
        data = enricher.enrich_opportunities(opp_rows, parse_rows(PipelineStage, stage_rows))
        return envelope(enricher.page(
            data, page_limit, page_offset, {"status": status, "pipeline": pipeline}
        ))
    except Exception as e:
        logger.error("List opportunities failed: %s", e)
        raise HTTPException(status_code=500, detail=f"Opportunities error: {e}")


@router.get("/contacts")
async def list_contacts(
    tag: Optional[str] = Query(None, description="Only contacts carrying this tag"),
    source: Optional[str] = Query(None, description="Filter by source"),
    limit: Optional[int] = Query(None, description="Max results (default 100, max 500)"),
    offset: Optional[int] = Query(None, description="Pagination offset"),
    provider: SnapshotProvider = Depends(get_provider),
):
    """Contacts, filtered by source in the store and by tag after fetch."""
    try:
        page_limit = enricher.clamp_limit(limit)
        page_offset = enricher.clamp_offset(offset)

        contact_rows = await provider.fetch(
            "contacts",
            select="id,ghl_contact_id,email,phone,first_name,last_name,tags,source,created_at",
            filters={"source": f"eq.{source}"} if source else None,
            order="created_at.desc",
            limit=page_limit,
            offset=page_offset,
        )
        contacts = enricher.filter_contacts(contact_rows, tag)
        return envelope(enricher.page(
            contacts,
            page_limit, page_offset, {"tag": tag, "source": source},
        ))
    except Exception as e:
        logger.error("List contacts failed: %s", e)
        raise HTTPException(status_code=500, detail=f"Contacts error: {e}")
