"""
PI Analytics — Analytics Router
=================================
Precomputed analytics views. Each view fetches its snapshots concurrently,
maps them into entities and runs one analyzer synchronously.

Endpoints:
  GET /analytics/summary        - High-level dashboard metrics
  GET /analytics/pipeline       - Pipeline and stage funnels (?pipeline_id=X)
  GET /analytics/leads          - Lead quality and conversion
  GET /analytics/attribution    - Marketing attribution
  GET /analytics/data-quality   - Data quality issues and duplicates
  GET /analytics/migration      - Salesforce migration status
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from analytics import (
    AttributionAnalyzer,
    DataQualityAnalyzer,
    LeadQualityAnalyzer,
    MigrationParityComparator,
    PipelineAnalyzer,
    SummaryAnalyzer,
)
from api.dependencies import get_provider
from api.envelope import envelope
from lib.logger import setup_logger
from lib.snapshot_provider import SnapshotProvider
from models.entities import (
    Contact,
    Opportunity,
    PipelineStage,
    ShadowRecord,
    parse_rows,
)

logger = setup_logger("analytics_router")

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/summary")
async def summary(provider: SnapshotProvider = Depends(get_provider)):
    """Status counts, pipeline value, qualification and 30-day activity."""
    try:
        opp_rows, contact_rows, stage_rows = await provider.gather(
            provider.fetch(
                "opportunities",
                select="id,status,monetary_value,pipeline_id,pipeline_stage_id,ghl_created_at",
            ),
            provider.fetch("contacts", select="id,tags,source,created_at"),
            provider.fetch("pipeline_stages"),
        )
        report = SummaryAnalyzer().analyze(
            parse_rows(Opportunity, opp_rows),
            parse_rows(Contact, contact_rows),
            parse_rows(PipelineStage, stage_rows),
        )
        return envelope(report)
    except Exception as e:
        logger.error("Summary failed: %s", e)
        raise HTTPException(status_code=500, detail=f"Summary error: {e}")


@router.get("/pipeline")
async def pipeline(
    pipeline_id: Optional[str] = Query(None, description="Restrict to one pipeline"),
    provider: SnapshotProvider = Depends(get_provider),
):
    """Stage funnels with conversion from the previous stage."""
    try:
        filters = {"pipeline_id": f"eq.{pipeline_id}"} if pipeline_id else None
        opp_rows, stage_rows = await provider.gather(
            provider.fetch(
                "opportunities",
                select="id,name,status,monetary_value,pipeline_id,pipeline_stage_id,"
                       "ghl_created_at,last_stage_change_at,contact",
                filters=filters,
            ),
            provider.fetch("pipeline_stages", order="pipeline_name,stage_position"),
        )
        pipelines = PipelineAnalyzer().analyze(
            parse_rows(Opportunity, opp_rows),
            parse_rows(PipelineStage, stage_rows),
        )
        return envelope({"pipelines": pipelines})
    except Exception as e:
        logger.error("Pipeline analytics failed: %s", e)
        raise HTTPException(status_code=500, detail=f"Pipeline error: {e}")


@router.get("/leads")
async def leads(provider: SnapshotProvider = Depends(get_provider)):
    """Qualification split, sources, tags, completeness and weekly trend."""
    try:
        contact_rows = await provider.fetch(
            "contacts", select="id,tags,source,email,phone,created_at,custom_fields",
        )
        report = LeadQualityAnalyzer().analyze(parse_rows(Contact, contact_rows))
        return envelope(report)
    except Exception as e:
        logger.error("Lead analytics failed: %s", e)
        raise HTTPException(status_code=500, detail=f"Lead analytics error: {e}")


@router.get("/attribution")
async def attribution(provider: SnapshotProvider = Depends(get_provider)):
    """First-touch, last-touch, UTM source and medium rollups."""
    try:
        opp_rows = await provider.fetch(
            "opportunities",
            select="id,name,status,monetary_value,attributions,source,ghl_created_at",
        )
        report = AttributionAnalyzer().analyze(parse_rows(Opportunity, opp_rows))
        return envelope(report)
    except Exception as e:
        logger.error("Attribution analytics failed: %s", e)
        raise HTTPException(status_code=500, detail=f"Attribution error: {e}")


@router.get("/data-quality")
async def data_quality(provider: SnapshotProvider = Depends(get_provider)):
    """Missing fields, duplicate contacts and stored issue records."""
    try:
        contact_rows, opp_rows, stored_issues = await provider.gather(
            provider.fetch(
                "contacts", select="id,email,phone,tags,source,first_name,last_name",
            ),
            provider.fetch(
                "opportunities",
                select="id,name,ghl_contact_id,contact,monetary_value,status",
            ),
            provider.fetch_optional("data_quality_issues"),
        )
        report = DataQualityAnalyzer().analyze(
            parse_rows(Contact, contact_rows),
            parse_rows(Opportunity, opp_rows),
            stored_issues,
        )
        return envelope(report)
    except Exception as e:
        logger.error("Data quality analytics failed: %s", e)
        raise HTTPException(status_code=500, detail=f"Data quality error: {e}")


@router.get("/migration")
async def migration(provider: SnapshotProvider = Depends(get_provider)):
    """Native totals vs. staged and synced Salesforce shadow records."""
    try:
        (
            contacts, sf_contacts,
            opportunities, sf_opportunities,
            appointments, sf_appointments,
        ) = await provider.gather(
            provider.fetch("contacts", select="id"),
            provider.fetch_optional("sf_contacts", select="id,salesforce_id"),
            provider.fetch("opportunities", select="id"),
            provider.fetch_optional("sf_opportunities", select="id,salesforce_id"),
            provider.fetch_optional("appointments", select="id"),
            provider.fetch_optional("sf_appointments", select="id,salesforce_id"),
        )
        report = MigrationParityComparator().analyze({
            "contacts": (contacts, parse_rows(ShadowRecord, sf_contacts)),
            "opportunities": (opportunities, parse_rows(ShadowRecord, sf_opportunities)),
            "appointments": (appointments, parse_rows(ShadowRecord, sf_appointments)),
        })
        return envelope(report)
    except Exception as e:
        logger.error("Migration status failed: %s", e)
        raise HTTPException(status_code=500, detail=f"Migration status error: {e}")
