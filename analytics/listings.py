"""
Listing enricher for the opportunity and contact pages.

Pagination clamping, post-fetch tag filtering and the stage join that adds
human-readable pipeline/stage names and flattened contact fields.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from models.entities import UNKNOWN, Contact, Opportunity, PipelineStage

DEFAULT_LIMIT = 100
MAX_LIMIT = 500


class ListingEnricher:
    """Shape paginated entity listings for the caller."""

    def __init__(self, default_limit: int = DEFAULT_LIMIT, max_limit: int = MAX_LIMIT):
        self.default_limit = default_limit
        self.max_limit = max_limit

    def clamp_limit(self, limit: Optional[int]) -> int:
        """Missing, zero or negative -> default; otherwise capped at max."""
        if not limit or limit < 0:
            return self.default_limit
        return min(limit, self.max_limit)

    @staticmethod
    def clamp_offset(offset: Optional[int]) -> int:
        return offset if offset and offset > 0 else 0

    @staticmethod
    def enrich_opportunities(
        rows: Sequence[Dict[str, Any]], stages: Sequence[PipelineStage]
    ) -> List[Dict[str, Any]]:
        """
        Attach pipeline/stage names and flattened contact fields.

        The fetched row is returned as-is with the extra fields added; the
        typed opportunity is only used for the lookups.
        """
        stage_map = {s.stage_id: s for s in stages if s.stage_id is not None}
        enriched = []
        for row in rows:
            opp = Opportunity.model_validate(row)
            stage = stage_map.get(opp.pipeline_stage_id)
            contact = opp.contact
            enriched.append({
                **row,
                "pipeline_name": stage.pipeline_name if stage else UNKNOWN,
                "stage_name": stage.stage_name if stage else UNKNOWN,
                "contact_email": contact.email if contact else None,
                "contact_phone": contact.phone if contact else None,
                "contact_tags": contact.tags if contact else None,
            })
        return enriched

    @staticmethod
    def filter_contacts(
        rows: Sequence[Dict[str, Any]], tag: Optional[str]
    ) -> List[Dict[str, Any]]:
        """Keep the fetched rows whose contact carries ``tag``."""
        if not tag:
            return list(rows)
        return [row for row in rows if Contact.model_validate(row).has_tag(tag)]

    @staticmethod
    def page(
        data: List[Dict[str, Any]], limit: int, offset: int, filters: Dict[str, Any]
    ) -> Dict[str, Any]:
        return {
            "count": len(data),
            "limit": limit,
            "offset": offset,
            "filters": filters,
            "data": data,
        }
