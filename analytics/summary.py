"""
Summary analyzer: headline dashboard metrics.

Status counts, pipeline value, qualification split, 30-day activity and a
per-(pipeline, stage) breakdown.
"""
from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from analytics.helpers import money, now_utc, pct, rank_by
from models.entities import UNKNOWN, Contact, Opportunity, PipelineStage


class SummaryAnalyzer:
    """High-level counts over opportunities, contacts and stages."""

    window_days = 30

    def analyze(
        self,
        opportunities: Sequence[Opportunity],
        contacts: Sequence[Contact],
        stages: Sequence[PipelineStage],
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        now = now or now_utc()
        cutoff = now - timedelta(days=self.window_days)

        by_status: Counter = Counter(opp.status or UNKNOWN for opp in opportunities)
        total_value = sum(opp.monetary_value for opp in opportunities)

        qualified = sum(1 for c in contacts if c.is_qualified)
        disqualified = sum(1 for c in contacts if c.is_disqualified)

        recent_opps = sum(
            1 for o in opportunities if o.created_at and o.created_at > cutoff
        )
        recent_contacts = sum(
            1 for c in contacts if c.created_at and c.created_at > cutoff
        )

        return {
            "summary": {
                "total_opportunities": len(opportunities),
                "total_contacts": len(contacts),
                "total_pipeline_value": money(total_value),
                "opportunities_by_status": dict(by_status),
                "qualified_contacts": qualified,
                "disqualified_contacts": disqualified,
                "qualification_rate": pct(qualified, len(contacts)),
                "disqualification_rate": pct(disqualified, len(contacts)),
            },
            "last_30_days": {
                "new_opportunities": recent_opps,
                "new_contacts": recent_contacts,
            },
            "pipeline_breakdown": self._stage_breakdown(opportunities, stages),
        }

    @staticmethod
    def _stage_breakdown(
        opportunities: Sequence[Opportunity], stages: Sequence[PipelineStage]
    ) -> List[Dict[str, Any]]:
        stage_map = {
            stage.stage_id: stage for stage in stages if stage.stage_id is not None
        }
        groups: Dict[tuple, Dict[str, Any]] = {}

        for opp in opportunities:
            stage = stage_map.get(opp.pipeline_stage_id)
            if stage is None:
                continue
            key = (stage.pipeline_name, stage.stage_name)
            if key not in groups:
                groups[key] = {
                    "pipeline_name": stage.pipeline_name,
                    "stage_name": stage.stage_name,
                    "count": 0,
                    "value": 0.0,
                }
            groups[key]["count"] += 1
            groups[key]["value"] += opp.monetary_value

        for group in groups.values():
            group["value"] = money(group["value"])
        return rank_by(groups.values())
