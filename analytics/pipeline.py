"""
Pipeline analyzer: per-pipeline funnels.

Each pipeline becomes an ordered list of stages with opportunity count,
summed value and stage-to-stage conversion. Only aggregates are returned.
"""
from __future__ import annotations

from typing import Any, Dict, Sequence

from analytics.helpers import money, pct
from models.entities import UNKNOWN, Opportunity, PipelineStage


class PipelineAnalyzer:
    """Build stage funnels and conversion rates for every pipeline."""

    def analyze(
        self,
        opportunities: Sequence[Opportunity],
        stages: Sequence[PipelineStage],
    ) -> Dict[Any, Dict[str, Any]]:
        pipelines: Dict[Any, Dict[str, Any]] = {}
        # pipeline key -> stage id -> stage record (first declaration wins)
        stage_index: Dict[Any, Dict[Any, Dict[str, Any]]] = {}

        for stage in stages:
            key = stage.pipeline_id if stage.pipeline_id is not None else UNKNOWN
            if key not in pipelines:
                pipelines[key] = {
                    "name": stage.pipeline_name,
                    "stages": [],
                    "total_opportunities": 0,
                    "total_value": 0.0,
                }
                stage_index[key] = {}
            record = {
                "id": stage.stage_id,
                "name": stage.stage_name,
                "position": stage.stage_position,
                "count": 0,
                "value": 0.0,
            }
            pipelines[key]["stages"].append(record)
            if stage.stage_id is not None:
                stage_index[key].setdefault(stage.stage_id, record)

        for opp in opportunities:
            if opp.pipeline_id is None or opp.pipeline_id not in pipelines:
                continue
            funnel = pipelines[opp.pipeline_id]
            funnel["total_opportunities"] += 1
            funnel["total_value"] += opp.monetary_value

            record = stage_index[opp.pipeline_id].get(opp.pipeline_stage_id)
            if record is not None:
                record["count"] += 1
                record["value"] += opp.monetary_value

        for funnel in pipelines.values():
            self._finish(funnel)
        return pipelines

    @staticmethod
    def _finish(funnel: Dict[str, Any]) -> None:
        ordered = sorted(funnel["stages"], key=lambda s: s["position"])
        for previous, current in zip(ordered, ordered[1:]):
            current["conversion_from_previous"] = pct(current["count"], previous["count"])
        for record in ordered:
            record["value"] = money(record["value"])
        funnel["stages"] = ordered
        funnel["total_value"] = money(funnel["total_value"])
