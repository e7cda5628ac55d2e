"""
Attribution analyzer: first-touch, last-touch and all-touch rollups.

First/last credit goes to the first touch carrying the flag. The all-touch
tables credit the full opportunity value to every touch, so opportunities
with several touches are counted several times.
"""
from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from analytics.helpers import explode, money, rank_by
from models.entities import AttributionTouch, Opportunity


def _credit(table: Dict[str, Dict[str, Any]], key: str, value: float, won: Optional[bool] = None):
    if key not in table:
        table[key] = {"count": 0, "value": 0.0}
        if won is not None:
            table[key]["won"] = 0
    table[key]["count"] += 1
    table[key]["value"] += value
    if won:
        table[key]["won"] += 1


def _first_flagged(touches: Sequence[AttributionTouch], flag: str) -> Optional[AttributionTouch]:
    return next((touch for touch in touches if getattr(touch, flag)), None)


class AttributionAnalyzer:
    """Roll opportunity value up by marketing touch."""

    def analyze(self, opportunities: Sequence[Opportunity]) -> Dict[str, Any]:
        first_touch: Dict[str, Dict[str, Any]] = {}
        last_touch: Dict[str, Dict[str, Any]] = {}
        utm_sources: Dict[str, Dict[str, Any]] = {}
        mediums: Dict[str, Dict[str, Any]] = {}

        for opp in opportunities:
            value = opp.monetary_value
            is_won = opp.is_won

            first = _first_flagged(opp.attributions, "is_first")
            if first is not None:
                _credit(first_touch, first.source_label, value, won=is_won)

            last = _first_flagged(opp.attributions, "is_last")
            if last is not None:
                _credit(last_touch, last.source_label, value, won=is_won)

            for touch in opp.attributions:
                _credit(utm_sources, touch.source_label, value)
                _credit(mediums, touch.medium_label, value)

        return {
            "total_opportunities": len(opportunities),
            "first_touch_attribution": self._table(first_touch, "source"),
            "last_touch_attribution": self._table(last_touch, "source"),
            "utm_sources": self._table(utm_sources, "source"),
            "mediums": self._table(mediums, "medium"),
        }

    @staticmethod
    def _table(groups: Dict[str, Dict[str, Any]], label: str):
        rows = explode(groups, label)
        for row in rows:
            row["value"] = money(row["value"])
        return rank_by(rows)
