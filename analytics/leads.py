"""
Lead-quality analyzer over the contact snapshot.

Qualification split, per-source effectiveness, tag histogram, contact
completeness and a weekly trend of the most recent twelve active weeks.
"""
from __future__ import annotations

from collections import Counter
from typing import Any, Dict, List, Sequence

from analytics.helpers import explode, pct, rank_by, week_start
from models.entities import Contact


class LeadQualityAnalyzer:
    """Analyze lead qualification and contact data coverage."""

    trend_weeks = 12

    def analyze(self, contacts: Sequence[Contact]) -> Dict[str, Any]:
        total = len(contacts)
        qualified = sum(1 for c in contacts if c.is_qualified)
        disqualified = sum(1 for c in contacts if c.is_disqualified)
        uncategorized = sum(
            1 for c in contacts if not c.is_qualified and not c.is_disqualified
        )

        return {
            "totals": {
                "total_contacts": total,
                "qualified": qualified,
                "disqualified": disqualified,
                "uncategorized": uncategorized,
                "qualification_rate": pct(qualified, total),
            },
            "by_source": self._by_source(contacts),
            "tag_frequency": self._tag_frequency(contacts),
            "data_quality": self._completeness(contacts),
            "weekly_trend": self._weekly_trend(contacts),
        }

    @staticmethod
    def _by_source(contacts: Sequence[Contact]) -> List[Dict[str, Any]]:
        sources: Dict[str, Dict[str, int]] = {}
        for c in contacts:
            entry = sources.setdefault(
                c.source_label, {"total": 0, "qualified": 0, "disqualified": 0}
            )
            entry["total"] += 1
            if c.is_qualified:
                entry["qualified"] += 1
            if c.is_disqualified:
                entry["disqualified"] += 1

        rows = explode(sources, "source")
        for row in rows:
            row["qualification_rate"] = pct(row["qualified"], row["total"])
        return rank_by(rows, "total")

    @staticmethod
    def _tag_frequency(contacts: Sequence[Contact]) -> List[Dict[str, Any]]:
        counts: Counter = Counter(tag for c in contacts for tag in c.tags)
        return [{"tag": tag, "count": count} for tag, count in counts.most_common()]

    @staticmethod
    def _completeness(contacts: Sequence[Contact]) -> Dict[str, Any]:
        total = len(contacts)
        with_email = sum(1 for c in contacts if c.email)
        with_phone = sum(1 for c in contacts if c.phone)
        with_both = sum(1 for c in contacts if c.email and c.phone)
        return {
            "with_email": with_email,
            "with_phone": with_phone,
            "with_both": with_both,
            "email_rate": pct(with_email, total),
            "phone_rate": pct(with_phone, total),
            "both_rate": pct(with_both, total),
        }

    def _weekly_trend(self, contacts: Sequence[Contact]) -> List[Dict[str, Any]]:
        weeks: Dict[str, Dict[str, int]] = {}
        for c in contacts:
            if c.created_at is None:
                continue
            key = week_start(c.created_at).isoformat()
            entry = weeks.setdefault(key, {"total": 0, "qualified": 0})
            entry["total"] += 1
            if c.is_qualified:
                entry["qualified"] += 1

        # Most recent buckets present in the data, not calendar weeks.
        ordered = sorted(explode(weeks, "week"), key=lambda row: row["week"])
        return ordered[-self.trend_weeks:]
