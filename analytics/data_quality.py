"""
Data-quality analyzer: missing fields, duplicate clusters, completeness.

Duplicates are grouped by lower-cased email and by the raw phone string.
Only the largest clusters are listed, but the excess-member totals cover
every cluster found.
"""
from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from analytics.helpers import format_pct
from models.entities import Contact, Opportunity

TOP_CLUSTERS = 20
MAX_STORED_ISSUES = 50


def find_duplicates(
    keys: Iterable[Optional[str]], label: str, top: int = TOP_CLUSTERS
) -> Tuple[List[Dict[str, Any]], int]:
    """
    Group keys and report clusters with more than one member.

    Args:
        keys: One key per record; empty keys are ignored.
        label: Name of the key field in each reported cluster.
        top: How many of the largest clusters to report.

    Returns:
        (largest clusters, descending by size; excess members over all clusters)
    """
    counts: Counter = Counter(key for key in keys if key)
    clusters = [(key, count) for key, count in counts.most_common() if count > 1]
    excess = sum(count - 1 for _, count in clusters)
    return [{label: key, "count": count} for key, count in clusters[:top]], excess


def completeness_score(contacts: Sequence[Contact]) -> float:
    """Average share of (email, phone, name, source) present per contact, 0-100."""
    if not contacts:
        return 0.0
    ratios = [
        (bool(c.email) + bool(c.phone) + c.has_name + bool(c.source)) / 4
        for c in contacts
    ]
    return sum(ratios) / len(ratios) * 100


class DataQualityAnalyzer:
    """Score contact/opportunity completeness and find duplicate contacts."""

    def analyze(
        self,
        contacts: Sequence[Contact],
        opportunities: Sequence[Opportunity],
        stored_issues: Optional[Sequence[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        stored_issues = list(stored_issues or [])

        duplicate_emails, excess_emails = find_duplicates(
            (c.email.lower() if c.email else None for c in contacts), "email"
        )
        duplicate_phones, excess_phones = find_duplicates(
            (c.phone for c in contacts), "phone"
        )

        return {
            "totals": {
                "total_contacts": len(contacts),
                "total_opportunities": len(opportunities),
            },
            "contact_issues": {
                "missing_email": sum(1 for c in contacts if not c.email),
                "missing_phone": sum(1 for c in contacts if not c.phone),
                "missing_name": sum(1 for c in contacts if not c.has_name),
                "no_tags": sum(1 for c in contacts if not c.tags),
                "no_source": sum(1 for c in contacts if not c.source),
                # 0.0% rather than N/A for an empty snapshot.
                "completeness_score": format_pct(completeness_score(contacts)),
            },
            "opportunity_issues": {
                "missing_value": sum(1 for o in opportunities if not o.monetary_value),
                "missing_contact": sum(1 for o in opportunities if not o.contact_id),
                "no_status": sum(1 for o in opportunities if not o.status),
            },
            "duplicates": {
                "duplicate_emails": duplicate_emails,
                "duplicate_phones": duplicate_phones,
                "total_duplicate_email_contacts": excess_emails,
                "total_duplicate_phone_contacts": excess_phones,
            },
            "stored_issues": stored_issues[:MAX_STORED_ISSUES],
        }
