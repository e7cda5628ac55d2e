"""Shared helpers for the analyzers: percentages, ranking, time."""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List

NOT_APPLICABLE = "N/A"


def format_pct(value: float) -> str:
    """Format a 0-100 value with one decimal, e.g. 33.3333 -> '33.3%'."""
    return f"{value:.1f}%"


def pct(numerator: float, denominator: float) -> str:
    """Percentage string, or 'N/A' when the denominator is zero."""
    if not denominator:
        return NOT_APPLICABLE
    return format_pct(numerator / denominator * 100)


def money(value: float) -> float:
    return round(value, 2)


def rank_by(rows: Iterable[Dict[str, Any]], key: str = "count") -> List[Dict[str, Any]]:
    """Sort descending by ``key``; ties keep their first-seen order."""
    return sorted(rows, key=lambda row: row[key], reverse=True)


def explode(groups: Dict[str, Dict[str, Any]], label: str) -> List[Dict[str, Any]]:
    """Turn {key: stats} into [{label: key, **stats}]."""
    return [{label: key, **stats} for key, stats in groups.items()]


def week_start(dt: datetime) -> date:
    """Sunday that starts the week containing ``dt`` (UTC date)."""
    day = dt.astimezone(timezone.utc).date()
    return day - timedelta(days=(day.weekday() + 1) % 7)


def now_utc() -> datetime:
    """Current UTC time, timezone-aware."""
    return datetime.now(timezone.utc)
