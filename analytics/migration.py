"""Migration parity: native row counts vs. Salesforce shadow records."""
from __future__ import annotations

from typing import Any, Dict, Mapping, Sequence, Tuple

from analytics.helpers import pct
from models.entities import ShadowRecord


class MigrationParityComparator:
    """Compare native entity totals against staged and synced shadow rows."""

    def compare(self, native: Sequence[Any], staged: Sequence[ShadowRecord]) -> Dict[str, Any]:
        synced = sum(1 for record in staged if record.is_synced)
        return {
            "supabase_total": len(native),
            "salesforce_staged": len(staged),
            "salesforce_synced": synced,
            "pending_sync": len(staged) - synced,
            "migration_rate": pct(synced, len(native)),
        }

    def analyze(
        self, pairs: Mapping[str, Tuple[Sequence[Any], Sequence[ShadowRecord]]]
    ) -> Dict[str, Any]:
        return {
            "migration_status": {
                entity: self.compare(native, staged)
                for entity, (native, staged) in pairs.items()
            }
        }
