"""
PI Analytics — Query Request Models
=====================================

Body of ``POST /query``. ``table`` is optional here so a missing table is
reported as a descriptive 400 by the router rather than a schema error.
"""
from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel

MAX_QUERY_LIMIT = 1000


class QueryRequest(BaseModel):
    """Raw passthrough query against any table."""
    table: Optional[str] = None
    select: Optional[str] = None
    filters: Optional[Dict[str, str]] = None
    order: Optional[str] = None
    limit: Optional[int] = None
    offset: Optional[int] = None

    def clamped_limit(self) -> Optional[int]:
        if not self.limit or self.limit < 0:
            return None
        return min(self.limit, MAX_QUERY_LIMIT)

    def effective_offset(self) -> Optional[int]:
        return self.offset if self.offset and self.offset > 0 else None
