"""FastAPI dependencies shared by the routers."""
from __future__ import annotations

from fastapi import HTTPException, Request

from lib.snapshot_provider import SnapshotProvider


def get_provider(request: Request) -> SnapshotProvider:
    """Snapshot provider attached to the app at startup."""
    provider = getattr(request.app.state, "provider", None)
    if provider is None:
        raise HTTPException(status_code=503, detail="Snapshot provider not configured")
    return provider
