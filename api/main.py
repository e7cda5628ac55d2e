"""
PI Analytics — API Server
===========================

Precomputed analytics over the Supabase CRM dataset, so dashboards never
run heavy joins client-side and hit request timeouts.

Route groups:
  /                        - Service and endpoint catalogue
  /health                  - Health check
  /analytics/*             - Aggregated analytics views
  /analytics/opportunities - Enriched opportunity listing
  /analytics/contacts      - Contact listing
  /tables, /query          - Raw table inspection
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.envelope import envelope, register_exception_handlers
from api.middleware import (
    CORS_ALLOW_HEADERS,
    CORS_ALLOW_METHODS,
    PreflightMiddleware,
    RequestLoggingMiddleware,
)
from api.routers.analytics import router as analytics_router
from api.routers.listings import router as listings_router
from api.routers.query import router as query_router
from lib.config import SERVICE_NAME, SERVICE_VERSION, Settings
from lib.logger import setup_logger
from lib.snapshot_provider import SnapshotProvider

logger = setup_logger("api_main")

ENDPOINTS = {
    "GET /analytics/summary": "High-level dashboard metrics",
    "GET /analytics/pipeline": "Pipeline and stage analysis",
    "GET /analytics/pipeline?pipeline_id=X": "Specific pipeline analysis",
    "GET /analytics/leads": "Lead quality and conversion",
    "GET /analytics/attribution": "Marketing attribution",
    "GET /analytics/data-quality": "Data quality issues",
    "GET /analytics/migration": "Salesforce migration status",
    "GET /analytics/opportunities": "Opportunity listing (supports ?status=X&pipeline=X&limit=N&offset=N)",
    "GET /analytics/contacts": "Contact listing (supports ?tag=X&source=X&limit=N&offset=N)",
    "GET /tables": "List all available tables",
    "POST /query": "Custom query (body: {table, select?, filters?, order?, limit?, offset?})",
}


# ─── Lifespan ─────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect the snapshot provider unless one was injected."""
    logger.info("Starting %s...", SERVICE_NAME)
    if app.state.provider is None:
        settings = app.state.settings or Settings.from_env()
        app.state.provider = await SnapshotProvider.connect(settings)
    logger.info("%s ready", SERVICE_NAME)
    yield
    logger.info("Shutting down %s...", SERVICE_NAME)


# ─── App Setup ────────────────────────────────────────────────

def create_app(
    settings: Optional[Settings] = None,
    provider: Optional[SnapshotProvider] = None,
) -> FastAPI:
    """Build the application; tests pass a provider to skip the store connection."""
    app = FastAPI(
        title=SERVICE_NAME,
        version=SERVICE_VERSION,
        description="Server-side analytics over the CRM dataset",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.provider = provider

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=CORS_ALLOW_HEADERS,
    )
    # Outermost, so preflights never reach CORSMiddleware or routing.
    app.add_middleware(PreflightMiddleware)
    register_exception_handlers(app)

    app.include_router(analytics_router)
    app.include_router(listings_router)
    app.include_router(query_router)

    @app.get("/", tags=["system"])
    async def catalogue():
        """Service name, version and endpoint catalogue."""
        return envelope({
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "endpoints": ENDPOINTS,
        })

    @app.get("/health", tags=["system"])
    async def health():
        """Health check with store connection status."""
        store = app.state.provider
        return envelope({
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "integrations": {"supabase": bool(store and store.is_connected)},
        })

    return app


app = create_app()
