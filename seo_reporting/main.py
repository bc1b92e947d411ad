"""
SEO Reporting Service
Main FastAPI application
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware
from contextlib import asynccontextmanager

from seo_reporting.config import get_settings
from seo_reporting.utils.logger import log
from seo_reporting import __version__

# Import routers
from seo_reporting.api import health, reporting, snapshots, rank_tracker, backlinks

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    log.info(f"Starting {settings.app_name} v{__version__}")
    log.info(f"Environment: {settings.environment}")
    log.info(f"Upstream data API: {settings.data_api_base_url} (timeout {settings.request_timeout_seconds}s)")

    yield

    log.info("Shutting down application")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=__version__,
    description="""
    Reporting backend for the SEO dashboard

    Fetches raw data from the dashboard data API and serves aggregated reports:
    - Search Console traffic with period-over-period changes
    - Directory breakdown and cross-snapshot directory matching
    - Rank tracker tiers, movement and category stats
    - Task, ticket, KVP and briefing reports
    - Sorted, paged keyword and backlink tables
    """,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Gzip compression for large report payloads
app.add_middleware(GZipMiddleware, minimum_size=500)

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(reporting.router)
app.include_router(snapshots.router)
app.include_router(rank_tracker.router)
app.include_router(backlinks.router)


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "app": settings.app_name,
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "status": "/status",
        "endpoints": {
            "traffic_report": "GET /reporting/traffic",
            "ranking_report": "GET /reporting/ranking",
            "task_report": "GET /reporting/tasks",
            "ticket_report": "GET /reporting/tickets",
            "kvp_report": "GET /reporting/kvp",
            "briefing_report": "GET /reporting/briefings",
            "snapshot_directories": "GET /snapshots/{snapshot_id}/directories",
            "snapshot_comparison": "GET /snapshots/compare/directories",
            "tracked_keywords": "GET /rank-tracker/keywords",
            "backlinks": "GET /backlinks"
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "seo_reporting.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
