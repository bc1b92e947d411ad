"""
Snapshot Directory API Endpoints

Directory breakdown of stored Search Console snapshots.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from seo_reporting.api.deps import get_connector, resolve_brand_terms, run_report
from seo_reporting.config import get_settings
from seo_reporting.connectors.dashboard_api import DashboardDataConnector
from seo_reporting.services.directory_service import DEFAULT_TOP_KEYWORDS, DirectoryService

settings = get_settings()

router = APIRouter(prefix="/snapshots", tags=["snapshots"])


# Registered before /{snapshot_id}/directories so "compare" is not taken as an id
@router.get("/compare/directories")
async def compare_snapshot_directories(
    base_id: str = Query(..., description="Snapshot the comparison starts from"),
    compare_id: str = Query(..., description="Snapshot to match directories against"),
    depth: int = Query(settings.default_directory_depth, ge=1, le=settings.max_directory_depth),
    min_similarity: float = Query(0.3, ge=0, le=1, description="Minimum keyword overlap for a match"),
    top_keywords: int = Query(DEFAULT_TOP_KEYWORDS, ge=1, le=100),
    sort_by: str = Query("similarity", description="similarity, clicks, impressions or position"),
    brand_terms: Optional[str] = Query(None),
    connector: DashboardDataConnector = Depends(get_connector),
):
    """
    Match directories of two snapshots by shared keywords

    Useful after a site restructuring: "/de/hypotheken" in the old snapshot
    can be compared with "/de/finanzieren" in the new one.
    """
    service = DirectoryService(connector)
    return await run_report("directory comparison", service.compare(
        base_id,
        compare_id,
        depth,
        min_similarity=min_similarity,
        top_keywords=top_keywords,
        sort_by=sort_by,
        brand_terms=resolve_brand_terms(brand_terms),
    ))


@router.get("/{snapshot_id}/directories")
async def get_snapshot_directories(
    snapshot_id: str,
    depth: int = Query(settings.default_directory_depth, ge=1, le=settings.max_directory_depth),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=500),
    brand_terms: Optional[str] = Query(None, description="Comma-separated brand terms to exclude from keywords"),
    connector: DashboardDataConnector = Depends(get_connector),
):
    """Directories of a snapshot, most clicked first"""
    service = DirectoryService(connector)
    return await run_report("snapshot directories", service.get_directories(
        snapshot_id,
        depth,
        page=page,
        page_size=page_size,
        brand_terms=resolve_brand_terms(brand_terms),
    ))
