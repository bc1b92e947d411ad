"""
Rank Tracker API Endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from seo_reporting.api.deps import get_connector, run_report, validate_category
from seo_reporting.config import get_settings
from seo_reporting.connectors.dashboard_api import DashboardDataConnector
from seo_reporting.services.ranking_report_service import RankingReportService

settings = get_settings()

router = APIRouter(prefix="/rank-tracker", tags=["rank-tracker"])


@router.get("/keywords")
async def get_tracked_keywords(
    category: Optional[str] = Query(None),
    sort_key: str = Query("current_position"),
    direction: str = Query("asc", description="asc or desc"),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=500),
    connector: DashboardDataConnector = Depends(get_connector),
):
    """
    Tracked keywords with current, previous and first position

    Keywords that do not rank sort last in both directions.
    """
    category = validate_category(category)
    service = RankingReportService(connector)
    return await run_report("keyword table", service.get_keyword_table(
        category=category,
        sort_key=sort_key,
        direction=direction,
        page=page,
        page_size=page_size,
    ))
