"""
Backlink API Endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from seo_reporting.api.deps import get_connector, run_report
from seo_reporting.config import get_settings
from seo_reporting.connectors.dashboard_api import DashboardDataConnector
from seo_reporting.services.backlink_service import BacklinkService

settings = get_settings()

router = APIRouter(prefix="/backlinks", tags=["backlinks"])


@router.get("")
async def get_backlinks(
    dofollow: Optional[bool] = Query(None),
    is_new: Optional[bool] = Query(None),
    is_lost: Optional[bool] = Query(None),
    sort_key: str = Query("domain_from_rank"),
    direction: str = Query("desc", description="asc or desc"),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=500),
    connector: DashboardDataConnector = Depends(get_connector),
):
    """Backlink profile filtered by follow/new/lost flags, sorted and paged"""
    service = BacklinkService(connector)
    return await run_report("backlink table", service.get_backlink_table(
        dofollow=dofollow,
        is_new=is_new,
        is_lost=is_lost,
        sort_key=sort_key,
        direction=direction,
        page=page,
        page_size=page_size,
    ))
