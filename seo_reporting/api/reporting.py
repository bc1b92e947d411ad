"""
Reporting API Endpoints

Traffic, ranking, task, ticket, KVP and briefing reports for the
dashboard's reporting pages and their charts.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from seo_reporting.api.deps import get_connector, resolve_brand_terms, run_report, validate_category
from seo_reporting.config import get_settings
from seo_reporting.connectors.dashboard_api import DashboardDataConnector
from seo_reporting.services.briefing_report_service import BriefingReportService
from seo_reporting.services.date_ranges import DEFAULT_GSC_PERIOD, GSC_PERIODS, PRESET_LABELS
from seo_reporting.services.kvp_report_service import DEFAULT_PRESET, KvpReportService
from seo_reporting.services.ranking_report_service import DEFAULT_HISTORY_DAYS, RankingReportService
from seo_reporting.services.task_report_service import TaskReportService
from seo_reporting.services.traffic_report_service import TrafficReportService
from seo_reporting.utils.helpers import today_in_timezone, utc_now

settings = get_settings()

router = APIRouter(prefix="/reporting", tags=["reporting"])


@router.get("/traffic")
async def get_traffic_report(
    site_url: str = Query(..., description="Search Console property, e.g. https://www.example.ch/"),
    period: str = Query(DEFAULT_GSC_PERIOD, description="7d, 28d, 3m, 6m or 12m"),
    url_filter: Optional[str] = Query(None, description="Only pages containing this string"),
    depth: int = Query(settings.default_directory_depth, ge=1, le=settings.max_directory_depth),
    brand_terms: Optional[str] = Query(None, description="Comma-separated brand terms to exclude from keywords"),
    connector: DashboardDataConnector = Depends(get_connector),
):
    """
    Search Console traffic report

    Totals against the previous period of equal length, daily trend,
    top keywords and pages, devices and top directories.
    """
    if period not in GSC_PERIODS:
        raise HTTPException(status_code=400, detail=f"Unknown period '{period}'")

    service = TrafficReportService(connector)
    return await run_report("traffic report", service.get_traffic_report(
        site_url,
        today=today_in_timezone(settings.report_timezone),
        period=period,
        url_filter=url_filter,
        depth=depth,
        brand_terms=resolve_brand_terms(brand_terms),
    ))


@router.get("/ranking")
async def get_ranking_report(
    category: Optional[str] = Query(None, description="Keyword category"),
    days: int = Query(DEFAULT_HISTORY_DAYS, ge=1, le=730, description="Days of ranking history"),
    connector: DashboardDataConnector = Depends(get_connector),
):
    """
    Rank tracker report

    Tier counts, movement since the previous check, category breakdown,
    average position trend and the biggest movers.
    """
    category = validate_category(category)
    service = RankingReportService(connector)
    return await run_report("ranking report", service.get_ranking_report(
        utc_now(), days=days, category=category
    ))


@router.get("/tasks")
async def get_task_report(connector: DashboardDataConnector = Depends(get_connector)):
    """Task status, workload and due dates"""
    service = TaskReportService(connector)
    return await run_report("task report", service.get_task_report(
        utc_now(), window_days=settings.upcoming_window_days
    ))


@router.get("/tickets")
async def get_ticket_report(connector: DashboardDataConnector = Depends(get_connector)):
    service = TaskReportService(connector)
    return await run_report("ticket report", service.get_ticket_report())


@router.get("/kvp")
async def get_kvp_report(
    preset: str = Query(DEFAULT_PRESET, description="Date range preset"),
    date_from: Optional[date] = Query(None, description="Start of a custom range (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(None, description="End of a custom range (YYYY-MM-DD)"),
    category: Optional[str] = Query(None),
    connector: DashboardDataConnector = Depends(get_connector),
):
    """KVP URLs created in the selected window with keyword and maturity coverage"""
    if preset not in PRESET_LABELS:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown preset '{preset}'. Valid presets: {', '.join(PRESET_LABELS)}",
        )
    category = validate_category(category)

    service = KvpReportService(connector, settings.report_timezone)
    return await run_report("KVP report", service.get_kvp_report(
        today_in_timezone(settings.report_timezone),
        preset=preset,
        date_from=date_from,
        date_to=date_to,
        category=category,
    ))


@router.get("/briefings")
async def get_briefing_report(connector: DashboardDataConnector = Depends(get_connector)):
    """Briefing volume, requesters, processing time and types"""
    service = BriefingReportService(connector, settings.keyword_categories)
    return await run_report("briefing report", service.get_briefing_report(utc_now()))
