"""
Traffic Report Service

Search Console traffic for a property: period totals against the previous
period of equal length, daily trend, top keywords and pages, devices and
directories.
"""
import asyncio
from datetime import date
from typing import Dict, List, Optional, Sequence

from seo_reporting.connectors.dashboard_api import DashboardDataConnector
from seo_reporting.models.search_console import MetricRow
from seo_reporting.services.date_ranges import (
    DEFAULT_GSC_PERIOD,
    DateRange,
    gsc_period_range,
    previous_period_range,
)
from seo_reporting.services.metrics import aggregate, delta, period_changes
from seo_reporting.services.path_grouper import build_directory_stats, exclude_brand_queries
from seo_reporting.utils.logger import log
from seo_reporting.utils.url_parsing import pathname

TOP_KEYWORDS = 50
TOP_PAGES = 50
TOP_DIRECTORIES = 20
TRAFFIC_DIRECTORY_DEPTH = 2


def _row_dict(row: MetricRow, key_name: str) -> Dict:
    return {
        key_name: row.dimension_key,
        "clicks": row.clicks,
        "impressions": row.impressions,
        "ctr": row.ctr,
        "position": row.position,
    }


def _by_clicks(rows: Sequence[MetricRow]) -> List[MetricRow]:
    return sorted(rows, key=lambda r: r.clicks, reverse=True)


def build_traffic_report(
    period: DateRange,
    previous_period: DateRange,
    current_daily: Sequence[MetricRow],
    previous_daily: Sequence[MetricRow],
    query_rows: Sequence[MetricRow],
    page_rows: Sequence[MetricRow],
    device_rows: Sequence[MetricRow],
    url_filter: Optional[str] = None,
    depth: int = TRAFFIC_DIRECTORY_DEPTH,
    brand_terms: Sequence[str] = (),
) -> Dict:
    current = aggregate(current_daily).period_totals()
    previous = aggregate(previous_daily).period_totals()

    daily_trend = sorted(
        (_row_dict(row, "date") for row in current_daily),
        key=lambda r: r["date"],
    )

    top_keywords = [
        _row_dict(row, "keyword")
        for row in _by_clicks(exclude_brand_queries(query_rows, brand_terms))[:TOP_KEYWORDS]
    ]

    top_pages = []
    for row in _by_clicks(page_rows)[:TOP_PAGES]:
        page = _row_dict(row, "url")
        page["pathname"] = pathname(row.dimension_key)
        top_pages.append(page)

    directories = [
        {
            "path": d.path,
            "clicks": d.clicks,
            "impressions": d.impressions,
            "ctr": d.ctr,
            "position": d.position,
            "page_count": d.page_count,
        }
        for d in build_directory_stats(page_rows, depth)[:TOP_DIRECTORIES]
    ]

    return {
        "period": period.to_dict(),
        "previous_period": previous_period.to_dict(),
        "url_filter": url_filter or None,
        "current": current.to_dict(),
        "previous": previous.to_dict(),
        "changes": period_changes(current, previous),
        "delta": delta(current, previous).to_dict(),
        "daily_trend": daily_trend,
        "top_keywords": top_keywords,
        "top_pages": top_pages,
        "devices": [_row_dict(row, "device") for row in device_rows],
        "directories": directories,
    }


class TrafficReportService:
    """Fetches Search Console rows for both periods and assembles the traffic report"""

    def __init__(self, connector: DashboardDataConnector):
        self.connector = connector

    async def get_traffic_report(
        self,
        site_url: str,
        today: date,
        period: str = DEFAULT_GSC_PERIOD,
        url_filter: Optional[str] = None,
        depth: int = TRAFFIC_DIRECTORY_DEPTH,
        brand_terms: Sequence[str] = (),
    ) -> Dict:
        log.info(f"Building traffic report for {site_url} ({period})")

        current_range = gsc_period_range(period, today)
        previous_range = previous_period_range(current_range)
        fetch = self.connector.fetch_search_analytics

        current_daily, previous_daily, queries, pages, devices = await asyncio.gather(
            fetch(site_url, current_range, "date", row_limit=1000, url_filter=url_filter),
            fetch(site_url, previous_range, "date", row_limit=1000, url_filter=url_filter),
            fetch(site_url, current_range, "query", row_limit=500, url_filter=url_filter),
            fetch(site_url, current_range, "page", row_limit=500, url_filter=url_filter),
            fetch(site_url, current_range, "device", row_limit=10, url_filter=url_filter),
        )

        return build_traffic_report(
            period=current_range,
            previous_period=previous_range,
            current_daily=current_daily,
            previous_daily=previous_daily,
            query_rows=queries,
            page_rows=pages,
            device_rows=devices,
            url_filter=url_filter,
            depth=depth,
            brand_terms=brand_terms,
        )
