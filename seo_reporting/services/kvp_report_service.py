"""
KVP Report Service

Continuous-improvement (KVP) URLs created within a reporting window:
keyword and maturity model coverage, category split and the monthly
overview across all KVPs.
"""
from datetime import date
from typing import Dict, List, Optional, Sequence

from seo_reporting.connectors.dashboard_api import DashboardDataConnector
from seo_reporting.models.workflow import KvpUrl
from seo_reporting.services.category_rollup import (
    maturity_category_rollup,
    monthly_rollup,
    rollup,
    sorted_stats,
)
from seo_reporting.services.date_ranges import PRESET_LABELS, DateRange, preset_range
from seo_reporting.utils.helpers import local_date
from seo_reporting.utils.logger import log

DEFAULT_PRESET = "current_month"


def kvp_row(kvp: KvpUrl) -> Dict:
    return {
        "id": kvp.id,
        "url": kvp.url,
        "focus_keyword": kvp.focus_keyword,
        "category": kvp.category,
        "created_at": kvp.created_at.isoformat(),
        "subkeywords": [s.keyword for s in kvp.subkeywords],
        "maturity_links": [link.model_dump() for link in kvp.maturity_links],
        "assignees": [a.model_dump() for a in kvp.assignees],
    }


def kvps_in_range(
    kvps: Sequence[KvpUrl],
    period: DateRange,
    tz_name: str,
    category: Optional[str] = None,
) -> List[KvpUrl]:
    """KVPs whose creation date (in the reporting time zone) lies inside the window."""
    selected = []
    for kvp in kvps:
        if category and kvp.category != category:
            continue
        if period.start <= local_date(kvp.created_at, tz_name) <= period.end:
            selected.append(kvp)
    return selected


def build_kvp_report(
    all_kvps: Sequence[KvpUrl],
    period: DateRange,
    tz_name: str,
    category: Optional[str] = None,
    preset: Optional[str] = None,
) -> Dict:
    kvps = kvps_in_range(all_kvps, period, tz_name, category)
    kvps.sort(key=lambda k: k.created_at, reverse=True)
    links = [link for kvp in kvps for link in kvp.maturity_links]

    created = sorted(kvp.created_at for kvp in all_kvps)
    monthly = monthly_rollup(local_date(kvp.created_at, tz_name) for kvp in all_kvps)

    return {
        "period": period.to_dict(),
        "preset": preset,
        "preset_label": PRESET_LABELS.get(preset) if preset else None,
        "category": category or None,
        "kvp_urls": [kvp_row(kvp) for kvp in kvps],
        "stats": {
            "total_kvps": len(kvps),
            "total_subkeywords": sum(len(kvp.subkeywords) for kvp in kvps),
            "total_focus_keywords": len({kvp.focus_keyword for kvp in kvps}),
            "total_maturity_links": len(links),
            "unique_maturity_items": len({link.maturity_item_id for link in links}),
        },
        "category_stats": [
            {"category": s.key, "count": s.count}
            for s in sorted_stats(rollup(kvps, lambda k: k.category))
        ],
        "maturity_category_stats": [s.to_dict() for s in maturity_category_rollup(links)],
        "monthly_stats": monthly,
        "available_months": [m["month"] for m in monthly],
        "date_range": {
            "earliest": created[0].isoformat(),
            "latest": created[-1].isoformat(),
        } if created else None,
    }


class KvpReportService:
    """KVP report for a preset or custom date window"""

    def __init__(self, connector: DashboardDataConnector, tz_name: str):
        self.connector = connector
        self.tz_name = tz_name

    async def get_kvp_report(
        self,
        today: date,
        preset: str = DEFAULT_PRESET,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        category: Optional[str] = None,
    ) -> Dict:
        period = preset_range(preset, today, date_from, date_to)
        all_kvps = await self.connector.fetch_kvp_urls()
        log.info(f"Building KVP report for {period.start} - {period.end} ({len(all_kvps)} KVPs total)")
        return build_kvp_report(all_kvps, period, self.tz_name, category=category, preset=preset)
