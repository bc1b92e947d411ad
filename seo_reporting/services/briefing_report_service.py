"""
Briefing Report Service

Content briefing throughput: volume over trailing windows, per requester,
per type and category, processing time and overdue deadlines.
"""
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from dateutil.relativedelta import relativedelta

from seo_reporting.connectors.dashboard_api import DashboardDataConnector
from seo_reporting.models.workflow import Briefing
from seo_reporting.services.category_rollup import UNCATEGORIZED, rollup
from seo_reporting.utils.helpers import as_utc, round_1
from seo_reporting.utils.logger import log

TRAILING_WINDOWS = (30, 60, 90, 180)
BRIEFING_STATUSES = ("ordered", "in_progress", "completed")
BRIEFING_TYPES = ("new_content", "edit_content", "lexicon")
MONTHLY_TREND_MONTHS = 6


def _status_counts(briefings: Sequence[Briefing]) -> Dict[str, int]:
    counts = {"total": len(briefings)}
    for status in BRIEFING_STATUSES:
        counts[status] = sum(1 for b in briefings if b.status == status)
    return counts


def requester_stats(briefings: Sequence[Briefing], now: datetime) -> List[Dict]:
    """Briefings per requester with status split, most active requester first."""
    since = as_utc(now) - timedelta(days=30)
    users: Dict[str, Dict] = {}

    for briefing in briefings:
        requester = briefing.requester
        entry = users.get(requester.id)
        if entry is None:
            entry = {
                "user_id": requester.id,
                "name": requester.name or "",
                "email": requester.email,
                "total": 0,
                "ordered": 0,
                "in_progress": 0,
                "completed": 0,
                "last_30_days": 0,
            }
            users[requester.id] = entry
        entry["total"] += 1
        if briefing.status in BRIEFING_STATUSES:
            entry[briefing.status] += 1
        if as_utc(briefing.created_at) >= since:
            entry["last_30_days"] += 1

    return sorted(users.values(), key=lambda u: u["total"], reverse=True)


def average_processing_days(briefings: Sequence[Briefing]) -> Optional[float]:
    completed = [b for b in briefings if b.status == "completed"]
    if not completed:
        return None
    total_seconds = sum(
        (as_utc(b.updated_at) - as_utc(b.created_at)).total_seconds() for b in completed
    )
    return round_1(total_seconds / len(completed) / 86400)


def monthly_trend(briefings: Sequence[Briefing], now: datetime, months: int = MONTHLY_TREND_MONTHS) -> List[Dict]:
    """Briefings created per calendar month for the last `months` months, oldest first."""
    current_month = as_utc(now).replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    trend = []
    for back in range(months - 1, -1, -1):
        start = current_month - relativedelta(months=back)
        end = start + relativedelta(months=1)
        trend.append({
            "month": start.strftime("%Y-%m"),
            "count": sum(1 for b in briefings if start <= as_utc(b.created_at) < end),
        })
    return trend


def build_briefing_report(
    briefings: Sequence[Briefing],
    now: datetime,
    categories: Sequence[str] = (),
) -> Dict:
    now_utc = as_utc(now)

    by_category_stats = rollup(briefings, lambda b: b.category, lambda b: b.status)
    by_category = {}
    for category in list(categories) + [UNCATEGORIZED]:
        stat = by_category_stats.get(category)
        sub_counts = stat.sub_counts if stat else {}
        by_category[category] = {
            "total": stat.count if stat else 0,
            **{status: sub_counts.get(status, 0) for status in BRIEFING_STATUSES},
        }

    completed_count = sum(1 for b in briefings if b.status == "completed")

    return {
        "time_based": {
            f"last_{days}_days": sum(
                1 for b in briefings if as_utc(b.created_at) >= now_utc - timedelta(days=days)
            )
            for days in TRAILING_WINDOWS
        },
        "requesters": requester_stats(briefings, now),
        "processing_time": {
            "avg_days": average_processing_days(briefings),
            "completed_count": completed_count,
        },
        "by_type": {
            briefing_type: _status_counts([b for b in briefings if b.briefing_type == briefing_type])
            for briefing_type in BRIEFING_TYPES
        },
        "by_category": by_category,
        "status_overview": _status_counts(briefings),
        "overdue": sum(
            1 for b in briefings
            if b.deadline is not None and as_utc(b.deadline) < now_utc and b.status != "completed"
        ),
        "monthly_trend": monthly_trend(briefings, now),
    }


class BriefingReportService:

    def __init__(self, connector: DashboardDataConnector, categories: Sequence[str] = ()):
        self.connector = connector
        self.categories = list(categories)

    async def get_briefing_report(self, now: datetime) -> Dict:
        briefings = await self.connector.fetch_briefings()
        log.info(f"Building briefing report for {len(briefings)} briefings")
        return build_briefing_report(briefings, now, self.categories)
