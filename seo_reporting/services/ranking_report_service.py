"""
Ranking Report Service

Keyword positions from the rank tracker: current, previous and first check
per keyword, tier and movement counts, category breakdown, daily average
position trend and the biggest movers. Also backs the paged keyword table.
"""
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from seo_reporting.connectors.dashboard_api import DashboardDataConnector
from seo_reporting.models.rank_tracker import TrackedKeyword
from seo_reporting.services.category_rollup import UNCATEGORIZED
from seo_reporting.services.ranking import position_change, ranking_stats, tier_distribution
from seo_reporting.services.table_pager import paginate, sort_items
from seo_reporting.utils.helpers import as_utc, round_1
from seo_reporting.utils.logger import log

DEFAULT_HISTORY_DAYS = 90
TOP_MOVERS = 10

KEYWORD_SORT_KEYS = (
    "keyword",
    "category",
    "current_position",
    "previous_position",
    "delta_last",
    "delta_start",
    "search_volume",
)


def keyword_row(keyword: TrackedKeyword, since: Optional[datetime] = None) -> Dict:
    """Flatten one tracked keyword into a report row."""
    rankings = keyword.rankings_newest_first()
    latest = rankings[0] if rankings else None
    previous = rankings[1] if len(rankings) > 1 else None
    first = rankings[-1] if rankings else None

    current_position = latest.position if latest else None
    previous_position = previous.position if previous else None
    first_position = first.position if first else None

    recent = rankings
    if since is not None:
        recent = [r for r in rankings if as_utc(r.date) >= as_utc(since)]

    return {
        "id": keyword.id,
        "keyword": keyword.keyword,
        "category": keyword.category,
        "target_url": keyword.target_url,
        "search_volume": keyword.search_volume,
        "current_position": current_position,
        "previous_position": previous_position,
        "first_position": first_position,
        "delta_last": position_change(current_position, previous_position),
        "delta_start": position_change(current_position, first_position),
        "latest_url": latest.url if latest else None,
        "latest_date": latest.date.isoformat() if latest else None,
        "recent_rankings": [
            {"date": r.date.isoformat(), "position": r.position, "url": r.url}
            for r in recent
        ],
    }


def category_ranking_stats(rows: Sequence[Dict]) -> List[Dict]:
    """Per category: keywords tracked, ranking, in the top 10 and their average position."""
    categories: Dict[str, Dict] = {}

    for row in rows:
        category = row["category"] or UNCATEGORIZED
        entry = categories.setdefault(category, {"total": 0, "ranking": 0, "top10": 0, "positions": []})
        entry["total"] += 1
        position = row["current_position"]
        if position is not None:
            entry["ranking"] += 1
            entry["positions"].append(position)
            if position <= 10:
                entry["top10"] += 1

    return [
        {
            "category": category,
            "total": entry["total"],
            "ranking": entry["ranking"],
            "top10": entry["top10"],
            "avg_position": round_1(sum(entry["positions"]) / len(entry["positions"]))
            if entry["positions"] else None,
        }
        for category, entry in categories.items()
    ]


def daily_position_trend(keywords: Sequence[TrackedKeyword], since: datetime) -> List[Dict]:
    """Average position per day across all keywords that ranked that day."""
    days: Dict[str, List[float]] = defaultdict(list)
    since = as_utc(since)

    for keyword in keywords:
        for ranking in keyword.rankings:
            if ranking.position is None or as_utc(ranking.date) < since:
                continue
            days[as_utc(ranking.date).date().isoformat()].append(ranking.position)

    return [
        {
            "date": day,
            "avg_position": round_1(sum(positions) / len(positions)),
            "keywords_tracked": len(positions),
        }
        for day, positions in sorted(days.items())
    ]


def top_movers(rows: Sequence[Dict], limit: int = TOP_MOVERS) -> Dict[str, List[Dict]]:
    """Biggest improvements and declines since the previous check."""
    with_delta = [r for r in rows if r["delta_last"] is not None]
    improvers = sorted(with_delta, key=lambda r: r["delta_last"], reverse=True)[:limit]
    decliners = sorted(with_delta, key=lambda r: r["delta_last"])[:limit]
    return {
        "top_improvers": [r for r in improvers if r["delta_last"] > 0],
        "top_decliners": [r for r in decliners if r["delta_last"] < 0],
    }


def _filter_category(keywords: Sequence[TrackedKeyword], category: Optional[str]) -> List[TrackedKeyword]:
    if not category:
        return list(keywords)
    return [k for k in keywords if k.category == category]


def build_ranking_report(
    keywords: Sequence[TrackedKeyword],
    now: datetime,
    days: int = DEFAULT_HISTORY_DAYS,
    category: Optional[str] = None,
) -> Dict:
    keywords = _filter_category(keywords, category)
    since = as_utc(now) - timedelta(days=days)

    rows = [keyword_row(keyword, since) for keyword in keywords]
    stats = ranking_stats((row["current_position"], row["previous_position"]) for row in rows)

    return {
        "category": category or None,
        "days": days,
        "keywords": rows,
        "stats": stats.to_dict(),
        "distribution": tier_distribution(stats),
        "category_stats": category_ranking_stats(rows),
        "historical_trend": daily_position_trend(keywords, since),
        **top_movers(rows),
    }


def build_keyword_table(
    keywords: Sequence[TrackedKeyword],
    category: Optional[str] = None,
    sort_key: str = "current_position",
    direction: str = "asc",
    page: int = 1,
    page_size: int = 25,
) -> Dict:
    """Filtered, sorted and paged keyword rows for the rank tracker table."""
    if sort_key not in KEYWORD_SORT_KEYS:
        raise ValueError(f"Unknown keyword sort key '{sort_key}'")

    rows = [keyword_row(keyword) for keyword in _filter_category(keywords, category)]
    for row in rows:
        row.pop("recent_rankings")

    return paginate(sort_items(rows, sort_key, direction), page, page_size).to_dict()


class RankingReportService:
    """Loads the rank tracker and builds ranking reports and keyword tables"""

    def __init__(self, connector: DashboardDataConnector):
        self.connector = connector

    async def get_ranking_report(
        self,
        now: datetime,
        days: int = DEFAULT_HISTORY_DAYS,
        category: Optional[str] = None,
    ) -> Dict:
        keywords = await self.connector.fetch_rank_tracker()
        log.info(f"Building ranking report for {len(keywords)} keywords (category={category}, days={days})")
        return build_ranking_report(keywords, now, days=days, category=category)

    async def get_keyword_table(self, **options) -> Dict:
        keywords = await self.connector.fetch_rank_tracker()
        return build_keyword_table(keywords, **options)
