"""
Directory Analysis Service

Directory breakdown of a stored snapshot and the keyword-based matching of
directories between two snapshots.
"""
from typing import Dict, Sequence

from seo_reporting.connectors.dashboard_api import DashboardDataConnector
from seo_reporting.models.search_console import Snapshot
from seo_reporting.services.metrics import aggregate
from seo_reporting.services.path_grouper import (
    build_snapshot_directories,
    compare_directories,
    comparison_summary,
    exclude_brand_queries,
)
from seo_reporting.services.table_pager import paginate
from seo_reporting.utils.logger import log

DEFAULT_TOP_KEYWORDS = 20


def _snapshot_info(snapshot: Snapshot) -> Dict:
    return {
        "id": snapshot.id,
        "name": snapshot.name,
        "start_date": snapshot.start_date,
        "end_date": snapshot.end_date,
    }


def snapshot_directories(
    snapshot: Snapshot,
    depth: int,
    brand_terms: Sequence[str] = (),
    top_keywords: int = DEFAULT_TOP_KEYWORDS,
):
    query_page_rows = exclude_brand_queries(snapshot.rows_for("query_page"), brand_terms)
    return build_snapshot_directories(
        snapshot.rows_for("page"), query_page_rows, depth, top_keywords=top_keywords
    )


def build_directory_report(
    snapshot: Snapshot,
    depth: int,
    page: int = 1,
    page_size: int = 25,
    brand_terms: Sequence[str] = (),
) -> Dict:
    """Paged directories of a snapshot, with totals over all of its page rows."""
    directories = snapshot_directories(snapshot, depth, brand_terms)
    return {
        "snapshot": _snapshot_info(snapshot),
        "depth": depth,
        "totals": aggregate(snapshot.rows_for("page")).to_dict(),
        "directories": paginate(directories, page, page_size).to_dict(lambda d: d.to_dict()),
    }


def build_directory_comparison(
    base: Snapshot,
    other: Snapshot,
    depth: int,
    min_similarity: float = 0.3,
    top_keywords: int = DEFAULT_TOP_KEYWORDS,
    sort_by: str = "similarity",
    brand_terms: Sequence[str] = (),
) -> Dict:
    comparisons = compare_directories(
        snapshot_directories(base, depth, brand_terms, top_keywords),
        snapshot_directories(other, depth, brand_terms, top_keywords),
        min_similarity=min_similarity,
        sort_by=sort_by,
    )
    return {
        "base_snapshot": _snapshot_info(base),
        "compare_snapshot": _snapshot_info(other),
        "depth": depth,
        "comparisons": [c.to_dict() for c in comparisons],
        "summary": comparison_summary(comparisons),
    }


class DirectoryService:
    """Snapshot directory analysis"""

    def __init__(self, connector: DashboardDataConnector):
        self.connector = connector

    async def get_directories(self, snapshot_id: str, depth: int, **options) -> Dict:
        snapshot = await self.connector.fetch_snapshot(snapshot_id)
        log.info(f"Grouping {len(snapshot.data)} rows of snapshot {snapshot_id} at depth {depth}")
        return build_directory_report(snapshot, depth, **options)

    async def compare(self, base_id: str, compare_id: str, depth: int, **options) -> Dict:
        base = await self.connector.fetch_snapshot(base_id)
        other = await self.connector.fetch_snapshot(compare_id)
        log.info(f"Comparing directories of snapshots {base_id} and {compare_id} at depth {depth}")
        return build_directory_comparison(base, other, depth, **options)
