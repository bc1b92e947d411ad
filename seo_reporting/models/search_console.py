"""
Google Search Console records

Rows from snapshots and search analytics requests.
"""
from typing import List, Optional

from pydantic import Field

from seo_reporting.models.base import Record


class MetricRow(Record):
    """One Search Console row for a single dimension value"""
    dimension_key: str
    # URL, search query, country code, device label or date depending on dimension
    clicks: int = Field(0, ge=0)
    impressions: int = Field(0, ge=0)
    ctr: float = Field(0.0, ge=0)
    # Stored CTR; recomputed from summed clicks/impressions when aggregating
    position: float = Field(0.0, ge=0)
    # 1 is the best position; 0 only on rows without impressions or position


class SnapshotRow(MetricRow):
    """Row stored in a snapshot, tagged with the dimension it came from"""
    dimension: str
    # Types: page, query, query_page, device, country, date
    page_url: Optional[str] = None
    # Landing page for query_page rows


class Snapshot(Record):
    """A stored Search Console export for a fixed date window"""
    id: str
    name: str = ""
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    data: List[SnapshotRow] = []

    def rows_for(self, dimension: str) -> List[SnapshotRow]:
        return [row for row in self.data if row.dimension == dimension]
