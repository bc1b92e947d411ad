"""
Rank tracker records
"""
from datetime import datetime
from typing import List, Optional

from seo_reporting.models.base import Record


class KeywordRanking(Record):
    """Daily ranking check; position None means not found in the results"""
    date: datetime
    position: Optional[float] = None
    url: Optional[str] = None


class TrackedKeyword(Record):
    id: str
    keyword: str
    category: Optional[str] = None
    target_url: Optional[str] = None
    search_volume: Optional[int] = None
    rankings: List[KeywordRanking] = []

    def rankings_newest_first(self) -> List[KeywordRanking]:
        return sorted(self.rankings, key=lambda r: r.date, reverse=True)
