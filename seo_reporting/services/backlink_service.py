"""
Backlink Table Service

Filters, sorts and pages the stored backlink profile.
"""
from typing import Dict, List, Optional, Sequence

from seo_reporting.connectors.dashboard_api import DashboardDataConnector
from seo_reporting.models.backlinks import Backlink
from seo_reporting.services.table_pager import paginate, sort_items
from seo_reporting.utils.logger import log

BACKLINK_SORT_KEYS = (
    "domain_from",
    "rank",
    "domain_from_rank",
    "page_from_rank",
    "backlink_spam_score",
    "first_seen",
    "last_seen",
)


def filter_backlinks(
    backlinks: Sequence[Backlink],
    dofollow: Optional[bool] = None,
    is_new: Optional[bool] = None,
    is_lost: Optional[bool] = None,
) -> List[Backlink]:
    """Keep backlinks matching every given flag; None means "any"."""
    return [
        b for b in backlinks
        if (dofollow is None or b.dofollow == dofollow)
        and (is_new is None or b.is_new == is_new)
        and (is_lost is None or b.is_lost == is_lost)
    ]


def backlink_summary(backlinks: Sequence[Backlink]) -> Dict:
    dofollow = sum(1 for b in backlinks if b.dofollow)
    return {
        "total": len(backlinks),
        "dofollow": dofollow,
        "nofollow": len(backlinks) - dofollow,
        "new": sum(1 for b in backlinks if b.is_new),
        "lost": sum(1 for b in backlinks if b.is_lost),
        "referring_domains": len({b.domain_from for b in backlinks}),
    }


def build_backlink_table(
    backlinks: Sequence[Backlink],
    dofollow: Optional[bool] = None,
    is_new: Optional[bool] = None,
    is_lost: Optional[bool] = None,
    sort_key: str = "domain_from_rank",
    direction: str = "desc",
    page: int = 1,
    page_size: int = 25,
) -> Dict:
    if sort_key not in BACKLINK_SORT_KEYS:
        raise ValueError(f"Unknown backlink sort key '{sort_key}'")

    filtered = filter_backlinks(backlinks, dofollow=dofollow, is_new=is_new, is_lost=is_lost)
    table = paginate(sort_items(filtered, sort_key, direction), page, page_size)
    return {
        "summary": backlink_summary(backlinks),
        "filtered_total": len(filtered),
        **table.to_dict(lambda b: b.model_dump(mode="json")),
    }


class BacklinkService:

    def __init__(self, connector: DashboardDataConnector):
        self.connector = connector

    async def get_backlink_table(self, **options) -> Dict:
        backlinks = await self.connector.fetch_backlinks()
        log.info(f"Building backlink table from {len(backlinks)} backlinks")
        return build_backlink_table(backlinks, **options)
