"""Records validated at the upstream data API boundary"""

from seo_reporting.models.base import Record

from seo_reporting.models.search_console import (
    MetricRow,
    SnapshotRow,
    Snapshot,
)

from seo_reporting.models.rank_tracker import (
    KeywordRanking,
    TrackedKeyword,
)

from seo_reporting.models.workflow import (
    UserRef,
    Task,
    Ticket,
    Subkeyword,
    MaturityLink,
    KvpUrl,
    Briefing,
)

from seo_reporting.models.backlinks import Backlink

__all__ = [
    "Record",
    "MetricRow",
    "SnapshotRow",
    "Snapshot",
    "KeywordRanking",
    "TrackedKeyword",
    "UserRef",
    "Task",
    "Ticket",
    "Subkeyword",
    "MaturityLink",
    "KvpUrl",
    "Briefing",
    "Backlink",
]
