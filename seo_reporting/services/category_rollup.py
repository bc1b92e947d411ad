"""
Categorical rollups for workflow objects

Counts tasks, tickets, KVP URLs and keywords per category, optionally with a
second-level breakdown (e.g. status per priority). Items without a category
are counted under UNCATEGORIZED; dropping them would under-count totals.

Due-date classification takes `now` from the caller, never from the clock.
"""
import math
from collections import Counter, defaultdict
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from seo_reporting.models.workflow import MaturityLink, Task
from seo_reporting.utils.helpers import as_utc

T = TypeVar("T")

UNCATEGORIZED = "Keine Kategorie"
CLOSED_STATUSES = frozenset({"done", "closed"})
UPCOMING_WINDOW_DAYS = 7


@dataclass(frozen=True)
class CategoryStat:
    key: str
    count: int
    sub_counts: Optional[Dict[str, int]] = None

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class WorkloadStat:
    user_id: str
    name: Optional[str]
    email: str
    total: int
    by_status: Dict[str, int] = field(default_factory=dict)
    by_priority: Dict[str, int] = field(default_factory=dict)
    overdue: int = 0
    upcoming: int = 0

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class MaturityCategoryStat:
    category: str
    link_count: int
    unique_items: int
    items: Tuple[str, ...]

    def to_dict(self) -> Dict:
        return asdict(self)


def _key_or_default(value: Optional[str], default_key: str) -> str:
    if value is None or value == "":
        return default_key
    return str(value)


def rollup(
    items: Iterable[T],
    key_fn: Callable[[T], Optional[str]],
    sub_key_fn: Optional[Callable[[T], Optional[str]]] = None,
    default_key: str = UNCATEGORIZED,
) -> Dict[str, CategoryStat]:
    """
    Count items per key, and per sub-key within each key when `sub_key_fn` is given.

    Missing keys (None or empty) are grouped under `default_key`.
    """
    counts: Counter = Counter()
    sub_counts: Dict[str, Counter] = defaultdict(Counter)

    for item in items:
        key = _key_or_default(key_fn(item), default_key)
        counts[key] += 1
        if sub_key_fn is not None:
            sub_counts[key][_key_or_default(sub_key_fn(item), default_key)] += 1

    return {
        key: CategoryStat(
            key=key,
            count=count,
            sub_counts=dict(sub_counts[key]) if sub_key_fn is not None else None,
        )
        for key, count in counts.items()
    }


def sorted_stats(stats: Dict[str, CategoryStat], by: str = "count") -> List[CategoryStat]:
    """Order rollup output for display: by count (desc, then key) or alphabetically."""
    if by == "count":
        return sorted(stats.values(), key=lambda s: (-s.count, s.key))
    if by == "key":
        return sorted(stats.values(), key=lambda s: s.key.lower())
    raise ValueError(f"Unknown rollup sort '{by}'")


def fixed_distribution(
    items: Iterable[T],
    key_fn: Callable[[T], Optional[str]],
    order: Sequence[str],
    labels: Optional[Dict[str, str]] = None,
) -> List[Dict]:
    """Counts for a fixed, ordered set of keys (zero-filled), e.g. for status charts."""
    counts = Counter(key_fn(item) for item in items)
    labels = labels or {}
    return [
        {"key": key, "label": labels.get(key, key), "count": counts.get(key, 0)}
        for key in order
    ]


def is_open(status: Optional[str]) -> bool:
    return status not in CLOSED_STATUSES


def is_overdue(due_date: Optional[datetime], status: Optional[str], now: datetime) -> bool:
    if due_date is None or not is_open(status):
        return False
    return as_utc(due_date) < as_utc(now)


def is_upcoming(
    due_date: Optional[datetime],
    status: Optional[str],
    now: datetime,
    window_days: int = UPCOMING_WINDOW_DAYS,
) -> bool:
    """Due within [now, now + window_days] and still open."""
    if due_date is None or not is_open(status):
        return False
    due = as_utc(due_date)
    start = as_utc(now)
    return start <= due <= start + timedelta(days=window_days)


def days_until_due(due_date: Optional[datetime], now: datetime) -> Optional[int]:
    """Whole days until the due date, rounded up; negative when overdue."""
    if due_date is None:
        return None
    seconds = (as_utc(due_date) - as_utc(now)).total_seconds()
    return math.ceil(seconds / 86400)


def workload_rollup(
    tasks: Iterable[Task],
    now: datetime,
    window_days: int = UPCOMING_WINDOW_DAYS,
) -> List[WorkloadStat]:
    """Open task load per assignee, busiest first."""
    users: Dict[str, Dict] = {}

    for task in tasks:
        if not is_open(task.status):
            continue
        overdue = is_overdue(task.due_date, task.status, now)
        upcoming = is_upcoming(task.due_date, task.status, now, window_days)

        for assignee in task.assignees:
            entry = users.get(assignee.id)
            if entry is None:
                entry = {
                    "user": assignee,
                    "total": 0,
                    "by_status": Counter(),
                    "by_priority": Counter(),
                    "overdue": 0,
                    "upcoming": 0,
                }
                users[assignee.id] = entry
            entry["total"] += 1
            entry["by_status"][task.status] += 1
            entry["by_priority"][task.priority] += 1
            if overdue:
                entry["overdue"] += 1
            if upcoming:
                entry["upcoming"] += 1

    stats = [
        WorkloadStat(
            user_id=entry["user"].id,
            name=entry["user"].name,
            email=entry["user"].email,
            total=entry["total"],
            by_status=dict(entry["by_status"]),
            by_priority=dict(entry["by_priority"]),
            overdue=entry["overdue"],
            upcoming=entry["upcoming"],
        )
        for entry in users.values()
    ]
    stats.sort(key=lambda s: s.total, reverse=True)
    return stats


def maturity_category_rollup(
    links: Iterable[MaturityLink],
    default_key: str = UNCATEGORIZED,
) -> List[MaturityCategoryStat]:
    """Which maturity model categories the linked items address, with distinct item titles."""
    link_counts: Counter = Counter()
    titles: Dict[str, List[str]] = defaultdict(list)

    for link in links:
        category = _key_or_default(link.category, default_key)
        link_counts[category] += 1
        if link.title not in titles[category]:
            titles[category].append(link.title)

    return [
        MaturityCategoryStat(
            category=category,
            link_count=count,
            unique_items=len(titles[category]),
            items=tuple(titles[category]),
        )
        for category, count in link_counts.items()
    ]


def monthly_rollup(dates: Iterable[date]) -> List[Dict]:
    """Counts per calendar month ("YYYY-MM"), newest month first.

    Pass local calendar dates when the report window is in a local time zone.
    """
    counts = Counter(f"{d.year:04d}-{d.month:02d}" for d in dates)
    return [
        {"month": month, "count": counts[month]}
        for month in sorted(counts, reverse=True)
    ]
