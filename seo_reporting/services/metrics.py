"""
Metric aggregation and period-over-period deltas

Search Console rows are re-aggregated here for directories, date windows and
dimension breakdowns. CTR is always recomputed from summed clicks and
impressions; averaging per-row CTR would understate high-impression rows.

Position is the plain arithmetic mean of member positions, not weighted by
impressions or clicks. Every report in the dashboard computes it this way and
the figures must stay comparable, so keep it unweighted.
"""
import math
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, Optional, Protocol

from seo_reporting.utils.helpers import safe_divide


class HasMetrics(Protocol):
    clicks: int
    impressions: int
    position: float


@dataclass(frozen=True)
class MetricTotals:
    clicks: int
    impressions: int
    ctr: float
    position: float
    count: int

    def to_dict(self) -> Dict:
        return asdict(self)

    def period_totals(self) -> "PeriodTotals":
        return PeriodTotals(
            clicks=self.clicks,
            impressions=self.impressions,
            ctr=self.ctr,
            position=self.position,
        )


@dataclass(frozen=True)
class PeriodTotals:
    clicks: int
    impressions: int
    ctr: float
    position: float

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class Delta:
    """Signed current-minus-previous difference for each metric.

    A negative position delta is an improvement; callers flip the trend
    arrow for position themselves.
    """
    clicks: int
    impressions: int
    ctr: float
    position: float

    def to_dict(self) -> Dict:
        return asdict(self)


EMPTY_TOTALS = MetricTotals(clicks=0, impressions=0, ctr=0.0, position=0.0, count=0)


def aggregate(rows: Iterable[HasMetrics]) -> MetricTotals:
    """Sum additive metrics and derive CTR and mean position for a group of rows."""
    clicks = 0
    impressions = 0
    positions = []

    for row in rows:
        clicks += row.clicks
        impressions += row.impressions
        positions.append(row.position)

    count = len(positions)
    if count == 0:
        return EMPTY_TOTALS

    return MetricTotals(
        clicks=clicks,
        impressions=impressions,
        ctr=safe_divide(clicks, impressions),
        # fsum keeps the mean independent of row order
        position=math.fsum(positions) / count,
        count=count,
    )


def delta(current: PeriodTotals, previous: PeriodTotals) -> Delta:
    return Delta(
        clicks=current.clicks - previous.clicks,
        impressions=current.impressions - previous.impressions,
        ctr=current.ctr - previous.ctr,
        position=current.position - previous.position,
    )


def percent_change(current: float, previous: float) -> Optional[float]:
    """
    Relative change between two values as a fraction (0.25 == +25%).

    Returns 0.0 when both values are zero and None when the previous value
    is zero but the current one is not (growth from nothing has no ratio).
    """
    if previous == 0:
        return 0.0 if current == 0 else None
    return (current - previous) / previous


def period_changes(current: PeriodTotals, previous: PeriodTotals) -> Dict[str, Optional[float]]:
    """Relative change per metric between two equal-length periods."""
    return {
        "clicks": percent_change(current.clicks, previous.clicks),
        "impressions": percent_change(current.impressions, previous.impressions),
        "ctr": percent_change(current.ctr, previous.ctr),
        "position": percent_change(current.position, previous.position),
    }
