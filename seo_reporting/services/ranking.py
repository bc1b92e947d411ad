"""
Ranking status classification for tracked keywords

Buckets positions into coarse tiers for counts and distribution charts, and
classifies position movement between two checks. Lower positions are better.
"""
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from seo_reporting.utils.helpers import round_1


class RankingTier(str, Enum):
    TOP3 = "top3"
    TOP10 = "top10"  # positions 4-10
    TOP20 = "top20"
    TOP50 = "top50"
    TOP100 = "top100"
    NOT_RANKING = "not_ranking"


class Movement(str, Enum):
    IMPROVED = "improved"
    DECLINED = "declined"
    UNCHANGED = "unchanged"


# Upper bounds are inclusive
TIER_BOUNDS: Tuple[Tuple[float, RankingTier], ...] = (
    (3, RankingTier.TOP3),
    (10, RankingTier.TOP10),
    (20, RankingTier.TOP20),
    (50, RankingTier.TOP50),
    (100, RankingTier.TOP100),
)

TIER_LABELS = {
    RankingTier.TOP3: "Top 3",
    RankingTier.TOP10: "Top 4-10",
    RankingTier.TOP20: "Top 11-20",
    RankingTier.TOP50: "Top 21-50",
    RankingTier.TOP100: "Top 51-100",
    RankingTier.NOT_RANKING: "Nicht rankend",
}


@dataclass(frozen=True)
class RankingStats:
    total: int
    top3: int
    top10: int
    top20: int
    top50: int
    top100: int
    not_ranking: int
    avg_position: float
    improved: int
    declined: int
    unchanged: int

    def to_dict(self) -> Dict:
        return asdict(self)


def classify(position: Optional[float]) -> RankingTier:
    if position is None:
        return RankingTier.NOT_RANKING
    for upper, tier in TIER_BOUNDS:
        if position <= upper:
            return tier
    return RankingTier.NOT_RANKING


def average_position(positions: Iterable[Optional[float]]) -> float:
    """Mean of the non-null positions; 0 when nothing ranks."""
    ranked = [p for p in positions if p is not None]
    if not ranked:
        return 0.0
    return sum(ranked) / len(ranked)


def movement(current: Optional[float], previous: Optional[float]) -> Movement:
    """
    Direction of change between the previous and the current check.

    Newly ranking (previous None) counts as improved, dropping out
    (current None) as declined.
    """
    if current is None and previous is None:
        return Movement.UNCHANGED
    if previous is None:
        return Movement.IMPROVED
    if current is None:
        return Movement.DECLINED

    change = previous - current
    if change > 0:
        return Movement.IMPROVED
    if change < 0:
        return Movement.DECLINED
    return Movement.UNCHANGED


def position_change(current: Optional[float], previous: Optional[float]) -> Optional[float]:
    """previous - current, so a positive value is an improvement. None unless both rank."""
    if current is None or previous is None:
        return None
    return previous - current


def ranking_stats(positions: Iterable[Tuple[Optional[float], Optional[float]]]) -> RankingStats:
    """Tier counts, average position and movement counts for (current, previous) pairs."""
    tiers = {tier: 0 for tier in RankingTier}
    movements = {m: 0 for m in Movement}
    current_positions: List[Optional[float]] = []

    for current, previous in positions:
        tiers[classify(current)] += 1
        movements[movement(current, previous)] += 1
        current_positions.append(current)

    return RankingStats(
        total=len(current_positions),
        top3=tiers[RankingTier.TOP3],
        top10=tiers[RankingTier.TOP10],
        top20=tiers[RankingTier.TOP20],
        top50=tiers[RankingTier.TOP50],
        top100=tiers[RankingTier.TOP100],
        not_ranking=tiers[RankingTier.NOT_RANKING],
        avg_position=round_1(average_position(current_positions)),
        improved=movements[Movement.IMPROVED],
        declined=movements[Movement.DECLINED],
        unchanged=movements[Movement.UNCHANGED],
    )


def tier_distribution(stats: RankingStats) -> List[Dict]:
    """{name, value} pairs in tier order for distribution charts."""
    return [
        {"tier": tier.value, "name": TIER_LABELS[tier], "value": getattr(stats, tier.value)}
        for tier in RankingTier
    ]
