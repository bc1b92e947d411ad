"""
Directory grouping for Search Console page rows

Groups page URLs by their leading path segments ("/de/hypotheken" at depth 2)
and rolls the rows of each directory up with the metric aggregator. Also
matches directories across two snapshots by the keywords they rank for, so a
restructured site section can still be compared with its predecessor.
"""
from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from seo_reporting.models.search_console import MetricRow, SnapshotRow
from seo_reporting.services.metrics import aggregate
from seo_reporting.utils.url_parsing import path_segments

ROOT_PATH = "/"

COMPARISON_SORTS = ("similarity", "clicks", "impressions", "position")


@dataclass(frozen=True)
class PageStat:
    url: str
    clicks: int
    impressions: int
    ctr: float
    position: float


@dataclass(frozen=True)
class KeywordStat:
    keyword: str
    clicks: int
    impressions: int


@dataclass(frozen=True)
class DirectoryAggregate:
    path: str
    clicks: int
    impressions: int
    ctr: float
    position: float
    page_count: int
    pages: Tuple[PageStat, ...] = ()
    top_keywords: Tuple[KeywordStat, ...] = ()

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class DirectoryComparison:
    base_path: str
    compare_path: str
    base: DirectoryAggregate
    compare: DirectoryAggregate
    similarity: float
    common_keywords: Tuple[str, ...]
    clicks_diff: int
    impressions_diff: int
    position_diff: float
    page_count_diff: int

    def to_dict(self) -> Dict:
        return asdict(self)


def _check_depth(depth: int) -> None:
    if depth < 1:
        raise ValueError(f"Directory depth must be at least 1, got {depth}")


def extract_directory_path(url: str, depth: int) -> str:
    """
    Truncate a URL's path to its first `depth` segments.

    Unparsable URLs fall back to "/". Shorter paths are kept as they are.
    """
    _check_depth(depth)

    segments = path_segments(url)
    if segments is None:
        return ROOT_PATH

    return "/" + "/".join(segments[:depth])


def group_by_directory(rows: Iterable[MetricRow], depth: int) -> Dict[str, List[MetricRow]]:
    """Group rows under their truncated directory path. Group order is not meaningful."""
    _check_depth(depth)

    groups: Dict[str, List[MetricRow]] = defaultdict(list)
    for row in rows:
        groups[extract_directory_path(row.dimension_key, depth)].append(row)
    return dict(groups)


def _build_directory(path: str, rows: Sequence[MetricRow], top_keywords: Tuple[KeywordStat, ...] = ()) -> DirectoryAggregate:
    totals = aggregate(rows)
    pages = sorted(
        (
            PageStat(
                url=row.dimension_key,
                clicks=row.clicks,
                impressions=row.impressions,
                ctr=row.ctr,
                position=row.position,
            )
            for row in rows
        ),
        key=lambda p: p.clicks,
        reverse=True,
    )
    return DirectoryAggregate(
        path=path,
        clicks=totals.clicks,
        impressions=totals.impressions,
        ctr=totals.ctr,
        position=totals.position,
        page_count=totals.count,
        pages=tuple(pages),
        top_keywords=top_keywords,
    )


def build_directory_stats(rows: Iterable[MetricRow], depth: int) -> List[DirectoryAggregate]:
    """Directory aggregates for page rows, most clicked directory first."""
    groups = group_by_directory(rows, depth)
    directories = [_build_directory(path, members) for path, members in groups.items()]
    directories.sort(key=lambda d: d.clicks, reverse=True)
    return directories


def directory_keywords(
    page_urls: Iterable[str],
    query_page_rows: Iterable[SnapshotRow],
    limit: int = 20,
) -> Tuple[KeywordStat, ...]:
    """Top keywords (by clicks) across the query/page rows landing on the given pages."""
    urls = set(page_urls)
    totals: Dict[str, List[int]] = {}

    for row in query_page_rows:
        if not row.page_url or row.page_url not in urls:
            continue
        entry = totals.setdefault(row.dimension_key, [0, 0])
        entry[0] += row.clicks
        entry[1] += row.impressions

    keywords = [
        KeywordStat(keyword=keyword, clicks=clicks, impressions=impressions)
        for keyword, (clicks, impressions) in totals.items()
    ]
    keywords.sort(key=lambda k: k.clicks, reverse=True)
    return tuple(keywords[:limit])


def build_snapshot_directories(
    page_rows: Sequence[SnapshotRow],
    query_page_rows: Sequence[SnapshotRow],
    depth: int,
    top_keywords: int = 20,
) -> List[DirectoryAggregate]:
    """Directory aggregates with each directory's top keywords attached."""
    groups = group_by_directory(page_rows, depth)
    directories = []
    for path, members in groups.items():
        keywords = directory_keywords(
            (row.dimension_key for row in members), query_page_rows, limit=top_keywords
        )
        directories.append(_build_directory(path, members, keywords))
    directories.sort(key=lambda d: d.clicks, reverse=True)
    return directories


def keyword_similarity(first: DirectoryAggregate, second: DirectoryAggregate) -> float:
    """Jaccard similarity of the two directories' top keyword sets (case-insensitive)."""
    if not first.top_keywords or not second.top_keywords:
        return 0.0

    keywords_first = {k.keyword.lower() for k in first.top_keywords}
    keywords_second = {k.keyword.lower() for k in second.top_keywords}
    union = keywords_first | keywords_second
    return len(keywords_first & keywords_second) / len(union)


def compare_directories(
    base: Sequence[DirectoryAggregate],
    other: Sequence[DirectoryAggregate],
    min_similarity: float = 0.3,
    sort_by: str = "similarity",
) -> List[DirectoryComparison]:
    """
    Match every base directory to its most similar directory in `other`.

    Directories without a match at or above `min_similarity` are left out.
    Diffs are base minus matched directory.
    """
    if sort_by not in COMPARISON_SORTS:
        raise ValueError(f"Unknown comparison sort '{sort_by}'")

    comparisons = []
    for directory in base:
        best_match: Optional[DirectoryAggregate] = None
        best_score = 0.0

        for candidate in other:
            score = keyword_similarity(directory, candidate)
            if score >= min_similarity and score > best_score:
                best_match = candidate
                best_score = score

        if best_match is None:
            continue

        matched_keywords = {k.keyword.lower() for k in best_match.top_keywords}
        common = tuple(
            k.keyword for k in directory.top_keywords if k.keyword.lower() in matched_keywords
        )

        comparisons.append(DirectoryComparison(
            base_path=directory.path,
            compare_path=best_match.path,
            base=directory,
            compare=best_match,
            similarity=best_score,
            common_keywords=common,
            clicks_diff=directory.clicks - best_match.clicks,
            impressions_diff=directory.impressions - best_match.impressions,
            position_diff=directory.position - best_match.position,
            page_count_diff=directory.page_count - best_match.page_count,
        ))

    if sort_by == "similarity":
        comparisons.sort(key=lambda c: c.similarity, reverse=True)
    else:
        attr = f"{sort_by}_diff"
        comparisons.sort(key=lambda c: abs(getattr(c, attr)), reverse=True)

    return comparisons


def comparison_summary(comparisons: Sequence[DirectoryComparison]) -> Dict:
    matched = len(comparisons)
    avg_similarity = sum(c.similarity for c in comparisons) / matched if matched else 0.0
    return {"matched": matched, "avg_similarity": avg_similarity}


def parse_brand_terms(raw: Optional[str]) -> List[str]:
    """Split a comma-separated brand term list into lower-cased terms."""
    if not raw:
        return []
    return [t.strip().lower() for t in raw.split(",") if t.strip()]


def is_brand_query(keyword: str, brand_terms: Sequence[str]) -> bool:
    keyword_lower = keyword.lower()
    return any(term in keyword_lower for term in brand_terms)


def exclude_brand_queries(rows: Iterable[MetricRow], brand_terms: Sequence[str]) -> List[MetricRow]:
    """Drop query rows containing any brand term. No terms means nothing is dropped."""
    if not brand_terms:
        return list(rows)
    return [row for row in rows if not is_brand_query(row.dimension_key, brand_terms)]
