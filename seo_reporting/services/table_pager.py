"""
Sorting and pagination for report tables (keywords, backlinks, pages)
"""
import math
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar, Union

T = TypeVar("T")

SORT_DIRECTIONS = ("asc", "desc")


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Tuple[T, ...]
    page: int
    page_size: int
    total_items: int
    total_pages: int

    def to_dict(self, serialize: Optional[Callable[[T], Any]] = None) -> Dict:
        items = [serialize(item) for item in self.items] if serialize else list(self.items)
        return {
            "items": items,
            "page": self.page,
            "page_size": self.page_size,
            "total_items": self.total_items,
            "total_pages": self.total_pages,
        }


def paginate(items: Sequence[T], page: int, page_size: int) -> Page[T]:
    """
    Slice out one page (1-based).

    A page past the end is returned empty rather than clamped; the caller
    disables its "next" control using total_pages.
    """
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if page_size <= 0:
        raise ValueError(f"page_size must be > 0, got {page_size}")

    total_items = len(items)
    start = (page - 1) * page_size
    return Page(
        items=tuple(items[start:start + page_size]),
        page=page,
        page_size=page_size,
        total_items=total_items,
        total_pages=math.ceil(total_items / page_size),
    )


def _value(item: Any, key: Union[str, Callable[[Any], Any]]) -> Any:
    if callable(key):
        return key(item)
    if isinstance(item, dict):
        return item.get(key)
    return getattr(item, key, None)


def _default_sort_key(value: Any) -> Any:
    if isinstance(value, str):
        return value.casefold()
    return value


def sort_items(
    items: Sequence[T],
    key: Union[str, Callable[[T], Any]],
    direction: str = "asc",
    comparator: Optional[Callable[[Any, Any], int]] = None,
) -> List[T]:
    """
    Stable sort by a field name (or key function) in either direction.

    Items whose value is None or missing always go last, whatever the
    direction, so unranked keywords stay below ranked ones.
    """
    if direction not in SORT_DIRECTIONS:
        raise ValueError(f"direction must be 'asc' or 'desc', got '{direction}'")

    present = []
    missing = []
    for item in items:
        value = _value(item, key)
        if value is None:
            missing.append(item)
        else:
            present.append((value, item))

    if comparator is not None:
        sort_key = cmp_to_key(lambda a, b: comparator(a[0], b[0]))
    else:
        sort_key = lambda pair: _default_sort_key(pair[0])

    # sorted() keeps ties in input order, with reverse=True as well
    ordered = sorted(present, key=sort_key, reverse=direction == "desc")
    return [item for _, item in ordered] + missing
