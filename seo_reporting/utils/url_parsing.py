"""
URL parsing utilities for grouping Search Console pages by directory.
"""
from urllib.parse import urlparse
from typing import List, Optional


def path_segments(url: Optional[str]) -> Optional[List[str]]:
    """
    Return the non-empty path segments of an absolute URL.

    Returns None when the value is not a parsable absolute URL
    (missing scheme or host).
    """
    if not url:
        return None

    try:
        parsed = urlparse(url.strip())
    except (TypeError, ValueError):
        return None

    if not parsed.scheme or not parsed.netloc:
        return None

    return [part for part in parsed.path.split("/") if part]


def pathname(url: str) -> str:
    """Path component of a URL, or the input unchanged if it cannot be parsed."""
    segments = path_segments(url)
    if segments is None:
        return url
    return urlparse(url.strip()).path or "/"
