"""
Request sequencing for filter-driven report fetches

When filters change quickly, an older slow fetch can finish after a newer
one. LatestRequestGuard tags every request with an increasing sequence
number, cancels the superseded in-flight request and discards any response
that is no longer the latest. ScopedDebouncer coalesces bursts of calls per
key (e.g. autosave per comment field).

Both keep their state on the instance; each consumer owns its own.
"""
import asyncio
import json
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from seo_reporting.utils.logger import log

T = TypeVar("T")


def filter_signature(**filters: Any) -> str:
    """Stable string for a filter state, independent of argument order."""
    return json.dumps(filters, sort_keys=True, default=str)


class LatestRequestGuard:
    """Apply only the response of the most recently issued request."""

    def __init__(self):
        self._sequence = 0
        self._latest_signature: Optional[str] = None
        self._in_flight: Optional[asyncio.Future] = None

    @property
    def latest_signature(self) -> Optional[str]:
        return self._latest_signature

    def begin(self, signature: str) -> int:
        """Register a new request and return its sequence number."""
        self._sequence += 1
        self._latest_signature = signature
        return self._sequence

    def is_current(self, sequence: int) -> bool:
        return sequence == self._sequence

    async def run(self, signature: str, factory: Callable[[], Awaitable[T]]) -> Optional[T]:
        """
        Issue the request built by `factory` under `signature`.

        Returns the response, or None when a newer request superseded this
        one before it finished.
        """
        sequence = self.begin(signature)

        previous = self._in_flight
        if previous is not None and not previous.done():
            previous.cancel()

        task = asyncio.ensure_future(factory())
        self._in_flight = task
        try:
            result = await task
        except asyncio.CancelledError:
            if self.is_current(sequence):
                raise
            log.debug(f"Request #{sequence} cancelled, superseded by #{self._sequence}")
            return None
        finally:
            if self._in_flight is task:
                self._in_flight = None

        if not self.is_current(sequence):
            log.debug(f"Discarding stale response #{sequence} (latest #{self._sequence})")
            return None
        return result


class ScopedDebouncer:
    """Per-key debounce: scheduling a key again cancels its pending call."""

    def __init__(self):
        self._handles: Dict[str, asyncio.TimerHandle] = {}

    def schedule(self, key: str, fn: Callable[..., Any], delay_ms: int, *args: Any) -> None:
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {delay_ms}")
        self.cancel(key)
        loop = asyncio.get_running_loop()
        self._handles[key] = loop.call_later(delay_ms / 1000, self._fire, key, fn, args)

    def _fire(self, key: str, fn: Callable[..., Any], args: tuple) -> None:
        self._handles.pop(key, None)
        fn(*args)

    def pending(self, key: str) -> bool:
        return key in self._handles

    def cancel(self, key: str) -> bool:
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> None:
        for handle in self._handles.values():
            handle.cancel()
        self._handles.clear()
