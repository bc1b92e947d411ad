"""
Tests for request sequencing and per-key debouncing.

Guards against:
  - A slow, older report fetch overwriting the result of a newer one
  - Debounced saves for one field cancelling saves for another field
"""
import asyncio

import pytest

from seo_reporting.services.request_guard import LatestRequestGuard, ScopedDebouncer, filter_signature


def test_filter_signature_ignores_argument_order():
    assert filter_signature(category="Pension", days=90) == filter_signature(days=90, category="Pension")
    assert filter_signature(category="Pension") != filter_signature(category="Investing")


def test_single_request_returns_result():
    async def scenario():
        guard = LatestRequestGuard()

        async def fetch():
            return {"rows": 3}

        return await guard.run("a", fetch)

    assert asyncio.run(scenario()) == {"rows": 3}


def test_newer_request_supersedes_slow_older_one():
    async def scenario():
        guard = LatestRequestGuard()
        started = asyncio.Event()

        async def slow():
            started.set()
            await asyncio.sleep(10)
            return "old"

        async def fast():
            return "new"

        old = asyncio.ensure_future(guard.run(filter_signature(category="A"), slow))
        await started.wait()
        new = await guard.run(filter_signature(category="B"), fast)
        return await old, new, guard.latest_signature

    old, new, latest = asyncio.run(scenario())
    assert old is None
    assert new == "new"
    assert latest == filter_signature(category="B")


def test_stale_response_is_discarded():
    """A response that completes after a newer request was issued is dropped."""
    async def scenario():
        guard = LatestRequestGuard()
        release = asyncio.Event()

        async def first():
            await release.wait()
            return "first"

        pending = asyncio.ensure_future(guard.run("first", first))
        await asyncio.sleep(0)
        sequence = guard.begin("second")
        release.set()
        return await pending, guard.is_current(sequence)

    result, current = asyncio.run(scenario())
    assert result is None
    assert current is True


def test_errors_of_current_request_propagate():
    async def scenario():
        guard = LatestRequestGuard()

        async def failing():
            raise RuntimeError("upstream down")

        await guard.run("a", failing)

    with pytest.raises(RuntimeError):
        asyncio.run(scenario())


# ---------------------------------------------------------------------------
# ScopedDebouncer
# ---------------------------------------------------------------------------


def test_debouncer_coalesces_per_key():
    calls = []

    async def scenario():
        debouncer = ScopedDebouncer()
        debouncer.schedule("comment-1", calls.append, 20, "v1")
        debouncer.schedule("comment-1", calls.append, 20, "v2")
        debouncer.schedule("comment-2", calls.append, 20, "other")
        assert debouncer.pending("comment-1")
        await asyncio.sleep(0.1)
        assert not debouncer.pending("comment-1")

    asyncio.run(scenario())
    assert sorted(calls) == ["other", "v2"]


def test_debouncer_cancel():
    calls = []

    async def scenario():
        debouncer = ScopedDebouncer()
        debouncer.schedule("a", calls.append, 20, "a")
        debouncer.schedule("b", calls.append, 20, "b")
        assert debouncer.cancel("a")
        assert not debouncer.cancel("missing")
        debouncer.cancel_all()
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert calls == []


def test_debouncer_rejects_negative_delay():
    async def scenario():
        ScopedDebouncer().schedule("a", print, -1)

    with pytest.raises(ValueError):
        asyncio.run(scenario())


def test_debouncer_instances_are_independent():
    calls = []

    async def scenario():
        first, second = ScopedDebouncer(), ScopedDebouncer()
        first.schedule("field", calls.append, 10, "first")
        second.schedule("field", calls.append, 10, "second")
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert sorted(calls) == ["first", "second"]
