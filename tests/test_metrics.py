"""
Tests for metric aggregation and period deltas.

Guards against:
  - CTR averaged per row instead of recomputed from summed clicks/impressions
  - Division by zero on empty groups or zero impressions
  - Delta sign flipped (must be current - previous)
  - Percent change blowing up when the previous period is zero
"""
import random

import pytest

from seo_reporting.models.search_console import MetricRow
from seo_reporting.services.metrics import (
    EMPTY_TOTALS,
    PeriodTotals,
    aggregate,
    delta,
    percent_change,
    period_changes,
)


def _row(clicks, impressions, position, key="k"):
    return MetricRow(dimension_key=key, clicks=clicks, impressions=impressions, ctr=0, position=position)


class TestAggregate:

    def test_sums_and_derived_metrics(self):
        totals = aggregate([_row(10, 100, 5.0), _row(5, 50, 8.0)])
        assert totals.clicks == 15
        assert totals.impressions == 150
        assert totals.ctr == pytest.approx(0.1)
        assert totals.position == pytest.approx(6.5)
        assert totals.count == 2

    def test_empty_input_is_all_zero(self):
        assert aggregate([]) == EMPTY_TOTALS
        assert aggregate([]).ctr == 0.0

    def test_zero_impressions_gives_zero_ctr(self):
        assert aggregate([_row(0, 0, 0.0)]).ctr == 0.0

    def test_impression_weighted_ctr(self):
        """One high-CTR low-volume row must not dominate."""
        totals = aggregate([_row(1, 1, 1.0), _row(1, 99, 1.0)])
        assert totals.ctr == pytest.approx(0.02)

    def test_order_independent(self):
        rows = [_row(i, i * 7 + 1, (i % 13) + 0.1) for i in range(200)]
        shuffled = rows[:]
        random.Random(42).shuffle(shuffled)
        assert aggregate(rows) == aggregate(shuffled)

    def test_accepts_generators(self):
        totals = aggregate(_row(1, 10, 2.0) for _ in range(3))
        assert totals.clicks == 3
        assert totals.count == 3


# ---------------------------------------------------------------------------
# Deltas
# ---------------------------------------------------------------------------


def _totals(clicks, impressions, ctr, position):
    return PeriodTotals(clicks=clicks, impressions=impressions, ctr=ctr, position=position)


def test_delta_is_current_minus_previous():
    current = _totals(120, 1000, 0.12, 4.0)
    previous = _totals(100, 1200, 0.0833, 6.0)

    d = delta(current, previous)

    assert d.clicks == 20
    assert d.impressions == -200
    assert d.ctr == pytest.approx(0.0367)
    # Position went from 6 to 4: negative delta is an improvement
    assert d.position == pytest.approx(-2.0)


def test_delta_of_identical_periods_is_zero():
    totals = _totals(5, 50, 0.1, 3.0)
    assert delta(totals, totals).to_dict() == {"clicks": 0, "impressions": 0, "ctr": 0.0, "position": 0.0}


@pytest.mark.parametrize("current, previous, expected", [
    (125, 100, 0.25),
    (50, 100, -0.5),
    (100, 100, 0.0),
    (0, 100, -1.0),
    (0, 0, 0.0),
])
def test_percent_change(current, previous, expected):
    assert percent_change(current, previous) == pytest.approx(expected)


def test_percent_change_from_zero_has_no_ratio():
    assert percent_change(10, 0) is None


def test_period_changes_per_metric():
    changes = period_changes(_totals(110, 0, 0.05, 3.0), _totals(100, 0, 0.04, 4.0))
    assert changes["clicks"] == pytest.approx(0.1)
    assert changes["impressions"] == 0.0
    assert changes["ctr"] == pytest.approx(0.25)
    assert changes["position"] == pytest.approx(-0.25)


def test_period_totals_drop_count():
    totals = aggregate([_row(1, 10, 2.0)]).period_totals()
    assert totals.to_dict() == {"clicks": 1, "impressions": 10, "ctr": 0.1, "position": 2.0}
