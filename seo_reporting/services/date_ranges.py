"""
Reporting date windows

Calendar presets for the workflow reports and rolling Search Console periods
with their equal-length comparison window. Everything is computed from a
`today` passed in by the caller.
"""
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Optional

from dateutil.relativedelta import relativedelta

# Search Console data lags roughly three days behind
GSC_DATA_DELAY_DAYS = 3
DEFAULT_GSC_PERIOD = "28d"
ALL_TIME_START = date(2020, 1, 1)

PRESET_LABELS = {
    "current_month": "Aktueller Monat",
    "last_month": "Letzter Monat",
    "last_quarter": "Letztes Quartal (3 Monate)",
    "last_half": "Letztes Halbjahr (6 Monate)",
    "ytd": "Laufendes Jahr (YTD)",
    "last_year": "Letztes Jahr (12 Monate)",
    "all": "Gesamter Zeitraum",
    "custom": "Benutzerdefiniert",
}

GSC_PERIODS = {
    "7d": relativedelta(days=7),
    "28d": relativedelta(days=28),
    "3m": relativedelta(months=3),
    "6m": relativedelta(months=6),
    "12m": relativedelta(years=1),
}


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    @property
    def days(self) -> int:
        """Inclusive length in days"""
        return (self.end - self.start).days + 1

    def to_dict(self) -> Dict[str, str]:
        return {"from": self.start.isoformat(), "to": self.end.isoformat()}


def _month_start(day: date, months_back: int = 0) -> date:
    return day.replace(day=1) - relativedelta(months=months_back)


def _month_end(day: date) -> date:
    return day.replace(day=1) + relativedelta(months=1) - timedelta(days=1)


def preset_range(
    preset: str,
    today: date,
    custom_from: Optional[date] = None,
    custom_to: Optional[date] = None,
) -> DateRange:
    """
    Resolve a named preset to a from/to pair.

    Multi-month presets end with the current month. "custom" uses the given
    bounds and falls back to the current month for a missing bound.
    """
    end_of_month = _month_end(today)

    if preset == "current_month":
        return DateRange(_month_start(today), end_of_month)
    if preset == "last_month":
        start = _month_start(today, 1)
        return DateRange(start, _month_end(start))
    if preset == "last_quarter":
        return DateRange(_month_start(today, 2), end_of_month)
    if preset == "last_half":
        return DateRange(_month_start(today, 5), end_of_month)
    if preset == "ytd":
        return DateRange(date(today.year, 1, 1), end_of_month)
    if preset == "last_year":
        return DateRange(_month_start(today, 11), end_of_month)
    if preset == "all":
        return DateRange(ALL_TIME_START, end_of_month)
    if preset == "custom":
        start = custom_from or _month_start(today)
        end = custom_to or end_of_month
        if start > end:
            raise ValueError(f"Custom range starts after it ends: {start} > {end}")
        return DateRange(start, end)

    raise ValueError(f"Unknown date range preset '{preset}'")


def gsc_period_range(period: str, today: date) -> DateRange:
    """
    Rolling Search Console window ending GSC_DATA_DELAY_DAYS before today.

    Month-based periods clamp to the end of a shorter month
    (May 31 minus 3 months is Feb 28/29).
    """
    end = today - timedelta(days=GSC_DATA_DELAY_DAYS)
    span = GSC_PERIODS.get(period, GSC_PERIODS[DEFAULT_GSC_PERIOD])
    return DateRange(end - span, end)


def previous_period_range(current: DateRange) -> DateRange:
    """The window of equal length ending the day before `current` starts."""
    prev_end = current.start - timedelta(days=1)
    prev_start = prev_end - (current.end - current.start)
    return DateRange(prev_start, prev_end)
