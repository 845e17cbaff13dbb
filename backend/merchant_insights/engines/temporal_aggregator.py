"""Re-bucket a daily series into weeks, months, quarters or years.

Bucket values:

* daily      – the day's value
* weekly     – mean of the days present in the Monday-to-Sunday week
* monthly    – sum (or mean, per metric policy) of the days present
* quarterly  – same as monthly, per calendar quarter
* yearly     – same as monthly, per calendar year

Weekly buckets average so that week bars stay comparable in magnitude to
daily bars. Missing days are absent from both the sum and the mean's
denominator; they are never counted as zero.
"""

from datetime import date, timedelta
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

from merchant_insights.domain.metrics import AggregationPolicy
from merchant_insights.domain.periods import (
    AVAILABILITY_THRESHOLDS,
    BUCKET_LIMITS,
    Granularity,
)
from merchant_insights.schemas.metrics import Bucket
from merchant_insights.utils.financial_math import mean

MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


# ── Bucket keys and labels ───────────────────────────────────────────────


def _daily(day: date) -> Tuple[str, str]:
    return day.isoformat(), day.strftime("%d/%m/%Y")


def _weekly(day: date) -> Tuple[str, str]:
    monday = day - timedelta(days=day.weekday())
    sunday = monday + timedelta(days=6)
    return monday.isoformat(), f"{monday:%d/%m} - {sunday:%d/%m/%Y}"


def _monthly(day: date) -> Tuple[str, str]:
    return f"{day.year:04d}-{day.month:02d}", f"{MONTH_ABBR[day.month - 1]} {day.year}"


def _quarterly(day: date) -> Tuple[str, str]:
    quarter = (day.month - 1) // 3 + 1
    return f"{day.year:04d}-Q{quarter}", f"Q{quarter} {day.year}"


def _yearly(day: date) -> Tuple[str, str]:
    return f"{day.year:04d}", str(day.year)


_BUCKETERS: Dict[Granularity, Callable[[date], Tuple[str, str]]] = {
    Granularity.DAILY: _daily,
    Granularity.WEEKLY: _weekly,
    Granularity.MONTHLY: _monthly,
    Granularity.QUARTERLY: _quarterly,
    Granularity.YEARLY: _yearly,
}


# ── Public API ───────────────────────────────────────────────────────────


def aggregate(
    series: Mapping[str, float],
    granularity: Union[Granularity, str],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    policy: AggregationPolicy = AggregationPolicy.SUM,
) -> List[Bucket]:
    """Bucket a ``{YYYY-MM-DD: value}`` series, oldest bucket first.

    Args:
        series: Daily values keyed by ISO date.
        granularity: Target bucket size.
        start_date: Inclusive lower bound applied before bucketing.
        end_date: Inclusive upper bound applied before bucketing.
        policy: How month/quarter/year buckets combine days. Weekly buckets
            always average.

    Returns:
        Buckets in ascending chronological order, truncated to the most
        recent ``BUCKET_LIMITS[granularity]``. Daily output is only
        truncated when no explicit range was given.
    """
    granularity = Granularity(granularity)
    bucketer = _BUCKETERS[granularity]

    days = _in_window(series, start_date, end_date)

    grouped: Dict[str, Tuple[str, List[float]]] = {}
    for day, value in days:
        key, label = bucketer(day)
        grouped.setdefault(key, (label, []))[1].append(value)

    use_mean = granularity is Granularity.WEEKLY or policy is AggregationPolicy.MEAN
    buckets = [
        Bucket(key=key, label=label, value=mean(values) if use_mean else sum(values))
        for key, (label, values) in sorted(grouped.items())
    ]

    explicit_range = start_date is not None and end_date is not None
    if granularity is Granularity.DAILY and explicit_range:
        return buckets
    limit = BUCKET_LIMITS[granularity]
    return buckets[-limit:]


def available_granularities(start_date: date, end_date: date) -> List[Granularity]:
    """Granularities worth offering for a selected range (daily always)."""
    days = abs((end_date - start_date).days)
    return [g for g, minimum in AVAILABILITY_THRESHOLDS.items() if days >= minimum]


def _in_window(
    series: Mapping[str, float],
    start_date: Optional[date],
    end_date: Optional[date],
) -> List[Tuple[date, float]]:
    days: List[Tuple[date, float]] = []
    for key, value in series.items():
        day = date.fromisoformat(key)
        if start_date is not None and day < start_date:
            continue
        if end_date is not None and day > end_date:
            continue
        days.append((day, value))
    days.sort()
    return days
