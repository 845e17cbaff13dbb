"""Tests for re-bucketing daily series into coarser periods."""

from datetime import date, timedelta

import pytest

from merchant_insights.domain.metrics import AggregationPolicy
from merchant_insights.domain.periods import Granularity
from merchant_insights.engines.temporal_aggregator import aggregate, available_granularities


def _daily(start: date, values):
    return {(start + timedelta(days=i)).isoformat(): v for i, v in enumerate(values)}


class TestDaily:
    def test_pass_through(self):
        buckets = aggregate({"2025-04-02": 2.0, "2025-04-01": 1.0}, "daily")

        assert [(b.key, b.label, b.value) for b in buckets] == [
            ("2025-04-01", "01/04/2025", 1.0),
            ("2025-04-02", "02/04/2025", 2.0),
        ]

    def test_truncated_to_30_without_range(self):
        series = _daily(date(2025, 1, 1), range(45))

        buckets = aggregate(series, Granularity.DAILY)

        assert len(buckets) == 30
        assert buckets[0].key == "2025-01-16"
        assert buckets[-1].key == "2025-02-14"

    def test_not_truncated_with_explicit_range(self):
        series = _daily(date(2025, 1, 1), range(45))

        buckets = aggregate(series, "daily", date(2025, 1, 1), date(2025, 2, 14))

        assert len(buckets) == 45


class TestWeekly:
    def test_mean_of_present_days(self):
        # Mon 2025-04-07 .. Wed 2025-04-09 present, rest of week absent
        series = {"2025-04-07": 10.0, "2025-04-08": 20.0, "2025-04-09": 60.0}

        buckets = aggregate(series, "weekly")

        assert len(buckets) == 1
        assert buckets[0].value == pytest.approx(30.0)

    def test_weeks_start_on_monday(self):
        # Sunday 2025-04-06 and Monday 2025-04-07 fall in different weeks
        buckets = aggregate({"2025-04-06": 1.0, "2025-04-07": 3.0}, "weekly")

        assert [b.key for b in buckets] == ["2025-03-31", "2025-04-07"]

    def test_label(self):
        bucket = aggregate({"2025-04-09": 1.0}, "weekly")[0]
        assert bucket.label == "07/04 - 13/04/2025"

    def test_truncated_to_20(self):
        series = _daily(date(2024, 1, 1), [1.0] * 7 * 30)
        assert len(aggregate(series, "weekly")) == 20


class TestMonthly:
    def test_sum_of_present_days_only(self):
        series = {"2025-04-01": 10.0, "2025-04-15": 5.0, "2025-04-30": 2.5}

        buckets = aggregate(series, "monthly")

        assert len(buckets) == 1
        assert buckets[0].key == "2025-04"
        assert buckets[0].label == "Apr 2025"
        assert buckets[0].value == 17.5

    def test_mean_policy(self):
        series = {"2025-04-01": 10.0, "2025-04-02": 20.0}
        buckets = aggregate(series, "monthly", policy=AggregationPolicy.MEAN)
        assert buckets[0].value == 15.0

    def test_chronological_across_year_boundary(self):
        series = {"2025-01-05": 1.0, "2024-12-05": 2.0}
        assert [b.key for b in aggregate(series, "monthly")] == ["2024-12", "2025-01"]

    def test_truncated_to_12_most_recent(self):
        series = {f"{2024 + (i // 12)}-{i % 12 + 1:02d}-01": 1.0 for i in range(18)}

        buckets = aggregate(series, "monthly")

        assert len(buckets) == 12
        assert buckets[0].key == "2024-07"
        assert buckets[-1].key == "2025-06"


class TestQuarterlyAndYearly:
    def test_quarter_sum(self):
        series = {"2025-01-10": 1.0, "2025-03-31": 2.0, "2025-04-01": 4.0}

        buckets = aggregate(series, "quarterly")

        assert [(b.key, b.label, b.value) for b in buckets] == [
            ("2025-Q1", "Q1 2025", 3.0),
            ("2025-Q2", "Q2 2025", 4.0),
        ]

    def test_quarter_limit(self):
        series = {f"{2020 + i // 4}-{(i % 4) * 3 + 1:02d}-01": 1.0 for i in range(10)}
        assert len(aggregate(series, "quarterly")) == 8

    def test_year_sum_and_limit(self):
        series = {f"{year}-06-01": float(year) for year in range(2020, 2026)}

        buckets = aggregate(series, "yearly")

        assert [b.key for b in buckets] == ["2023", "2024", "2025"]
        assert buckets[-1].label == "2025"
        assert buckets[-1].value == 2025.0


class TestWindowing:
    def test_range_filters_before_bucketing(self):
        series = {"2025-03-31": 100.0, "2025-04-01": 1.0, "2025-04-02": 2.0, "2025-04-03": 50.0}

        buckets = aggregate(series, "monthly", date(2025, 4, 1), date(2025, 4, 2))

        assert [(b.key, b.value) for b in buckets] == [("2025-04", 3.0)]

    def test_empty_series(self):
        assert aggregate({}, "monthly") == []

    def test_unknown_granularity(self):
        with pytest.raises(ValueError):
            aggregate({"2025-04-01": 1.0}, "hourly")


class TestAvailableGranularities:
    def test_short_range_daily_only(self):
        assert available_granularities(date(2025, 4, 1), date(2025, 4, 10)) == [Granularity.DAILY]

    def test_two_weeks_adds_weekly(self):
        assert available_granularities(date(2025, 4, 1), date(2025, 4, 15)) == [
            Granularity.DAILY,
            Granularity.WEEKLY,
        ]

    def test_full_year(self):
        result = available_granularities(date(2024, 1, 1), date(2025, 1, 1))
        assert result == list(Granularity)
