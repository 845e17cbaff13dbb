"""Tests for previous-year date arithmetic and the year-over-year merge."""

from datetime import date

import pytest

from merchant_insights.domain.metrics import MetricShape
from merchant_insights.engines.year_alignment import (
    YearAlignmentMerger,
    align_series,
    previous_value_for,
    previous_year_date,
    previous_year_range,
)
from merchant_insights.schemas.metrics import (
    EntityValues,
    NormalizationResult,
    NormalizedMetric,
)


def _scalar(metric_id, merchant, competitor=None):
    return NormalizedMetric(
        metric_id=metric_id,
        shape=MetricShape.SCALAR,
        merchant=EntityValues(current=merchant),
        competitor=EntityValues(current=competitor) if competitor is not None else None,
    )


# ── date arithmetic ──────────────────────────────────────────────────────

class TestPreviousYearDate:
    def test_ordinary_day(self):
        assert previous_year_date(date(2025, 4, 15)) == date(2024, 4, 15)

    def test_leap_day_aligns_to_feb_28(self):
        assert previous_year_date(date(2024, 2, 29)) == date(2023, 2, 28)

    def test_feb_28_in_leap_year_stays_feb_28(self):
        assert previous_year_date(date(2024, 2, 28)) == date(2023, 2, 28)

    def test_range(self):
        assert previous_year_range(date(2025, 1, 1), date(2025, 3, 31)) == (
            date(2024, 1, 1),
            date(2024, 3, 31),
        )

    def test_range_ending_on_leap_day(self):
        assert previous_year_range(date(2024, 2, 1), date(2024, 2, 29)) == (
            date(2023, 2, 1),
            date(2023, 2, 28),
        )


class TestAlignSeries:
    def test_pairs_same_calendar_day(self):
        points = align_series(
            {"2025-04-01": 10.0, "2025-04-02": 12.0},
            {"2024-04-01": 8.0, "2024-04-02": 6.0},
        )

        assert [(p.day, p.current, p.previous) for p in points] == [
            ("2025-04-01", 10.0, 8.0),
            ("2025-04-02", 12.0, 6.0),
        ]

    def test_missing_previous_day_is_none(self):
        points = align_series({"2025-04-01": 10.0}, {"2024-03-31": 1.0})
        assert points[0].previous is None

    def test_no_previous_series(self):
        points = align_series({"2025-04-01": 10.0}, None)
        assert points[0].previous is None

    def test_leap_day_finds_feb_28(self):
        assert previous_value_for("2024-02-29", {"2023-02-28": 5.0}) == 5.0

    def test_sorted_by_day(self):
        points = align_series({"2025-04-02": 1.0, "2025-04-01": 2.0}, {})
        assert [p.day for p in points] == ["2025-04-01", "2025-04-02"]


# ── merge ────────────────────────────────────────────────────────────────

class TestYearAlignmentMerger:
    @pytest.fixture()
    def merger(self):
        return YearAlignmentMerger()

    def test_previous_filled_from_second_window(self, merger):
        current = NormalizationResult(metrics={"total_revenue": _scalar("total_revenue", 1234.5, 2000.0)})
        previous = NormalizationResult(metrics={"total_revenue": _scalar("total_revenue", 1000.0, 1600.0)})

        metrics, errors = merger.merge(current, previous)

        revenue = metrics["total_revenue"]
        assert revenue.merchant.current == 1234.5
        assert revenue.merchant.previous == 1000.0
        assert revenue.competitor.current == 2000.0
        assert revenue.competitor.previous == 1600.0
        assert errors == []

    def test_metric_missing_from_previous_window(self, merger):
        current = NormalizationResult(metrics={"total_revenue": _scalar("total_revenue", 5.0)})

        metrics, _ = merger.merge(current, NormalizationResult())

        assert metrics["total_revenue"].merchant.previous is None

    def test_previous_only_metrics_dropped(self, merger):
        current = NormalizationResult(metrics={"total_revenue": _scalar("total_revenue", 5.0)})
        previous = NormalizationResult(metrics={"total_transactions": _scalar("total_transactions", 3.0)})

        metrics, _ = merger.merge(current, previous)

        assert set(metrics) == {"total_revenue"}

    def test_competitor_only_in_previous_window_not_added(self, merger):
        current = NormalizationResult(metrics={"total_revenue": _scalar("total_revenue", 5.0)})
        previous = NormalizationResult(metrics={"total_revenue": _scalar("total_revenue", 4.0, 9.0)})

        metrics, _ = merger.merge(current, previous)

        assert metrics["total_revenue"].competitor is None

    def test_previous_window_failure_keeps_current_data(self, merger):
        current = NormalizationResult(metrics={"total_revenue": _scalar("total_revenue", 5.0, 6.0)})

        metrics, errors = merger.merge(
            current, None, "Previous year data unavailable: timeout"
        )

        assert metrics["total_revenue"].merchant.current == 5.0
        assert metrics["total_revenue"].merchant.previous is None
        assert metrics["total_revenue"].competitor.previous is None
        assert errors == ["Previous year data unavailable: timeout"]

    def test_errors_from_both_windows_collected(self, merger):
        current = NormalizationResult(errors=["Invalid metric record at index 2"])
        previous = NormalizationResult(errors=["Error normalizing x: bad"])

        _, errors = merger.merge(current, previous)

        assert errors == ["Invalid metric record at index 2", "Error normalizing x: bad"]

    def test_inputs_not_mutated(self, merger):
        metric = _scalar("total_revenue", 5.0)
        current = NormalizationResult(metrics={"total_revenue": metric})

        merger.merge(current, NormalizationResult(metrics={"total_revenue": _scalar("total_revenue", 1.0)}))

        assert metric.merchant.previous is None

    def test_time_series_previous_is_whole_map(self, merger):
        series = NormalizedMetric(
            metric_id="revenue_per_day",
            shape=MetricShape.TIME_SERIES,
            merchant=EntityValues(current={"2025-04-01": 1.0}),
        )
        old = NormalizedMetric(
            metric_id="revenue_per_day",
            shape=MetricShape.TIME_SERIES,
            merchant=EntityValues(current={"2024-04-01": 2.0}),
        )

        metrics, _ = merger.merge(
            NormalizationResult(metrics={"revenue_per_day": series}),
            NormalizationResult(metrics={"revenue_per_day": old}),
        )

        assert metrics["revenue_per_day"].merchant.previous == {"2024-04-01": 2.0}
