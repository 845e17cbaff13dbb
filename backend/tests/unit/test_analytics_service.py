"""Tests for the concurrent current/previous-window fetch and merge."""

import asyncio
from datetime import date

import pytest

from merchant_insights.clients.base_client import AnalyticsAPIError
from merchant_insights.engines.api_normalizer import ApiNormalizer
from merchant_insights.engines.year_alignment import YearAlignmentMerger
from merchant_insights.services.analytics_service import AnalyticsService
from tests.fakes import FakeAnalyticsClient


def _service(client, settings):
    return AnalyticsService(client, ApiNormalizer(), YearAlignmentMerger(), settings)


class TestFetchYearOverYear:
    def test_merges_both_windows(self, fake_client, settings, april_filters):
        result = asyncio.run(
            _service(fake_client, settings).fetch_year_over_year(
                "revenue", ["total_revenue", "revenue_per_day"], april_filters
            )
        )

        revenue = result.get("total_revenue")
        assert revenue.merchant.current == 1234.5
        assert revenue.merchant.previous == 1000.0
        assert revenue.competitor.previous == 1600.0
        assert result.errors == []

    def test_issues_two_requests_with_shifted_window(self, fake_client, settings, april_filters):
        asyncio.run(
            _service(fake_client, settings).fetch_year_over_year(
                "revenue", ["total_revenue"], april_filters
            )
        )

        windows = sorted(
            (r.payload.start_date, r.payload.end_date) for r in fake_client.requests
        )
        assert windows == [
            (date(2024, 4, 1), date(2024, 4, 10)),
            (date(2025, 4, 1), date(2025, 4, 10)),
        ]

    def test_ranges_reported(self, fake_client, settings, april_filters):
        result = asyncio.run(
            _service(fake_client, settings).fetch_year_over_year(
                "revenue", ["total_revenue"], april_filters
            )
        )

        assert result.current_range.start_date == date(2025, 4, 1)
        assert result.previous_range.end_date == date(2024, 4, 10)

    def test_previous_window_failure_is_soft(self, current_response, settings, april_filters):
        client = FakeAnalyticsClient(
            {2025: current_response, 2024: AnalyticsAPIError("Analytics API returned 503", 503)}
        )

        result = asyncio.run(
            _service(client, settings).fetch_year_over_year("revenue", ["total_revenue"], april_filters)
        )

        assert result.get("total_revenue").merchant.current == 1234.5
        assert result.get("total_revenue").merchant.previous is None
        assert result.errors == [
            "Previous year data unavailable: Analytics API returned 503"
        ]

    def test_current_window_failure_raises(self, previous_response, settings, april_filters):
        client = FakeAnalyticsClient(
            {2025: AnalyticsAPIError("Analytics API unreachable: timeout"), 2024: previous_response}
        )

        with pytest.raises(AnalyticsAPIError, match="unreachable"):
            asyncio.run(
                _service(client, settings).fetch_year_over_year(
                    "revenue", ["total_revenue"], april_filters
                )
            )

    def test_windows_fetched_concurrently(self, settings, april_filters, current_response, previous_response):
        started = []

        class SlowClient(FakeAnalyticsClient):
            async def query(self, request):
                started.append(request.payload.start_date.year)
                # Both queries must have started before either finishes
                while len(started) < 2:
                    await asyncio.sleep(0)
                return await super().query(request)

        client = SlowClient({2025: current_response, 2024: previous_response})

        asyncio.run(
            asyncio.wait_for(
                _service(client, settings).fetch_year_over_year("revenue", ["total_revenue"], april_filters),
                timeout=5,
            )
        )

        assert sorted(started) == [2024, 2025]

    def test_missing_user_raises_before_any_request(self, fake_client, settings, april_filters):
        settings.default_user_id = ""
        filters = april_filters.model_copy(update={"user_id": None})

        with pytest.raises(ValueError):
            asyncio.run(
                _service(fake_client, settings).fetch_year_over_year(
                    "revenue", ["total_revenue"], filters
                )
            )

        assert fake_client.requests == []
