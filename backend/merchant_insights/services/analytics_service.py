"""Fetches a tab's metrics for the selected window and the same window one
year earlier, and merges both into a single year-over-year result.

The two queries run concurrently. A failed current-window query fails the
whole operation; a failed previous-window query only costs the comparison
and is reported as a soft error.
"""

import asyncio
from typing import Optional, Sequence

from merchant_insights.clients.analytics_client import AnalyticsClient
from merchant_insights.config import Settings
from merchant_insights.engines.api_normalizer import ApiNormalizer
from merchant_insights.engines.year_alignment import YearAlignmentMerger
from merchant_insights.logging_config import get_logger
from merchant_insights.schemas.filters import AnalyticsFilters, AnalyticsRequest
from merchant_insights.schemas.metrics import (
    DateRange,
    MetricsResult,
    NormalizationResult,
)
from merchant_insights.services.request_builder import (
    MetricSpecificFilters,
    build_analytics_request,
    shift_to_previous_year,
)

logger = get_logger(__name__)

PREVIOUS_YEAR_UNAVAILABLE = "Previous year data unavailable: {reason}"


class AnalyticsService:
    def __init__(
        self,
        client: AnalyticsClient,
        normalizer: ApiNormalizer,
        merger: YearAlignmentMerger,
        settings: Settings,
    ):
        self.client = client
        self.normalizer = normalizer
        self.merger = merger
        self.settings = settings

    async def fetch_window(self, request: AnalyticsRequest) -> NormalizationResult:
        """Query one date window and normalise the response."""
        response = await self.client.query(request)
        return self.normalizer.normalize(response)

    async def fetch_year_over_year(
        self,
        tab_id: str,
        metric_ids: Sequence[str],
        filters: AnalyticsFilters,
        metric_specific_filters: Optional[MetricSpecificFilters] = None,
    ) -> MetricsResult:
        previous_filters = shift_to_previous_year(filters)
        current_request = build_analytics_request(
            tab_id, metric_ids, filters, self.settings, metric_specific_filters
        )
        previous_request = build_analytics_request(
            tab_id, metric_ids, previous_filters, self.settings, metric_specific_filters
        )

        logger.info(
            "year_over_year_fetch_started",
            tab_id=tab_id,
            metrics=len(current_request.payload.metric_ids),
            start_date=str(filters.start_date),
            end_date=str(filters.end_date),
        )
        current, previous = await asyncio.gather(
            self.fetch_window(current_request),
            self.fetch_window(previous_request),
            return_exceptions=True,
        )

        # Current-year data is mandatory
        if isinstance(current, BaseException):
            logger.error("current_window_failed", tab_id=tab_id, error=str(current))
            raise current

        previous_error: Optional[str] = None
        if isinstance(previous, Exception):
            logger.warning("previous_window_unavailable", tab_id=tab_id, error=str(previous))
            previous_error = PREVIOUS_YEAR_UNAVAILABLE.format(reason=previous)
            previous = None
        elif isinstance(previous, BaseException):
            raise previous

        metrics, errors = self.merger.merge(current, previous, previous_error)
        return MetricsResult(
            metrics=metrics,
            errors=errors,
            current_range=DateRange(start_date=filters.start_date, end_date=filters.end_date),
            previous_range=DateRange(
                start_date=previous_filters.start_date,
                end_date=previous_filters.end_date,
            ),
        )
