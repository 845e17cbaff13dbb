"""Builds the body of an analytics query.

Every request carries the mandatory ``data_origin=own_data`` filter, the
sidebar filters, and the metric-specific filters inferred for the tab the
request is made from (explicit overrides win over inferred values).
"""

import uuid
from datetime import date
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from merchant_insights.config import Settings
from merchant_insights.domain.metric_filters import (
    DATA_ORIGIN_FILTER_ID,
    DATA_ORIGIN_OWN_DATA,
    filters_for_context,
    validate_metric_filters,
)
from merchant_insights.engines.year_alignment import previous_year_range
from merchant_insights.logging_config import get_logger
from merchant_insights.schemas.filters import (
    AnalyticsFilters,
    AnalyticsRequest,
    AnalyticsRequestHeader,
    AnalyticsRequestPayload,
    FilterValue,
)

logger = get_logger(__name__)

MetricSpecificFilters = Mapping[str, Mapping[str, str]]


def build_analytics_request(
    tab_id: Optional[str],
    metric_ids: Sequence[str],
    filters: AnalyticsFilters,
    settings: Settings,
    metric_specific_filters: Optional[MetricSpecificFilters] = None,
    metric_parameters: Optional[Dict[str, object]] = None,
    request_id: Optional[str] = None,
) -> AnalyticsRequest:
    """Assemble an ``AnalyticsRequest`` for *filters*' date window.

    Raises:
        ValueError: no user id in *filters* nor in the settings.
    """
    user_id = filters.user_id or settings.default_user_id
    if not user_id:
        raise ValueError("userID is required for analytics requests")

    provider_id = filters.provider_id or settings.analytics_provider_id
    metric_ids = list(dict.fromkeys(metric_ids))

    filter_values: List[FilterValue] = [
        FilterValue(
            provider_id=provider_id,
            filter_id=DATA_ORIGIN_FILTER_ID,
            value=DATA_ORIGIN_OWN_DATA,
        )
    ]
    filter_values.extend(
        fv for fv in filters.filter_values if fv.filter_id != DATA_ORIGIN_FILTER_ID
    )
    filter_values.extend(
        _metric_specific_filter_values(
            metric_ids, tab_id, metric_specific_filters or {}, provider_id
        )
    )

    return AnalyticsRequest(
        header=AnalyticsRequestHeader(
            id=request_id or str(uuid.uuid4()).upper(),
            application=settings.application_id,
        ),
        payload=AnalyticsRequestPayload(
            user_id=user_id,
            start_date=filters.start_date,
            end_date=filters.end_date,
            provider_id=provider_id,
            metric_ids=metric_ids,
            filter_values=filter_values,
            metric_parameters=dict(metric_parameters or {}),
            merchant_id=filters.merchant_id or settings.default_merchant_id,
        ),
    )


def shift_to_previous_year(filters: AnalyticsFilters) -> AnalyticsFilters:
    """Same filters with both dates moved back one calendar year."""
    start, end = previous_year_range(filters.start_date, filters.end_date)
    return filters.model_copy(update={"start_date": start, "end_date": end})


def parse_date_range(start: str, end: str) -> Tuple[date, date]:
    """Parse an ISO ``start``/``end`` pair; ValueError when invalid."""
    start_date = date.fromisoformat(start)
    end_date = date.fromisoformat(end)
    if end_date < start_date:
        raise ValueError(f"end date {end} is before start date {start}")
    return start_date, end_date


def _metric_specific_filter_values(
    metric_ids: Sequence[str],
    tab_id: Optional[str],
    overrides: MetricSpecificFilters,
    provider_id: str,
) -> List[FilterValue]:
    out: List[FilterValue] = []
    for metric_id in metric_ids:
        merged = dict(filters_for_context(metric_id, tab_id)) if tab_id else {}

        for filter_id, value in (overrides.get(metric_id) or {}).items():
            error = validate_metric_filters(metric_id, {filter_id: value})
            if error:
                logger.warning(
                    "metric_filter_override_dropped",
                    metric_id=metric_id,
                    filter_id=filter_id,
                    error=error,
                )
                continue
            merged[filter_id] = value

        out.extend(
            FilterValue(provider_id=provider_id, filter_id=filter_id, value=value)
            for filter_id, value in merged.items()
        )
    return out
