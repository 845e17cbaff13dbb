"""Pydantic schemas for raw responses, requests and normalised output."""

from merchant_insights.schemas.filters import (
    AnalyticsFilters,
    AnalyticsRequest,
    FilterValue,
)
from merchant_insights.schemas.metrics import (
    AlignedPoint,
    Bucket,
    ChangeResult,
    DateRange,
    EntityValues,
    MetricsResult,
    NormalizationResult,
    NormalizedMetric,
)
from merchant_insights.schemas.raw import AnalyticsResponse, RawMetricRecord

__all__ = [
    "AlignedPoint",
    "AnalyticsFilters",
    "AnalyticsRequest",
    "AnalyticsResponse",
    "Bucket",
    "ChangeResult",
    "DateRange",
    "EntityValues",
    "FilterValue",
    "MetricsResult",
    "NormalizationResult",
    "NormalizedMetric",
    "RawMetricRecord",
]
