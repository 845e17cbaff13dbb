"""Pure transformation engines: normalisation, alignment, aggregation."""

from merchant_insights.engines.api_normalizer import ApiNormalizer
from merchant_insights.engines.change_calculator import change
from merchant_insights.engines.temporal_aggregator import aggregate, available_granularities
from merchant_insights.engines.year_alignment import YearAlignmentMerger, align_series

__all__ = [
    "ApiNormalizer",
    "YearAlignmentMerger",
    "aggregate",
    "align_series",
    "available_granularities",
    "change",
]
