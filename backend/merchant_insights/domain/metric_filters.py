"""Metric-specific request filters.

Some metrics change *what* the API returns depending on an extra filter,
e.g. ``converted_customers_by_interest`` returns revenue amounts or customer
counts depending on ``interest_type``. The right value is inferred from the
tab the request is made for; callers may override it explicitly.

Usage:
    from merchant_insights.domain.metric_filters import filters_for_context

    filters_for_context("converted_customers_by_interest", "demographics")
    # -> {"interest_type": "customers"}
"""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

# Filter sent with every request
DATA_ORIGIN_FILTER_ID = "data_origin"
DATA_ORIGIN_OWN_DATA = "own_data"


@dataclass(frozen=True)
class MetricFilterRule:
    """One filter a metric requires, with its per-context defaults."""

    filter_id: str
    default: str
    options: Tuple[str, ...]
    contexts: Dict[str, str] = field(default_factory=dict)


METRIC_SPECIFIC_FILTERS: Dict[str, Tuple[MetricFilterRule, ...]] = {
    "converted_customers_by_interest": (
        MetricFilterRule(
            filter_id="interest_type",
            default="revenue",
            options=("revenue", "customers"),
            contexts={"revenue": "revenue", "demographics": "customers"},
        ),
    ),
}


def filters_for_context(metric_id: str, context: Optional[str]) -> Dict[str, str]:
    """Return ``{filter_id: value}`` inferred for *metric_id* on tab *context*."""
    rules = METRIC_SPECIFIC_FILTERS.get(metric_id, ())
    return {
        rule.filter_id: rule.contexts.get(context or "", rule.default)
        for rule in rules
    }


def validate_metric_filters(
    metric_id: str, filters: Mapping[str, str]
) -> Optional[str]:
    """Return an error message when a filter value is not allowed, else None."""
    rules = {r.filter_id: r for r in METRIC_SPECIFIC_FILTERS.get(metric_id, ())}
    for filter_id, value in filters.items():
        rule = rules.get(filter_id)
        if rule and value not in rule.options:
            return (
                f"Invalid value '{value}' for {filter_id}. "
                f"Valid options: {', '.join(rule.options)}"
            )
    return None
