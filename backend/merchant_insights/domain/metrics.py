"""Domain model for analytics metrics.

This is the **single source of truth** for:
- Metric identifiers the analytics API understands
- The shape each metric arrives in (scalar, time series, categorical)
- How daily values of a time series roll up into coarser buckets
- Which metrics must never show a competitor comparison

Usage:
    from merchant_insights.domain.metrics import MetricShape, classify

    classify("revenue_per_day")  # -> MetricShape.TIME_SERIES
    classify("made_up_metric")   # -> MetricShape.SCALAR (logged)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Tuple

from merchant_insights.logging_config import get_logger

logger = get_logger(__name__)


class MetricShape(str, Enum):
    """How a metric's values are laid out in the API response."""

    SCALAR = "scalar"
    TIME_SERIES = "time_series"
    CATEGORICAL = "categorical"


class AggregationPolicy(str, Enum):
    """How daily values combine inside a month/quarter/year bucket."""

    SUM = "sum"
    MEAN = "mean"


# ══════════════════════════════════════════════════════════════════════════
# METRIC IDENTIFIERS
# ══════════════════════════════════════════════════════════════════════════

# Transaction metrics
TOTAL_REVENUE = "total_revenue"
TOTAL_TRANSACTIONS = "total_transactions"
AVG_TICKET_PER_USER = "avg_ticket_per_user"
AVG_DAILY_REVENUE = "avg_daily_revenue"

# Customer metrics
TOTAL_CUSTOMERS = "total_customers"

# Loyalty ("Go For More") metrics
GOFORMORE_AMOUNT = "goformore_amount"
REWARDED_AMOUNT = "rewarded_amount"
REWARDED_POINTS = "rewarded_points"
REDEEMED_AMOUNT = "redeemed_amount"
REDEEMED_POINTS = "redeemed_points"

# Daily series
REVENUE_PER_DAY = "revenue_per_day"
TRANSACTIONS_PER_DAY = "transactions_per_day"
CUSTOMERS_PER_DAY = "customers_per_day"

# Breakdowns
CONVERTED_CUSTOMERS_BY_GENDER = "converted_customers_by_gender"
CONVERTED_CUSTOMERS_BY_AGE = "converted_customers_by_age"
CONVERTED_CUSTOMERS_BY_INTEREST = "converted_customers_by_interest"
CONVERTED_CUSTOMERS_BY_ACTIVITY = "converted_customers_by_activity"
REVENUE_BY_CHANNEL = "revenue_by_channel"
TRANSACTIONS_BY_GEO = "transactions_by_geo"


# ══════════════════════════════════════════════════════════════════════════
# METRIC DEFINITIONS
# ══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class MetricDefinition:
    """Metadata about an analytics metric."""

    metric_id: str
    shape: MetricShape
    description: str
    unit: str = "number"  # "currency", "count", "points", "number"
    aggregation: AggregationPolicy = AggregationPolicy.SUM


def _scalar(metric_id: str, description: str, unit: str) -> MetricDefinition:
    return MetricDefinition(metric_id, MetricShape.SCALAR, description, unit)


def _series(metric_id: str, description: str, unit: str) -> MetricDefinition:
    return MetricDefinition(metric_id, MetricShape.TIME_SERIES, description, unit)


def _breakdown(metric_id: str, description: str, unit: str) -> MetricDefinition:
    return MetricDefinition(metric_id, MetricShape.CATEGORICAL, description, unit)


METRICS: Dict[str, MetricDefinition] = {
    d.metric_id: d
    for d in (
        # ── Scalars ──────────────────────────────────────────────────
        _scalar(TOTAL_REVENUE, "Revenue over the selected window", "currency"),
        _scalar(TOTAL_TRANSACTIONS, "Number of card transactions", "count"),
        _scalar(AVG_TICKET_PER_USER, "Average spend per customer", "currency"),
        _scalar(AVG_DAILY_REVENUE, "Revenue divided by days in window", "currency"),
        _scalar(TOTAL_CUSTOMERS, "Distinct paying customers", "count"),
        _scalar(GOFORMORE_AMOUNT, "Bonus-programme turnover", "currency"),
        _scalar(REWARDED_AMOUNT, "Loyalty rewards granted", "currency"),
        _scalar(REWARDED_POINTS, "Loyalty points granted", "points"),
        _scalar(REDEEMED_AMOUNT, "Loyalty rewards redeemed", "currency"),
        _scalar(REDEEMED_POINTS, "Loyalty points redeemed", "points"),
        # ── Time series (cumulative, so buckets sum) ─────────────────
        _series(REVENUE_PER_DAY, "Daily revenue", "currency"),
        _series(TRANSACTIONS_PER_DAY, "Daily transaction count", "count"),
        _series(CUSTOMERS_PER_DAY, "Daily distinct customers", "count"),
        # ── Categorical breakdowns ───────────────────────────────────
        _breakdown(CONVERTED_CUSTOMERS_BY_GENDER, "Customers by gender", "count"),
        _breakdown(CONVERTED_CUSTOMERS_BY_AGE, "Customers by age group", "count"),
        _breakdown(
            CONVERTED_CUSTOMERS_BY_INTEREST,
            "Customers or revenue by shopping interest",
            "number",
        ),
        _breakdown(
            CONVERTED_CUSTOMERS_BY_ACTIVITY, "Customers by activity segment", "count"
        ),
        _breakdown(REVENUE_BY_CHANNEL, "Revenue by sales channel", "currency"),
        _breakdown(TRANSACTIONS_BY_GEO, "Transactions by region", "count"),
    )
}


# ══════════════════════════════════════════════════════════════════════════
# BUSINESS RULES
# ══════════════════════════════════════════════════════════════════════════

# Compliance: these figures must never be displayed next to a competitor value.
LOYALTY_METRICS: FrozenSet[str] = frozenset(
    {
        GOFORMORE_AMOUNT,
        REWARDED_AMOUNT,
        REWARDED_POINTS,
        REDEEMED_AMOUNT,
        REDEEMED_POINTS,
    }
)

CUSTOMER_METRICS: FrozenSet[str] = frozenset(
    {
        CUSTOMERS_PER_DAY,
        TOTAL_CUSTOMERS,
        "new_customers",
        "returning_customers",
        "top_spenders",
        "loyal_customers",
        "at_risk_customers",
    }
)

MERCHANT_ONLY_METRICS: FrozenSet[str] = LOYALTY_METRICS | CUSTOMER_METRICS


# Metric sets requested by each dashboard tab
TAB_METRICS: Dict[str, Tuple[str, ...]] = {
    "dashboard": (
        TOTAL_REVENUE,
        TOTAL_TRANSACTIONS,
        AVG_TICKET_PER_USER,
        REVENUE_PER_DAY,
        TRANSACTIONS_PER_DAY,
        CUSTOMERS_PER_DAY,
    ),
    "revenue": (
        TOTAL_REVENUE,
        AVG_DAILY_REVENUE,
        AVG_TICKET_PER_USER,
        GOFORMORE_AMOUNT,
        REWARDED_AMOUNT,
        REDEEMED_AMOUNT,
        REVENUE_PER_DAY,
        CONVERTED_CUSTOMERS_BY_INTEREST,
        REVENUE_BY_CHANNEL,
    ),
    "demographics": (
        CONVERTED_CUSTOMERS_BY_AGE,
        CONVERTED_CUSTOMERS_BY_GENDER,
        CONVERTED_CUSTOMERS_BY_INTEREST,
    ),
    "competition": (
        TOTAL_REVENUE,
        TRANSACTIONS_PER_DAY,
        REVENUE_PER_DAY,
    ),
}


# ══════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ══════════════════════════════════════════════════════════════════════════


def classify(metric_id: str) -> MetricShape:
    """Return the shape a metric is delivered in.

    Unknown identifiers are treated as scalars and logged, never rejected.

    Examples:
        >>> classify("revenue_by_channel")
        <MetricShape.CATEGORICAL: 'categorical'>
    """
    definition = METRICS.get(metric_id)
    if definition is None:
        logger.warning("metric_classified_unknown", metric_id=metric_id, shape="scalar")
        return MetricShape.SCALAR
    return definition.shape


def aggregation_policy(metric_id: str) -> AggregationPolicy:
    """How *metric_id* rolls up into month/quarter/year buckets (SUM if unknown)."""
    definition = METRICS.get(metric_id)
    return definition.aggregation if definition else AggregationPolicy.SUM


def is_merchant_only(metric_id: str) -> bool:
    """True when competitor figures for *metric_id* must be suppressed.

    Examples:
        >>> is_merchant_only("rewarded_amount")
        True
        >>> is_merchant_only("total_revenue")
        False
    """
    return metric_id in MERCHANT_ONLY_METRICS


def get_metric_definition(metric_id: str) -> MetricDefinition | None:
    """Look up metadata for a metric, or None when it is not catalogued."""
    return METRICS.get(metric_id)
