"""Bucket granularities and the limits that apply to each of them."""

from enum import Enum
from typing import Dict


class Granularity(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


# Most recent buckets kept per granularity. Daily is only truncated when
# the caller gave no explicit date range.
BUCKET_LIMITS: Dict[Granularity, int] = {
    Granularity.DAILY: 30,
    Granularity.WEEKLY: 20,
    Granularity.MONTHLY: 12,
    Granularity.QUARTERLY: 8,
    Granularity.YEARLY: 3,
}

# Minimum selected days before a granularity is offered.
AVAILABILITY_THRESHOLDS: Dict[Granularity, int] = {
    Granularity.DAILY: 0,
    Granularity.WEEKLY: 14,
    Granularity.MONTHLY: 30,
    Granularity.QUARTERLY: 90,
    Granularity.YEARLY: 365,
}
