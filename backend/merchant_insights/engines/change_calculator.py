"""Year-over-year change between two aggregated values."""

from typing import Optional

from merchant_insights.schemas.metrics import ChangeResult
from merchant_insights.utils.financial_math import percent_change


def change(current: float, previous: Optional[float]) -> ChangeResult:
    """Build a ``ChangeResult``; no rounding is applied here.

    >>> change(5, 0).percent_change
    100.0
    >>> change(0, 0).percent_change is None
    True
    """
    return ChangeResult(
        current=current,
        previous=previous,
        percent_change=percent_change(current, previous),
    )
