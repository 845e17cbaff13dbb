"""Year-over-year alignment.

The previous window is the requested ``[start, end]`` shifted back exactly
one calendar year. February 29 has no counterpart in a non-leap year and is
aligned to February 28.
"""

from datetime import date
from typing import Dict, List, Mapping, Optional, Tuple

from merchant_insights.logging_config import get_logger
from merchant_insights.schemas.metrics import (
    AlignedPoint,
    EntityValues,
    NormalizationResult,
    NormalizedMetric,
)

logger = get_logger(__name__)


def previous_year_date(day: date) -> date:
    """Same month and day one year earlier; Feb 29 maps to Feb 28.

    >>> previous_year_date(date(2024, 2, 29))
    datetime.date(2023, 2, 28)
    """
    try:
        return day.replace(year=day.year - 1)
    except ValueError:
        return day.replace(year=day.year - 1, day=28)


def previous_year_range(start: date, end: date) -> Tuple[date, date]:
    """The ``[start, end]`` window shifted back one year."""
    return previous_year_date(start), previous_year_date(end)


def previous_value_for(
    date_key: str, previous_series: Mapping[str, float]
) -> Optional[float]:
    """Value recorded one year before *date_key*, or None if absent."""
    return previous_series.get(
        previous_year_date(date.fromisoformat(date_key)).isoformat()
    )


def align_series(
    current_series: Mapping[str, float],
    previous_series: Optional[Mapping[str, float]],
) -> List[AlignedPoint]:
    """Pair each current-window day with the same day one year earlier."""
    previous_series = previous_series or {}
    return [
        AlignedPoint(
            day=key,
            current=value,
            previous=previous_value_for(key, previous_series),
        )
        for key, value in sorted(current_series.items())
    ]


class YearAlignmentMerger:
    """Merge a current-window and a previous-window normalisation."""

    def merge(
        self,
        current: NormalizationResult,
        previous: Optional[NormalizationResult],
        previous_error: Optional[str] = None,
    ) -> Tuple[Dict[str, NormalizedMetric], List[str]]:
        """Attach previous-year values to every current-window metric.

        ``previous`` may be None when the previous-window fetch failed; the
        current metrics are then returned unchanged (``previous`` unset) and
        *previous_error* is reported as a soft error. Metrics present only in
        the previous window are dropped.
        """
        errors = list(current.errors)
        previous_metrics: Mapping[str, NormalizedMetric] = {}
        if previous is None:
            if previous_error:
                errors.append(previous_error)
        else:
            errors.extend(previous.errors)
            previous_metrics = previous.metrics

        merged: Dict[str, NormalizedMetric] = {}
        for metric_id, metric in current.metrics.items():
            merged[metric_id] = self._merge_metric(metric, previous_metrics.get(metric_id))

        logger.info(
            "year_over_year_merged",
            current_metrics=len(current.metrics),
            previous_metrics=len(previous_metrics),
            merged_metrics=len(merged),
            errors=len(errors),
        )
        return merged, errors

    @staticmethod
    def _merge_metric(
        metric: NormalizedMetric, previous: Optional[NormalizedMetric]
    ) -> NormalizedMetric:
        merchant = EntityValues(
            current=metric.merchant.current,
            previous=previous.merchant.current if previous else None,
        )
        competitor = None
        if metric.competitor is not None:
            competitor = EntityValues(
                current=metric.competitor.current,
                previous=(
                    previous.competitor.current
                    if previous and previous.competitor is not None
                    else None
                ),
            )
        return metric.model_copy(update={"merchant": merchant, "competitor": competitor})
