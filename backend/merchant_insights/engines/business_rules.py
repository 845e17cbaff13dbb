"""Compliance rules applied to normalised metrics before they leave the pipeline."""

from typing import Dict

from merchant_insights.domain.metrics import is_merchant_only
from merchant_insights.logging_config import get_logger
from merchant_insights.schemas.metrics import NormalizedMetric

logger = get_logger(__name__)


def apply_business_rules(
    metrics: Dict[str, NormalizedMetric],
) -> Dict[str, NormalizedMetric]:
    """Strip competitor data from merchant-only metrics.

    Loyalty and customer-count figures must never be shown next to a
    competition value, whatever the API returned. Returns a new mapping;
    the input is left untouched.
    """
    processed: Dict[str, NormalizedMetric] = {}
    for metric_id, metric in metrics.items():
        if metric.competitor is not None and is_merchant_only(metric_id):
            logger.info("competitor_removed", metric_id=metric_id)
            metric = metric.model_copy(update={"competitor": None})
        processed[metric_id] = metric
    return processed
