"""Turns a raw analytics API response into normalised metrics.

Pipeline per response::

    records --group by metric--> classify --> split entities
            --> shape normalizer --> business rules --> NormalizationResult
"""

from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from merchant_insights.domain.metrics import MetricShape, classify
from merchant_insights.engines.business_rules import apply_business_rules
from merchant_insights.engines.entity_splitter import split
from merchant_insights.engines.normalizers import normalize_record
from merchant_insights.logging_config import get_logger
from merchant_insights.schemas.metrics import (
    EntityValues,
    NormalizationResult,
    NormalizedMetric,
)
from merchant_insights.schemas.raw import AnalyticsResponse, RawMetricRecord

logger = get_logger(__name__)


class ApiNormalizer:
    """Normalise analytics API responses into ``NormalizedMetric`` objects."""

    # ── public API ───────────────────────────────────────────────────

    def normalize(
        self, response: Union[AnalyticsResponse, Mapping[str, Any], None]
    ) -> NormalizationResult:
        """Normalise every metric in *response*.

        A missing ``payload.metrics`` is zero metrics, not an error. A metric
        that cannot be normalised is skipped and reported in ``errors``.
        """
        try:
            envelope = self._envelope(response)
        except ValidationError as exc:
            logger.warning("response_envelope_invalid", error=str(exc))
            return NormalizationResult(errors=["Malformed analytics response"])

        records, errors = self._parse_records(envelope.raw_metrics)
        if not records:
            logger.info("response_without_metrics")
            return NormalizationResult(errors=errors)

        normalized: Dict[str, NormalizedMetric] = {}
        for metric_id, group in self._group_by_metric(records).items():
            try:
                normalized[metric_id] = self.normalize_metric(metric_id, group)
            except (TypeError, ValueError) as exc:
                logger.error("metric_normalization_failed", metric_id=metric_id, error=str(exc))
                errors.append(f"Error normalizing {metric_id}: {exc}")

        result = apply_business_rules(normalized)
        logger.info(
            "response_normalized",
            raw_records=len(records),
            metrics=len(result),
            errors=len(errors),
        )
        return NormalizationResult(metrics=result, errors=errors)

    def normalize_metric(
        self, metric_id: str, records: List[RawMetricRecord]
    ) -> NormalizedMetric:
        """Normalise one metric's merchant and competitor records."""
        shape = classify(metric_id)
        entities = split(records, metric_id)

        if entities.merchant is not None:
            merchant = EntityValues(current=normalize_record(entities.merchant, shape))
        else:
            # Only competition came back; the merchant still gets an empty value
            merchant = EntityValues(current=self._empty_value(shape))

        competitor: Optional[EntityValues] = None
        if entities.competitor is not None:
            competitor = EntityValues(current=normalize_record(entities.competitor, shape))

        return NormalizedMetric(
            metric_id=metric_id,
            shape=shape,
            merchant=merchant,
            competitor=competitor,
        )

    def stats(self, metrics: Mapping[str, NormalizedMetric]) -> Dict[str, int]:
        """Counts by entity coverage and by shape, for diagnostics."""
        out = {
            "total_metrics": len(metrics),
            "merchant_only_metrics": 0,
            "competitor_metrics": 0,
            "scalar_metrics": 0,
            "time_series_metrics": 0,
            "categorical_metrics": 0,
        }
        for metric in metrics.values():
            if metric.competitor is None:
                out["merchant_only_metrics"] += 1
            else:
                out["competitor_metrics"] += 1
            out[f"{metric.shape.value}_metrics"] += 1
        return out

    # ── helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _envelope(
        response: Union[AnalyticsResponse, Mapping[str, Any], None],
    ) -> AnalyticsResponse:
        if response is None:
            return AnalyticsResponse()
        if isinstance(response, AnalyticsResponse):
            return response
        return AnalyticsResponse.model_validate(response)

    @staticmethod
    def _parse_records(
        raw_metrics: List[Dict[str, Any]],
    ) -> tuple[List[RawMetricRecord], List[str]]:
        records: List[RawMetricRecord] = []
        errors: List[str] = []
        for index, raw in enumerate(raw_metrics):
            try:
                records.append(RawMetricRecord.model_validate(raw))
            except ValidationError as exc:
                logger.warning("raw_record_invalid", index=index, error=str(exc))
                errors.append(f"Invalid metric record at index {index}")
        return records, errors

    @staticmethod
    def _group_by_metric(
        records: List[RawMetricRecord],
    ) -> Dict[str, List[RawMetricRecord]]:
        grouped: Dict[str, List[RawMetricRecord]] = {}
        for record in records:
            grouped.setdefault(record.metric_id, []).append(record)
        return grouped

    @staticmethod
    def _empty_value(shape: MetricShape):
        return 0.0 if shape is MetricShape.SCALAR else {}
