"""Analytics facade: single entry point for callers of the pipeline.

The CLI and any rendering layer should use this instead of wiring clients
and services directly. Fetching is async; bucketing and change calculation
are synchronous and run on demand against an already-fetched result.

Usage::

    facade = AnalyticsFacade()          # uses Settings() from .env
    result = await facade.fetch_tab("revenue", {"startDate": "2025-04-01",
                                                "endDate": "2025-04-30",
                                                "userID": "E12345"})
    buckets = facade.buckets(result.get("revenue_per_day"), "weekly")
    card = facade.metric_card(result.get("total_revenue"))
    await facade.close()
"""

from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import httpx
from dependency_injector import providers

from merchant_insights.config import Settings
from merchant_insights.container import AppContainer
from merchant_insights.domain.metrics import TAB_METRICS, MetricShape, aggregation_policy
from merchant_insights.domain.periods import Granularity
from merchant_insights.engines.change_calculator import change
from merchant_insights.engines.temporal_aggregator import aggregate, available_granularities
from merchant_insights.engines.year_alignment import align_series
from merchant_insights.logging_config import get_logger
from merchant_insights.schemas.filters import AnalyticsFilters
from merchant_insights.schemas.metrics import (
    AlignedPoint,
    Bucket,
    ChangeResult,
    EntityValues,
    MetricsResult,
    NormalizedMetric,
)

logger = get_logger(__name__)

ENTITIES = ("merchant", "competitor")


class AnalyticsFacade:
    """High-level API for the merchant analytics pipeline.

    Hides the container, the client and the coordinator. Returns only
    pydantic schemas and plain dicts.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._container = AppContainer()
        if settings is not None:
            self._container.settings.override(providers.Object(settings))
        if transport is not None:
            self._container.transport.override(providers.Object(transport))
        self._settings = self._container.settings()
        self._coordinator = self._container.request_coordinator()
        self._normalizer = self._container.api_normalizer()

    # ══════════════════════════════════════════════════════════════════
    # FETCHING
    # ══════════════════════════════════════════════════════════════════

    async def fetch_tab(
        self,
        tab_id: str,
        filters: Union[AnalyticsFilters, Mapping[str, Any]],
        metric_ids: Optional[Sequence[str]] = None,
        metric_specific_filters: Optional[Mapping[str, Mapping[str, str]]] = None,
    ) -> MetricsResult:
        """Year-over-year metrics for a tab.

        ``metric_ids`` defaults to the tab's preset list. Raises
        ``AnalyticsAPIError`` when the current window cannot be fetched.
        """
        if not isinstance(filters, AnalyticsFilters):
            filters = AnalyticsFilters.model_validate(filters)
        if metric_ids is None:
            if tab_id not in TAB_METRICS:
                raise ValueError(f"Unknown tab {tab_id!r} and no metric ids given")
            metric_ids = TAB_METRICS[tab_id]
        return await self._coordinator.fetch(
            tab_id, metric_ids, filters, metric_specific_filters
        )

    def mark_filters_changed(self) -> None:
        self._coordinator.mark_filters_changed()

    def mark_filters_applied(self) -> None:
        self._coordinator.mark_filters_applied()

    # ══════════════════════════════════════════════════════════════════
    # ON-DEMAND VIEWS
    # ══════════════════════════════════════════════════════════════════

    def buckets(
        self,
        metric: NormalizedMetric,
        granularity: Union[Granularity, str],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        entity: str = "merchant",
    ) -> List[Bucket]:
        """Current-window buckets of a time-series metric."""
        values = self._entity(metric, entity)
        if values is None:
            return []
        return aggregate(
            self._series(metric, values.current),
            granularity,
            start_date,
            end_date,
            aggregation_policy(metric.metric_id),
        )

    def timeline(self, metric: NormalizedMetric, entity: str = "merchant") -> List[AlignedPoint]:
        """Daily points of a time-series metric paired with last year's value."""
        values = self._entity(metric, entity)
        if values is None:
            return []
        previous = self._series(metric, values.previous) if values.previous is not None else None
        return align_series(self._series(metric, values.current), previous)

    def compare(
        self,
        metric: NormalizedMetric,
        granularity: Union[Granularity, str],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        entity: str = "merchant",
    ) -> List[Dict[str, Any]]:
        """Per-bucket current vs previous-year values with their change.

        Previous-year days are aligned onto current-window dates first, so
        both sides bucket identically.
        """
        values = self._entity(metric, entity)
        points = self.timeline(metric, entity)
        if not points:
            return []
        policy = aggregation_policy(metric.metric_id)
        current = {p.day: p.current for p in points}
        previous = {p.day: p.previous for p in points if p.previous is not None}

        current_buckets = aggregate(current, granularity, start_date, end_date, policy)
        previous_by_key = {
            b.key: b.value
            for b in aggregate(previous, granularity, start_date, end_date, policy)
        }
        has_previous = values is not None and values.previous is not None

        rows = []
        for bucket in current_buckets:
            prev = previous_by_key.get(bucket.key) if has_previous else None
            result = change(bucket.value, prev)
            rows.append({
                "key": bucket.key,
                "label": bucket.label,
                "current": result.current,
                "previous": result.previous,
                "percent_change": result.percent_change,
            })
        return rows

    def metric_card(self, metric: NormalizedMetric) -> Dict[str, Optional[ChangeResult]]:
        """Merchant and competitor changes for a scalar metric."""
        if metric.shape is not MetricShape.SCALAR:
            raise ValueError(f"{metric.metric_id} is not a scalar metric")
        card: Dict[str, Optional[ChangeResult]] = {}
        for entity in ENTITIES:
            values = self._entity(metric, entity)
            card[entity] = change(values.current, values.previous) if values else None
        return card

    def granularities(self, start_date: date, end_date: date) -> List[Granularity]:
        return available_granularities(start_date, end_date)

    def stats(self, result: MetricsResult) -> Dict[str, int]:
        return self._normalizer.stats(result.metrics)

    # ── helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _entity(metric: NormalizedMetric, entity: str) -> Optional[EntityValues]:
        if entity not in ENTITIES:
            raise ValueError(f"entity must be one of {ENTITIES}, got {entity!r}")
        return metric.merchant if entity == "merchant" else metric.competitor

    @staticmethod
    def _series(metric: NormalizedMetric, value: Any) -> Dict[str, float]:
        if metric.shape is not MetricShape.TIME_SERIES or not isinstance(value, dict):
            raise ValueError(f"{metric.metric_id} is not a time-series metric")
        return value

    # ── lifecycle ────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._container.analytics_client().close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()
