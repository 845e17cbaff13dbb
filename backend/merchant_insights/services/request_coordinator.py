"""Deduplicates concurrent fetches and serves short-lived cached results.

Usage::

    coordinator = RequestCoordinator(service, ResponseCache(ttl_seconds=30))
    result = await coordinator.fetch("revenue", ["total_revenue"], filters)

Two calls with the same ``(tab, metric set, filters, overrides)`` made while
the first is still running share one underlying fetch. A caller that is
cancelled while waiting does not cancel the shared fetch; it still completes
and populates the cache.
"""

import asyncio
import json
from functools import partial
from typing import Dict, Optional, Sequence

from merchant_insights.logging_config import get_logger
from merchant_insights.schemas.filters import AnalyticsFilters
from merchant_insights.schemas.metrics import MetricsResult
from merchant_insights.services.analytics_service import AnalyticsService
from merchant_insights.services.request_builder import MetricSpecificFilters
from merchant_insights.services.response_cache import ResponseCache

logger = get_logger(__name__)


class RequestCoordinator:
    def __init__(self, service: AnalyticsService, cache: ResponseCache):
        self.service = service
        self.cache = cache
        self.filters_changed = False
        self._in_flight: Dict[str, "asyncio.Task[MetricsResult]"] = {}

    # ── filter state ─────────────────────────────────────────────────

    def mark_filters_changed(self) -> None:
        """Sidebar filters were edited; bypass the cache until applied.

        Results cached for the old filter set are dropped.
        """
        self.filters_changed = True
        self.cache.invalidate()

    def mark_filters_applied(self) -> None:
        self.filters_changed = False

    # ── fetching ─────────────────────────────────────────────────────

    @staticmethod
    def build_key(
        tab_id: str,
        metric_ids: Sequence[str],
        filters: AnalyticsFilters,
        metric_specific_filters: Optional[MetricSpecificFilters] = None,
    ) -> str:
        """Deterministic dedup/cache key.

        Metric order and filter key order do not change the key.
        """
        filters_json = json.dumps(
            filters.model_dump(mode="json", by_alias=True), sort_keys=True
        )
        overrides_json = json.dumps(
            {k: dict(v) for k, v in (metric_specific_filters or {}).items()},
            sort_keys=True,
        )
        metrics = ",".join(sorted(set(metric_ids)))
        return f"{tab_id}|{metrics}|{filters_json}|{overrides_json}"

    async def fetch(
        self,
        tab_id: str,
        metric_ids: Sequence[str],
        filters: AnalyticsFilters,
        metric_specific_filters: Optional[MetricSpecificFilters] = None,
    ) -> MetricsResult:
        """Merged year-over-year metrics for a tab.

        Errors from the current-window fetch propagate to every waiting
        caller; nothing is cached for them and the key is released so the
        next call retries.
        """
        key = self.build_key(tab_id, metric_ids, filters, metric_specific_filters)

        task = self._in_flight.get(key)
        if task is not None:
            logger.debug("request_deduplicated", tab_id=tab_id)
            return await asyncio.shield(task)

        if not self.filters_changed:
            entry = self.cache.get(key)
            if entry is not None:
                logger.debug("cache_hit", tab_id=tab_id)
                return entry.data

        task = asyncio.ensure_future(
            self._fetch_and_cache(key, tab_id, metric_ids, filters, metric_specific_filters)
        )
        self._in_flight[key] = task
        task.add_done_callback(partial(self._release, key))
        return await asyncio.shield(task)

    async def _fetch_and_cache(
        self,
        key: str,
        tab_id: str,
        metric_ids: Sequence[str],
        filters: AnalyticsFilters,
        metric_specific_filters: Optional[MetricSpecificFilters],
    ) -> MetricsResult:
        result = await self.service.fetch_year_over_year(
            tab_id, metric_ids, filters, metric_specific_filters
        )
        self.cache.put(key, result)
        logger.info(
            "tab_fetched",
            tab_id=tab_id,
            metrics=len(result.metrics),
            errors=len(result.errors),
        )
        return result

    def _release(self, key: str, task: "asyncio.Task[MetricsResult]") -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("tab_fetch_failed", key=key, error=str(exc))
