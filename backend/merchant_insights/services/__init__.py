"""Service-layer orchestration modules."""

from merchant_insights.services.analytics_service import AnalyticsService
from merchant_insights.services.request_coordinator import RequestCoordinator
from merchant_insights.services.response_cache import RequestCacheEntry, ResponseCache

__all__ = [
    "AnalyticsService",
    "RequestCacheEntry",
    "RequestCoordinator",
    "ResponseCache",
]
