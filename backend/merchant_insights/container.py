"""Dependency Injection Container.

Centralized definition of the pipeline's dependencies using
dependency-injector.

Usage::

    from merchant_insights.container import AppContainer

    container = AppContainer()
    coordinator = container.request_coordinator()
    result = await coordinator.fetch("revenue", ["total_revenue"], filters)

Tests override the settings or the HTTP transport::

    container.settings.override(providers.Object(Settings(default_user_id="u1")))
    container.transport.override(providers.Object(httpx.MockTransport(handler)))
"""

from dependency_injector import containers, providers

from merchant_insights.clients.analytics_client import AnalyticsClient
from merchant_insights.config import Settings
from merchant_insights.engines.api_normalizer import ApiNormalizer
from merchant_insights.engines.year_alignment import YearAlignmentMerger
from merchant_insights.services.analytics_service import AnalyticsService
from merchant_insights.services.request_coordinator import RequestCoordinator
from merchant_insights.services.response_cache import ResponseCache


class AppContainer(containers.DeclarativeContainer):
    """Application Dependency Injection Container.

    - Configuration (Settings)
    - Clients (analytics API)
    - Engines (normalisation, year alignment)
    - Services (year-over-year fetch, cache, coordinator)

    The cache and the coordinator are singletons: one in-flight map and one
    cache per container.
    """

    # ══════════════════════════════════════════════════════════════════
    # CONFIGURATION
    # ══════════════════════════════════════════════════════════════════

    settings = providers.Singleton(Settings)

    # None means httpx's default network transport
    transport = providers.Object(None)

    # ══════════════════════════════════════════════════════════════════
    # EXTERNAL CLIENTS (Infrastructure)
    # ══════════════════════════════════════════════════════════════════

    analytics_client = providers.Singleton(
        AnalyticsClient,
        base_url=settings.provided.analytics_base_url,
        query_path=settings.provided.analytics_query_path,
        timeout=settings.provided.request_timeout,
        retry_max_attempts=settings.provided.retry_max_attempts,
        retry_initial_delay=settings.provided.retry_initial_delay,
        transport=transport,
    )

    # ══════════════════════════════════════════════════════════════════
    # ENGINES (Business Logic Layer)
    # ══════════════════════════════════════════════════════════════════

    api_normalizer = providers.Factory(ApiNormalizer)

    year_alignment_merger = providers.Factory(YearAlignmentMerger)

    # ══════════════════════════════════════════════════════════════════
    # SERVICES (Orchestration Layer)
    # ══════════════════════════════════════════════════════════════════

    analytics_service = providers.Factory(
        AnalyticsService,
        client=analytics_client,
        normalizer=api_normalizer,
        merger=year_alignment_merger,
        settings=settings,
    )

    response_cache = providers.Singleton(
        ResponseCache,
        ttl_seconds=settings.provided.cache_ttl_seconds,
    )

    request_coordinator = providers.Singleton(
        RequestCoordinator,
        service=analytics_service,
        cache=response_cache,
    )
