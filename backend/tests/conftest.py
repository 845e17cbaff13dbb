"""Shared test fixtures.

Nothing here touches the network: HTTP goes through ``httpx.MockTransport``
or a fake client, and time comes from a manual clock.
"""

import json
from datetime import date
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from merchant_insights.config import Settings
from merchant_insights.schemas.filters import AnalyticsFilters
from tests.fakes import FakeAnalyticsClient, ManualClock
from tests.fixtures import load_fixture


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        default_user_id="E12345",
        default_merchant_id="MERCH-001",
        retry_max_attempts=3,
        retry_initial_delay=0.0,
    )


@pytest.fixture()
def april_filters() -> AnalyticsFilters:
    """2025-04-01..2025-04-10 for merchant MERCH-001."""
    return AnalyticsFilters(
        start_date=date(2025, 4, 1),
        end_date=date(2025, 4, 10),
        user_id="E12345",
        merchant_id="MERCH-001",
    )


@pytest.fixture()
def current_response() -> Dict[str, Any]:
    return load_fixture("analytics_response_current.json")


@pytest.fixture()
def previous_response() -> Dict[str, Any]:
    return load_fixture("analytics_response_previous.json")


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture()
def fake_client(current_response, previous_response) -> FakeAnalyticsClient:
    return FakeAnalyticsClient({2025: current_response, 2024: previous_response})


@pytest.fixture()
def mock_transport_factory(current_response, previous_response) -> Callable[..., httpx.MockTransport]:
    """Build a MockTransport serving the fixtures by start year.

    The returned transport records each request body in ``transport.calls``.
    ``statuses`` optionally maps a year to a list of status codes served
    before the fixture (e.g. ``{2024: [503]}``).
    """

    def factory(statuses: Optional[Dict[int, List[int]]] = None) -> httpx.MockTransport:
        pending = {year: list(codes) for year, codes in (statuses or {}).items()}
        calls: List[Dict[str, Any]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            calls.append(body)
            year = int(body["payload"]["startDate"][:4])
            codes = pending.get(year)
            if codes:
                return httpx.Response(codes.pop(0), json={"error": "unavailable"})
            data = current_response if year == 2025 else previous_response
            return httpx.Response(200, json=data)

        transport = httpx.MockTransport(handler)
        transport.calls = calls
        return transport

    return factory
