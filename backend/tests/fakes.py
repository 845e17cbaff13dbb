"""Test doubles shared across unit and integration tests."""

from typing import Any, Dict, List

from merchant_insights.schemas.filters import AnalyticsRequest
from merchant_insights.schemas.raw import AnalyticsResponse


class ManualClock:
    """Clock whose time only moves when a test says so."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAnalyticsClient:
    """Stands in for ``AnalyticsClient``; answers by the request's start year.

    ``responses`` maps a year to a raw response dict or to an exception
    instance to raise.
    """

    def __init__(self, responses: Dict[int, Any]):
        self.responses = responses
        self.requests: List[AnalyticsRequest] = []

    async def query(self, request: AnalyticsRequest) -> AnalyticsResponse:
        self.requests.append(request)
        answer = self.responses[request.payload.start_date.year]
        if isinstance(answer, BaseException):
            raise answer
        return AnalyticsResponse.model_validate(answer)

    async def close(self) -> None:
        pass
