"""Client for the merchant analytics query endpoint.

A single POST endpoint answers every metric query; the body carries the
metric ids, the date window and the filter values (see
``services.request_builder``).
"""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from merchant_insights.clients.base_client import AnalyticsAPIError, BaseHTTPClient
from merchant_insights.schemas.filters import AnalyticsRequest
from merchant_insights.schemas.raw import AnalyticsResponse

logger = logging.getLogger(__name__)


class AnalyticsClient(BaseHTTPClient):
    """Analytics API client."""

    def __init__(
        self,
        base_url: str,
        query_path: str = "/api/ANALYTICS/QUERY",
        timeout: float = 180.0,
        retry_max_attempts: int = 3,
        retry_initial_delay: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(
            base_url=base_url,
            timeout=timeout,
            retry_max_attempts=retry_max_attempts,
            retry_initial_delay=retry_initial_delay,
            transport=transport,
        )
        self.query_path = query_path

    async def query(self, request: AnalyticsRequest) -> AnalyticsResponse:
        """Run one analytics query and return the parsed envelope.

        Raises ``AnalyticsAPIError`` on transport failures, on a body that is
        not an analytics envelope, and when the envelope carries an
        ``exception``.
        """
        payload = request.payload
        logger.info(
            "Querying %d metrics for %s..%s",
            len(payload.metric_ids),
            payload.start_date,
            payload.end_date,
        )
        data = await self._post(self.query_path, request.to_wire())

        if not isinstance(data, dict):
            raise AnalyticsAPIError("Analytics API returned an unexpected body")
        try:
            response = AnalyticsResponse.model_validate(data)
        except ValidationError as exc:
            raise AnalyticsAPIError(f"Malformed analytics response: {exc}") from exc

        if response.exception:
            message = response.exception
            if isinstance(message, dict):
                message = message.get("message") or message.get("code") or "unknown error"
            raise AnalyticsAPIError(f"Analytics query failed: {message}")

        logger.debug("Query returned %d raw records", len(response.raw_metrics))
        return response
