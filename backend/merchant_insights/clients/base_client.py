"""Reusable async base for the analytics HTTP API."""

import logging
from typing import Any, Optional

import httpx

from merchant_insights.utils.retry import with_retry

logger = logging.getLogger(__name__)


class AnalyticsAPIError(Exception):
    """The analytics API could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BaseHTTPClient:
    """Thin wrapper around ``httpx.AsyncClient`` with logging, error handling and retry.

    Subclasses (AnalyticsClient) only need to implement domain methods.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retry_max_attempts: int = 3,
        retry_initial_delay: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._retry_max_attempts = retry_max_attempts
        self._retry_initial_delay = retry_initial_delay

    # ── HTTP helpers ─────────────────────────────────────────────────

    async def _post(self, endpoint: str, body: dict) -> Any:
        """POST a JSON body with retry logic.

        Retries on:
        - 5xx server errors
        - 429 rate limit
        - Network errors
        - Timeouts

        Does NOT retry on 4xx client errors; those raise
        ``AnalyticsAPIError`` straight away.
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        try:
            return await self._post_with_retry(url, body)
        except httpx.HTTPStatusError as exc:
            raise AnalyticsAPIError(
                f"Analytics API returned {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.TransportError as exc:
            raise AnalyticsAPIError(f"Analytics API unreachable: {exc}") from exc

    async def _post_with_retry(self, url: str, body: dict) -> Any:
        """Internal POST with retry decorator applied."""

        @with_retry(
            max_attempts=self._retry_max_attempts,
            initial_delay=self._retry_initial_delay,
            retry_on=(
                httpx.HTTPStatusError,
                httpx.TimeoutException,
                httpx.NetworkError,
            ),
            reraise_on=(AnalyticsAPIError,),
        )
        async def _do_post():
            logger.debug("POST %s", url)
            resp = await self._client.post(url, json=body)

            # Only retry on 5xx and 429
            if resp.status_code >= 500 or resp.status_code == 429:
                logger.warning("Retryable error %d from %s", resp.status_code, url)
                resp.raise_for_status()
            elif resp.status_code >= 400:
                logger.warning(
                    "Client error %d for %s - not retrying", resp.status_code, url
                )
                raise AnalyticsAPIError(
                    f"Analytics API rejected the request ({resp.status_code})",
                    status_code=resp.status_code,
                )

            try:
                return resp.json()
            except ValueError as exc:
                raise AnalyticsAPIError(
                    "Analytics API returned a non-JSON body",
                    status_code=resp.status_code,
                ) from exc

        return await _do_post()

    # ── lifecycle ────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()
