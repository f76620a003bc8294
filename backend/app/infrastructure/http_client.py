"""Resilient HTTP Client — wraps httpx.AsyncClient with retry, backoff, and error mapping.

Invariants:
    - Rate limits (429): exponential backoff with jitter, respects Retry-After header
    - Transient errors (5xx, connection, timeout): max_retries retries with exponential backoff
    - Client errors (4xx except 429): immediate failure, no retry
    - All failures mapped to ExternalServiceError (core/errors.py) tagged with the service name
    - httpx.InvalidURL (a URL httpx refuses to build) maps to ExternalServiceError too

Design Decisions:
    - One wrapper shared by gateways, captcha, geolocation and Zoho: retry policy in one place
    - ±25% jitter on backoff: avoids synchronized retries against the same gateway
"""

import asyncio
import logging
import random

import httpx

from app.core.errors import ExternalServiceError

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


class ResilientHttpClient:
    """httpx client with retry logic, timeouts, and error mapping."""

    def __init__(
        self,
        service: str,
        *,
        base_url: str = "",
        headers: dict | None = None,
        timeout_seconds: float = 15.0,
        max_retries: int = 3,
        base_delay_ms: int = 500,
        max_delay_ms: int = 8_000,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.service = service
        self.client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout_seconds,
            transport=transport,
        )
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Send request with automatic retry on transient failures."""
        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.request(method, url, **kwargs)
            except (httpx.ConnectError, httpx.ReadError, httpx.TimeoutException) as e:
                await self._handle_transient_error(e, attempt)
                continue
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                raise ExternalServiceError(self.service, str(e))

            if response.status_code in _RETRYABLE_STATUS:
                await self._handle_retryable_status(response, attempt)
                continue
            if response.is_error:
                logger.warning(
                    f"{self.service} rejected {method} {url}",
                    extra={"status_code": response.status_code},
                )
                raise ExternalServiceError(
                    self.service, f"HTTP {response.status_code}",
                )
            return response
        raise ExternalServiceError(self.service, "retries exhausted")

    async def get_json(self, url: str, **kwargs) -> dict:
        response = await self.request("GET", url, **kwargs)
        return self._json(response)

    async def post_json(self, url: str, **kwargs) -> dict:
        response = await self.request("POST", url, **kwargs)
        return self._json(response)

    async def aclose(self) -> None:
        await self.client.aclose()

    def _json(self, response: httpx.Response) -> dict:
        try:
            data = response.json()
        except ValueError:
            raise ExternalServiceError(self.service, "invalid JSON response")
        if not isinstance(data, dict):
            raise ExternalServiceError(self.service, "unexpected response shape")
        return data

    async def _handle_retryable_status(
        self, response: httpx.Response, attempt: int,
    ) -> None:
        if attempt >= self.max_retries:
            raise ExternalServiceError(
                self.service,
                f"HTTP {response.status_code} after {self.max_retries} retries",
            )
        delay = self._extract_retry_after(response) or self._backoff(attempt)
        logger.warning(
            f"{self.service} returned {response.status_code}, retry after {delay}ms",
            extra={"attempt": attempt + 1, "status_code": response.status_code},
        )
        await asyncio.sleep(delay / 1000)

    async def _handle_transient_error(self, e: Exception, attempt: int) -> None:
        if attempt >= self.max_retries:
            raise ExternalServiceError(
                self.service,
                f"Transient failure after {self.max_retries} retries: {e}",
            )
        delay = self._backoff(attempt)
        logger.warning(
            f"{self.service} transient error, retry after {delay}ms: {e}",
            extra={"attempt": attempt + 1},
        )
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    def _extract_retry_after(self, response: httpx.Response) -> int | None:
        """Retry-After header in milliseconds, when numeric."""
        val = response.headers.get("retry-after")
        if val and val.isdigit():
            return int(val) * 1000
        return None
