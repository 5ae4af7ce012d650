"""
clients/http_client.py
----------------------

Async HTTP client wrapper with connection pooling, timeouts, retries and
a simple circuit breaker for idempotent requests.  This client should
only be instantiated once per process and shared across services via the
FastAPI lifespan event.  It uses ``httpx.AsyncClient`` under the hood and
honours the settings defined in :mod:`woodash.core.config`.

Retries are applied exclusively to GET requests, as these are idempotent
by definition, and only for transport errors and transient statuses
(429, 502, 503, 504).  Any other response is returned to the caller as
is.  A basic circuit breaker prevents hammering a store that keeps
failing by short‑circuiting requests to that host for a cooldown period.
"""

from __future__ import annotations

import asyncio
import json
import time
from typing import Any, Dict, Optional

import httpx

from woodash.core.config import Settings, get_settings
from woodash.logging_config import log_http_request, logger

# HTTP status codes that should trigger a retry
RETRY_STATUS = {429, 502, 503, 504}


class CircuitOpenError(httpx.TransportError):
    """Raised instead of sending a request while a host's breaker is open."""


class CircuitBreaker:
    """Simple per‑host circuit breaker.

    Tracks consecutive failures for each host and trips the breaker
    when the count reaches a threshold.  The breaker resets after a
    cooldown period.
    """

    def __init__(self, failure_threshold: int = 5, reset_timeout: float = 60.0) -> None:
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self._failures: Dict[str, int] = {}
        self._tripped_until: Dict[str, float] = {}

    def record_failure(self, host: str) -> None:
        self._failures[host] = self._failures.get(host, 0) + 1
        if self._failures[host] >= self.failure_threshold:
            self._tripped_until[host] = time.monotonic() + self.reset_timeout
            logger.warning(json.dumps({"event": "circuit_open", "host": host, "failures": self._failures[host]}))

    def record_success(self, host: str) -> None:
        self._failures.pop(host, None)
        self._tripped_until.pop(host, None)

    def can_request(self, host: str) -> bool:
        until = self._tripped_until.get(host)
        if until is None:
            return True
        if time.monotonic() >= until:
            # reset breaker after cooldown
            self._tripped_until.pop(host, None)
            self._failures.pop(host, None)
            return True
        return False


class HTTPClient:
    """Shared async HTTP client with retry and circuit breaker.

    Use this class for all outbound HTTP interactions within the
    application.  Instances are created in the FastAPI lifespan event and
    handed to services via dependency injection.

    :param settings: application settings; defaults to :func:`get_settings`
    :param transport: optional httpx transport, used by tests to fake the
        upstream store
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        breaker: Optional[CircuitBreaker] = None,
    ) -> None:
        settings = settings or get_settings()
        self.timeout = settings.http_timeout
        self.max_retries = settings.http_max_retries
        self.backoff_factor = settings.http_backoff_factor
        # AsyncClient pools connections across requests
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=transport)
        self._breaker = breaker or CircuitBreaker()

    async def close(self) -> None:
        """Close the underlying HTTPX client and release resources."""
        await self._client.aclose()

    async def _request(self, method: str, url: str, attempt: int = 0, **kwargs: Any) -> httpx.Response:
        """Perform a single HTTP request without retries.

        :raises CircuitOpenError: if the breaker for the target host is open
        """
        host = httpx.URL(url).host
        if not self._breaker.can_request(host):
            raise CircuitOpenError(f"Circuit breaker open for host {host}")
        start_time = time.monotonic()
        log_http_request(method, url, headers=kwargs.get("headers"), params=kwargs.get("params"), attempt=attempt)
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TransportError:
            self._breaker.record_failure(host)
            raise
        if response.status_code >= 500:
            self._breaker.record_failure(host)
        else:
            # 4xx is a client problem, not a sign the host is down
            self._breaker.record_success(host)
        log_http_request(
            method, url,
            status=response.status_code,
            duration_ms=(time.monotonic() - start_time) * 1000,
            attempt=attempt,
        )
        return response

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Perform a GET request with retries and exponential backoff."""
        attempt = 0
        while True:
            try:
                response = await self._request("GET", url, attempt=attempt, **kwargs)
            except CircuitOpenError:
                raise
            except httpx.TransportError as exc:
                if attempt >= self.max_retries:
                    raise
                logger.info(json.dumps({
                    "event": "http_retry",
                    "url": url,
                    "attempt": attempt + 1,
                    "detail": type(exc).__name__,
                }))
            else:
                if response.status_code not in RETRY_STATUS or attempt >= self.max_retries:
                    return response
                logger.info(json.dumps({
                    "event": "http_retry",
                    "url": url,
                    "attempt": attempt + 1,
                    "status": response.status_code,
                }))
            await asyncio.sleep(self.backoff_factor * (2 ** attempt))
            attempt += 1

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Public request method.

        For GET requests this applies retry logic.  For other methods the
        request is performed once.
        """
        method_upper = method.upper()
        if method_upper == "GET":
            return await self.get(url, **kwargs)
        return await self._request(method_upper, url, **kwargs)
