"""
clients/woocommerce_client.py
------------------------------

Thin client for the WooCommerce REST API (``/wp-json/wc/v3``) bound to a
single store's credentials.  It delegates transport concerns (pooling,
retries, circuit breaking) to the shared :class:`HTTPClient` and turns
failures into the :class:`~woodash.core.errors.UpstreamError` family so
callers never have to inspect raw ``httpx`` responses.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional

import httpx

from woodash.clients.http_client import HTTPClient
from woodash.core.auth import build_basic_auth, build_headers, get_api_root, is_secure, oauth_signed_params
from woodash.core.context import Credentials
from woodash.core.errors import (
    UpstreamAuthError,
    UpstreamError,
    UpstreamForbiddenError,
    UpstreamRateLimitedError,
    UpstreamResponseError,
    UpstreamUnavailableError,
)
from woodash.logging_config import logger


def _upstream_message(response: httpx.Response) -> str:
    """Extract WooCommerce's error message from a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase


def raise_for_upstream_status(response: httpx.Response, endpoint: str) -> None:
    """Raise the matching :class:`UpstreamError` for a non‑2xx response."""
    status = response.status_code
    if 200 <= status < 300:
        return
    message = _upstream_message(response)
    details = {"endpoint": endpoint, "upstream_status": status, "upstream_message": message}
    if status == 401:
        raise UpstreamAuthError(details=details)
    if status == 403:
        raise UpstreamForbiddenError(details=details)
    if status == 429:
        raise UpstreamRateLimitedError(details=details)
    raise UpstreamResponseError(
        f"WooCommerce returned {status} for {endpoint}: {message}",
        upstream_status=status,
        details=details,
    )


class WooCommerceClient:
    """REST client for one WooCommerce store."""

    def __init__(self, credentials: Credentials, http_client: HTTPClient) -> None:
        self.credentials = credentials
        self.http_client = http_client
        self.api_root = get_api_root(credentials.url)
        self.headers = build_headers()

    def __repr__(self) -> str:
        return f"WooCommerceClient({self.credentials.url!r})"

    async def get(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """GET ``endpoint`` (e.g. ``"orders"``) and return the decoded JSON body.

        :raises UpstreamUnavailableError: the store could not be reached
        :raises UpstreamError: the store answered with a non‑2xx status or
            a body that is not JSON
        """
        url = f"{self.api_root}/{endpoint.lstrip('/')}"
        query: Dict[str, Any] = {k: v for k, v in (params or {}).items() if v is not None}
        kwargs: Dict[str, Any] = {"headers": self.headers}
        if is_secure(self.credentials.url):
            kwargs["auth"] = build_basic_auth(self.credentials)
        else:
            query = oauth_signed_params("GET", url, query, self.credentials)
        kwargs["params"] = query

        try:
            response = await self.http_client.get(url, **kwargs)
        except httpx.TransportError as exc:
            logger.error(json.dumps({
                "event": "woocommerce_unreachable",
                "store": self.credentials.url,
                "endpoint": endpoint,
                "detail": f"{type(exc).__name__}: {exc}",
            }))
            raise UpstreamUnavailableError(details={"endpoint": endpoint, "reason": type(exc).__name__}) from exc

        raise_for_upstream_status(response, endpoint)
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamResponseError(
                f"WooCommerce returned a non-JSON body for {endpoint}",
                upstream_status=response.status_code,
                details={"endpoint": endpoint},
            ) from exc

    async def get_list(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> list:
        """Like :meth:`get` but insists on a JSON array, as collection endpoints return."""
        body = await self.get(endpoint, params)
        if not isinstance(body, list):
            raise UpstreamResponseError(
                f"Expected a list from {endpoint}, got {type(body).__name__}",
                details={"endpoint": endpoint},
            )
        return body


__all__ = ["WooCommerceClient", "UpstreamError", "raise_for_upstream_status"]
