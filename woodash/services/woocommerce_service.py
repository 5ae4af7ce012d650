"""
services/woocommerce_service.py
-------------------------------

Fetchers that assemble complete WooCommerce collections (orders,
customers, products) by walking the REST API page by page.  Each fetcher
requests ``page_size`` records per page, newest first, and stops on an
empty or short page or at the ``max_pages`` ceiling.  When the ceiling
cuts a collection short the returned :class:`PageResult` is flagged as
``truncated`` and a warning is logged.

Upstream errors are not caught here: a failed page aborts the whole
fetch and the partial list is discarded.
"""

from __future__ import annotations

import json
import time
from typing import Any, Dict, Mapping, Optional

from woodash.clients.woocommerce_client import WooCommerceClient
from woodash.core.config import get_settings
from woodash.core.errors import UpstreamError, UpstreamUnavailableError
from woodash.logging_config import log_call, logger
from woodash.utils.pagination import PageResult, paginate

MAX_PAGE_SIZE = 100


async def _fetch_collection(
    client: WooCommerceClient,
    endpoint: str,
    params: Optional[Mapping[str, Any]],
    orderby: str,
    page_size: Optional[int],
    max_pages: Optional[int],
) -> PageResult:
    settings = get_settings()
    per_page = min(page_size or settings.page_size, MAX_PAGE_SIZE)
    max_pages = max_pages or settings.max_pages
    base_params: Dict[str, Any] = {k: v for k, v in (params or {}).items() if v is not None}
    base_params.update({"per_page": per_page, "orderby": orderby, "order": "desc"})

    async def fetch_page(page: int) -> list:
        return await client.get_list(endpoint, {**base_params, "page": page})

    start_time = time.monotonic()
    result = await paginate(fetch_page, page_size=per_page, max_pages=max_pages)
    logger.info(json.dumps({
        "event": "woocommerce_fetch",
        "store": client.credentials.url,
        "endpoint": endpoint,
        "records": len(result.items),
        "pages": result.pages,
        "duration_ms": round((time.monotonic() - start_time) * 1000, 2),
    }))
    if result.truncated:
        logger.warning(json.dumps({
            "event": "woocommerce_fetch_truncated",
            "store": client.credentials.url,
            "endpoint": endpoint,
            "max_pages": max_pages,
            "records": len(result.items),
        }))
    return result


@log_call
async def fetch_orders(
    client: WooCommerceClient,
    params: Optional[Mapping[str, Any]] = None,
    *,
    page_size: Optional[int] = None,
    max_pages: Optional[int] = None,
) -> PageResult:
    """Fetch every order matching ``params`` (``after``, ``before``, ``status``)."""
    return await _fetch_collection(client, "orders", params, "date", page_size, max_pages)


@log_call
async def fetch_customers(
    client: WooCommerceClient,
    params: Optional[Mapping[str, Any]] = None,
    *,
    page_size: Optional[int] = None,
    max_pages: Optional[int] = None,
) -> PageResult:
    """Fetch every customer matching ``params`` (``after``, ``before``, ``role``)."""
    return await _fetch_collection(client, "customers", params, "registered_date", page_size, max_pages)


@log_call
async def fetch_products(
    client: WooCommerceClient,
    params: Optional[Mapping[str, Any]] = None,
    *,
    page_size: Optional[int] = None,
    max_pages: Optional[int] = None,
) -> PageResult:
    """Fetch every product matching ``params`` (usually ``status=publish``)."""
    return await _fetch_collection(client, "products", params, "date", page_size, max_pages)


async def check_connection(client: WooCommerceClient) -> bool:
    """Return ``True`` if the store accepts the client's credentials.

    A store that cannot be reached at all is not a credentials problem, so
    :class:`UpstreamUnavailableError` propagates instead of returning ``False``.
    """
    try:
        await client.get("system_status")
    except UpstreamUnavailableError:
        raise
    except UpstreamError as exc:
        logger.warning(json.dumps({
            "event": "woocommerce_connection_failed",
            "store": client.credentials.url,
            "code": exc.code,
            "upstream_status": exc.upstream_status,
        }))
        return False
    return True


