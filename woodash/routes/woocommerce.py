"""
routes/woocommerce.py
----------------------

Read endpoints for WooCommerce orders, customers and products.  Each
route requires a logged‑in session, validates its query parameters,
derives a cache key from the entity, the store URL and the filters, and
serves the collection through the cache‑aside wrapper with an
entity‑specific lifetime.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Awaitable, Callable, Dict

from fastapi import APIRouter, Depends, Query

from woodash.clients.woocommerce_client import WooCommerceClient
from woodash.core.config import Settings
from woodash.core.deps import get_app_settings, get_cache, get_woo_client
from woodash.core.responses import success_response
from woodash.logging_config import logger
from woodash.schemas.woocommerce import CustomerQuery, OrderQuery
from woodash.services.woocommerce_service import fetch_customers, fetch_orders, fetch_products
from woodash.utils.cache import CacheStore, build_cache_key
from woodash.utils.pagination import PageResult

router = APIRouter(prefix="/api/woocommerce", tags=["woocommerce"])

Fetcher = Callable[..., Awaitable[PageResult]]


async def _serve_collection(
    entity: str,
    fetcher: Fetcher,
    params: Dict[str, Any],
    ttl: int,
    client: WooCommerceClient,
    cache: CacheStore,
    settings: Settings,
):
    key = build_cache_key(entity, client.credentials.url, params)

    async def produce() -> PageResult:
        return await fetcher(client, params, page_size=settings.page_size, max_pages=settings.max_pages)

    result, from_cache = await cache.get_or_fetch(key, produce, ttl)
    logger.info(json.dumps({
        "event": f"{entity}_response",
        "store": client.credentials.url,
        "count": len(result.items),
        "cached": from_cache,
        "truncated": result.truncated,
    }))
    return success_response(
        {entity: result.items, "count": len(result.items), "truncated": result.truncated},
        cached=from_cache,
        cache_expiry=ttl,
    )


@router.get("/orders")
async def get_orders(
    query: Annotated[OrderQuery, Query()],
    client: WooCommerceClient = Depends(get_woo_client),
    cache: CacheStore = Depends(get_cache),
    settings: Settings = Depends(get_app_settings),
):
    """Orders newest first, optionally filtered by date range and status."""
    return await _serve_collection(
        "orders", fetch_orders, query.to_params(), settings.cache_ttl_orders, client, cache, settings,
    )


@router.get("/customers")
async def get_customers(
    query: Annotated[CustomerQuery, Query()],
    client: WooCommerceClient = Depends(get_woo_client),
    cache: CacheStore = Depends(get_cache),
    settings: Settings = Depends(get_app_settings),
):
    """Customers by registration date, newest first, optionally filtered by role."""
    return await _serve_collection(
        "customers", fetch_customers, query.to_params(), settings.cache_ttl_customers, client, cache, settings,
    )


@router.get("/products")
async def get_products(
    client: WooCommerceClient = Depends(get_woo_client),
    cache: CacheStore = Depends(get_cache),
    settings: Settings = Depends(get_app_settings),
):
    """Published products, newest first."""
    return await _serve_collection(
        "products", fetch_products, {"status": "publish"}, settings.cache_ttl_products, client, cache, settings,
    )
