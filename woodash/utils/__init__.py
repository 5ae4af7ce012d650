"""
Utility helpers shared by services and routes: the TTL cache store and
the page loop used to walk WooCommerce collections.
"""

from __future__ import annotations

from .cache import MISS, CacheEntry, CacheStore, build_cache_key, invalidate_store, keys_for_store, with_cache
from .pagination import PageResult, paginate

__all__ = [
    "MISS",
    "CacheEntry",
    "CacheStore",
    "build_cache_key",
    "invalidate_store",
    "keys_for_store",
    "with_cache",
    "PageResult",
    "paginate",
]
