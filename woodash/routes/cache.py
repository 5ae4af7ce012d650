"""
routes/cache.py
----------------

Debugging endpoints over the response cache.  Both are scoped to the
caller's own store so one session can neither see nor clear another
store's entries.
"""

from __future__ import annotations

import json
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from woodash.core.context import Session
from woodash.core.deps import get_cache, require_session
from woodash.core.responses import success_response
from woodash.logging_config import logger
from woodash.utils.cache import CacheStore, invalidate_store, keys_for_store

router = APIRouter(prefix="/api/cache", tags=["cache"])

Entity = Literal["orders", "customers", "products"]


@router.get("/stats")
async def cache_stats(
    session: Session = Depends(require_session),
    cache: CacheStore = Depends(get_cache),
):
    keys = keys_for_store(cache, session.credentials.url)
    return success_response({"size": len(keys), "keys": keys})


@router.post("/invalidate")
async def invalidate_cache(
    entity: Optional[Entity] = Query(None),
    session: Session = Depends(require_session),
    cache: CacheStore = Depends(get_cache),
):
    """Clear this store's cached responses, optionally for one entity only."""
    removed = invalidate_store(cache, session.credentials.url, entity)
    logger.info(json.dumps({
        "event": "cache_invalidate",
        "store": session.credentials.url,
        "entity": entity,
        "removed": removed,
    }))
    return success_response({"removed": removed})
