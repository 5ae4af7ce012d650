"""Health check route. No upstream calls."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from woodash.core.deps import get_cache
from woodash.utils.cache import CacheStore

router = APIRouter()


@router.get("/health")
async def health(cache: CacheStore = Depends(get_cache)) -> dict:
    return {"status": "ok", "service": "woodash", "cache_size": len(cache)}
