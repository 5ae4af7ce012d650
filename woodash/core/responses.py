"""
core/responses.py
------------------

Helpers that build the JSON envelope shared by every endpoint.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi.responses import ORJSONResponse


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def success_response(
    data: Any,
    *,
    status_code: int = 200,
    cached: Optional[bool] = None,
    cache_expiry: Optional[int] = None,
    headers: Optional[Dict[str, str]] = None,
) -> ORJSONResponse:
    """Wrap ``data`` in a success envelope.

    When ``cache_expiry`` is given the response is also marked as
    privately cacheable by the browser for the same number of seconds.
    """
    meta: Dict[str, Any] = {"timestamp": _timestamp()}
    if cached is not None:
        meta["cached"] = cached
    if cache_expiry is not None:
        meta["cacheExpiry"] = cache_expiry

    response_headers = dict(headers or {})
    if cache_expiry:
        response_headers["Cache-Control"] = f"private, max-age={cache_expiry}"

    return ORJSONResponse(
        {"success": True, "data": data, "meta": meta},
        status_code=status_code,
        headers=response_headers,
    )


def error_response(
    code: str,
    message: str,
    status_code: int = 500,
    details: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> ORJSONResponse:
    error: Dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return ORJSONResponse(
        {"success": False, "error": error, "meta": {"timestamp": _timestamp()}},
        status_code=status_code,
        headers=headers,
    )
