"""
logging_config.py
------------------

Shared logging configuration and utilities for structured logging
throughout the WooCommerce dashboard API.  It uses Python's built‑in
``logging`` module so that log output can be captured by standard
handlers or shipped to an external system.  Messages are serialised as
JSON to make them easier to parse downstream.

To use this module, import ``logger`` and call its methods instead of
``logging.info`` directly.  The ``log_call`` decorator can be applied
to functions (plain or ``async``) to record entry and exit points at
the DEBUG level without leaking consumer secrets.
"""

from __future__ import annotations

import inspect
import json
import logging
import sys
from functools import wraps
from typing import Any, Callable, Dict

from pydantic import BaseModel

# -----------------------------------------------------------------------------
# Configure global logging
# -----------------------------------------------------------------------------

# The message itself should be a JSON string so downstream consumers can
# parse it easily.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger("woodash")

_SENSITIVE_KEYWORDS = ("token", "password", "secret", "consumer_key", "oauth_signature", "authorization")


def _is_sensitive(key: Any) -> bool:
    lowered = str(key).lower()
    # LoginData carries the consumer key in a field called plain "key"
    return lowered == "key" or any(keyword in lowered for keyword in _SENSITIVE_KEYWORDS)


def _sanitize(obj: Any) -> Any:
    """Recursively sanitise objects for logging.

    Dictionaries will have keys containing 'token', 'password', 'secret'
    or consumer/OAuth credentials removed.  Lists and tuples are processed
    element‑wise.  Pydantic models are converted to dicts first; any other
    object is replaced by its ``repr``, so dataclasses such as
    ``Credentials`` must keep secrets out of their ``repr``.

    Parameters
    ----------
    obj : Any
        Arbitrary Python object to sanitise.

    Returns
    -------
    Any
        A sanitised representation of the input suitable for JSON serialisation.
    """
    if isinstance(obj, (bytes, bytearray)):
        return f"<binary {len(obj)} bytes>"
    if isinstance(obj, dict):
        clean: Dict[str, Any] = {}
        for k, v in obj.items():
            if _is_sensitive(k):
                continue
            clean[str(k)] = _sanitize(v)
        return clean
    if isinstance(obj, (list, tuple)):
        return [_sanitize(i) for i in obj]
    if isinstance(obj, BaseModel):
        return _sanitize(obj.model_dump())
    if isinstance(obj, (str, int, float, bool)) or obj is None:
        return obj
    return repr(obj)


def log_call(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to log entry and exit of functions.

    Logs a DEBUG level ``call_start`` message before the function is
    executed and a ``call_end`` message after it returns.  Coroutine
    functions are awaited inside the wrapper, so the decorator can be
    stacked on ``async def`` services and route handlers alike.  Only the
    type and length of the return value are logged to avoid dumping whole
    result sets.

    Examples
    --------

    >>> @log_call
    ... async def fetch(client):
    ...     return []
    """

    def _log_start(args: tuple, kwargs: dict) -> None:
        if not logger.isEnabledFor(logging.DEBUG):
            return
        logger.debug(json.dumps({
            "event": "call_start",
            "function": func.__name__,
            "args": _sanitize(args),
            "kwargs": _sanitize(kwargs),
        }))

    def _log_end(result: Any) -> None:
        if not logger.isEnabledFor(logging.DEBUG):
            return
        summary: Dict[str, Any] = {"event": "call_end", "function": func.__name__, "result_type": type(result).__name__}
        if hasattr(result, "__len__"):
            summary["result_len"] = len(result)
        logger.debug(json.dumps(summary))

    if inspect.iscoroutinefunction(func):
        @wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            _log_start(args, kwargs)
            result = await func(*args, **kwargs)
            _log_end(result)
            return result

        return async_wrapper

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        _log_start(args, kwargs)
        result = func(*args, **kwargs)
        _log_end(result)
        return result

    return wrapper


def log_http_request(method: str, url: str, *, headers: Dict[str, Any] | None = None,
                     params: Dict[str, Any] | None = None,
                     status: int | None = None, duration_ms: float | None = None,
                     attempt: int | None = None) -> None:
    """Log an outbound HTTP request at DEBUG level.

    Authorization headers and credential query parameters are removed so
    only high‑level information (method, URL, status and duration) is
    recorded.  The HTTP client wrapper invokes this before and after
    performing requests.

    Parameters
    ----------
    method : str
        The HTTP method (GET, POST, etc.)
    url : str
        The URL being requested, without query string.
    headers : dict, optional
        Request headers.  Sensitive keys are removed.
    params : dict, optional
        Query parameters.  OAuth and consumer credentials are removed.
    status : int, optional
        Response status code (log end only).
    duration_ms : float, optional
        Time taken in milliseconds (log end only).
    attempt : int, optional
        Retry attempt number, starting at 0.
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return
    data: Dict[str, Any] = {
        "event": "http_request",
        "method": method,
        "url": url,
    }
    if headers is not None:
        data["headers"] = {k: v for k, v in headers.items() if not _is_sensitive(k)}
    if params:
        data["params"] = _sanitize(params)
    if status is not None:
        data["status"] = status
    if duration_ms is not None:
        data["duration_ms"] = round(duration_ms, 2)
    if attempt:
        data["attempt"] = attempt
    logger.debug(json.dumps(data))
