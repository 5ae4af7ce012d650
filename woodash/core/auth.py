"""
core/auth.py
-------------

Utility functions for building authenticated requests to a WooCommerce
store.

These helpers centralise construction of the REST API root and the
credentials attached to each call.  WooCommerce accepts HTTP Basic
authentication only over HTTPS; on plain HTTP every request must carry
a one‑legged OAuth 1.0a signature in the query string instead.  Keeping
that knowledge here keeps consumer secrets out of the services and the
logs.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import time
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

import httpx

from woodash.core.context import Credentials

API_PREFIX = "wp-json/wc/v3"
USER_AGENT = "woodash/1.0"


def normalize_store_url(url: str) -> str:
    """Strip surrounding whitespace and trailing slashes from a store URL."""
    return url.strip().rstrip("/")


def get_api_root(store_url: str) -> str:
    """Return the WooCommerce REST root for a store, without trailing slash."""
    return f"{normalize_store_url(store_url)}/{API_PREFIX}"


def is_secure(store_url: str) -> bool:
    return store_url.lower().startswith("https://")


def build_headers() -> Dict[str, str]:
    return {
        "Accept": "application/json",
        "User-Agent": USER_AGENT,
    }


def build_basic_auth(credentials: Credentials) -> httpx.BasicAuth:
    return httpx.BasicAuth(credentials.consumer_key, credentials.consumer_secret)


def _encode(value: Any) -> str:
    return quote(str(value), safe="")


def oauth_signed_params(
    method: str,
    url: str,
    params: Optional[Mapping[str, Any]],
    credentials: Credentials,
    *,
    timestamp: Optional[int] = None,
    nonce: Optional[str] = None,
) -> Dict[str, Any]:
    """Return ``params`` extended with a one‑legged OAuth 1.0a signature.

    The signature base string is ``METHOD&url&sorted-params`` with every
    component percent‑encoded, signed with HMAC‑SHA256 using the consumer
    secret followed by ``&`` as key, which is what WooCommerce verifies on
    insecure transports.

    :param method: HTTP method of the request
    :param url: absolute endpoint URL without query string
    :param params: query parameters that will be sent with the request
    :param credentials: consumer key and secret of the store
    :param timestamp: fixed ``oauth_timestamp`` (tests only)
    :param nonce: fixed ``oauth_nonce`` (tests only)
    """
    signed: Dict[str, Any] = {k: v for k, v in (params or {}).items() if v is not None}
    signed.update({
        "oauth_consumer_key": credentials.consumer_key,
        "oauth_nonce": nonce or secrets.token_hex(16),
        "oauth_signature_method": "HMAC-SHA256",
        "oauth_timestamp": int(time.time()) if timestamp is None else timestamp,
    })
    normalized = "&".join(
        f"{_encode(k)}={_encode(v)}"
        for k, v in sorted((str(k), str(v)) for k, v in signed.items())
    )
    base_string = "&".join([method.upper(), _encode(url), _encode(normalized)])
    key = f"{credentials.consumer_secret}&".encode()
    digest = hmac.new(key, base_string.encode(), hashlib.sha256).digest()
    signed["oauth_signature"] = base64.b64encode(digest).decode()
    return signed
