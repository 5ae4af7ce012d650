"""
services/auth_service.py
------------------------

Business logic for connecting a dashboard user to a WooCommerce store.
Login verifies the consumer credentials against the store before a
session is created; logout destroys the session and drops every cached
response that belongs to the store.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from woodash.clients.http_client import HTTPClient
from woodash.clients.woocommerce_client import WooCommerceClient
from woodash.core.context import Credentials, Session, SessionStore
from woodash.core.errors import AuthenticationError
from woodash.logging_config import log_call, logger
from woodash.schemas.auth import LoginData
from woodash.services.woocommerce_service import check_connection
from woodash.utils.cache import CacheStore, invalidate_store


@log_call
async def login_store(data: LoginData, http_client: HTTPClient, sessions: SessionStore) -> Session:
    """Authenticate against the store and open a session.

    :param data: validated store URL and consumer credentials
    :param http_client: shared HTTP client
    :param sessions: session store receiving the new session
    :raises AuthenticationError: if the store rejects the credentials
    :raises UpstreamUnavailableError: if the store cannot be reached
    :return: the newly created session
    """
    credentials = Credentials(url=data.url, consumer_key=data.key, consumer_secret=data.secret)
    logger.info(json.dumps({"event": "login_start", "store": credentials.url}))

    if not await check_connection(WooCommerceClient(credentials, http_client)):
        logger.warning(json.dumps({"event": "login_failed", "store": credentials.url}))
        raise AuthenticationError("Invalid credentials or unable to connect to WooCommerce store")

    session = sessions.create(credentials)
    logger.info(json.dumps({"event": "login_success", "store": credentials.url}))
    return session


@log_call
def logout_store(session_id: Optional[str], sessions: SessionStore, cache: CacheStore) -> int:
    """Close a session and invalidate the store's cached responses.

    Logging out without a session is not an error.

    :return: number of cache entries removed
    """
    session = sessions.destroy(session_id)
    if session is None:
        return 0
    removed = invalidate_store(cache, session.credentials.url)
    logger.info(json.dumps({
        "event": "logout",
        "store": session.credentials.url,
        "cache_entries_removed": removed,
    }))
    return removed


def describe_session(session: Optional[Session]) -> Dict[str, Any]:
    return {
        "isLoggedIn": session is not None,
        "storeUrl": session.credentials.url if session else None,
    }
