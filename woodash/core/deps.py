"""
core/deps.py
-------------

FastAPI dependencies exposing the process‑wide services created in the
application lifespan (HTTP client, cache store, session store, settings)
and the authenticated session of the caller.
"""

from __future__ import annotations

from fastapi import Depends, Request

from woodash.clients.http_client import HTTPClient
from woodash.clients.woocommerce_client import WooCommerceClient
from woodash.core.config import Settings
from woodash.core.context import Session, SessionStore
from woodash.core.errors import AuthenticationError
from woodash.utils.cache import CacheStore


def get_http_client(request: Request) -> HTTPClient:
    """Dependency to retrieve the shared HTTP client from the application state."""
    return request.app.state.http_client


def get_cache(request: Request) -> CacheStore:
    return request.app.state.cache


def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_optional_session(
    request: Request,
    sessions: SessionStore = Depends(get_sessions),
    settings: Settings = Depends(get_app_settings),
) -> Session | None:
    return sessions.get(request.cookies.get(settings.session_cookie_name))


def require_session(session: Session | None = Depends(get_optional_session)) -> Session:
    """Reject the request with 401 unless it carries a live session."""
    if session is None:
        raise AuthenticationError()
    return session


def get_woo_client(
    session: Session = Depends(require_session),
    http_client: HTTPClient = Depends(get_http_client),
) -> WooCommerceClient:
    return WooCommerceClient(session.credentials, http_client)
