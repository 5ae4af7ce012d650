"""
routes/auth.py
---------------

API routes for connecting to and disconnecting from a WooCommerce
store.  These routes delegate to :mod:`woodash.services.auth_service`
and manage the session cookie.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from woodash.clients.http_client import HTTPClient
from woodash.core.config import Settings
from woodash.core.context import Session, SessionStore
from woodash.core.deps import get_app_settings, get_cache, get_http_client, get_optional_session, get_sessions
from woodash.core.responses import success_response
from woodash.schemas.auth import LoginData
from woodash.services.auth_service import describe_session, login_store, logout_store
from woodash.utils.cache import CacheStore

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login")
async def login(
    data: LoginData,
    http_client: HTTPClient = Depends(get_http_client),
    sessions: SessionStore = Depends(get_sessions),
    settings: Settings = Depends(get_app_settings),
):
    session = await login_store(data, http_client, sessions)
    response = success_response({"message": "Connected successfully", "storeUrl": session.credentials.url})
    response.set_cookie(
        settings.session_cookie_name,
        session.session_id,
        max_age=settings.session_max_age,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return response


@router.post("/logout")
async def logout(
    request: Request,
    sessions: SessionStore = Depends(get_sessions),
    cache: CacheStore = Depends(get_cache),
    settings: Settings = Depends(get_app_settings),
):
    logout_store(request.cookies.get(settings.session_cookie_name), sessions, cache)
    response = success_response({"message": "Logged out successfully"})
    response.delete_cookie(settings.session_cookie_name)
    return response


@router.get("/session")
async def session_info(session: Session | None = Depends(get_optional_session)):
    return success_response(describe_session(session))
