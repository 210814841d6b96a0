"""FastAPI dependencies shared by the routers.

Everything is read from ``app.state``, which the application lifespan (or a
test) fills with the settings, stores and assembled strategies.
"""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from signin_service.config.settings import Settings
from signin_service.core.auth import AuthStrategies, UserNotFound
from signin_service.domain.models import UserRecord
from signin_service.infrastructure.auth.session_store import RedisSessionStore
from signin_service.infrastructure.auth.user_store import RedisUserStore

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_strategies(request: Request) -> AuthStrategies:
    return request.app.state.strategies


def get_session_store(request: Request) -> RedisSessionStore:
    return request.app.state.session_store


def get_user_store(request: Request) -> RedisUserStore:
    return request.app.state.user_store


async def extract_session_token(
    request: Request,
    authorization: Optional[str] = Header(None, alias="Authorization"),
    settings: Settings = Depends(get_app_settings),
) -> Optional[str]:
    """Session token from the session cookie, or a Bearer header for API clients"""
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token

    if authorization and authorization.startswith("Bearer "):
        token = authorization[7:].strip()
        if token:
            return token

    return None


async def get_current_user_optional(
    token: Optional[str] = Depends(extract_session_token),
    session_store: RedisSessionStore = Depends(get_session_store),
    strategies: AuthStrategies = Depends(get_strategies),
) -> Optional[UserRecord]:
    """Current user from the session (None if missing, expired or stale)"""
    if not token:
        return None

    user_id = await session_store.get_session_identity(token)
    if not user_id:
        logger.debug("Session not found or expired")
        return None

    try:
        return await strategies.sessions.from_session_identity(user_id)
    except UserNotFound:
        logger.warning(f"Session refers to missing user {user_id}")
        return None


async def require_authentication(
    user: Optional[UserRecord] = Depends(get_current_user_optional),
) -> UserRecord:
    """Require authenticated user (raises 401 if not authenticated)"""
    if not user:
        raise HTTPException(
            status_code=401,
            detail="Authentication required. Please log in to access this resource.",
        )
    return user
