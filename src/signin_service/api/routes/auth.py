"""Authentication Routes

Purpose: FastAPI routes for registration, login and logout

Key Endpoints:
- POST /api/auth/register: Local account registration
- POST /api/auth/login: Email/password login
- GET /api/auth/{provider}: Redirect to Google or GitHub
- GET /api/auth/{provider}/callback: Provider callback, federated login
- POST /api/auth/logout: End the current session
- GET /api/auth/health: Authentication system health
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import RedirectResponse

from signin_service.api.dependencies import (
    extract_session_token,
    get_app_settings,
    get_session_store,
    get_strategies,
    get_user_store,
)
from signin_service.config.settings import Settings
from signin_service.core.auth import AuthStrategies, ProviderError, StoreError
from signin_service.domain.models import (
    AuthResponse,
    LoginRequest,
    LogoutResponse,
    Provider,
    RegisterRequest,
    UserProfile,
    UserRecord,
    to_json_compatible,
)
from signin_service.infrastructure.auth.session_store import RedisSessionStore
from signin_service.infrastructure.auth.user_store import RedisUserStore

router = APIRouter(prefix="/api/auth", tags=["authentication"])
logger = logging.getLogger(__name__)


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


async def start_session(
    response: Response,
    user: UserRecord,
    strategies: AuthStrategies,
    session_store: RedisSessionStore,
    settings: Settings,
) -> None:
    identity = strategies.sessions.to_session_identity(user)
    token = await session_store.create_session(identity)
    set_session_cookie(response, token, settings)


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    request: RegisterRequest,
    response: Response,
    strategies: AuthStrategies = Depends(get_strategies),
    session_store: RedisSessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_app_settings),
) -> AuthResponse:
    """Register a local account and sign it in"""
    if not settings.enable_registration:
        raise HTTPException(status_code=403, detail="Registration is disabled.")

    correlation_id = str(uuid.uuid4())
    user = await strategies.local.register(request.name, request.email, request.password)
    await start_session(response, user, strategies, session_store, settings)

    response.headers["X-Correlation-Id"] = correlation_id
    logger.info(
        f"Registration successful for user {user.user_id} (correlation: {correlation_id})",
        extra={"user_id": user.user_id, "correlation_id": correlation_id},
    )
    return AuthResponse(message="User registered successfully", user=UserProfile.from_record(user))


@router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    response: Response,
    strategies: AuthStrategies = Depends(get_strategies),
    session_store: RedisSessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_app_settings),
) -> AuthResponse:
    """Email/password login"""
    correlation_id = str(uuid.uuid4())
    user = await strategies.local.authenticate(request.email, request.password)
    await start_session(response, user, strategies, session_store, settings)

    response.headers["X-Correlation-Id"] = correlation_id
    logger.info(
        f"Login successful for user {user.user_id} (correlation: {correlation_id})",
        extra={"user_id": user.user_id, "correlation_id": correlation_id},
    )
    return AuthResponse(message="Logged in successfully", user=UserProfile.from_record(user))


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    response: Response,
    token: Optional[str] = Depends(extract_session_token),
    session_store: RedisSessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_app_settings),
) -> LogoutResponse:
    """End the current session"""
    if token:
        await session_store.revoke_session(token)
    response.delete_cookie(settings.session_cookie_name)
    return LogoutResponse()


@router.get("/health")
async def auth_health_check(user_store: RedisUserStore = Depends(get_user_store)):
    """Authentication system health check"""
    try:
        user_count = await user_store.count_users()
    except StoreError as e:
        logger.error(f"Auth health check failed: {e}")
        return {
            "status": "unhealthy",
            "timestamp": to_json_compatible(datetime.now(timezone.utc)),
            "error": str(e),
        }

    return {
        "status": "healthy",
        "timestamp": to_json_compatible(datetime.now(timezone.utc)),
        "users": user_count,
    }


@router.get("/{provider}")
async def provider_login(
    provider: Provider,
    request: Request,
    strategies: AuthStrategies = Depends(get_strategies),
) -> RedirectResponse:
    """Redirect the browser to the provider's consent screen"""
    client = strategies.get_provider(provider)
    state = strategies.state_signer.issue(provider)
    redirect_uri = client.config.resolve_callback(str(request.base_url))
    return RedirectResponse(client.get_login_url(state, redirect_uri))


@router.get("/{provider}/callback", response_model=AuthResponse)
async def provider_callback(
    provider: Provider,
    request: Request,
    response: Response,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    strategies: AuthStrategies = Depends(get_strategies),
    session_store: RedisSessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_app_settings),
):
    """Complete a federated login"""
    if error:
        raise ProviderError(f"{provider.value} login was denied: {error}")
    if not code:
        raise ProviderError("Missing authorization code")

    client = strategies.get_provider(provider)
    strategies.state_signer.verify(state, provider)

    redirect_uri = client.config.resolve_callback(str(request.base_url))
    provider_id, profile = await client.exchange_code(code, redirect_uri)
    user = await strategies.federated.authenticate(provider, provider_id, profile)

    if settings.frontend_url:
        redirect = RedirectResponse(settings.frontend_url, status_code=303)
        await start_session(redirect, user, strategies, session_store, settings)
        return redirect

    await start_session(response, user, strategies, session_store, settings)
    return AuthResponse(
        message=f"Logged in with {provider.value}", user=UserProfile.from_record(user)
    )
