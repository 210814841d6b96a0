"""Sign-in Service

Main FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from signin_service.api.routes import auth, user
from signin_service.config.settings import Settings, get_settings
from signin_service.core.auth import AuthError, build_strategies
from signin_service.domain.models import ErrorResponse
from signin_service.infrastructure.auth.session_store import RedisSessionStore
from signin_service.infrastructure.auth.user_store import RedisUserStore
from signin_service.infrastructure.redis.client import close_redis_client, get_redis_client

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    settings: Settings = app.state.settings

    # Startup
    logger.info(f"Starting {settings.service_name} v{settings.service_version}")
    logger.info(f"Environment: {settings.environment}")

    try:
        redis_client = await get_redis_client(settings.redis_url)
        logger.info("Redis connection established")
    except Exception as e:
        logger.error(f"Failed to connect to Redis: {e}")
        raise

    client = redis_client.get_client()
    app.state.user_store = RedisUserStore(client)
    app.state.session_store = RedisSessionStore(client, ttl_seconds=settings.session_ttl_seconds)
    app.state.strategies = build_strategies(settings, app.state.user_store)

    yield

    # Shutdown
    logger.info("Shutting down Sign-in Service")
    await close_redis_client()
    logger.info("Redis connection closed")


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(status=status_code, message=message).model_dump(),
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application.

    Stores and strategies are attached to ``app.state`` by the lifespan;
    tests may attach their own instead.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Sign-in Service",
        version=settings.service_version,
        description="Local and federated (Google, GitHub) sign-in",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
        else:
            logger.info(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0]["msg"] if errors else "Invalid request"
        return error_response(422, message)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler for unhandled errors"""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return error_response(500, "Internal server error")

    @app.get("/health")
    async def root_health_check():
        """Root health check endpoint"""
        return {
            "status": "healthy",
            "service": settings.service_name,
            "version": settings.service_version,
            "environment": settings.environment,
        }

    app.include_router(auth.router)
    app.include_router(user.router)

    return app


settings = get_settings()
configure_logging(settings)
app = create_app(settings)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "signin_service.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
