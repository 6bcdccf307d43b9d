"""
Profile Share Backend - FastAPI Application
Main entry point for the profile sharing backend service.
Handles credential sessions, profile editing, links, likes, posts and moderation.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from app.api.dto.common_dto import error_envelope
from app.core.config import settings
from app.core.exceptions import ProfileShareException, get_exception_status_code
from app.core.logging import get_logger, log_error, setup_logging
from app.domain.repositories.like_repository import like_repository, report_repository
from app.domain.repositories.link_repository import link_repository
from app.domain.repositories.post_repository import post_repository
from app.domain.repositories.user_repository import user_repository
from app.infrastructure.cache.redis_client import redis_client

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Startup
    setup_logging()
    logger.info(f"{settings.APP_NAME} starting in {settings.ENVIRONMENT} mode")
    yield
    # Shutdown
    for repository in (
        user_repository,
        link_repository,
        post_repository,
        like_repository,
        report_repository,
    ):
        await repository.close()
    await redis_client.disconnect()


def register_exception_handlers(app: FastAPI) -> None:
    """Render domain and validation errors as failure envelopes."""

    @app.exception_handler(ProfileShareException)
    async def profile_share_exception_handler(request: Request, exc: ProfileShareException):
        status_code = get_exception_status_code(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            log_error(exc, {"path": request.url.path, "method": request.method})
        else:
            logger.info(f"{request.method} {request.url.path} -> {exc.error_code}: {exc.message}")
        return JSONResponse(
            status_code=status_code,
            content=error_envelope(exc.message, status_code, exc.error_code, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=error_envelope(
                "Invalid request",
                status.HTTP_422_UNPROCESSABLE_ENTITY,
                "VALIDATION_ERROR",
                {"errors": errors},
            ),
        )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title="Profile Share Backend",
        description="Profile sharing API - credential sessions, profile editing, links, likes and posts",
        version="1.0.0",
        docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
        openapi_url="/openapi.json" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # CORS middleware, credentials required for the session cookie
    cors_origins = settings.get_effective_cors_origins()
    logger.info(f"CORS configured with origins: {cors_origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Trusted host middleware only validates the Host header
    if settings.ENVIRONMENT == "production":
        logger.info(
            f"TrustedHost middleware enabled with hosts: {settings.ALLOWED_HOSTS}"
        )
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=settings.ALLOWED_HOSTS,
        )
    else:
        logger.info("TrustedHost middleware disabled (development mode)")

    register_exception_handlers(app)

    from app.api.routers import admin_router, auth_router, post_router, user_router

    app.include_router(auth_router.router, prefix="/api/v1/auth", tags=["Authentication"])
    app.include_router(user_router.router, prefix="/api/v1/user", tags=["User Profile"])
    app.include_router(post_router.router, prefix="/api/v1/post", tags=["Posts"])
    app.include_router(admin_router.router, prefix="/api/v1/admin", tags=["Admin"])

    @app.get("/")
    async def root():
        """Root endpoint for health check."""
        return {
            "message": "Profile Share API",
            "version": "1.0.0",
            "status": "healthy",
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "features_enabled": {
                "object_storage": bool(settings.S3_ACCESS_KEY_ID or settings.S3_ENDPOINT_URL),
                "profile_cache": bool(settings.REDIS_URI),
            },
        }

    return app


# Create the FastAPI app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.ENVIRONMENT == "development",
        log_level="info",
    )
