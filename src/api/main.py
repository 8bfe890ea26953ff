"""
FastAPI main application.

JSON HTTP API for the validator engine.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import time
from typing import Callable, Optional

from modules.validation.core.exceptions import LoopDetected, RateLimitExceeded
from modules.validation.engine import ValidationService, build_validation_service
from modules.validation.storage import RedisCacheBackend
from src.api.config import APISettings, get_api_settings
from src.api.v1.dependencies.rate_limit import RateLimiter
from src.api.v1.dependencies.redis_rate_limiter import RedisRateLimiter
from src.api.v1.models.responses import HealthResponse
from src.api.v1.router import api_router
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)


def _cors_headers(settings: APISettings) -> dict:
    return {
        "Access-Control-Allow-Origin": settings.CORS_ALLOW_ORIGIN,
        "Access-Control-Allow-Methods": ", ".join(settings.CORS_METHODS),
        "Access-Control-Allow-Headers": ", ".join(settings.CORS_HEADERS),
    }


def _internal_error(settings: APISettings, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled exception: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "detail": str(exc) if settings.DEBUG else None
        }
    )


def attach_service(app: FastAPI, service: ValidationService) -> None:
    """Serve a validation service; the rate limiter shares its Redis store when it has one."""
    app.state.validation_service = service
    if isinstance(service.cache, RedisCacheBackend):
        app.state.rate_limiter = RedisRateLimiter(client=service.cache.client)


def create_application(
    settings: Optional[APISettings] = None,
    service: Optional[ValidationService] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: API settings (defaults to environment settings)
        service: Validation service to serve; built from settings on
                 startup when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_api_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.API_TITLE} v{settings.API_VERSION}")
        logger.info(f"Environment: {settings.ENVIRONMENT}")
        if app.state.validation_service is None:
            # Fails startup on a malformed validator table
            attach_service(app, build_validation_service())
        yield
        logger.info(f"Shutting down {settings.API_TITLE}")
        app.state.validation_service.cache.close()

    app = FastAPI(
        title=settings.API_TITLE,
        description=settings.API_DESCRIPTION,
        version=settings.API_VERSION,
        docs_url="/docs" if settings.ENABLE_DOCS else None,
        redoc_url="/redoc" if settings.ENABLE_DOCS else None,
        openapi_url="/openapi.json" if settings.ENABLE_DOCS else None,
        lifespan=lifespan,
    )

    app.state.api_settings = settings
    app.state.validation_service = None
    app.state.rate_limiter = RateLimiter()
    if service is not None:
        service.registry.verify_all()
        attach_service(app, service)

    # Add request timing middleware
    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next: Callable):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)

        remaining = getattr(request.state, "rate_limit_remaining", None)
        if remaining is not None:
            response.headers["X-RateLimit-Limit"] = str(request.state.rate_limit_limit)
            response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response

    # CORS headers on every response, errors included; preflight answered directly
    if settings.ENABLE_CORS:
        @app.middleware("http")
        async def add_cors_headers(request: Request, call_next: Callable):
            if request.method == "OPTIONS":
                return Response(status_code=204, headers=_cors_headers(settings))
            try:
                response = await call_next(request)
            except Exception as exc:
                response = _internal_error(settings, exc)
            response.headers.update(_cors_headers(settings))
            return response

    # Include API routers
    app.include_router(api_router, prefix=settings.API_PREFIX)

    # Health check endpoint
    @app.get("/health", tags=["health"], response_model=HealthResponse)
    def health_check(request: Request):
        """
        Health check endpoint.

        Returns:
            Health status of the API
        """
        service = request.app.state.validation_service
        return {
            "status": "healthy",
            "version": settings.API_VERSION,
            "environment": settings.ENVIRONMENT,
            "cache_backend": service.cache.backend_name if service is not None else "uninitialized",
            "cache_healthy": service.cache.health_check() if service is not None else False,
        }

    # Root endpoint
    @app.get("/", tags=["root"])
    def root():
        """
        Root endpoint with API information.

        Returns:
            API information and available endpoints
        """
        return {
            "name": settings.API_TITLE,
            "version": settings.API_VERSION,
            "docs": "/docs" if settings.ENABLE_DOCS else "disabled",
            "health": "/health",
            "validators": f"{settings.API_PREFIX}/validators",
            "extract": f"{settings.API_PREFIX}/extract",
        }

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException):
        """Render HTTP errors as {"error": ...}."""
        content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(_request: Request, exc: RateLimitExceeded):
        return JSONResponse(
            status_code=429,
            content={"error": "Rate limit exceeded"},
            headers={
                "X-RateLimit-Limit": str(exc.limit),
                "X-RateLimit-Remaining": "0",
                "Retry-After": str(exc.retry_after),
            }
        )

    @app.exception_handler(LoopDetected)
    async def loop_detected_handler(_request: Request, exc: LoopDetected):
        return JSONResponse(
            status_code=429,
            content={"error": "Validation loop detected"},
            headers={"Retry-After": str(exc.retry_after)}
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(_request: Request, exc: RequestValidationError):
        logger.debug(f"Rejected request body: {exc.errors()}")
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(_request: Request, exc: Exception):
        """
        Global exception handler for unhandled errors.

        Args:
            _request: FastAPI request
            exc: Exception raised

        Returns:
            JSON error response
        """
        return _internal_error(settings, exc)

    return app


# Create application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn

    api_settings = get_api_settings()
    uvicorn.run(
        "src.api.main:app",
        host=api_settings.API_HOST,
        port=api_settings.API_PORT,
        reload=api_settings.DEBUG,
        log_level=api_settings.LOG_LEVEL.lower()
    )
