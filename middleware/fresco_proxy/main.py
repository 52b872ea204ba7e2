"""
FastAPI Application Factory
===========================

Entry point for the web server hosting the Fresco API proxy.

Architecture:
    Web Clients → Web Server (this service) → Fresco API

Routers:
    - /api/*        : Requests forwarded to the Fresco API (prefix configurable)
    - /health       : Health check endpoint

Environment Variables Required:
    - API_URL: Fresco API base URL (e.g., "https://api.fresconews.com")
    - API_VERSION: API version prefix (default: v2)
    - API_CLIENT_ID / API_CLIENT_SECRET: Client credentials for Basic auth
    - SESSION_SECRET: Secret for signing session cookies
    - DEV: Enable request diagnostics (default: false)
    - LOG_LEVEL: Logging level (default: INFO)

Running the Service:
    Development:
        uvicorn fresco_proxy.main:create_app --factory --reload --port 8080

    Production:
        uvicorn fresco_proxy.main:create_app --factory --host 0.0.0.0 --port 8080 --workers 4
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Dict, Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from . import __version__
from .auth.refresh import BearerRefresher, SessionBearerRefresher
from .config import Settings, get_settings, log_configuration_report
from .proxy.client import ApiClient
from .proxy.routes import proxy_router
from .proxy.transport import TransportExecutor


# Configure structured JSON logging
def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s", "module": "%(module)s", "function": "%(funcName)s"}',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def create_app(
    settings: Optional[Settings] = None,
    refresher: Optional[BearerRefresher] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Application factory function.

    Creates and configures the FastAPI application instance with:
        - Lifespan management (shared HTTP client and ApiClient)
        - Session and CORS middleware
        - Proxy router
        - Exception handlers

    Args:
        settings: Settings to use instead of the environment
        refresher: Bearer refresher to use instead of SessionBearerRefresher
        transport: httpx transport for the shared client (tests use MockTransport)

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.

        Startup: configure logging, open the shared HTTP client, build the
        ApiClient. Shutdown: close the HTTP client.
        """
        setup_logging(settings.LOG_LEVEL)
        logger = logging.getLogger("fresco_proxy.main")

        log_configuration_report(settings, logger)

        http_client = httpx.AsyncClient(
            timeout=settings.API_TIMEOUT_SECONDS,
            follow_redirects=True,
            transport=transport,
        )
        app.state.http_client = http_client
        app.state.api_client = ApiClient(
            TransportExecutor(http_client, settings),
            refresher or SessionBearerRefresher(http_client, settings),
        )

        logger.info(
            "Proxy service started",
            extra={"api_base_url": settings.api_base_url, "dev": settings.DEV}
        )

        yield

        logger.info("Shutting down proxy service")
        app.state.api_client = None
        await http_client.aclose()

    app = FastAPI(
        title="Fresco API Proxy",
        description="Forwards web client requests to the Fresco API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET,
        session_cookie=settings.SESSION_COOKIE,
        https_only=settings.SESSION_HTTPS_ONLY,
    )

    origins = settings.allowed_origins_list
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )

    # Health check endpoint
    @app.get("/health", tags=["System"])
    async def health_check() -> Dict[str, str]:
        """Return service status and basic metadata."""
        return {
            "status": "ok",
            "service": "fresco-proxy",
            "version": __version__
        }

    # Root endpoint
    @app.get("/", tags=["System"])
    async def root() -> Dict[str, object]:
        return {
            "service": "fresco-proxy",
            "version": __version__,
            "endpoints": {
                "health": "/health",
                "proxy": settings.PROXY_PREFIX or "/",
            }
        }

    # Proxy router last, its catch-all path must not shadow the system endpoints
    app.include_router(
        proxy_router,
        prefix=settings.PROXY_PREFIX,
        tags=["Fresco API Proxy"]
    )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Global exception handler for unhandled errors.

        Logs the error and returns a standardized error response.
        """
        logger = logging.getLogger("fresco_proxy.main")
        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "exception_type": type(exc).__name__
            },
            exc_info=True
        )

        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred",
                "detail": str(exc) if settings.DEV else None
            }
        )

    return app


if __name__ == "__main__":
    """
    Direct execution entry point.

    This allows running the service directly with: python -m fresco_proxy.main
    However, using the uvicorn command is recommended for production.
    """
    settings = get_settings()

    uvicorn.run(
        "fresco_proxy.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8080,
        reload=settings.DEV,
        log_level=settings.LOG_LEVEL.lower()
    )
