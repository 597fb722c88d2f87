"""
FastAPI Bill Proxy Application Factory
======================================

Main entry point for the HTTP service that sits between callers and the
telecom billing provider.

Architecture:
    Client → Bill Proxy (this service) → Billing Provider API

Routes:
    - /bill/{phone} : Bill lookup proxied to the provider
    - /health       : Health check endpoint
    - /             : Service information

Environment Variables:
    - PROVIDER_BASE_URL: Provider API base URL (required)
    - PROVIDER_API_KEY: Provider API key (required)
    - PORT: Server port (default: 3000)
    - HOST: Bind address (default: 0.0.0.0)
    - PROVIDER_TIMEOUT_SECONDS: Outbound timeout (default: 10.0)
    - LOG_LEVEL: Logging level (default: INFO)
    - ALLOWED_ORIGINS: Comma-separated CORS origins (optional)

Running the Service:
    Development:
        uvicorn billproxy.main:app --reload --port 3000

    Using configured HOST/PORT:
        bill-proxy
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import Settings, get_settings
from .errors import BillProxyError
from .logs import setup_logging
from .models import HealthResponse
from .provider import create_async_client
from .proxy import proxy_router

SERVICE_NAME = "bill-proxy"


class AppState:
    """
    Application state container.

    Holds the shared provider client and the loaded settings.
    """
    def __init__(self):
        self.provider_client: Optional[httpx.AsyncClient] = None
        self.settings: Optional[Settings] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup: open the shared provider client.
    Shutdown: close it.
    """
    settings = get_settings()
    app_state = app.state.app_state
    app_state.settings = settings

    setup_logging(settings.LOG_LEVEL)
    logger = logging.getLogger("billproxy.main")

    app_state.provider_client = create_async_client(settings)
    logger.info(
        "Starting bill proxy",
        extra={
            "provider_url": settings.provider_base_url_str,
            "port": settings.PORT,
            "log_level": settings.LOG_LEVEL,
        }
    )

    yield

    logger.info("Shutting down bill proxy")
    await app_state.provider_client.aclose()
    app_state.provider_client = None


def create_application() -> FastAPI:
    """
    Application factory function.

    Creates and configures the FastAPI application instance with:
        - Lifespan management
        - CORS middleware (when ALLOWED_ORIGINS is set)
        - Route handlers
        - Exception handlers

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Bill Proxy",
        description="Proxy for querying mobile bills from a telecom billing provider",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.app_state = AppState()

    if settings.allowed_origins_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins_list,
            allow_methods=["GET", "OPTIONS"],
            allow_headers=["*"],
        )

    app.include_router(proxy_router, tags=["Bills"])

    @app.get("/health", tags=["System"], response_model=HealthResponse)
    async def health_check() -> Dict[str, str]:
        """
        Health check endpoint.

        Returns:
            dict: Service health information
        """
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "version": __version__,
        }

    @app.get("/", tags=["System"])
    async def root() -> Dict[str, Any]:
        """Service metadata and available endpoints"""
        return {
            "service": SERVICE_NAME,
            "version": __version__,
            "endpoints": {
                "bill": "/bill/{phone}",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.exception_handler(BillProxyError)
    async def bill_proxy_error_handler(request: Request, exc: BillProxyError) -> JSONResponse:
        """Render a BillProxyError with its own status and body"""
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Global exception handler for unhandled errors.

        Args:
            request: FastAPI request object
            exc: Exception that was raised

        Returns:
            JSONResponse: Generic 500 error body
        """
        logger = logging.getLogger("billproxy.main")
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
            content={"error": BillProxyError.message},
        )

    return app


# Create app instance for uvicorn
app = create_application()


def run() -> None:
    """Run the service with uvicorn using HOST/PORT from settings"""
    settings = get_settings()

    uvicorn.run(
        "billproxy.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
