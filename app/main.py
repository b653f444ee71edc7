"""
FastAPI Application Entry Point

This module initializes the FastAPI application and configures:
- API routes, HTML pages and admin endpoints
- Middleware (logging, CORS)
- Rate limiting and error handlers
- Link store startup/shutdown

Design Decisions:
- create_app() builds a fully configured app; the module-level `app` is
  what uvicorn serves
- The link store is created on startup and injected through app.state
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import admin, endpoints, pages
from app.api.responses import error_response
from app.core.logging_config import configure_logging
from app.core.rate_limit import configure_rate_limits, limiter, rate_limit_exceeded_handler
from app.core.setting import Settings, settings as default_settings
from app.core.store_manager import initialize_store, shutdown_store
from app.middleware.logging import add_logging_middleware

logger = logging.getLogger(__name__)

ENDPOINTS = [
    ("GET", "/", "Homepage"),
    ("POST", "/shorten", "Create short URL"),
    ("GET", "/r/{slug}", "Redirect to URL"),
    ("GET", "/stats", "Global statistics"),
    ("GET", "/stats/{slug}", "Link statistics"),
    ("GET", "/health", "Health check"),
    ("GET", "/delete.html?slug=", "Delete page"),
    ("POST", "/delete.html?slug=", "Delete action"),
    ("GET", "/linkdata?adminKey=", "All data (admin)"),
    ("GET", "/clear-cache?adminKey=", "Clear cache (admin)"),
]


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()]
    return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request", code="VALIDATION_ERROR", errors=errors)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        logger.info(f"404: {request.method} {request.url.path}")
        return pages.templates.TemplateResponse(
            request,
            "404.html",
            {"title": "404 Not Found", "url": request.url.path},
            status_code=status.HTTP_404_NOT_FOUND,
        )
    return error_response(exc.status_code, str(exc.detail))


async def server_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    app_settings = request.app.state.settings
    return pages.templates.TemplateResponse(
        request,
        "500.html",
        {
            "title": "500 Server Error",
            "error": str(exc) if app_settings.ENV_SETTING.value == "dev" else None,
        },
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use (defaults to the environment settings)
        transport: Optional HTTP transport for the remote store client
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Locate or create the link document; the app does not start without it
        await initialize_store(app, settings, transport=transport)
        logger.info(f"Domain: {settings.domain}")
        logger.info(f"Rate limit: {settings.MAX_REQUESTS_PER_HOUR} requests/hour")
        logger.info(f"Environment: {settings.ENV_SETTING.value}")
        for method, path, label in ENDPOINTS:
            logger.info(f"  {method:<6} {path:<24} - {label}")
        yield
        await shutdown_store(app)

    app = FastAPI(
        title="NVSURL - URL Shortener",
        description="URL shortener that keeps its link table in a GitHub Gist",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    configure_rate_limits(settings)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, server_error_handler)

    add_logging_middleware(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(pages.router, tags=["Pages"])
    app.include_router(endpoints.router, tags=["URL Shortener"])
    app.include_router(admin.router, tags=["Admin"])

    return app


configure_logging(default_settings.LOG_LEVEL)
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=default_settings.PORT)
