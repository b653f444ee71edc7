"""
FastAPI Endpoints for the URL Shortener JSON API

This module defines the REST endpoints with minimal logic.
Endpoints only handle:
- Request parsing
- Rate limiting
- Translating service exceptions into HTTP responses
- Delegating to the service layer

Design Principles:
- Thin endpoints: Only parsing, rate limiting and error mapping
- Service layer: All business logic
- Every JSON body uses the ApiResponse envelope
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from app.api.dependencies import (
    get_client_ip,
    get_link_service,
    get_link_store,
    get_stats_service,
)
from app.api.responses import ApiResponse, error_response
from app.api.schemas import ShortenRequest
from app.core.exceptions import (
    LinkNotFoundError,
    SlugAllocationError,
    SlugConflictError,
    StoreError,
    ValidationError,
)
from app.core.rate_limit import api_limit, create_limit
from app.services.background_tasks import increment_click_background
from app.services.link_store import LinkStore
from app.services.stats_service import StatsService
from app.services.url_service import LinkService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/shorten",
    status_code=status.HTTP_201_CREATED,
    summary="Create a short URL",
    description="Takes a long URL (and optionally a custom slug) and returns the stored link"
)
@api_limit
@create_limit
async def shorten_url(
    request: Request,  # Required for rate limiting (slowapi expects parameter named 'request')
    body: ShortenRequest,
    link_service: LinkService = Depends(get_link_service),
) -> JSONResponse:
    """
    Create a new short link.

    Returns:
        201 with the link record

    Raises (as responses):
        400: Validation failed
        409: Custom slug already exists
        429: Rate limit exceeded
        500: Slug allocation or store write failed
    """
    try:
        link = await link_service.create_link(
            body.to_payload(),
            ip=get_client_ip(request),
            user_agent=request.headers.get("User-Agent"),
        )
    except ValidationError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, str(e), code="VALIDATION_ERROR", errors=e.errors)
    except SlugConflictError as e:
        return error_response(status.HTTP_409_CONFLICT, str(e), code="SLUG_CONFLICT")
    except SlugAllocationError as e:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e), code="SLUG_ALLOCATION_FAILED")
    except StoreError as e:
        logger.error(f"Shorten error: {e}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to shorten URL")

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=ApiResponse.success(link, "URL shortened successfully"),
    )


@router.get(
    "/r/{slug}",
    status_code=status.HTTP_301_MOVED_PERMANENTLY,
    summary="Redirect to original URL",
    description="Looks up a slug, counts the click and redirects to the original URL"
)
async def redirect_to_url(
    slug: str,
    background_tasks: BackgroundTasks,
    link_service: LinkService = Depends(get_link_service),
    store: LinkStore = Depends(get_link_store),
) -> RedirectResponse:
    """
    Redirect to the original URL for a slug.

    A handler-cache hit redirects immediately and records the click in a
    background task. A miss records the click before redirecting.
    Unknown slugs and failures redirect to the home page with an error flag.
    """
    try:
        resolution = await link_service.resolve(slug)
    except Exception as e:
        logger.error(f"Redirect error for {slug}: {e}", exc_info=True)
        return RedirectResponse(url="/?error=server-error", status_code=status.HTTP_302_FOUND)

    if resolution is None:
        return RedirectResponse(url="/?error=link-not-found", status_code=status.HTTP_302_FOUND)

    if resolution.pending_click:
        background_tasks.add_task(increment_click_background, store, slug)

    return RedirectResponse(
        url=resolution.link.original_url,
        status_code=status.HTTP_301_MOVED_PERMANENTLY
    )


@router.get(
    "/stats",
    summary="Global statistics",
    description="Totals from the link table plus server, cache and rate limit information"
)
@api_limit
async def get_global_stats(
    request: Request,  # Required for rate limiting
    stats_service: StatsService = Depends(get_stats_service),
) -> JSONResponse:
    data = await stats_service.get_global_stats()
    return JSONResponse(content=ApiResponse.success(data, "Global statistics"))


@router.get(
    "/stats/{slug}",
    summary="Get link statistics",
    description="Returns the stored record for a slug, including its click count"
)
@api_limit
async def get_link_stats(
    slug: str,
    request: Request,  # Required for rate limiting
    link_service: LinkService = Depends(get_link_service),
) -> JSONResponse:
    """
    Raises (as responses):
        404: Slug not found
        429: Rate limit exceeded
    """
    try:
        link = await link_service.get_link(slug)
    except LinkNotFoundError as e:
        return error_response(status.HTTP_404_NOT_FOUND, str(e), code="NOT_FOUND")

    return JSONResponse(content=ApiResponse.success(link, "Link statistics"))


@router.get(
    "/health",
    summary="Health check",
    description="Reports store connectivity, cache and memory; 503 when the store is unreachable"
)
@api_limit
async def health_check(
    request: Request,  # Required for rate limiting
    stats_service: StatsService = Depends(get_stats_service),
) -> JSONResponse:
    try:
        data = await stats_service.get_health()
    except StoreError as e:
        logger.error(f"Health check failed: {e}")
        return error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "Service unhealthy - Gist connection failed",
            code="SERVICE_UNHEALTHY",
        )

    return JSONResponse(content=ApiResponse.success(data, "Server is healthy"))
