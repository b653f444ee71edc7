"""
HTML Pages

Server-rendered pages: the home page with the shorten form and global
counters, and the delete page which doubles as a JSON delete endpoint.
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates

from app.api.dependencies import get_link_service, get_settings, get_stats_service
from app.api.responses import ApiResponse, error_response
from app.core.exceptions import LinkNotFoundError, StoreError
from app.core.rate_limit import api_limit
from app.core.setting import Settings
from app.services.stats_service import StatsService
from app.services.url_service import LinkService

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

HOME_TITLE = "NVSURL - URL Shortener"
DELETE_TITLE = "Delete URL - NVSURL"

ERROR_MESSAGES = {
    "link-not-found": "That short link does not exist.",
    "server-error": "Something went wrong, please try again.",
}

router = APIRouter()


def wants_json(request: Request) -> bool:
    return request.headers.get("content-type", "").startswith("application/json")


@router.get("/", summary="Home page", include_in_schema=False)
async def home(
    request: Request,
    error: Optional[str] = None,
    stats_service: StatsService = Depends(get_stats_service),
    settings: Settings = Depends(get_settings),
):
    stats, stats_error = await stats_service.get_home_stats()
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "title": HOME_TITLE,
            "stats": stats,
            "domain": settings.domain,
            "error": stats_error,
            "notice": ERROR_MESSAGES.get(error) if error else None,
        },
    )


@router.api_route("/delete.html", methods=["GET", "POST"], summary="Delete page and action")
@api_limit
async def delete_link(
    request: Request,  # Required for rate limiting
    slug: Optional[str] = None,
    link_service: LinkService = Depends(get_link_service),
    settings: Settings = Depends(get_settings),
):
    """
    GET without slug: input form.
    GET with slug: confirmation page.
    POST with slug: delete, answering in JSON when the request is JSON.
    """
    context = {"title": DELETE_TITLE, "domain": settings.domain, "slug": slug}

    if not slug:
        return templates.TemplateResponse(request, "delete.html", context)

    try:
        if request.method == "POST":
            return await _delete(request, slug, link_service, context)

        link = await link_service.find_link(slug)
        return templates.TemplateResponse(request, "delete.html", {**context, "link": link})
    except StoreError as e:
        logger.error(f"Delete error for {slug}: {e}")
        if wants_json(request):
            return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to process deletion")
        return templates.TemplateResponse(
            request,
            "delete.html",
            {**context, "error": "Failed to process deletion"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


async def _delete(request: Request, slug: str, link_service: LinkService, context: dict):
    try:
        link = await link_service.delete_link(slug)
    except LinkNotFoundError:
        if wants_json(request):
            return error_response(status.HTTP_404_NOT_FOUND, "Link not found", code="NOT_FOUND")
        return templates.TemplateResponse(
            request,
            "delete.html",
            {**context, "error": "Link not found"},
            status_code=status.HTTP_404_NOT_FOUND,
        )

    if wants_json(request):
        return JSONResponse(
            content=ApiResponse.success(
                {"deletedSlug": slug, "originalUrl": link.original_url},
                "Link deleted successfully",
            )
        )

    return templates.TemplateResponse(
        request,
        "delete.html",
        {**context, "success": True, "deletedSlug": slug, "originalUrl": link.original_url},
    )
