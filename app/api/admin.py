"""
Admin Endpoints

Protected by a shared secret passed as the `adminKey` query parameter and
compared against ADMIN_KEY. Not rate limited.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from app.api.dependencies import check_admin_key, get_link_service, get_settings, get_stats_service
from app.api.responses import ApiResponse, error_response
from app.core.exceptions import UnauthorizedError
from app.core.setting import Settings
from app.db.models import utc_now_iso
from app.services.stats_service import StatsService
from app.services.url_service import LinkService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/clear-cache", summary="Clear all caches (admin)")
async def clear_cache(
    adminKey: Optional[str] = None,
    link_service: LinkService = Depends(get_link_service),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    try:
        check_admin_key(adminKey, settings)
    except UnauthorizedError as e:
        return error_response(status.HTTP_401_UNAUTHORIZED, str(e), code="UNAUTHORIZED")

    link_service.clear_caches()
    return JSONResponse(
        content=ApiResponse.success({"clearedAt": utc_now_iso()}, "All caches cleared successfully")
    )


@router.get("/linkdata", summary="Export all link data (admin)")
async def get_all_link_data(
    adminKey: Optional[str] = None,
    page: Optional[int] = Query(None, ge=1),
    limit: int = Query(50, ge=1, le=500),
    stats_service: StatsService = Depends(get_stats_service),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    try:
        check_admin_key(adminKey, settings)
    except UnauthorizedError as e:
        return error_response(status.HTTP_401_UNAUTHORIZED, str(e), code="UNAUTHORIZED")

    if page is not None:
        items, total = await stats_service.list_links(page, limit)
        return JSONResponse(content=ApiResponse.paginate(items, page=page, limit=limit, total=total))

    data = await stats_service.export_links()
    return JSONResponse(content=ApiResponse.success(data, "All link data retrieved"))
