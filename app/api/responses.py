"""
Response Envelope

Every JSON response uses the same envelope:

    success: {"success": true, "data": ..., "message": ..., "timestamp": ..., "meta": {...}}
    error:   {"success": false, "message": ..., "timestamp": ..., "code"?: ..., "errors"?: [...]}
"""

import math
from typing import Any, List, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.db.models import utc_now_iso

SERVER_NAME = "NVSURL"
SERVER_VERSION = "1.0.0"


class ApiResponse:
    """Builders for the response envelope."""

    @staticmethod
    def success(data: Any = None, message: str = "Success", meta: Optional[dict] = None) -> dict:
        return {
            "success": True,
            "data": jsonable_encoder(data, by_alias=True),
            "message": message,
            "timestamp": utc_now_iso(),
            "meta": {"server": SERVER_NAME, "version": SERVER_VERSION, **(meta or {})},
        }

    @staticmethod
    def error(message: str = "Error", code: Optional[str] = None, errors: Optional[List[str]] = None) -> dict:
        body = {
            "success": False,
            "message": message,
            "timestamp": utc_now_iso(),
        }
        if code:
            body["code"] = code
        if errors:
            body["errors"] = errors
        return body

    @staticmethod
    def paginate(data: list, page: int = 1, limit: int = 10, total: int = 0) -> dict:
        total_pages = math.ceil(total / limit) if limit else 0
        return {
            "success": True,
            "data": jsonable_encoder(data, by_alias=True),
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": total_pages,
                "hasNext": page < total_pages,
                "hasPrev": page > 1,
            },
            "timestamp": utc_now_iso(),
        }


def error_response(
    status_code: int,
    message: str,
    code: Optional[str] = None,
    errors: Optional[List[str]] = None,
) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ApiResponse.error(message, code, errors))
