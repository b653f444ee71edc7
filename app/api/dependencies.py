"""
FastAPI dependencies.

Services are created once on startup (see app.core.store_manager) and
attached to app.state; these functions hand them to endpoints.
"""

import secrets
from typing import Optional

from fastapi import Request

from app.core.exceptions import UnauthorizedError
from app.core.setting import Settings
from app.services.link_store import LinkStore
from app.services.stats_service import StatsService
from app.services.url_service import LinkService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_link_store(request: Request) -> LinkStore:
    return request.app.state.link_store


def get_link_service(request: Request) -> LinkService:
    return request.app.state.link_service


def get_stats_service(request: Request) -> StatsService:
    return request.app.state.stats_service


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request.

    Handles proxies and load balancers by checking X-Forwarded-For header.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded_for.split(",")[0].strip()

    return request.client.host if request.client else "unknown"


def check_admin_key(admin_key: Optional[str], settings: Settings) -> None:
    """
    Raises:
        UnauthorizedError: If the key is missing, wrong, or no admin key is configured
    """
    if not admin_key or not settings.ADMIN_KEY:
        raise UnauthorizedError()
    if not secrets.compare_digest(admin_key.encode(), settings.ADMIN_KEY.encode()):
        raise UnauthorizedError()
