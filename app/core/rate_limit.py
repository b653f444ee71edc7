"""
Rate Limiting Configuration

This module provides rate limiting functionality for API endpoints.
Rate limiting prevents abuse and ensures fair usage.

Design Decisions:
- Uses slowapi for rate limiting (lightweight, FastAPI-compatible)
- Fixed windows: counters reset when the window expires, they do not slide
- IP-based limiting
- Two limits:
  - "api": one bucket per IP shared by /shorten, /stats, /stats/{slug},
    /health and /delete.html (MAX_REQUESTS_PER_HOUR per hour)
  - "create": link creation only (CREATE_LINK_LIMIT, 10 per 15 minutes)
- Limit values follow the Settings passed to create_app(); the limiter is
  process-wide, so the most recently built app sets them
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.api.responses import ApiResponse
from app.core.setting import Settings, settings

# Initialize rate limiter
# Uses IP address for rate limiting
limiter = Limiter(
    key_func=get_remote_address,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)

# Format: "count/period" (e.g., "35/hour", "10/15 minutes")
# Replaced by configure_rate_limits() when an app is built
RATE_LIMITS = {
    "api": f"{settings.MAX_REQUESTS_PER_HOUR}/hour",
    "create": settings.CREATE_LINK_LIMIT,
}

CREATE_LIMIT_MESSAGE = "Too many link creation attempts. Please wait 15 minutes."


def configure_rate_limits(app_settings: Settings) -> None:
    """Apply the rate limit settings of the app being built."""
    limiter.enabled = app_settings.RATE_LIMIT_ENABLED
    RATE_LIMITS["api"] = f"{app_settings.MAX_REQUESTS_PER_HOUR}/hour"
    RATE_LIMITS["create"] = app_settings.CREATE_LINK_LIMIT


def api_limit_message() -> str:
    max_per_hour = RATE_LIMITS["api"].split("/")[0]
    return f"Too many requests. Maximum {max_per_hour} requests per hour."


# Limits are looked up per request so they follow configure_rate_limits()
api_limit = limiter.shared_limit(lambda: RATE_LIMITS["api"], scope="api", error_message=api_limit_message)
create_limit = limiter.limit(lambda: RATE_LIMITS["create"], error_message=CREATE_LIMIT_MESSAGE)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Render a rate limit violation in the standard error envelope."""
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=ApiResponse.error(exc.detail, code="RATE_LIMITED"),
    )
