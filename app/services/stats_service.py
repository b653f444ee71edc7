"""
Statistics Service

This service aggregates statistics for the home page, the /stats and
/health endpoints and the admin data export.

Design Decisions:
- Home page stats degrade to zeros when the store cannot be read
- Health reports unhealthy when the store cannot be read, using the
  ReadResult of the store instead of catching exceptions
"""

import platform
import sys
import time
from typing import Optional

from app.core.exceptions import StoreError
from app.db.models import utc_now_iso
from app.services.link_store import LinkStore
from app.services.url_service import LinkService

try:
    import resource
except ImportError:  # Windows
    resource = None

EMPTY_STATS = {"totalLinks": 0, "totalClicks": 0, "createdAt": None, "updatedAt": None}


def format_uptime(seconds: float) -> str:
    hours, remainder = divmod(int(seconds), 3600)
    return f"{hours}h {remainder // 60}m"


def memory_usage_mb() -> dict:
    """Peak resident memory of the process in MB, as reported by the OS."""
    if resource is None:
        return {"peakRss": None}

    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # ru_maxrss is in bytes on macOS, kilobytes elsewhere
    divisor = 1024 * 1024 if sys.platform == "darwin" else 1024
    peak_mb = round(peak / divisor, 2)
    return {"peakRss": peak_mb}


class StatsService:
    """
    Service for retrieving global statistics and health information.
    """

    def __init__(self, store: LinkStore, link_service: LinkService, max_requests_per_hour: int):
        self.store = store
        self.link_service = link_service
        self.max_requests_per_hour = max_requests_per_hour
        self.started_at = time.monotonic()

    def uptime(self) -> str:
        return format_uptime(time.monotonic() - self.started_at)

    async def get_home_stats(self) -> tuple[dict, Optional[str]]:
        """
        Stats for the home page.

        Returns:
            (stats, error) where error is a user-facing message when the
            store could not be read
        """
        result = await self.store.read_all()
        if not result.ok:
            return dict(EMPTY_STATS), "Failed to load statistics"
        return LinkStore.summarize(result.table), None

    async def get_global_stats(self) -> dict:
        stats = await self.store.get_stats()
        return {
            **stats,
            "server": {
                "uptime": self.uptime(),
                "memory": memory_usage_mb(),
                "cache": self.link_service.cache_stats(),
                "pythonVersion": platform.python_version(),
            },
            "rateLimit": {
                "maxPerHour": self.max_requests_per_hour,
            },
        }

    async def get_health(self) -> dict:
        """
        Raises:
            StoreError: If the link document cannot be read
        """
        result = await self.store.read_all()
        if not result.ok:
            raise StoreError(result.error)

        stats = LinkStore.summarize(result.table)
        return {
            "status": "healthy",
            "uptime": self.uptime(),
            "gist": {
                "connected": True,
                "totalLinks": stats["totalLinks"],
                "totalClicks": stats["totalClicks"],
            },
            "cache": self.link_service.cache.stats(),
            "memory": {"heapUsed": memory_usage_mb()["peakRss"]},
        }

    async def export_links(self) -> dict:
        table = (await self.store.read_all()).table
        links = {slug: link.to_json() for slug, link in table.links.items()}
        return {
            "links": links,
            "stats": LinkStore.summarize(table),
            "metadata": {
                "totalLinks": len(links),
                "exportTime": utc_now_iso(),
            },
        }

    async def list_links(self, page: int, limit: int) -> tuple[list, int]:
        """One page of links, newest first, plus the total link count."""
        links = sorted(
            (await self.store.get_all_links()).values(),
            key=lambda link: link.created_at or "",
            reverse=True,
        )
        start = (page - 1) * limit
        return [link.to_json() for link in links[start:start + limit]], len(links)
