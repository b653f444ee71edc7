"""
Link Store Lifecycle

Builds the link store and the services that use it when the application
starts, and releases the HTTP client on shutdown.

Design:
- One LinkStore per application instance, created on startup and stored on
  app.state; endpoints receive it through dependencies
- Startup fails (and the process does not serve) when the link document can
  be neither located nor created
"""

import logging
from typing import Optional

import httpx
from fastapi import FastAPI

from app.core.setting import Settings
from app.db.gist_adapter import get_document_backend
from app.services.link_store import LinkStore
from app.services.stats_service import StatsService
from app.services.url_service import LinkService

logger = logging.getLogger(__name__)


async def initialize_store(
    app: FastAPI,
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> None:
    """
    Create the link store and services and attach them to app.state.

    Raises:
        StoreInitializationError: If the link document is unavailable
    """
    backend = get_document_backend(settings, transport=transport)
    store = LinkStore(backend, cache_ttl_seconds=settings.STORE_CACHE_TTL_SECONDS)

    try:
        await store.initialize()
    except Exception:
        await store.close()
        raise

    link_service = LinkService(
        store,
        domain=settings.domain,
        cache_ttl_seconds=settings.HANDLER_CACHE_TTL_SECONDS,
    )

    app.state.link_store = store
    app.state.link_service = link_service
    app.state.stats_service = StatsService(
        store,
        link_service,
        max_requests_per_hour=settings.MAX_REQUESTS_PER_HOUR,
    )
    logger.info(f"Link store ready: document={backend.document_id}")


async def shutdown_store(app: FastAPI) -> None:
    """Close the store's HTTP client."""
    store = getattr(app.state, "link_store", None)
    if store is None:
        return

    try:
        await store.close()
        logger.info("Link store closed")
    except Exception as e:
        logger.warning(f"Failed to close link store: {e}")
    app.state.link_store = None
