"""
Background Task Helpers

Work scheduled to run after the response has been sent. Failures are
logged and never reach the request that scheduled them.
"""

import logging

from app.services.link_store import LinkStore

logger = logging.getLogger(__name__)


async def increment_click_background(store: LinkStore, slug: str) -> None:
    """
    Background task to record a click served from the handler cache.

    Args:
        store: Link store to update
        slug: The slug that was visited
    """
    try:
        link = await store.increment_click(slug)
        if link is None:
            logger.warning(f"Click for {slug} dropped, link no longer exists")
    except Exception as e:
        logger.error(
            f"Failed to increment click count for {slug}: {str(e)}",
            exc_info=True
        )
