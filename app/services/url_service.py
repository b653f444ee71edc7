"""
Link Service

This service handles the core business logic of the shortener:
- Validating shorten requests
- Allocating slugs (random with retry, or custom with conflict check)
- Resolving slugs for redirects and counting clicks
- Deleting links and keeping both cache layers consistent

Design Decisions:
- Two cache layers exist: this service's handler cache (5 minutes by
  default) and the LinkStore's own cache (2 minutes). Every invalidation
  goes through this service, which evicts both
- Random slugs: 5-8 base62 characters, retried up to MAX_SLUG_ATTEMPTS times
  against the store. Existence checks are not atomic with the write
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from app.core.cache import TTLCache
from app.core.exceptions import (
    LinkNotFoundError,
    SlugAllocationError,
    SlugConflictError,
    ValidationError,
)
from app.core.validators import MAX_SLUG_ATTEMPTS, generate_slug, validate_shorten_request
from app.db.models import LinkMetadata, LinkRecord
from app.services.link_store import LinkStore

logger = logging.getLogger(__name__)


@dataclass
class Resolution:
    """
    Result of resolving a slug for a redirect.

    `pending_click` is True when the click still has to be recorded in the
    store (the link came from the handler cache).
    """
    link: LinkRecord
    pending_click: bool = False


class LinkService:
    """
    Orchestrates validation, the link store and the handler-level cache.
    """

    def __init__(
        self,
        store: LinkStore,
        domain: str,
        cache_ttl_seconds: float = 300,
        slug_generator: Callable[[], str] = generate_slug,
        clock=None,
    ):
        """
        Args:
            store: Link store client
            domain: Base URL used for short URLs
            cache_ttl_seconds: TTL of the handler-level cache
            slug_generator: Random slug source
            clock: Optional monotonic clock for the cache (tests)
        """
        self.store = store
        self.domain = domain.rstrip("/")
        self.cache = TTLCache(cache_ttl_seconds, clock=clock)
        self.slug_generator = slug_generator

    def short_url_for(self, slug: str) -> str:
        return f"{self.domain}/r/{slug}"

    async def allocate_slug(self) -> str:
        """
        Find a random slug that is not in the store.

        Raises:
            SlugAllocationError: After MAX_SLUG_ATTEMPTS collisions
        """
        for attempt in range(1, MAX_SLUG_ATTEMPTS + 1):
            slug = self.slug_generator()
            if await self.store.get_link(slug) is None:
                return slug
            logger.debug(f"Slug collision on attempt {attempt}: {slug}")

        logger.warning(f"Could not allocate a free slug after {MAX_SLUG_ATTEMPTS} attempts")
        raise SlugAllocationError(MAX_SLUG_ATTEMPTS)

    async def create_link(
        self,
        payload: dict,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> LinkRecord:
        """
        Create a short link.

        Args:
            payload: Request body with originalUrl, customSlug, title, description
            ip: Client address recorded in the link metadata
            user_agent: Client user agent recorded in the link metadata

        Returns:
            The stored link

        Raises:
            ValidationError: If the payload is invalid
            SlugConflictError: If the custom slug is taken
            SlugAllocationError: If no random slug could be allocated
            StoreError: If the write fails
        """
        errors = validate_shorten_request(payload)
        if errors:
            raise ValidationError(errors)

        slug = payload.get("customSlug")
        if slug:
            if await self.store.get_link(slug) is not None:
                raise SlugConflictError(slug)
        else:
            slug = await self.allocate_slug()

        record = LinkRecord(
            slug=slug,
            original_url=payload["originalUrl"],
            short_url=self.short_url_for(slug),
            clicks=0,
            title=payload.get("title") or None,
            description=payload.get("description") or None,
            is_active=True,
            metadata=LinkMetadata(ip=ip, user_agent=user_agent, created_via="API"),
        )

        created = await self.store.create_link(slug, record)
        self.cache.set(slug, created)
        logger.info(f"Created link {slug} -> {created.original_url}")
        return created

    async def resolve(self, slug: str) -> Optional[Resolution]:
        """
        Resolve a slug for a redirect.

        On a handler-cache hit the cached copy is bumped by one click and the
        store update is left to the caller (as a background task). On a miss
        the click is recorded in the store before returning.

        Returns:
            Resolution, or None if the slug does not exist
        """
        cached = self.cache.get(slug)
        if cached is not None:
            self.cache.set(slug, cached.model_copy(update={"clicks": cached.clicks + 1}))
            return Resolution(link=cached, pending_click=True)

        link = await self.store.get_link(slug)
        if link is None:
            return None

        updated = await self.store.increment_click(slug)
        self.cache.set(slug, updated or link)
        return Resolution(link=updated or link)

    async def get_link(self, slug: str) -> LinkRecord:
        """
        Raises:
            LinkNotFoundError: If the slug does not exist
        """
        link = await self.store.get_link(slug)
        if link is None:
            raise LinkNotFoundError(slug)
        return link

    async def find_link(self, slug: str) -> Optional[LinkRecord]:
        return await self.store.get_link(slug)

    async def delete_link(self, slug: str) -> LinkRecord:
        """
        Delete a link and evict it from both cache layers.

        Returns:
            The deleted link

        Raises:
            LinkNotFoundError: If the slug does not exist
            StoreError: If the write fails
        """
        link = await self.store.get_link(slug)
        if link is None:
            raise LinkNotFoundError(slug)

        result = await self.store.delete_link(slug)
        self.invalidate(slug)
        if not result["success"]:
            raise LinkNotFoundError(slug)

        logger.info(f"Deleted link {slug}")
        return link

    def invalidate(self, slug: str) -> None:
        self.cache.delete(slug)
        self.store.clear_cache(slug)

    def clear_caches(self) -> None:
        self.cache.clear()
        self.store.clear_cache()
        logger.info("All caches cleared")

    def cache_stats(self) -> dict:
        return {
            "memoryCache": self.cache.stats(),
            "gistCache": self.store.cache_stats(),
        }
