"""
Link Store Service

Single point of access to the remote link table. Hides the
read-whole/write-whole document model behind per-slug operations.

Design Decisions:
- Explicitly constructed and injected (one instance per application),
  owns its backend handle and its own TTL cache
- Reads never raise: read_all() returns a ReadResult and each caller decides
  whether a failed read degrades to an empty table or is reported
- Writes propagate StoreError to the caller
- Mutations are read-modify-write cycles over the whole document. They are
  serialized within this process by an asyncio.Lock; writers in other
  processes are not coordinated and the last write wins
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from app.core.cache import TTLCache
from app.core.exceptions import StoreError, StoreInitializationError
from app.db.interface import DocumentBackend
from app.db.models import LinkRecord, LinkTable, utc_now_iso

logger = logging.getLogger(__name__)

DATABASE_DESCRIPTION = "URL Shortener Database"


@dataclass
class ReadResult:
    """Outcome of a full-table read: the table, plus the error if the read failed."""
    table: LinkTable
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _serialize(table: LinkTable) -> str:
    return json.dumps(table.to_json(), indent=2)


class LinkStore:
    """
    CRUD-style access to links stored in one remote document.
    """

    def __init__(self, backend: DocumentBackend, cache_ttl_seconds: float = 120, clock=None):
        """
        Args:
            backend: Remote document backend
            cache_ttl_seconds: TTL of the per-slug cache in front of the backend
            clock: Optional monotonic clock for the cache (tests)
        """
        self.backend = backend
        self.cache = TTLCache(cache_ttl_seconds, clock=clock)
        self.last_cache_clear = utc_now_iso()
        self._write_lock = asyncio.Lock()

    async def initialize(self) -> None:
        """
        Locate the configured document, or create a new empty one.

        A configured id that cannot be fetched is dropped and a new document
        is created once.

        Raises:
            StoreInitializationError: If no document could be located or created
        """
        if self.backend.document_id:
            try:
                await self.backend.fetch_document()
                logger.info(f"Using existing Gist: {self.backend.document_id}")
                return
            except StoreError as e:
                logger.error(f"Gist {self.backend.document_id} not found ({e}). Creating new one...")
                self.backend.reset_document()

        try:
            document_id = await self.backend.create_document(
                _serialize(LinkTable.empty()),
                DATABASE_DESCRIPTION,
            )
        except StoreError as e:
            logger.error(f"Failed to create Gist: {e}")
            raise StoreInitializationError("could not locate or create the link document", original_error=e)

        logger.info(f"Gist created: {document_id}")

    async def close(self) -> None:
        await self.backend.close()

    async def read_all(self) -> ReadResult:
        """
        Fetch and parse the full link table.

        Returns:
            ReadResult; on failure the table is empty and `error` is set
        """
        try:
            content = await self.backend.fetch_document()
            table = LinkTable.model_validate_json(content)
        except (StoreError, PydanticValidationError) as e:
            logger.error(f"Error reading Gist: {e}")
            return ReadResult(table=LinkTable.empty(), error=str(e))
        return ReadResult(table=table)

    async def write_all(self, table: LinkTable) -> None:
        """
        Overwrite the remote document with `table`.

        Stamps updatedAt and totalLinks before writing.

        Raises:
            StoreError: If the write fails
        """
        table.updated_at = utc_now_iso()
        table.total_links = len(table.links)
        try:
            await self.backend.update_document(
                _serialize(table),
                f"URL Shortener ({len(table.links)} links)",
            )
        except StoreError as e:
            logger.error(f"Error writing to Gist: {e}")
            raise

    async def _read_for_write(self) -> LinkTable:
        # A failed read must not be written back as an empty table
        result = await self.read_all()
        if not result.ok:
            raise StoreError(f"cannot update link table, read failed: {result.error}")
        return result.table

    async def get_link(self, slug: str) -> Optional[LinkRecord]:
        """
        Look up a link, serving from the cache when fresh.

        Only hits are cached; a missing slug always goes to the backend.
        """
        cached = self.cache.get(slug)
        if cached is not None:
            return cached.model_copy(deep=True)

        result = await self.read_all()
        link = result.table.links.get(slug)
        if link is not None:
            self.cache.set(slug, link.model_copy(deep=True))
        return link

    async def create_link(self, slug: str, record: LinkRecord) -> LinkRecord:
        """
        Insert a link and write the table back.

        Existence is not re-checked here; callers check beforehand.

        Raises:
            StoreError: If the write fails
        """
        async with self._write_lock:
            table = await self._read_for_write()
            now = utc_now_iso()
            link = record.model_copy(update={"slug": slug, "created_at": now, "updated_at": now}, deep=True)
            table.links[slug] = link
            await self.write_all(table)
        return link

    async def delete_link(self, slug: str) -> dict:
        """
        Remove a link.

        Returns:
            {"success": True, "deletedSlug": slug} or
            {"success": False, "message": "Link not found"}
        """
        async with self._write_lock:
            table = await self._read_for_write()
            if slug not in table.links:
                return {"success": False, "message": "Link not found"}

            del table.links[slug]
            await self.write_all(table)
            self.cache.delete(slug)
        return {"success": True, "deletedSlug": slug}

    async def increment_click(self, slug: str) -> Optional[LinkRecord]:
        """
        Add one click and stamp lastAccessed.

        The lookup may be served from cache, so the table is re-read before
        the write to avoid writing back a stale document.

        Returns:
            The updated link, or None if the slug does not exist
        """
        async with self._write_lock:
            link = await self.get_link(slug)
            if link is None:
                return None

            table = await self._read_for_write()
            stored = table.links.get(slug)
            if stored is None:
                # deleted since the cached lookup
                self.cache.delete(slug)
                return None

            stored.clicks += 1
            stored.last_accessed = utc_now_iso()
            table.links[slug] = stored
            await self.write_all(table)
            self.cache.set(slug, stored.model_copy(deep=True))
        return stored

    async def get_all_links(self) -> Dict[str, LinkRecord]:
        return (await self.read_all()).table.links

    async def get_stats(self) -> dict:
        table = (await self.read_all()).table
        return self.summarize(table)

    @staticmethod
    def summarize(table: LinkTable) -> dict:
        return {
            "totalLinks": len(table.links),
            "totalClicks": table.total_clicks,
            "createdAt": table.created_at,
            "updatedAt": table.updated_at,
        }

    def clear_cache(self, slug: Optional[str] = None) -> None:
        """Drop one slug from the cache, or everything when no slug is given."""
        if slug is not None:
            self.cache.delete(slug)
            return

        self.cache.clear()
        self.last_cache_clear = utc_now_iso()
        logger.info("Store cache cleared")

    def cache_stats(self) -> dict:
        return {**self.cache.stats(), "lastClear": self.last_cache_clear}
