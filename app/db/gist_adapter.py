"""
GitHub Gist Document Adapter

This module implements the DocumentBackend interface on top of the GitHub
Gist API. The link table lives in one file of one private Gist.

Gist characteristics:
- Every write is a PATCH of the full file (no partial updates)
- Gist revisions are kept by GitHub but never consulted here
- Large files are truncated in the Gist response and must be fetched
  from their raw_url
"""

import logging
from typing import Optional

import httpx

from app.core.exceptions import StoreError
from app.core.setting import Settings
from app.db.interface import DocumentBackend
from app.db.session import create_http_client

logger = logging.getLogger(__name__)


class GistAdapter(DocumentBackend):
    """
    Gist-backed document store.

    Uses an httpx.AsyncClient whose base_url points at the GitHub REST API
    and which already carries the auth headers and timeout.
    """

    def __init__(self, client: httpx.AsyncClient, gist_id: Optional[str], file_name: str):
        self.client = client
        self.file_name = file_name
        self._gist_id = gist_id or None

    @property
    def document_id(self) -> Optional[str]:
        return self._gist_id

    def reset_document(self) -> None:
        self._gist_id = None

    async def fetch_document(self) -> str:
        """
        Fetch the content of the link table file.

        Raises:
            StoreError: On transport errors, non-2xx responses, or a missing file
        """
        if not self._gist_id:
            raise StoreError("No Gist id configured")

        try:
            response = await self.client.get(f"/gists/{self._gist_id}")
            response.raise_for_status()
            files = response.json().get("files") or {}
        except (httpx.HTTPError, ValueError) as e:
            raise StoreError(f"Failed to fetch Gist {self._gist_id}: {e}", original_error=e)

        gist_file = files.get(self.file_name)
        if not gist_file:
            raise StoreError(f"Gist file '{self.file_name}' not found")

        if gist_file.get("truncated") and gist_file.get("raw_url"):
            return await self._fetch_raw(gist_file["raw_url"])

        return gist_file.get("content") or ""

    async def _fetch_raw(self, raw_url: str) -> str:
        try:
            response = await self.client.get(raw_url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StoreError(f"Failed to fetch raw Gist content: {e}", original_error=e)
        return response.text

    async def create_document(self, content: str, description: str) -> str:
        payload = {
            "description": description,
            "public": False,
            "files": {self.file_name: {"content": content}},
        }
        try:
            response = await self.client.post("/gists", json=payload)
            response.raise_for_status()
            gist_id = response.json()["id"]
        except (httpx.HTTPError, ValueError, KeyError) as e:
            raise StoreError(f"Failed to create Gist: {e}", original_error=e)

        self._gist_id = gist_id
        return gist_id

    async def update_document(self, content: str, description: str) -> None:
        if not self._gist_id:
            raise StoreError("No Gist id configured")

        payload = {
            "description": description,
            "files": {self.file_name: {"content": content}},
        }
        try:
            response = await self.client.patch(f"/gists/{self._gist_id}", json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StoreError(f"Failed to write Gist {self._gist_id}: {e}", original_error=e)

    async def close(self) -> None:
        await self.client.aclose()


def get_document_backend(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> DocumentBackend:
    """
    Factory function to get the document backend.

    Returns a GistAdapter configured from settings. `transport` replaces the
    network layer of the HTTP client (used by tests).

    Returns:
        DocumentBackend instance
    """
    client = create_http_client(settings, transport=transport)
    return GistAdapter(client, gist_id=settings.GIST_ID, file_name=settings.GIST_NAME)
