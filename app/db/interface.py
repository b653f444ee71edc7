"""
Document Store Abstraction Interface

The link table is persisted as one text document in a remote store. This
module defines the contract a remote backend must implement so the rest of
the codebase never talks to a specific API directly.

The model is deliberately coarse: the whole document is fetched and the whole
document is overwritten. There is no partial update and no version check.
"""

from abc import ABC, abstractmethod
from typing import Optional


class DocumentBackend(ABC):
    """
    Abstract base class for remote document backends.

    To add a new backend:
    1. Create a new class inheriting from DocumentBackend
    2. Implement all abstract methods
    3. Update get_document_backend() in gist_adapter.py to return the new backend
    """

    @property
    @abstractmethod
    def document_id(self) -> Optional[str]:
        """Identifier of the current document, None until one is located or created."""

    @abstractmethod
    def reset_document(self) -> None:
        """Forget the current document id so the next create starts fresh."""

    @abstractmethod
    async def fetch_document(self) -> str:
        """
        Fetch the raw document content.

        Returns:
            Document text

        Raises:
            StoreError: If the document cannot be fetched
        """

    @abstractmethod
    async def create_document(self, content: str, description: str) -> str:
        """
        Create a new document and make it current.

        Args:
            content: Initial document text
            description: Human readable description

        Returns:
            The new document id

        Raises:
            StoreError: If creation fails
        """

    @abstractmethod
    async def update_document(self, content: str, description: str) -> None:
        """
        Overwrite the current document.

        Raises:
            StoreError: If the write fails
        """

    @abstractmethod
    async def close(self) -> None:
        """Release network resources."""
