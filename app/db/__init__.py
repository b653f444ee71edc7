"""
Remote document store module with abstraction layer.

This module provides:
- DocumentBackend interface: Abstract base class for remote document stores
- GistAdapter: GitHub Gist implementation (default)
- Link table models: LinkRecord, LinkMetadata, LinkTable

To add a new backend:
1. Create a new adapter class inheriting from DocumentBackend
2. Implement all abstract methods
3. Update get_document_backend() in gist_adapter.py to return the new backend
"""

from app.db.interface import DocumentBackend
from app.db.gist_adapter import GistAdapter, get_document_backend
from app.db.models import LinkMetadata, LinkRecord, LinkTable

__all__ = [
    "DocumentBackend",
    "GistAdapter",
    "get_document_backend",
    "LinkMetadata",
    "LinkRecord",
    "LinkTable",
]
