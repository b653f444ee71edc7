"""
Data Models for the Link Table

The whole link table is a single JSON document stored in a Gist file:

    {
      "links": {"<slug>": {...link record...}},
      "createdAt": "...",
      "updatedAt": "...",
      "totalLinks": 3,
      "version": "1.0"
    }

Design Decisions:
- Pydantic models with camelCase aliases so the stored JSON keeps the
  document's existing field names
- Unknown keys are kept (extra="allow") so a read/write cycle does not drop
  data written by other tools
- Timestamps are kept as ISO-8601 strings exactly as stored
"""

from datetime import datetime, timezone
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

DOCUMENT_VERSION = "1.0"


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class LinkMetadata(CamelModel):
    """Request context captured when the link was created."""
    ip: Optional[str] = None
    user_agent: Optional[str] = Field(default=None, alias="userAgent")
    created_via: str = Field(default="API", alias="createdVia")


class LinkRecord(CamelModel):
    """
    One shortened link.

    Fields:
    - slug: Unique key of the link (also the key in the links mapping)
    - original_url: Redirect target
    - short_url: Public short URL (APP_DOMAIN + /r/ + slug)
    - clicks: Number of redirects served
    - last_accessed: Time of the most recent redirect
    """
    slug: str
    original_url: str = Field(alias="originalUrl")
    short_url: Optional[str] = Field(default=None, alias="shortUrl")
    clicks: int = Field(default=0, ge=0)
    title: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = Field(default=True, alias="isActive")
    metadata: LinkMetadata = Field(default_factory=LinkMetadata)
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")
    last_accessed: Optional[str] = Field(default=None, alias="lastAccessed")

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class LinkTable(CamelModel):
    """The full link table, the unit of every read and write."""
    links: Dict[str, LinkRecord] = Field(default_factory=dict)
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")
    total_links: Optional[int] = Field(default=None, alias="totalLinks")
    version: Optional[str] = None

    @classmethod
    def empty(cls) -> "LinkTable":
        return cls(links={}, created_at=utc_now_iso(), version=DOCUMENT_VERSION)

    @property
    def total_clicks(self) -> int:
        return sum(link.clicks for link in self.links.values())

    def to_json(self) -> dict:
        # exclude_none applies to the table fields only, link records keep their nulls
        header = self.model_dump(mode="json", by_alias=True, exclude={"links"}, exclude_none=True)
        return {"links": {slug: link.to_json() for slug, link in self.links.items()}, **header}
