"""
API Request Schemas

This module defines the Pydantic models for API requests.
Separated from endpoints to keep concerns separated and enable reuse.

Design Principles:
- Request models define shape only; field rules (URL scheme, slug format)
  are checked by app.core.validators so all messages share one format
- JSON keys are camelCase
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ShortenRequest(BaseModel):
    """Request model for URL shortening endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    original_url: Optional[str] = Field(default=None, alias="originalUrl", description="The long URL to shorten")
    custom_slug: Optional[str] = Field(default=None, alias="customSlug", description="Optional slug to use instead of a random one")
    title: Optional[str] = Field(default=None, description="Optional title")
    description: Optional[str] = Field(default=None, description="Optional description")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)
