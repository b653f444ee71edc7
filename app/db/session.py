"""
Remote Store HTTP Session

This module builds the HTTP client used to talk to the GitHub API.

Key Features:
- One AsyncClient per application instance (connection pooling by httpx)
- Auth headers and the request timeout configured once
- Pluggable transport so tests can swap the network for an in-process fake
"""

from typing import Optional

import httpx

from app.core.setting import Settings

USER_AGENT = "NVSURL-Shortener"


def create_http_client(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Create the authenticated client for the GitHub REST API.

    Args:
        settings: Application settings (token, API URL, timeout)
        transport: Optional transport override

    Returns:
        Configured httpx.AsyncClient
    """
    headers = {
        "Accept": "application/vnd.github.v3+json",
        "User-Agent": USER_AGENT,
    }
    if settings.GITHUB_TOKEN:
        headers["Authorization"] = f"token {settings.GITHUB_TOKEN}"

    return httpx.AsyncClient(
        base_url=settings.GITHUB_API_URL,
        headers=headers,
        timeout=settings.STORE_TIMEOUT_SECONDS,
        transport=transport,
    )
