"""
Slug Generation and Input Validators

This module generates random slugs and validates user inputs
(slugs, URLs and shorten request payloads).

Security Considerations:
- Slugs are restricted to [A-Za-z0-9_-] so they are safe in paths and JSON keys
- Only http/https URLs are accepted as redirect targets
- Random slugs come from `secrets`, not `random`
"""

import re
import secrets
from typing import Any, List, Mapping
from urllib.parse import urlparse

SLUG_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
MIN_GENERATED_LENGTH = 5
MAX_GENERATED_LENGTH = 8

MIN_SLUG_LENGTH = 2
MAX_SLUG_LENGTH = 30
SLUG_PATTERN = re.compile(r"[a-zA-Z0-9_-]+")

# Attempts to find a free random slug before giving up
MAX_SLUG_ATTEMPTS = 10

ALLOWED_SCHEMES = {"http", "https"}


def generate_slug() -> str:
    """
    Generate a random slug of 5 to 8 alphanumeric characters.

    Uniqueness is not guaranteed; callers check the store and retry.

    Returns:
        Random slug string
    """
    length = MIN_GENERATED_LENGTH + secrets.randbelow(MAX_GENERATED_LENGTH - MIN_GENERATED_LENGTH + 1)
    return "".join(secrets.choice(SLUG_ALPHABET) for _ in range(length))


def validate_slug(slug: Any) -> bool:
    """
    Check slug format: 2-30 characters of letters, digits, '-' and '_'.

    Args:
        slug: Candidate slug

    Returns:
        True if valid, False otherwise
    """
    if not isinstance(slug, str):
        return False
    return bool(SLUG_PATTERN.fullmatch(slug)) and MIN_SLUG_LENGTH <= len(slug) <= MAX_SLUG_LENGTH


def validate_url(url: Any) -> bool:
    """
    Check that a URL parses and uses the http or https scheme.

    Args:
        url: Candidate URL

    Returns:
        True if valid, False otherwise
    """
    if not url or not isinstance(url, str):
        return False

    try:
        result = urlparse(url)
    except ValueError:
        return False

    if result.scheme.lower() not in ALLOWED_SCHEMES:
        return False
    return bool(result.netloc)


def validate_shorten_request(payload: Mapping[str, Any]) -> List[str]:
    """
    Validate a shorten request body.

    Args:
        payload: Request fields keyed by their JSON names

    Returns:
        List of error messages (empty when the request is valid)
    """
    errors = []

    original_url = payload.get("originalUrl")
    if not original_url:
        errors.append("originalUrl is required")
    elif not validate_url(original_url):
        errors.append("originalUrl must be a valid URL")

    custom_slug = payload.get("customSlug")
    if custom_slug and not validate_slug(custom_slug):
        errors.append(
            "customSlug must be 2-30 characters and contain only letters, "
            "numbers, hyphens, and underscores"
        )

    return errors
