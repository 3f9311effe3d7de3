"""
Credential-safe logging helpers.

Keeps subscription keys and signed job URLs out of logs while leaving
enough of them to correlate requests.
"""

from urllib.parse import urlsplit


def sanitize_subscription_key(key: str | None) -> str:
    """
    Mask a subscription key for logs.

    Rules:
    - None / empty / <8 chars → fully masked
    - Otherwise → last 4 chars, rest masked
    """
    if not key or len(key) < 8:
        return "***"

    return f"***{key[-4:]}"


def sanitize_operation_location(location: str | None) -> str:
    """
    Reduce a job handle URL to its operation id.

    The last path segment of an Operation-Location URL is the operation id;
    host and query string are dropped.
    """
    if not location:
        return "N/A"

    path = urlsplit(location).path.rstrip("/")
    return path.rsplit("/", 1)[-1] or "N/A"
