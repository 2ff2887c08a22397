"""
Utility functions for API client.

Includes:
- URL building from base URL, path and query params
"""

from typing import Any, Mapping, Optional
from urllib.parse import urlencode, urlparse, urlunparse

from .exceptions import ConfigurationError


def is_absolute_url(url: str) -> bool:
    parsed = urlparse(url)
    return bool(parsed.scheme and parsed.netloc)


def _format_param(value: Any) -> str:
    # JS-style rendering of booleans: ?active=true
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_url(base_url: str, path: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """
    Build an absolute URL from base URL, path and query parameters.

    The path is appended to the base URL (base path is kept). Absolute
    URLs are used as is. Parameters with ``None`` values are skipped;
    list/tuple values produce repeated keys.

    Args:
        base_url: Base URL (may be empty when path is absolute)
        path: Relative path or absolute URL
        params: Query parameters

    Returns:
        Absolute URL

    Raises:
        ConfigurationError: relative path without a base URL

    Examples:
        >>> build_url("https://api.example.com/v1", "/users", {"page": 2, "q": None})
        'https://api.example.com/v1/users?page=2'
        >>> build_url("", "https://other.example.com/x")
        'https://other.example.com/x'
    """
    if is_absolute_url(path):
        url = path
    else:
        if not base_url:
            raise ConfigurationError(
                f"Cannot resolve relative URL {path!r}: base_url is not configured"
            )
        url = base_url.rstrip('/')
        if path:
            url += '/' + path.lstrip('/')

    if not params:
        return url

    query = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            query.extend((key, _format_param(item)) for item in value if item is not None)
        else:
            query.append((key, _format_param(value)))

    if not query:
        return url

    parsed = urlparse(url)
    existing = parsed.query + '&' if parsed.query else ''
    return urlunparse(parsed._replace(query=existing + urlencode(query)))
