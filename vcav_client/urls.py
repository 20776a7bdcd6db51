"""Request URL composition for the vCAV REST namespace."""

from __future__ import annotations

from typing import Any, Mapping, Optional


def format_filter_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_filters(filters: Optional[Mapping[str, Any]]) -> str:
    """Join ``filters`` as ``k1=v1&k2=v2`` in iteration order, unescaped."""
    if not filters:
        return ""
    return "&".join(f"{k}={format_filter_value(v)}" for k, v in filters.items())


def append_filters(url: str, filters: Optional[Mapping[str, Any]]) -> str:
    query = encode_filters(filters)
    if not query:
        return url
    sep = "&" if "?" in url else "?"
    return f"{url}{sep}{query}"


def build_url(host: str, path: str, filters: Optional[Mapping[str, Any]] = None) -> str:
    """
    Compose ``https://{host}/{path}`` plus an optional query string.

    Keys and values are not URL-escaped; callers pass values that need none.

    Raises:
        ValueError: If ``host`` or ``path`` is empty.
    """
    if not host or not host.strip():
        raise ValueError("host is required")
    path = (path or "").lstrip("/")
    if not path:
        raise ValueError("path is required")
    return append_filters(f"https://{host.strip()}/{path}", filters)
