"""URL helpers."""

from __future__ import annotations

from urllib.parse import SplitResult, urlsplit

__all__ = ["base_url"]


def base_url(url: str | SplitResult) -> str:
    """Return the URL up to and including the last '/' of its path."""
    parts = urlsplit(url) if isinstance(url, str) else url
    path = parts.path
    idx = path.rfind("/")
    if idx != -1:
        path = path[: idx + 1]
    if not path.startswith("/"):
        path = "/" + path
    user, _, host = parts.netloc.rpartition("@")
    if user:
        user += "@"
    return f"{parts.scheme}://{user}{host}{path}"