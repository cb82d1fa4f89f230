"""Derive page titles from navigation locations."""

from __future__ import annotations

from typing import Optional
from urllib.parse import unquote, urlsplit

__all__ = ["derive_title", "last_segment", "title_for_location"]


def last_segment(path: str) -> str:
    """Return the last non-empty ``/``-separated segment of *path*.

    A path without any non-empty segment (``""`` or ``"/"``) yields ``""``.
    """

    for segment in reversed((path or "").split("/")):
        if segment:
            return unquote(segment)
    return ""


def derive_title(path: str, suffix: Optional[str] = None) -> str:
    """Build a title from the last segment of *path* followed by *suffix*."""

    return last_segment(path) + (suffix or "")


def title_for_location(location: str, suffix: Optional[str] = None) -> str:
    """Apply :func:`derive_title` to the path of a full location string."""

    return derive_title(urlsplit(location or "").path, suffix)
