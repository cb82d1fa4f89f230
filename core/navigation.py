"""Detect navigation changes that warrant a head update."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote, urlsplit

__all__ = ["DEFAULT_PORTS", "LocationKey", "NavigationTracker", "has_location_changed"]


DEFAULT_PORTS = {
    "http": 80,
    "https": 443,
    "ws": 80,
    "wss": 443,
    "ftp": 21,
}


@dataclass(frozen=True, slots=True)
class LocationKey:
    """The parts of a location that identify a page: scheme, authority, path.

    Query and fragment are dropped.  All parts are case-folded so two keys
    compare equal when the locations differ only in letter case.
    """

    scheme: str
    authority: str
    path: str

    @classmethod
    def parse(cls, location: str) -> "LocationKey":
        parts = urlsplit(location or "")
        scheme = parts.scheme.casefold()
        authority = _authority(parts.netloc, scheme)
        path = unquote(parts.path)
        if not path and authority:
            path = "/"
        return cls(scheme=scheme, authority=authority, path=path.casefold())


def _authority(netloc: str, scheme: str) -> str:
    # user info is not part of the authority for comparison purposes
    host_port = netloc.rpartition("@")[2].casefold()
    if not host_port:
        return ""
    if host_port.startswith("["):
        host, _, rest = host_port.partition("]")
        host += "]"
        port = rest[1:] if rest.startswith(":") else ""
    else:
        host, _, port = host_port.partition(":")
    if port:
        try:
            port_number = int(port)
        except ValueError:
            return host_port
        if DEFAULT_PORTS.get(scheme) == port_number:
            return host
        return f"{host}:{port_number}"
    return host


def has_location_changed(previous: Optional[str], current: str) -> bool:
    """Return ``True`` when *current* names a different page than *previous*.

    Identical strings are unchanged.  Otherwise both are reduced to
    :class:`LocationKey` and compared, so query-only or fragment-only
    differences, default ports and letter case do not count as a change.
    """

    if previous == current:
        return False
    if previous is None:
        return True
    return LocationKey.parse(previous) != LocationKey.parse(current)


class NavigationTracker:
    """Hold the last page-level location and report genuine changes."""

    def __init__(self, initial: Optional[str] = None) -> None:
        self._location = initial

    @property
    def location(self) -> Optional[str]:
        return self._location

    def reset(self, location: Optional[str]) -> None:
        self._location = location

    def observe(self, location: str) -> bool:
        """Record *location* if it differs from the stored one.

        Returns ``True`` when the stored location was replaced.
        """

        if not has_location_changed(self._location, location):
            return False
        self._location = location
        return True
