"""Navigation sources and scoped subscriptions to their change notifications."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol

log = logging.getLogger(__name__)

__all__ = [
    "LocationListener",
    "LocalNavigationSource",
    "NavigationSource",
    "NavigationSubscription",
]

LocationListener = Callable[[str], None]


class NavigationSource(Protocol):
    """Supplies the current location and raises change notifications."""

    @property
    def location(self) -> str: ...

    def add_listener(self, listener: LocationListener) -> None: ...

    def remove_listener(self, listener: LocationListener) -> None: ...


class NavigationSubscription:
    """Pair ``add_listener`` with ``remove_listener`` in one closable object."""

    def __init__(self, source: NavigationSource, listener: LocationListener) -> None:
        self._source: Optional[NavigationSource] = source
        self._listener = listener
        source.add_listener(listener)

    @property
    def active(self) -> bool:
        return self._source is not None

    def close(self) -> None:
        source, self._source = self._source, None
        if source is None:
            return
        source.remove_listener(self._listener)

    def __enter__(self) -> "NavigationSubscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class LocalNavigationSource:
    """In-process navigation source driven by :meth:`navigate_to`."""

    def __init__(self, location: str) -> None:
        self._location = location
        self._listeners: List[LocationListener] = []

    @property
    def location(self) -> str:
        return self._location

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def add_listener(self, listener: LocationListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: LocationListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            log.debug("listener %r was not registered", listener)

    def navigate_to(self, location: str) -> None:
        """Set the current location and notify every listener."""

        self._location = location
        for listener in list(self._listeners):
            listener(location)
