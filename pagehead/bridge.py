"""Interface to the external head bridge and its lazily acquired handle."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Protocol

log = logging.getLogger(__name__)

__all__ = ["Bridge", "BridgeHandle", "BridgeLoader"]


class Bridge(Protocol):
    """Asynchronous operations exposed by the head bridge module."""

    async def set_title(self, title: str) -> None: ...

    async def process_head_content(self, element_ref: Any, suffix: str) -> Optional[str]: ...


BridgeLoader = Callable[[], Awaitable[Bridge]]


class BridgeHandle:
    """Memoized asynchronous initializer for the bridge.

    The first :meth:`get` starts the loader; every caller, the first one
    included, awaits the same shared future, so the loader runs at most once.
    A failed load is not cached and the next :meth:`get` tries again.
    """

    def __init__(self, loader: BridgeLoader) -> None:
        self._loader = loader
        self._future: Optional[asyncio.Future] = None
        self._released = False

    @property
    def acquired(self) -> bool:
        future = self._future
        return (
            future is not None
            and future.done()
            and not future.cancelled()
            and future.exception() is None
        )

    async def get(self) -> Bridge:
        if self._released:
            raise RuntimeError("bridge handle already released")
        if self._future is None:
            self._future = asyncio.ensure_future(self._load())
        future = self._future
        try:
            return await asyncio.shield(future)
        except Exception:
            if self._future is future and future.done():
                self._future = None
            raise

    async def release(self) -> None:
        """Dispose the bridge if it was acquired.  Safe to call repeatedly."""

        if self._released:
            return
        self._released = True
        future, self._future = self._future, None
        if future is None:
            return
        if not future.done():
            future.cancel()
            return
        if future.cancelled() or future.exception() is not None:
            return
        bridge = future.result()
        dispose = getattr(bridge, "dispose", None)
        if callable(dispose):
            result = dispose()
            if asyncio.iscoroutine(result) or isinstance(result, asyncio.Future):
                await result
        log.debug("bridge released")

    async def _load(self) -> Bridge:
        log.debug("bridge acquisition started")
        bridge = await self._loader()
        log.info("bridge acquired")
        return bridge
