"""Keep the document head in sync with navigation through a serialized bridge."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Optional, Set, Tuple

from core.logging import get_logger
from core.navigation import NavigationTracker, has_location_changed
from core.task_queue import SerialTaskQueue

from .bridge import BridgeHandle, BridgeLoader
from .config import HeadConfig
from .navigation_source import NavigationSource, NavigationSubscription
from .title import title_for_location

__all__ = ["CoordinatorState", "HeadCoordinator", "InvalidStateError"]


class InvalidStateError(RuntimeError):
    """Raised when a caller violates the coordinator's ordering contract."""


class CoordinatorState(str, Enum):
    UNINITIALIZED = "uninitialized"
    RENDERING = "rendering"
    READY = "ready"
    DISPOSED = "disposed"


class HeadCoordinator:
    """Translate navigation and render events into queued bridge calls.

    Every bridge interaction, including the one-time bridge acquisition, runs
    through a single :class:`SerialTaskQueue`, so at most one bridge call is in
    flight and calls start in the order they were requested.

    The ``notify_*`` methods are meant for synchronous callbacks.  They submit
    the bridge call immediately and return a tracked task that logs failures
    instead of raising them.
    """

    def __init__(
        self,
        navigation: NavigationSource,
        loader: BridgeLoader,
        config: Optional[HeadConfig] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._config = config or HeadConfig()
        self._navigation = navigation
        self._log = logger or get_logger("head.coordinator")
        self._bridge = BridgeHandle(loader)
        self._queue = SerialTaskQueue(
            name="head",
            timeout_s=self._config.call_timeout_s,
            logger=self._log,
        )
        self._tracker = NavigationTracker()
        self._subscription: Optional[NavigationSubscription] = None
        self._acquisition: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()
        self._dispose_task: Optional[asyncio.Task] = None
        self._state = CoordinatorState.UNINITIALIZED
        self._title: Optional[str] = None
        self._discovered_title: Optional[str] = None
        self._last_title: Optional[Tuple[str, asyncio.Task]] = None

    # ------------------------------------------------------------------
    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def suffix(self) -> str:
        return self._config.suffix

    @property
    def location(self) -> Optional[str]:
        return self._tracker.location

    @property
    def title(self) -> Optional[str]:
        """Last title the bridge accepted."""

        return self._title

    @property
    def discovered_title(self) -> Optional[str]:
        """Last title reported by head content processing."""

        return self._discovered_title

    @property
    def queue(self) -> SerialTaskQueue:
        return self._queue

    # ------------------------------------------------------------------
    def start(self) -> None:
        """Record the initial location and subscribe to navigation changes."""

        if self._state is not CoordinatorState.UNINITIALIZED:
            raise InvalidStateError(f"cannot start coordinator in state {self._state.value}")
        self._tracker.reset(self._navigation.location)
        self._subscription = NavigationSubscription(
            self._navigation, self.notify_location_changed
        )
        self._set_state(CoordinatorState.RENDERING)

    def notify_first_render(self) -> Optional[asyncio.Task]:
        """Mark the initial render complete and queue the initial title."""

        if self._state is CoordinatorState.READY:
            self._log.debug("first render already handled")
            return None
        if self._state is not CoordinatorState.RENDERING:
            raise InvalidStateError(
                f"first render reported in state {self._state.value}"
            )
        asyncio.get_running_loop()
        location = self._tracker.location or self._navigation.location
        self._set_state(CoordinatorState.READY)
        queued = self._queued_title_for(location)
        if queued is not None:
            self._log.debug("initial title already queued location=%s", location)
            return queued
        return self._submit_title(location)

    async def handle_first_render(self) -> bool:
        task = self.notify_first_render()
        if task is None:
            return False
        return await task

    def notify_location_changed(self, location: str) -> Optional[asyncio.Task]:
        """Queue a title update if *location* names a different page."""

        if self._state in (CoordinatorState.UNINITIALIZED, CoordinatorState.DISPOSED):
            self._log.debug("navigation ignored state=%s location=%s", self._state.value, location)
            return None
        asyncio.get_running_loop()
        if not self._tracker.observe(location):
            self._log.debug("navigation unchanged location=%s", location)
            return None
        return self._submit_title(location)

    def notify_head_content(self, element_ref: Any) -> asyncio.Task:
        """Queue head content processing for *element_ref*.

        Raises :class:`InvalidStateError` before the initial render completed.
        """

        if self._state is not CoordinatorState.READY:
            raise InvalidStateError(
                f"head content available in state {self._state.value}; "
                "initial render has not completed"
            )
        self._ensure_bridge_queued()
        suffix = self.suffix

        async def _process() -> Optional[str]:
            bridge = await self._bridge.get()
            return await bridge.process_head_content(element_ref, suffix)

        handle = self._queue.enqueue(_process)
        return self._spawn(self._report_head_content(handle))

    async def process_head_content(self, element_ref: Any) -> Optional[str]:
        return await self.notify_head_content(element_ref)

    async def wait_idle(self) -> None:
        """Wait for every tracked task and queued bridge call to settle."""

        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                break
            await asyncio.gather(*pending, return_exceptions=True)
        await self._queue.drain()

    async def dispose(self) -> None:
        """Unsubscribe, optionally drain outstanding work, release the bridge."""

        if self._dispose_task is None:
            self._dispose_task = asyncio.ensure_future(self._dispose())
        await asyncio.shield(self._dispose_task)

    async def __aenter__(self) -> "HeadCoordinator":
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.dispose()

    # ------------------------------------------------------------------
    def _set_state(self, state: CoordinatorState) -> None:
        self._log.info("head state %s -> %s", self._state.value, state.value)
        self._state = state

    def _ensure_bridge_queued(self) -> None:
        if self._acquisition is not None or self._bridge.acquired:
            return
        self._acquisition = self._queue.enqueue(self._bridge.get)
        self._acquisition.add_done_callback(self._on_acquired)

    def _on_acquired(self, task: asyncio.Task) -> None:
        if task.cancelled():
            self._acquisition = None
            return
        exc = task.exception()
        if exc is not None:
            self._log.warning("head bridge status=unavailable error=%r", exc)
            self._acquisition = None

    def _queued_title_for(self, location: str) -> Optional[asyncio.Task]:
        if self._last_title is None:
            return None
        queued_location, task = self._last_title
        if task.done() or has_location_changed(queued_location, location):
            return None
        return task

    def _submit_title(self, location: str) -> asyncio.Task:
        title = title_for_location(location, self.suffix)
        self._ensure_bridge_queued()

        async def _set_title() -> None:
            bridge = await self._bridge.get()
            await bridge.set_title(title)

        handle = self._queue.enqueue(_set_title)
        task = self._spawn(self._report_title(handle, title))
        self._last_title = (location, task)
        return task

    async def _report_title(self, handle: asyncio.Task, title: str) -> bool:
        try:
            await handle
        except Exception as exc:
            self._log.warning("head set_title status=failed title=%r error=%r", title, exc)
            return False
        self._title = title
        self._log.info("head set_title status=ok title=%r", title)
        return True

    async def _report_head_content(self, handle: asyncio.Task) -> Optional[str]:
        try:
            discovered = await handle
        except Exception as exc:
            self._log.warning("head process_content status=failed error=%r", exc)
            return None
        if discovered:
            self._discovered_title = discovered
            self._log.info("head process_content status=ok title=%r", discovered)
        else:
            self._log.debug("head process_content status=ok title=None")
        return discovered

    def _spawn(self, coro: Any) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._log.error("head task failed", exc_info=exc)

    async def _dispose(self) -> None:
        previous = self._state
        self._set_state(CoordinatorState.DISPOSED)
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
        if previous is not CoordinatorState.UNINITIALIZED and self._config.drain_on_dispose:
            await self.wait_idle()
        await self._bridge.release()
