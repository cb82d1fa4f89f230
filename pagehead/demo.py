"""In-process bridge and scripted navigation run used by ``head_sync.py``."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .config import HeadConfig
from .coordinator import HeadCoordinator
from .navigation_source import LocalNavigationSource

log = logging.getLogger(__name__)

__all__ = ["BridgeCallFailed", "RecordingBridge", "run_demo"]


class BridgeCallFailed(RuntimeError):
    """Raised by :class:`RecordingBridge` for titles configured to fail."""


@dataclass
class RecordingBridge:
    """Bridge that records every call and can be told to fail or stall."""

    latency_s: float = 0.0
    fail_titles: Tuple[str, ...] = ()
    head_title: Optional[str] = None
    calls: List[Tuple[str, Any]] = field(default_factory=list)
    in_flight: int = 0
    max_in_flight: int = 0
    disposed: bool = False

    async def set_title(self, title: str) -> None:
        await self._enter()
        try:
            self.calls.append(("set_title", title))
            if title in self.fail_titles:
                raise BridgeCallFailed(f"set_title rejected: {title}")
        finally:
            self.in_flight -= 1

    async def process_head_content(self, element_ref: Any, suffix: str) -> Optional[str]:
        await self._enter()
        try:
            self.calls.append(("process_head_content", element_ref))
            if self.head_title is None:
                return None
            return self.head_title + suffix
        finally:
            self.in_flight -= 1

    async def dispose(self) -> None:
        self.disposed = True
        self.calls.append(("dispose", None))

    async def _enter(self) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        if self.latency_s:
            await asyncio.sleep(self.latency_s)


async def run_demo(
    locations: Sequence[str],
    config: Optional[HeadConfig] = None,
    *,
    fail_titles: Iterable[str] = (),
    head_title: Optional[str] = None,
    latency_s: float = 0.0,
) -> RecordingBridge:
    """Drive a coordinator through *locations* and return the bridge used.

    The first location is the initial page; the rest are navigations raised
    before and after the first render, followed by one head content pass.
    """

    if not locations:
        raise ValueError("at least one location is required")
    bridge = RecordingBridge(
        latency_s=latency_s,
        fail_titles=tuple(fail_titles),
        head_title=head_title,
    )

    async def _load() -> RecordingBridge:
        return bridge

    source = LocalNavigationSource(locations[0])
    async with HeadCoordinator(source, _load, config) as coordinator:
        coordinator.notify_first_render()
        for location in locations[1:]:
            source.navigate_to(location)
        await coordinator.process_head_content("head")
        await coordinator.wait_idle()
        log.info("demo finished title=%r", coordinator.title)
    return bridge
