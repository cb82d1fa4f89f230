"""Serialized execution of asynchronous operations."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional, TypeVar

from .logging import get_logger

__all__ = ["QueuedOperation", "SerialTaskQueue"]

T = TypeVar("T")

QueuedOperation = Callable[[], Awaitable[T]]


class SerialTaskQueue:
    """Run submitted operations strictly one at a time, in submission order.

    Every call to :meth:`enqueue` chains the new operation behind the task of
    the previously submitted one.  The previous outcome is ignored, so a failed
    or cancelled operation never blocks the operations queued after it; only
    the handle returned for that operation raises.

    Without ``timeout_s`` an operation that never settles stalls every
    operation submitted after it.
    """

    def __init__(
        self,
        *,
        name: str = "serial",
        timeout_s: float | None = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.name = name
        self.timeout_s = timeout_s
        self._tail: Optional[asyncio.Task] = None
        self._submitted = 0
        self._unsettled: Dict[int, asyncio.Task] = {}
        self._log = logger or get_logger(f"core.task_queue.{name}")

    @property
    def pending(self) -> int:
        """Number of submitted operations that have not settled yet."""

        return len(self._unsettled)

    @property
    def idle(self) -> bool:
        return not self._unsettled

    def enqueue(self, op: QueuedOperation[T]) -> "asyncio.Task[T]":
        """Schedule *op* behind every previously submitted operation.

        Must be called while the event loop is running.  The returned task
        resolves with *op*'s result or raises *op*'s exception.
        """

        if op is None:
            raise ValueError("operation must not be None")
        loop = asyncio.get_running_loop()
        seq = self._submitted + 1
        previous = self._tail
        task = loop.create_task(
            self._run_after(previous, op, seq),
            name=f"{self.name}-op-{seq}",
        )
        self._submitted = seq
        self._unsettled[seq] = task
        # a task cancelled before its first step never runs _run_after
        task.add_done_callback(lambda _: self._unsettled.pop(seq, None))
        self._tail = task
        return task

    async def drain(self) -> None:
        """Wait until every operation submitted so far has settled.

        Operations enqueued while draining are waited for as well.  Failures
        are left to the individual handles.
        """

        while self._unsettled:
            running = [task for task in self._unsettled.values() if not task.done()]
            if running:
                await asyncio.wait(running)
            else:
                await asyncio.sleep(0)

    # ------------------------------------------------------------------
    async def _run_after(
        self,
        previous: Optional[asyncio.Task],
        op: QueuedOperation[T],
        seq: int,
    ) -> T:
        try:
            if previous is not None and not previous.done():
                await asyncio.wait((previous,))
            return await self._run(op, seq)
        finally:
            self._unsettled.pop(seq, None)

    async def _run(self, op: QueuedOperation[T], seq: int) -> T:
        self._log.debug("%s op=%d status=start pending=%d", self.name, seq, self.pending)
        try:
            if self.timeout_s is None:
                result = await op()
            else:
                result = await asyncio.wait_for(op(), timeout=self.timeout_s)
        except asyncio.CancelledError:
            self._log.debug("%s op=%d status=cancelled", self.name, seq)
            raise
        except asyncio.TimeoutError:
            if self.timeout_s is not None:
                self._log.warning(
                    "%s op=%d status=timeout timeout_s=%.3f", self.name, seq, self.timeout_s
                )
            raise
        except Exception as exc:
            self._log.debug("%s op=%d status=failed error=%r", self.name, seq, exc)
            raise
        self._log.debug("%s op=%d status=ok", self.name, seq)
        return result
