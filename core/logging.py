"""Logger helpers shared by the core and the head coordinator."""

from __future__ import annotations

import logging
import os
from logging.handlers import QueueHandler, QueueListener
from queue import Queue
from typing import Optional

__all__ = ["LOGGER_ROOT", "LOG_FORMAT", "configure_async_logging", "get_logger"]

LOGGER_ROOT = "pagehead"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced below :data:`LOGGER_ROOT`."""

    if not name:
        return logging.getLogger(LOGGER_ROOT)
    if name == LOGGER_ROOT or name.startswith(LOGGER_ROOT + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_ROOT}.{name}")


def _sync_logging_requested() -> bool:
    value = os.environ.get("PAGEHEAD_SYNC_LOGGING", "")
    return value.strip().lower() in {"1", "true", "yes", "on"}


def configure_async_logging(
    level: int = logging.INFO,
    *,
    maxsize: int = 4000,
) -> tuple[Optional[QueueListener], Optional[Queue]]:
    """Install a queue-based logging pipeline on the root logger.

    Existing root handlers are moved behind a :class:`QueueListener` so that
    coroutines never block on handler I/O.  Returns ``(None, None)`` when
    ``PAGEHEAD_SYNC_LOGGING`` is set; the caller owns stopping the listener.
    """

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if _sync_logging_requested():
        if not root_logger.handlers:
            logging.basicConfig(level=level, format=LOG_FORMAT)
        return None, None

    log_queue: Queue = Queue(maxsize=maxsize)
    handlers = list(root_logger.handlers)
    if not handlers:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers = [console]

    for handler in handlers:
        root_logger.removeHandler(handler)

    queue_handler = QueueHandler(log_queue)
    root_logger.addHandler(queue_handler)

    listener = QueueListener(log_queue, *handlers, respect_handler_level=True)
    listener.start()
    return listener, log_queue
