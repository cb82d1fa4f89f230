"""Core infrastructure for page head synchronisation."""

__all__ = [
    "logging",
    "navigation",
    "task_queue",
]
