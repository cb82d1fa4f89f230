"""Synchronise a single-page application's document head with navigation."""

__all__ = [
    "bridge",
    "config",
    "coordinator",
    "demo",
    "navigation_source",
    "title",
]
