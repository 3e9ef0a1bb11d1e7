"""Aggregate application use cases."""

from .notifications import NotificationDispatcher, resolve_recipients

__all__ = [
    "NotificationDispatcher",
    "resolve_recipients",
]
