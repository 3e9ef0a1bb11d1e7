"""Error taxonomy shared by the notification components."""

from __future__ import annotations


class NotificationError(Exception):
    """Base class for every error raised by the notification subsystem."""


class AuthenticationError(NotificationError):
    """Raised when a channel credential is missing or cannot be verified."""


class ValidationError(NotificationError, ValueError):
    """Raised when a notification is missing a field or uses an unknown value."""


class NotFoundError(NotificationError, LookupError):
    """Raised when a notification (or a recipient's feed) does not exist."""


class StoreUnavailableError(NotificationError):
    """Raised when the notification store cannot complete an operation."""


__all__ = [
    "AuthenticationError",
    "NotFoundError",
    "NotificationError",
    "StoreUnavailableError",
    "ValidationError",
]
