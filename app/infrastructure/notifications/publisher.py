"""Wire representations of notifications pushed to websocket subscribers."""

from __future__ import annotations

import copy
from datetime import datetime
from typing import Any

from app.domain.entities import (
    Notification,
    NotificationPriority,
    NotificationType,
    RecipientType,
)
from app.utils import isoformat_or_none, now_in_app_timezone


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the websocket payload representation for ``notification``."""

    return {
        "id": notification.id,
        "recipient_id": notification.recipient_id,
        "recipient_type": notification.recipient_type.value,
        "title": notification.title,
        "message": notification.message,
        "type": notification.type.value,
        "is_read": notification.is_read,
        "case_id": notification.case_id,
        "complaint_id": notification.complaint_id,
        "fir_id": notification.fir_id,
        "metadata": copy.deepcopy(notification.metadata or {}),
        "priority": notification.priority.value,
        "created_at": isoformat_or_none(notification.created_at),
        "expires_at": isoformat_or_none(notification.expires_at),
    }


def serialize_system_update(
    *,
    title: str,
    message: str,
    metadata: dict[str, Any] | None = None,
    priority: NotificationPriority = NotificationPriority.NORMAL,
    recipient_type: RecipientType | None = None,
    created_at: datetime | None = None,
) -> dict[str, Any]:
    """Return the payload of a system-wide announcement (never persisted)."""

    return {
        "id": None,
        "recipient_type": recipient_type.value if recipient_type else None,
        "title": title,
        "message": message,
        "type": NotificationType.SYSTEM_UPDATE.value,
        "metadata": copy.deepcopy(metadata or {}),
        "priority": NotificationPriority(priority).value,
        "is_system": True,
        "created_at": isoformat_or_none(created_at or now_in_app_timezone()),
    }


__all__ = ["serialize_notification", "serialize_system_update"]
