"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.entities import (
    NotificationPriority,
    NotificationType,
    RecipientType,
)


class NotificationRead(BaseModel):
    """Representation of a stored notification returned to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    recipient_id: str
    recipient_type: RecipientType
    title: str
    message: str
    type: NotificationType
    is_read: bool = False
    case_id: str | None = None
    complaint_id: str | None = None
    fir_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    priority: NotificationPriority = NotificationPriority.NORMAL
    created_at: datetime
    expires_at: datetime | None = None


class PaginationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    current_page: int
    total_pages: int
    total_items: int
    has_next: bool
    has_prev: bool


class NotificationPageRead(BaseModel):
    """One page of the caller's notification feed."""

    items: list[NotificationRead]
    pagination: PaginationRead


class UnreadCountRead(BaseModel):
    unread: int


class MarkAllReadResponse(BaseModel):
    modified_count: int


__all__ = [
    "MarkAllReadResponse",
    "NotificationPageRead",
    "NotificationRead",
    "PaginationRead",
    "UnreadCountRead",
]
