"""Domain entity representing a notification addressed to one case party."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

from app.domain.errors import ValidationError


class RecipientType(str, Enum):
    """Kind of account a notification is addressed to."""

    CITIZEN = "CITIZEN"
    POLICE = "POLICE"
    JUDGE = "JUDGE"
    LAWYER = "LAWYER"


class NotificationType(str, Enum):
    """Closed set of events a notification can describe."""

    CASE_CREATED = "CASE_CREATED"
    CASE_ASSIGNED = "CASE_ASSIGNED"
    CASE_ACCEPTED = "CASE_ACCEPTED"
    CASE_REJECTED = "CASE_REJECTED"
    CASE_PENDING = "CASE_PENDING"
    HEARING_SCHEDULED = "HEARING_SCHEDULED"
    EVIDENCE_SUBMITTED = "EVIDENCE_SUBMITTED"
    DOCUMENT_FILED = "DOCUMENT_FILED"
    LAWYER_REQUEST_ACCEPTED = "LAWYER_REQUEST_ACCEPTED"
    LAWYER_REQUEST_REJECTED = "LAWYER_REQUEST_REJECTED"
    LAWYER_REQUEST_PENDING = "LAWYER_REQUEST_PENDING"
    CASE_CLOSED = "CASE_CLOSED"
    COMPLAINT_SUBMITTED = "COMPLAINT_SUBMITTED"
    COMPLAINT_ASSIGNED = "COMPLAINT_ASSIGNED"
    FIR_REGISTERED = "FIR_REGISTERED"
    FIR_SUBMITTED = "FIR_SUBMITTED"
    FIR_REJECTED = "FIR_REJECTED"
    STATUS_CHANGED = "STATUS_CHANGED"
    ORDER_PASSED = "ORDER_PASSED"
    JUDGMENT_PASSED = "JUDGMENT_PASSED"
    SUMMON_ISSUED = "SUMMON_ISSUED"
    SYSTEM_UPDATE = "SYSTEM_UPDATE"


class NotificationPriority(str, Enum):
    """Informational urgency attached to a notification."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


@dataclass
class Notification:
    """Message delivered to a single recipient about a case event."""

    id: int | None
    recipient_id: str
    recipient_type: RecipientType
    title: str
    message: str
    type: NotificationType
    case_id: str | None = None
    complaint_id: str | None = None
    fir_id: str | None = None
    is_read: bool = False
    priority: NotificationPriority = NotificationPriority.NORMAL
    expires_at: datetime | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None


@dataclass(frozen=True)
class Pagination:
    """Position of a feed page within a recipient's notifications."""

    current_page: int
    total_pages: int
    total_items: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, *, page: int, page_size: int, total_items: int) -> "Pagination":
        return cls(
            current_page=page,
            total_pages=math.ceil(total_items / page_size),
            total_items=total_items,
            has_next=page * page_size < total_items,
            has_prev=page > 1,
        )


@dataclass
class NotificationPage:
    """One page of a recipient's feed, newest first."""

    items: list[Notification]
    pagination: Pagination


_REQUIRED_FIELDS = ("recipient_id", "recipient_type", "title", "message", "type")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


_JSON_SCALARS = (str, int, float, bool, type(None))


def _check_metadata_value(value: Any, path: str) -> None:
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise ValidationError(
                    f"Notification metadata keys must be strings, got {key!r} in {path}"
                )
            _check_metadata_value(item, f"{path}.{key}")
    elif isinstance(value, list):
        for index, item in enumerate(value):
            _check_metadata_value(item, f"{path}[{index}]")
    elif not isinstance(value, _JSON_SCALARS):
        raise ValidationError(
            f"Notification metadata value at {path} is not JSON compatible: {type(value).__name__}"
        )


def _coerce_enum(enum_cls: type[Enum], value: Any, field_name: str) -> Enum:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"Invalid {field_name} '{value}'. Allowed values: {allowed}"
        ) from exc


def validate_notification(notification: Notification) -> Notification:
    """Return a normalized copy of ``notification`` or raise ``ValidationError``.

    Required fields are ``recipient_id``, ``recipient_type``, ``title``,
    ``message`` and ``type``. Enum fields accept either the enum member or its
    raw value. ``metadata`` must hold JSON values only (string keys, lists
    rather than tuples) so it reads back exactly as written.
    """

    missing = [
        name
        for name in _REQUIRED_FIELDS
        if _is_blank(getattr(notification, name))
    ]
    if missing:
        raise ValidationError(f"Missing required notification fields: {', '.join(missing)}")

    metadata = notification.metadata
    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise ValidationError("Notification metadata must be a mapping")
    _check_metadata_value(metadata, "metadata")
    try:
        json.dumps(metadata, allow_nan=False)
    except ValueError as exc:
        raise ValidationError(f"Notification metadata is not JSON compatible: {exc}") from exc

    return replace(
        notification,
        recipient_id=str(notification.recipient_id),
        recipient_type=_coerce_enum(RecipientType, notification.recipient_type, "recipient_type"),
        type=_coerce_enum(NotificationType, notification.type, "type"),
        priority=_coerce_enum(
            NotificationPriority,
            notification.priority or NotificationPriority.NORMAL,
            "priority",
        ),
        metadata=metadata,
    )


__all__ = [
    "Notification",
    "NotificationPage",
    "NotificationPriority",
    "NotificationType",
    "Pagination",
    "RecipientType",
    "validate_notification",
]
