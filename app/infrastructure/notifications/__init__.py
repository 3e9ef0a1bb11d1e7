"""Realtime notification helpers for the infrastructure layer."""

from .gateway import (
    CASE_NOTIFICATION_EVENT,
    NOTIFICATION_EVENT,
    SYSTEM_NOTIFICATION_EVENT,
    DeliveryStatus,
    PushGateway,
    case_topic,
    role_topic,
    user_topic,
)
from .publisher import serialize_notification, serialize_system_update
from .registry import (
    Channel,
    Connection,
    ConnectionRegistry,
    InMemoryConnectionRegistry,
)
from .sweeper import ExpirySweeper

__all__ = [
    "CASE_NOTIFICATION_EVENT",
    "NOTIFICATION_EVENT",
    "SYSTEM_NOTIFICATION_EVENT",
    "Channel",
    "Connection",
    "ConnectionRegistry",
    "DeliveryStatus",
    "ExpirySweeper",
    "InMemoryConnectionRegistry",
    "PushGateway",
    "case_topic",
    "role_topic",
    "serialize_notification",
    "serialize_system_update",
    "user_topic",
]
