"""Topic based push gateway for notification websockets."""

from __future__ import annotations

import copy
import logging
import threading
from collections import defaultdict
from enum import Enum
from typing import Any, DefaultDict, Iterable, Set

from app.domain.entities import AuthenticatedUser, RecipientType
from app.infrastructure.security import authenticate_token

from .registry import Channel, Connection, ConnectionRegistry, InMemoryConnectionRegistry

logger = logging.getLogger(__name__)

NOTIFICATION_EVENT = "notification"
CASE_NOTIFICATION_EVENT = "case_notification"
SYSTEM_NOTIFICATION_EVENT = "system_notification"


class DeliveryStatus(Enum):
    """Outcome of a live delivery attempt to a single user."""

    DELIVERED = "delivered"
    OFFLINE = "offline"
    FAILED = "failed"


def user_topic(user_id: str) -> str:
    return f"user_{user_id}"


def role_topic(role: RecipientType | str) -> str:
    value = role.value if isinstance(role, RecipientType) else str(role)
    return value.lower()


def case_topic(case_id: str) -> str:
    return f"case_{case_id}"


class PushGateway:
    """Bind authenticated channels to topics and emit messages on them.

    Every channel is subscribed to its personal topic (``user_<id>``) and to
    its role topic (``citizen``, ``police`` ...). Case topics
    (``case_<id>``) are joined and left explicitly by the client.
    """

    def __init__(self, registry: ConnectionRegistry | None = None) -> None:
        self._registry = registry if registry is not None else InMemoryConnectionRegistry()
        self._topics: DefaultDict[str, Set[Channel]] = defaultdict(set)
        self._sessions: dict[Channel, Connection] = {}
        self._subscriptions: DefaultDict[Channel, Set[str]] = defaultdict(set)
        self._lock = threading.RLock()

    @property
    def registry(self) -> ConnectionRegistry:
        return self._registry

    @staticmethod
    def authenticate(token: str | None) -> AuthenticatedUser:
        """Verify the handshake credential, raising ``AuthenticationError``."""

        return authenticate_token(token)

    def connect(self, user: AuthenticatedUser, channel: Channel) -> Connection:
        """Register ``channel`` for ``user`` and subscribe it to its topics."""

        connection = self._registry.register(user.user_id, user.role, channel)
        with self._lock:
            self._sessions[channel] = connection
            self._subscribe(channel, user_topic(user.user_id))
            self._subscribe(channel, role_topic(user.role))
        logger.info("User connected: %s (%s)", user.user_id, user.role.value)
        return connection

    def disconnect(self, user_id: str, channel: Channel) -> None:
        """Drop ``channel`` from every topic and from the registry."""

        with self._lock:
            self._sessions.pop(channel, None)
            for topic in self._subscriptions.pop(channel, set()):
                self._unsubscribe(channel, topic)
            removed = self._registry.unregister(user_id, channel)
            if removed:
                self._promote_remaining_session(user_id)
        logger.info("User disconnected: %s", user_id)

    def join_case(self, channel: Channel, case_id: str) -> bool:
        """Subscribe ``channel`` to the topic of ``case_id``."""

        with self._lock:
            connection = self._sessions.get(channel)
            if connection is None:
                return False
            self._subscribe(channel, case_topic(case_id))
        logger.info("User %s joined case room: %s", connection.user_id, case_id)
        return True

    def leave_case(self, channel: Channel, case_id: str) -> bool:
        """Unsubscribe ``channel`` from the topic of ``case_id``."""

        topic = case_topic(case_id)
        with self._lock:
            connection = self._sessions.get(channel)
            if connection is None or topic not in self._subscriptions.get(channel, set()):
                return False
            self._subscriptions[channel].discard(topic)
            self._unsubscribe(channel, topic)
        logger.info("User %s left case room: %s", connection.user_id, case_id)
        return True

    def is_online(self, user_id: str) -> bool:
        return self._registry.is_online(user_id)

    def subscribers(self, topic: str) -> list[Channel]:
        with self._lock:
            return list(self._topics.get(topic, ()))

    async def send_to_user(self, user_id: str, payload: dict[str, Any]) -> DeliveryStatus:
        """Emit ``payload`` as a ``notification`` event on the user's personal topic.

        Returns ``OFFLINE`` when the user has no registered channel and
        ``FAILED`` when every channel write failed. Neither is an error for
        the caller: the stored notification remains available.
        """

        user_id = str(user_id)
        if self._registry.lookup(user_id) is None:
            logger.info(
                "User %s not connected, notification kept for later retrieval: %s",
                user_id,
                payload.get("title"),
            )
            return DeliveryStatus.OFFLINE

        reached = await self._emit(
            self.subscribers(user_topic(user_id)), NOTIFICATION_EVENT, payload
        )
        if not reached:
            return DeliveryStatus.FAILED
        logger.info("Notification sent to user %s: %s", user_id, payload.get("title"))
        return DeliveryStatus.DELIVERED

    async def send_to_users(
        self, user_ids: Iterable[str], payload: dict[str, Any]
    ) -> dict[str, DeliveryStatus]:
        results: dict[str, DeliveryStatus] = {}
        for user_id in user_ids:
            if not user_id or str(user_id) in results:
                continue
            results[str(user_id)] = await self.send_to_user(user_id, payload)
        return results

    async def send_to_role(self, role: RecipientType | str, payload: dict[str, Any]) -> int:
        """Emit ``payload`` to every channel of ``role``; returns channels reached."""

        reached = await self._emit(
            self.subscribers(role_topic(role)), NOTIFICATION_EVENT, payload
        )
        logger.info(
            "Notification sent to role %s (%s channels): %s",
            role_topic(role),
            reached,
            payload.get("title"),
        )
        return reached

    async def send_to_case(self, case_id: str, payload: dict[str, Any]) -> int:
        reached = await self._emit(
            self.subscribers(case_topic(case_id)), CASE_NOTIFICATION_EVENT, payload
        )
        logger.info(
            "Case notification sent for case %s (%s channels): %s",
            case_id,
            reached,
            payload.get("title"),
        )
        return reached

    async def broadcast_to_all(self, payload: dict[str, Any]) -> int:
        with self._lock:
            channels = list(self._sessions)
        reached = await self._emit(channels, SYSTEM_NOTIFICATION_EVENT, payload)
        logger.info(
            "System notification broadcast (%s channels): %s", reached, payload.get("title")
        )
        return reached

    async def _emit(self, channels: list[Channel], event: str, payload: dict[str, Any]) -> int:
        reached = 0
        for channel in channels:
            message = {"type": event, "data": copy.deepcopy(payload)}
            try:
                await channel.send_json(message)
            except Exception as exc:  # transport errors differ per server
                logger.warning("Dropping channel after failed %s write: %s", event, exc)
                self._drop(channel)
                continue
            reached += 1
        return reached

    def _drop(self, channel: Channel) -> None:
        with self._lock:
            connection = self._sessions.get(channel)
        if connection is not None:
            self.disconnect(connection.user_id, channel)

    def _promote_remaining_session(self, user_id: str) -> None:
        remaining = [
            self._sessions[channel]
            for channel in self._topics.get(user_topic(user_id), ())
            if channel in self._sessions
        ]
        if remaining:
            self._registry.restore(max(remaining, key=lambda item: item.connected_at))

    def _subscribe(self, channel: Channel, topic: str) -> None:
        self._topics[topic].add(channel)
        self._subscriptions[channel].add(topic)

    def _unsubscribe(self, channel: Channel, topic: str) -> None:
        members = self._topics.get(topic)
        if members is None:
            return
        members.discard(channel)
        if not members:
            self._topics.pop(topic, None)


__all__ = [
    "CASE_NOTIFICATION_EVENT",
    "DeliveryStatus",
    "NOTIFICATION_EVENT",
    "PushGateway",
    "SYSTEM_NOTIFICATION_EVENT",
    "case_topic",
    "role_topic",
    "user_topic",
]
