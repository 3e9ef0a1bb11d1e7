"""Registry of live notification channels keyed by user."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from app.domain.entities import RecipientType
from app.utils import now_in_app_timezone


class Channel(Protocol):
    """Live push connection to one client session."""

    async def send_json(self, data: Any) -> None:
        """Write ``data`` to the client as a JSON message."""


@dataclass(frozen=True)
class Connection:
    """Registry entry describing the live channel of a user."""

    user_id: str
    role: RecipientType
    channel: Channel
    connected_at: datetime


class ConnectionRegistry(Protocol):
    """Lookup table from user identity to its live channel."""

    def register(self, user_id: str, role: RecipientType, channel: Channel) -> Connection: ...

    def restore(self, connection: Connection) -> None: ...

    def unregister(self, user_id: str, channel: Channel | None = None) -> bool: ...

    def lookup(self, user_id: str) -> Channel | None: ...

    def get(self, user_id: str) -> Connection | None: ...

    def members_of_role(self, role: RecipientType | str) -> set[str]: ...

    def is_online(self, user_id: str) -> bool: ...


class InMemoryConnectionRegistry:
    """Process-local registry holding at most one connection per user.

    Registering a user that already has an entry replaces it (last write
    wins). The registry is rebuilt from scratch on restart: every user is
    offline until their client reconnects.
    """

    def __init__(self) -> None:
        self._connections: dict[str, Connection] = {}
        self._lock = threading.Lock()

    def register(self, user_id: str, role: RecipientType, channel: Channel) -> Connection:
        connection = Connection(
            user_id=str(user_id),
            role=RecipientType(role),
            channel=channel,
            connected_at=now_in_app_timezone(),
        )
        with self._lock:
            self._connections[connection.user_id] = connection
        return connection

    def restore(self, connection: Connection) -> None:
        """Put back a previously registered ``connection`` unchanged."""

        with self._lock:
            self._connections[connection.user_id] = connection

    def unregister(self, user_id: str, channel: Channel | None = None) -> bool:
        """Remove the entry of ``user_id``; a no-op when it is absent.

        When ``channel`` is given the entry is only removed if it still
        belongs to that channel, so closing a superseded session never evicts
        the newer one.
        """

        key = str(user_id)
        with self._lock:
            current = self._connections.get(key)
            if current is None:
                return False
            if channel is not None and current.channel is not channel:
                return False
            del self._connections[key]
            return True

    def lookup(self, user_id: str) -> Channel | None:
        connection = self._connections.get(str(user_id))
        return connection.channel if connection is not None else None

    def get(self, user_id: str) -> Connection | None:
        return self._connections.get(str(user_id))

    def members_of_role(self, role: RecipientType | str) -> set[str]:
        return {connection.user_id for connection in self.connections_for_role(role)}

    def connections_for_role(self, role: RecipientType | str) -> list[Connection]:
        wanted = RecipientType(role.upper() if isinstance(role, str) else role)
        with self._lock:
            return [
                connection
                for connection in self._connections.values()
                if connection.role is wanted
            ]

    def is_online(self, user_id: str) -> bool:
        return str(user_id) in self._connections

    def count(self) -> int:
        return len(self._connections)


__all__ = [
    "Channel",
    "Connection",
    "ConnectionRegistry",
    "InMemoryConnectionRegistry",
]
