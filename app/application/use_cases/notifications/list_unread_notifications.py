"""Use case for loading the unread backlog sent when a client connects."""

from typing import Sequence

from sqlalchemy.orm import Session

from app.domain.entities import Notification
from app.infrastructure.repositories import NotificationRepository


def list_unread_notifications(
    session: Session, *, recipient_id: str, limit: int | None = 50
) -> Sequence[Notification]:
    return NotificationRepository(session).list_unread_for_recipient(recipient_id, limit=limit)


def count_unread_notifications(session: Session, *, recipient_id: str) -> int:
    return NotificationRepository(session).count_unread(recipient_id)
