"""Use cases for acknowledging notifications."""

from typing import Iterable

from sqlalchemy.orm import Session

from app.domain.entities import Notification
from app.infrastructure.repositories import NotificationRepository


def mark_notification_read(
    session: Session, *, notification_id: int, recipient_id: str
) -> Notification:
    """Flag one of the recipient's notifications as read.

    Raises ``NotFoundError`` when the notification does not exist or belongs
    to somebody else.
    """

    return NotificationRepository(session).mark_read(notification_id, recipient_id=recipient_id)


def mark_all_notifications_read(session: Session, *, recipient_id: str) -> int:
    """Flag every notification of the recipient as read and return how many changed."""

    return NotificationRepository(session).mark_all_read(recipient_id)


def acknowledge_notifications(
    session: Session, *, notification_ids: Iterable[int], recipient_id: str
) -> int:
    # Only integer ids reach the query; strings and bools are ignored.
    ids = [
        value
        for value in notification_ids
        if isinstance(value, int) and not isinstance(value, bool)
    ]
    return NotificationRepository(session).mark_many_read(ids, recipient_id=recipient_id)
