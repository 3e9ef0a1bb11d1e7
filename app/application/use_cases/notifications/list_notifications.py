"""Use case for paging through a recipient's notification feed."""

from sqlalchemy.orm import Session

from app.domain.entities import NotificationPage
from app.infrastructure.repositories import NotificationRepository


def list_notifications(
    session: Session,
    *,
    recipient_id: str,
    page: int = 1,
    page_size: int = 20,
    unread_only: bool = False,
) -> NotificationPage:
    """Return the requested page of notifications, newest first."""

    return NotificationRepository(session).list_for_recipient(
        recipient_id,
        page=page,
        page_size=page_size,
        unread_only=unread_only,
    )
