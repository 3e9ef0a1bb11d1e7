"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from app.domain.entities import (
    Notification,
    NotificationPage,
    NotificationPriority,
    NotificationType,
    Pagination,
    RecipientType,
    validate_notification,
)
from app.domain.errors import NotFoundError, StoreUnavailableError, ValidationError
from app.infrastructure.models import NotificationModel
from app.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class NotificationRepository:
    """Provide the notification store operations on top of a SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, notification: Notification) -> Notification:
        """Persist ``notification`` and return it with ``id`` and ``created_at`` set."""

        validated = validate_notification(notification)
        model = NotificationModel()
        self._apply_entity_to_model(model, validated)
        with self._write("create notification"):
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def get(self, notification_id: int) -> Notification | None:
        with self._read("load notification"):
            model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model is not None else None

    def mark_read(
        self, notification_id: int, *, recipient_id: str | None = None
    ) -> Notification:
        """Flag a notification as read. Calling it again is a no-op."""

        with self._read("load notification"):
            model = self.session.get(NotificationModel, notification_id)
        if model is None or (
            recipient_id is not None and model.recipient_id != str(recipient_id)
        ):
            raise NotFoundError(f"Notification with id {notification_id} not found")
        if not model.is_read:
            with self._write("mark notification as read"):
                model.is_read = True
                self.session.commit()
                self.session.refresh(model)
        return self._to_entity(model)

    def mark_all_read(
        self,
        recipient_id: str,
        *,
        recipient_type: RecipientType | str | None = None,
    ) -> int:
        """Flag every unread notification of ``recipient_id`` as read.

        Returns the number of notifications that changed state. Raises
        ``NotFoundError`` when the recipient owns no notification at all.
        """

        with self._read("count notifications"):
            owned = self._recipient_query(recipient_id, recipient_type).count()
        if owned == 0:
            raise NotFoundError(f"No notifications found for recipient {recipient_id}")
        with self._write("mark notifications as read"):
            updated = (
                self._recipient_query(recipient_id, recipient_type)
                .filter(NotificationModel.is_read.is_(False))
                .update({NotificationModel.is_read: True}, synchronize_session=False)
            )
            self.session.commit()
        return updated

    def mark_many_read(self, notification_ids: Iterable[int], *, recipient_id: str) -> int:
        ids = [notification_id for notification_id in notification_ids if notification_id is not None]
        if not ids:
            return 0
        with self._write("mark notifications as read"):
            updated = (
                self._recipient_query(recipient_id)
                .filter(NotificationModel.id.in_(ids), NotificationModel.is_read.is_(False))
                .update({NotificationModel.is_read: True}, synchronize_session=False)
            )
            self.session.commit()
        return updated

    def list_for_recipient(
        self,
        recipient_id: str,
        *,
        page: int = 1,
        page_size: int = 20,
        unread_only: bool = False,
        recipient_type: RecipientType | str | None = None,
    ) -> NotificationPage:
        """Return one page of the recipient's feed ordered newest first."""

        if page < 1:
            raise ValidationError("page must be greater than or equal to 1")
        if page_size < 1:
            raise ValidationError("page_size must be greater than or equal to 1")

        query = self._recipient_query(recipient_id, recipient_type)
        if unread_only:
            query = query.filter(NotificationModel.is_read.is_(False))
        with self._read("list notifications"):
            total = query.count()
            models = (
                query.order_by(
                    NotificationModel.created_at.desc(), NotificationModel.id.desc()
                )
                .offset((page - 1) * page_size)
                .limit(page_size)
                .all()
            )
        return NotificationPage(
            items=[self._to_entity(model) for model in models],
            pagination=Pagination.build(page=page, page_size=page_size, total_items=total),
        )

    def list_unread_for_recipient(
        self, recipient_id: str, *, limit: int | None = 50
    ) -> Sequence[Notification]:
        query = (
            self._recipient_query(recipient_id)
            .filter(NotificationModel.is_read.is_(False))
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        with self._read("list unread notifications"):
            return [self._to_entity(model) for model in query.all()]

    def count_unread(self, recipient_id: str) -> int:
        with self._read("count unread notifications"):
            return (
                self._recipient_query(recipient_id)
                .filter(NotificationModel.is_read.is_(False))
                .count()
            )

    def sweep_expired(self, now: datetime | None = None) -> int:
        """Delete every notification whose ``expires_at`` is at or before ``now``."""

        cutoff = ensure_app_naive_datetime(now or now_in_app_timezone())
        with self._write("sweep expired notifications"):
            deleted = (
                self.session.query(NotificationModel)
                .filter(
                    NotificationModel.expires_at.is_not(None),
                    NotificationModel.expires_at <= cutoff,
                )
                .delete(synchronize_session=False)
            )
            self.session.commit()
        return deleted

    def _recipient_query(
        self,
        recipient_id: str,
        recipient_type: RecipientType | str | None = None,
    ) -> Query:
        query = self.session.query(NotificationModel).filter(
            NotificationModel.recipient_id == str(recipient_id)
        )
        if recipient_type is not None:
            query = query.filter(
                NotificationModel.recipient_type == RecipientType(recipient_type).value
            )
        return query

    @contextmanager
    def _read(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Could not {action}: {exc}") from exc

    @contextmanager
    def _write(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreUnavailableError(f"Could not {action}: {exc}") from exc

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, notification: Notification) -> None:
        model.created_at = ensure_app_naive_datetime(now_in_app_timezone())
        model.recipient_id = notification.recipient_id
        model.recipient_type = notification.recipient_type.value
        model.title = notification.title
        model.message = notification.message
        model.type = notification.type.value
        model.case_id = notification.case_id
        model.complaint_id = notification.complaint_id
        model.fir_id = notification.fir_id
        model.is_read = bool(notification.is_read)
        model.priority = notification.priority.value
        model.expires_at = ensure_app_naive_datetime(notification.expires_at)
        model.metadata_ = notification.metadata or {}

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            recipient_id=model.recipient_id,
            recipient_type=RecipientType(model.recipient_type),
            title=model.title,
            message=model.message,
            type=NotificationType(model.type),
            case_id=model.case_id,
            complaint_id=model.complaint_id,
            fir_id=model.fir_id,
            is_read=bool(model.is_read),
            priority=NotificationPriority(model.priority),
            expires_at=ensure_app_timezone(model.expires_at),
            metadata=model.metadata_ or {},
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["NotificationRepository"]
