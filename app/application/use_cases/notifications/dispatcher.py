"""Persist resolved notifications and push them to connected recipients."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

import anyio
from anyio import from_thread, to_thread
from sqlalchemy.orm import Session

from app.domain.entities import (
    CaseEvent,
    CaseParties,
    CasePartyDirectory,
    Notification,
    NotificationPriority,
    RecipientType,
)
from app.domain.errors import NotFoundError, ValidationError
from app.infrastructure.notifications import (
    DeliveryStatus,
    PushGateway,
    serialize_notification,
    serialize_system_update,
)
from app.infrastructure.repositories import NotificationRepository

from .fanout import NotificationDraft, resolve_recipients

logger = logging.getLogger(__name__)


@dataclass
class DeliveryOutcome:
    """What happened to a single draft during ``dispatch``."""

    draft: NotificationDraft
    notification: Notification | None = None
    status: DeliveryStatus | None = None
    error: str | None = None

    @property
    def persisted(self) -> bool:
        return self.notification is not None


@dataclass
class DispatchReport:
    outcomes: list[DeliveryOutcome] = field(default_factory=list)

    @property
    def notifications(self) -> list[Notification]:
        """Created records, in the order they were persisted."""

        return [outcome.notification for outcome in self.outcomes if outcome.notification]

    @property
    def failures(self) -> list[DeliveryOutcome]:
        return [outcome for outcome in self.outcomes if outcome.error is not None]

    @property
    def delivered_count(self) -> int:
        return sum(
            1 for outcome in self.outcomes if outcome.status is DeliveryStatus.DELIVERED
        )


class NotificationDispatcher:
    """Fan a case event out to its recipients.

    Every draft returned by the resolver is stored first, in resolver order;
    live pushes start once the records exist and run concurrently. A
    recipient whose record fails validation is skipped and reported, while
    an unavailable store aborts the whole call with ``StoreUnavailableError``.
    Offline recipients are not an error: their records wait in the store.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        gateway: PushGateway,
        party_directory: CasePartyDirectory | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._gateway = gateway
        self._party_directory = party_directory

    @property
    def gateway(self) -> PushGateway:
        return self._gateway

    async def dispatch(
        self,
        event: CaseEvent,
        parties: CaseParties | None = None,
        exclude_recipients: Iterable[str | None] = (),
    ) -> DispatchReport:
        if parties is None and event.requires_parties:
            parties = await self._load_parties(event.case_id)

        drafts = resolve_recipients(event, parties, exclude_recipients)
        report = DispatchReport()
        for draft in drafts:
            report.outcomes.append(await self._persist(draft))

        pending = [outcome for outcome in report.outcomes if outcome.notification]
        async with anyio.create_task_group() as task_group:
            for outcome in pending:
                task_group.start_soon(self._push, outcome)

        logger.info(
            "%s dispatched: %s of %s notifications delivered live (%s stored, %s rejected)",
            type(event).__name__,
            report.delivered_count,
            len(drafts),
            len(pending),
            len(report.failures),
        )
        return report

    def dispatch_from_thread(
        self,
        event: CaseEvent,
        parties: CaseParties | None = None,
        exclude_recipients: Iterable[str | None] = (),
    ) -> DispatchReport:
        """Run :meth:`dispatch` from a worker thread of the running event loop."""

        return from_thread.run(self.dispatch, event, parties, tuple(exclude_recipients))

    async def broadcast_system_update(
        self,
        title: str,
        message: str,
        *,
        recipient_type: RecipientType | None = None,
        metadata: dict[str, Any] | None = None,
        priority: NotificationPriority = NotificationPriority.NORMAL,
    ) -> int:
        """Announce a system update to one role or to everybody connected."""

        payload = serialize_system_update(
            title=title,
            message=message,
            metadata=metadata,
            priority=priority,
            recipient_type=recipient_type,
        )
        if recipient_type is not None:
            return await self._gateway.send_to_role(recipient_type, payload)
        return await self._gateway.broadcast_to_all(payload)

    async def _load_parties(self, case_id: str) -> CaseParties:
        if self._party_directory is None:
            raise ValueError(f"No party graph supplied for case {case_id}")
        parties = await to_thread.run_sync(self._party_directory.get_case_parties, case_id)
        if parties is None:
            raise NotFoundError(f"Case {case_id} not found")
        return parties

    async def _persist(self, draft: NotificationDraft) -> DeliveryOutcome:
        try:
            notification = await to_thread.run_sync(self._store, draft)
        except ValidationError as exc:
            logger.warning(
                "Skipping notification for recipient %s: %s", draft.recipient_id, exc
            )
            return DeliveryOutcome(draft=draft, error=str(exc))
        return DeliveryOutcome(draft=draft, notification=notification)

    def _store(self, draft: NotificationDraft) -> Notification:
        session = self._session_factory()
        try:
            return NotificationRepository(session).create(draft.to_notification())
        finally:
            session.close()

    async def _push(self, outcome: DeliveryOutcome) -> None:
        notification = outcome.notification
        try:
            outcome.status = await self._gateway.send_to_user(
                notification.recipient_id, serialize_notification(notification)
            )
        except Exception:
            logger.exception(
                "Live delivery of notification %s to user %s failed",
                notification.id,
                notification.recipient_id,
            )
            outcome.status = DeliveryStatus.FAILED


__all__ = ["DeliveryOutcome", "DispatchReport", "NotificationDispatcher"]
