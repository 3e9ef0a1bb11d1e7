"""Helpers that case-management flows call to notify the parties involved."""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable

from app.domain.entities import (
    CaseClosed,
    CaseCreated,
    CaseParties,
    CaseUpdate,
    ComplaintSubmitted,
    DocumentFiled,
    EvidenceSubmitted,
    FIRRegistered,
    FIRRejected,
    HearingScheduled,
    LawyerRequestDecision,
    LawyerRequestStatus,
    NotificationPriority,
    NotificationType,
    OrderPassed,
    OrderType,
    Participant,
    RecipientType,
    StatusChanged,
)

from .dispatcher import DispatchReport, NotificationDispatcher


async def notify_case_created(
    dispatcher: NotificationDispatcher,
    *,
    case_id: str,
    parties: CaseParties | None = None,
    exclude_recipients: Iterable[str | None] = (),
) -> DispatchReport:
    """Tell the complainant, the investigating officers and the judge about a new case."""

    return await dispatcher.dispatch(
        CaseCreated(case_id=case_id), parties, exclude_recipients
    )


async def notify_complaint_submitted(
    dispatcher: NotificationDispatcher,
    *,
    complaint_id: str,
    title: str,
    complainant_id: str | None,
    assigned_officer_id: str | None = None,
) -> DispatchReport:
    event = ComplaintSubmitted(
        complaint_id=complaint_id,
        title=title,
        complainant_id=complainant_id,
        assigned_officer_id=assigned_officer_id,
    )
    return await dispatcher.dispatch(event)


async def notify_fir_registered(
    dispatcher: NotificationDispatcher,
    *,
    fir_id: str,
    fir_number: str,
    complainant_id: str | None,
    registered_by: str | None = None,
    assigned_judge_id: str | None = None,
    complaint_id: str | None = None,
    exclude_recipients: Iterable[str | None] = (),
) -> DispatchReport:
    """Notify the complainant and the reviewing judge; the registering officer is skipped."""

    event = FIRRegistered(
        fir_id=fir_id,
        fir_number=fir_number,
        complainant_id=complainant_id,
        registered_by=registered_by,
        assigned_judge_id=assigned_judge_id,
        complaint_id=complaint_id,
    )
    return await dispatcher.dispatch(event, exclude_recipients=exclude_recipients)


async def notify_fir_rejected(
    dispatcher: NotificationDispatcher,
    *,
    fir_id: str,
    reason: str,
    recipient_id: str,
    recipient_type: RecipientType = RecipientType.POLICE,
) -> DispatchReport:
    event = FIRRejected(
        fir_id=fir_id,
        reason=reason,
        recipient_id=recipient_id,
        recipient_type=recipient_type,
    )
    return await dispatcher.dispatch(event)


async def notify_hearing_scheduled(
    dispatcher: NotificationDispatcher,
    *,
    case_id: str,
    case_number: str,
    hearing_date: date,
    hearing_time: str,
    courtroom: str,
    participants: Iterable[Participant],
    exclude_recipients: Iterable[str | None] = (),
) -> DispatchReport:
    """Warn every participant; the notifications expire when the hearing starts."""

    event = HearingScheduled(
        case_id=case_id,
        case_number=case_number,
        hearing_date=hearing_date,
        hearing_time=hearing_time,
        courtroom=courtroom,
        participants=tuple(participants),
    )
    return await dispatcher.dispatch(event, exclude_recipients=exclude_recipients)


async def notify_lawyer_request_decision(
    dispatcher: NotificationDispatcher,
    *,
    request_id: str,
    case_number: str,
    decision: LawyerRequestStatus | str,
    complainant_id: str | None,
    lawyer_id: str | None,
    case_id: str | None = None,
) -> DispatchReport:
    event = LawyerRequestDecision(
        request_id=request_id,
        case_id=case_id,
        case_number=case_number,
        complainant_id=complainant_id,
        lawyer_id=lawyer_id,
        decision=LawyerRequestStatus(decision),
    )
    return await dispatcher.dispatch(event)


async def notify_case_closed(
    dispatcher: NotificationDispatcher,
    *,
    case_id: str,
    verdict: str,
    parties: CaseParties | None = None,
    exclude_recipients: Iterable[str | None] = (),
) -> DispatchReport:
    return await dispatcher.dispatch(
        CaseClosed(case_id=case_id, verdict=verdict), parties, exclude_recipients
    )


async def notify_evidence_submitted(
    dispatcher: NotificationDispatcher,
    *,
    case_id: str,
    case_number: str,
    evidence_type: str,
    title: str,
    participants: Iterable[Participant],
    submitted_by: str | None = None,
    submitted_by_role: str | None = None,
    exclude_recipients: Iterable[str | None] = (),
) -> DispatchReport:
    """Notify the case participants about new evidence.

    The submitter is left out unless the caller passes an explicit
    ``exclude_recipients`` list.
    """

    event = EvidenceSubmitted(
        case_id=case_id,
        case_number=case_number,
        evidence_type=evidence_type,
        title=title,
        submitted_by=submitted_by,
        submitted_by_role=submitted_by_role,
        participants=tuple(participants),
    )
    excluded = tuple(exclude_recipients) or (submitted_by,)
    return await dispatcher.dispatch(event, exclude_recipients=excluded)


async def notify_document_filed(
    dispatcher: NotificationDispatcher,
    *,
    case_id: str,
    case_number: str,
    document_type: str,
    title: str,
    participants: Iterable[Participant],
    submitted_by: str | None = None,
    submitted_by_role: str | None = None,
    exclude_recipients: Iterable[str | None] = (),
) -> DispatchReport:
    event = DocumentFiled(
        case_id=case_id,
        case_number=case_number,
        document_type=document_type,
        title=title,
        submitted_by=submitted_by,
        submitted_by_role=submitted_by_role,
        participants=tuple(participants),
    )
    excluded = tuple(exclude_recipients) or (submitted_by,)
    return await dispatcher.dispatch(event, exclude_recipients=excluded)


async def notify_status_changed(
    dispatcher: NotificationDispatcher,
    *,
    case_id: str,
    case_number: str,
    old_status: str,
    new_status: str,
    participants: Iterable[Participant],
    changed_by: str | None = None,
    changed_by_role: str | None = None,
    exclude_recipients: Iterable[str | None] = (),
) -> DispatchReport:
    event = StatusChanged(
        case_id=case_id,
        case_number=case_number,
        old_status=old_status,
        new_status=new_status,
        changed_by=changed_by,
        changed_by_role=changed_by_role,
        participants=tuple(participants),
    )
    excluded = tuple(exclude_recipients) or (changed_by,)
    return await dispatcher.dispatch(event, exclude_recipients=excluded)


async def notify_order_passed(
    dispatcher: NotificationDispatcher,
    *,
    case_id: str,
    case_number: str,
    order_type: OrderType | str,
    order_title: str,
    participants: Iterable[Participant],
    exclude_recipients: Iterable[str | None] = (),
) -> DispatchReport:
    event = OrderPassed(
        case_id=case_id,
        case_number=case_number,
        order_type=OrderType(order_type),
        order_title=order_title,
        participants=tuple(participants),
    )
    return await dispatcher.dispatch(event, exclude_recipients=exclude_recipients)


async def notify_case_parties(
    dispatcher: NotificationDispatcher,
    *,
    case_id: str,
    title: str,
    message: str,
    type: NotificationType | str,
    metadata: dict[str, Any] | None = None,
    priority: NotificationPriority | str = NotificationPriority.NORMAL,
    parties: CaseParties | None = None,
    exclude_recipients: Iterable[str | None] = (),
) -> DispatchReport:
    """Send a custom message to every party of a case, judge included."""

    event = CaseUpdate(
        case_id=case_id,
        title=title,
        message=message,
        type=NotificationType(type),
        metadata=metadata,
        priority=NotificationPriority(priority),
    )
    return await dispatcher.dispatch(event, parties, exclude_recipients)


__all__ = [
    "notify_case_closed",
    "notify_case_created",
    "notify_case_parties",
    "notify_complaint_submitted",
    "notify_document_filed",
    "notify_evidence_submitted",
    "notify_fir_registered",
    "notify_fir_rejected",
    "notify_hearing_scheduled",
    "notify_lawyer_request_decision",
    "notify_order_passed",
    "notify_status_changed",
]
