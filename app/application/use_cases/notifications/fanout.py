"""Resolve which case parties must be notified about a domain event.

Everything in this module is a pure transformation: an event plus the case
party graph go in, an ordered list of :class:`NotificationDraft` comes out.
Persistence and delivery happen in :mod:`.dispatcher`.

Drafts follow a stable order (complainant, investigating officers in graph
order, judge, accused lawyer, prosecutor lawyer; participant lists keep the
caller's order) and the exclusion list is applied last, whatever the event.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable

from app.domain.entities import (
    CaseClosed,
    CaseCreated,
    CaseEvent,
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
    Notification,
    NotificationPriority,
    NotificationType,
    OrderPassed,
    OrderType,
    Participant,
    RecipientType,
    StatusChanged,
)
from app.utils import combine_in_app_timezone

ROLE_COMPLAINANT = "complainant"
ROLE_INVESTIGATING_OFFICER = "investigating_officer"
ROLE_ASSIGNED_JUDGE = "assigned_judge"
ROLE_ACCUSED_LAWYER = "accused_lawyer"
ROLE_PROSECUTOR_LAWYER = "prosecutor_lawyer"
ROLE_ASSIGNED_OFFICER = "assigned_officer"


@dataclass
class NotificationDraft:
    """A notification that has been addressed but not yet persisted."""

    recipient_id: str | None
    recipient_type: RecipientType | str
    title: str
    message: str
    type: NotificationType
    priority: NotificationPriority = NotificationPriority.NORMAL
    role: str | None = None
    case_id: str | None = None
    complaint_id: str | None = None
    fir_id: str | None = None
    expires_at: datetime | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_notification(self) -> Notification:
        return Notification(
            id=None,
            recipient_id=self.recipient_id,
            recipient_type=self.recipient_type,
            title=self.title,
            message=self.message,
            type=self.type,
            case_id=self.case_id,
            complaint_id=self.complaint_id,
            fir_id=self.fir_id,
            is_read=False,
            priority=self.priority,
            expires_at=self.expires_at,
            metadata=dict(self.metadata),
        )


@dataclass(frozen=True)
class _Party:
    user_id: str
    recipient_type: RecipientType
    role: str


def resolve_recipients(
    event: CaseEvent,
    parties: CaseParties | None = None,
    exclude_recipients: Iterable[str | None] = (),
) -> list[NotificationDraft]:
    """Return the drafts ``event`` fans out to, minus ``exclude_recipients``."""

    builder = _BUILDERS.get(type(event))
    if builder is None:
        raise TypeError(f"Unsupported case event: {type(event).__name__}")

    if event.requires_parties:
        if parties is None:
            raise ValueError(
                f"{type(event).__name__} needs the party graph of case {event.case_id}"
            )
        if str(parties.case_id) != str(event.case_id):
            raise ValueError(
                f"Party graph of case {parties.case_id} does not match event case {event.case_id}"
            )

    excluded = _normalize_ids(exclude_recipients)
    if isinstance(event, FIRRegistered) and event.registered_by:
        excluded.add(str(event.registered_by))

    drafts = builder(event, parties)
    return [draft for draft in drafts if draft.recipient_id not in excluded]


def case_party_members(parties: CaseParties) -> list[_Party]:
    """Return every identity of the party graph in notification order."""

    members: list[_Party] = []
    if parties.complainant_id:
        members.append(_Party(str(parties.complainant_id), RecipientType.CITIZEN, ROLE_COMPLAINANT))
    for officer_id in parties.investigating_officer_ids:
        if officer_id:
            members.append(
                _Party(str(officer_id), RecipientType.POLICE, ROLE_INVESTIGATING_OFFICER)
            )
    if parties.assigned_judge_id:
        members.append(
            _Party(str(parties.assigned_judge_id), RecipientType.JUDGE, ROLE_ASSIGNED_JUDGE)
        )
    if parties.accused_lawyer_id:
        members.append(
            _Party(str(parties.accused_lawyer_id), RecipientType.LAWYER, ROLE_ACCUSED_LAWYER)
        )
    if parties.prosecutor_lawyer_id:
        members.append(
            _Party(
                str(parties.prosecutor_lawyer_id), RecipientType.LAWYER, ROLE_PROSECUTOR_LAWYER
            )
        )
    return members


def _normalize_ids(values: Iterable[str | None]) -> set[str]:
    return {str(value) for value in values if value not in (None, "")}


def _recipient_id(value: Any) -> str | None:
    # Missing ids stay None so the store reports them as a missing field.
    if value is None:
        return None
    return str(value)


def _recipient_type(value: RecipientType | str) -> RecipientType | str:
    # Unknown labels are passed through untouched; the store rejects them.
    try:
        return RecipientType(value.upper() if isinstance(value, str) else value)
    except ValueError:
        return value


def _case_links(parties: CaseParties) -> dict[str, str | None]:
    return {
        "case_id": parties.case_id,
        "fir_id": parties.fir_id,
        "complaint_id": parties.complaint_id,
    }


def _case_created(event: CaseCreated, parties: CaseParties) -> list[NotificationDraft]:
    number = parties.case_number
    links = _case_links(parties)
    drafts: list[NotificationDraft] = []
    for member in case_party_members(parties):
        if member.role == ROLE_COMPLAINANT:
            drafts.append(
                NotificationDraft(
                    recipient_id=member.user_id,
                    recipient_type=member.recipient_type,
                    role=member.role,
                    title="Case Created",
                    message=f"Your case {number} has been created and is now under judicial review",
                    type=NotificationType.CASE_CREATED,
                    metadata={"case_number": number, "status": "PENDING"},
                    priority=NotificationPriority.HIGH,
                    **links,
                )
            )
        elif member.role == ROLE_INVESTIGATING_OFFICER:
            drafts.append(
                NotificationDraft(
                    recipient_id=member.user_id,
                    recipient_type=member.recipient_type,
                    role=member.role,
                    title="Case Assigned",
                    message=f"You have been assigned to investigate case {number}",
                    type=NotificationType.CASE_ASSIGNED,
                    metadata={"case_number": number, "role": member.role},
                    priority=NotificationPriority.HIGH,
                    **links,
                )
            )
        elif member.role == ROLE_ASSIGNED_JUDGE:
            drafts.append(
                NotificationDraft(
                    recipient_id=member.user_id,
                    recipient_type=member.recipient_type,
                    role=member.role,
                    title="New Case Assigned",
                    message=f"Case {number} has been assigned to you for judicial proceedings",
                    type=NotificationType.CASE_ASSIGNED,
                    metadata={"case_number": number, "role": member.role},
                    priority=NotificationPriority.HIGH,
                    **links,
                )
            )
    return drafts


def _case_closed(event: CaseClosed, parties: CaseParties) -> list[NotificationDraft]:
    number = parties.case_number
    return [
        NotificationDraft(
            recipient_id=member.user_id,
            recipient_type=member.recipient_type,
            role=member.role,
            title="Case Closed",
            message=f"Case {number} has been closed with verdict: {event.verdict}",
            type=NotificationType.CASE_CLOSED,
            metadata={"case_number": number, "verdict": event.verdict},
            priority=NotificationPriority.HIGH,
            **_case_links(parties),
        )
        for member in case_party_members(parties)
        # The judge passing the verdict is not told about it.
        if member.role != ROLE_ASSIGNED_JUDGE
    ]


def _case_update(event: CaseUpdate, parties: CaseParties) -> list[NotificationDraft]:
    return [
        NotificationDraft(
            recipient_id=member.user_id,
            recipient_type=member.recipient_type,
            role=member.role,
            title=event.title,
            message=event.message,
            type=event.type,
            metadata={**(event.metadata or {}), "case_number": parties.case_number},
            priority=event.priority,
            **_case_links(parties),
        )
        for member in case_party_members(parties)
    ]


def _complaint_submitted(event: ComplaintSubmitted, _parties: CaseParties | None) -> list[NotificationDraft]:
    drafts: list[NotificationDraft] = []
    if event.complainant_id:
        drafts.append(
            NotificationDraft(
                recipient_id=_recipient_id(event.complainant_id),
                recipient_type=RecipientType.CITIZEN,
                role=ROLE_COMPLAINANT,
                title="Complaint Submitted",
                message=f'Your complaint "{event.title}" has been submitted and is under investigation',
                type=NotificationType.COMPLAINT_SUBMITTED,
                complaint_id=event.complaint_id,
                metadata={"title": event.title, "status": "PENDING"},
                priority=NotificationPriority.NORMAL,
            )
        )
    if event.assigned_officer_id:
        drafts.append(
            NotificationDraft(
                recipient_id=_recipient_id(event.assigned_officer_id),
                recipient_type=RecipientType.POLICE,
                role=ROLE_ASSIGNED_OFFICER,
                title="New Complaint Assigned",
                message=f'Complaint "{event.title}" has been assigned to you for investigation',
                type=NotificationType.COMPLAINT_ASSIGNED,
                complaint_id=event.complaint_id,
                metadata={"title": event.title, "status": "ASSIGNED"},
                priority=NotificationPriority.HIGH,
            )
        )
    return drafts


def _fir_registered(event: FIRRegistered, _parties: CaseParties | None) -> list[NotificationDraft]:
    drafts: list[NotificationDraft] = []
    metadata = {"fir_number": event.fir_number, "status": "PENDING"}
    if event.complainant_id:
        drafts.append(
            NotificationDraft(
                recipient_id=_recipient_id(event.complainant_id),
                recipient_type=RecipientType.CITIZEN,
                role=ROLE_COMPLAINANT,
                title="FIR Registered",
                message=(
                    f"Your FIR {event.fir_number} has been successfully registered "
                    "and is under review"
                ),
                type=NotificationType.FIR_REGISTERED,
                fir_id=event.fir_id,
                complaint_id=event.complaint_id,
                metadata=dict(metadata),
                priority=NotificationPriority.HIGH,
            )
        )
    if event.assigned_judge_id:
        drafts.append(
            NotificationDraft(
                recipient_id=_recipient_id(event.assigned_judge_id),
                recipient_type=RecipientType.JUDGE,
                role=ROLE_ASSIGNED_JUDGE,
                title="New FIR Submitted",
                message=f"FIR {event.fir_number} has been submitted for your review and approval",
                type=NotificationType.FIR_SUBMITTED,
                fir_id=event.fir_id,
                complaint_id=event.complaint_id,
                metadata=dict(metadata),
                priority=NotificationPriority.NORMAL,
            )
        )
    return drafts


def _fir_rejected(event: FIRRejected, _parties: CaseParties | None) -> list[NotificationDraft]:
    return [
        NotificationDraft(
            recipient_id=_recipient_id(event.recipient_id),
            recipient_type=_recipient_type(event.recipient_type),
            title="FIR Rejected",
            message=f"Your FIR has been rejected by the judge. Reason: {event.reason}",
            type=NotificationType.FIR_REJECTED,
            fir_id=event.fir_id,
            metadata={"reason": event.reason},
            priority=NotificationPriority.HIGH,
        )
    ]


def _hearing_scheduled(event: HearingScheduled, _parties: CaseParties | None) -> list[NotificationDraft]:
    hearing_date = event.hearing_date.isoformat()
    expires_at = combine_in_app_timezone(event.hearing_date, event.hearing_time)
    return [
        NotificationDraft(
            recipient_id=_recipient_id(participant.user_id),
            recipient_type=_recipient_type(participant.recipient_type),
            role=participant.role,
            title="Hearing Scheduled",
            message=(
                f"Hearing for case {event.case_number} scheduled on {hearing_date} "
                f"at {event.hearing_time} in {event.courtroom}"
            ),
            type=NotificationType.HEARING_SCHEDULED,
            case_id=event.case_id,
            metadata={
                "case_number": event.case_number,
                "hearing_date": hearing_date,
                "hearing_time": event.hearing_time,
                "courtroom": event.courtroom,
                "role": participant.role,
            },
            priority=NotificationPriority.URGENT,
            expires_at=expires_at,
        )
        for participant in event.participants
    ]


_CITIZEN_DECISION_TEXT = {
    LawyerRequestStatus.ACCEPTED: "has been accepted",
    LawyerRequestStatus.REJECTED: "has been rejected",
    LawyerRequestStatus.PENDING: "is being reviewed by the lawyer",
}
_LAWYER_DECISION_TEXT = {
    LawyerRequestStatus.ACCEPTED: "has been accepted for your representation",
    LawyerRequestStatus.REJECTED: "has been rejected for your representation",
    LawyerRequestStatus.PENDING: "is awaiting your decision on representation",
}


def _lawyer_request_decision(
    event: LawyerRequestDecision, _parties: CaseParties | None
) -> list[NotificationDraft]:
    decision = LawyerRequestStatus(event.decision)
    label = decision.value.capitalize()
    metadata = {
        "case_number": event.case_number,
        "request_type": decision.value,
        "request_id": event.request_id,
    }
    drafts: list[NotificationDraft] = []
    if event.complainant_id:
        drafts.append(
            NotificationDraft(
                recipient_id=_recipient_id(event.complainant_id),
                recipient_type=RecipientType.CITIZEN,
                role=ROLE_COMPLAINANT,
                title=f"Lawyer Request {label}",
                message=(
                    f"Your lawyer request for case {event.case_number} "
                    f"{_CITIZEN_DECISION_TEXT[decision]}"
                ),
                type=NotificationType(f"LAWYER_REQUEST_{decision.value}"),
                case_id=event.case_id,
                metadata=dict(metadata),
                priority=NotificationPriority.NORMAL,
            )
        )
    if event.lawyer_id:
        drafts.append(
            NotificationDraft(
                recipient_id=_recipient_id(event.lawyer_id),
                recipient_type=RecipientType.LAWYER,
                title=f"Case {label}",
                message=f"Case {event.case_number} {_LAWYER_DECISION_TEXT[decision]}",
                type=NotificationType(f"CASE_{decision.value}"),
                case_id=event.case_id,
                metadata=dict(metadata),
                priority=NotificationPriority.HIGH,
            )
        )
    return drafts


def _participant_drafts(
    participants: Iterable[Participant],
    *,
    case_id: str,
    title: str,
    message: str,
    type: NotificationType,
    metadata: dict[str, Any],
    priority: NotificationPriority,
) -> list[NotificationDraft]:
    return [
        NotificationDraft(
            recipient_id=_recipient_id(participant.user_id),
            recipient_type=_recipient_type(participant.recipient_type),
            role=participant.role,
            title=title,
            message=message,
            type=type,
            case_id=case_id,
            metadata={**metadata, "role": participant.role},
            priority=priority,
        )
        for participant in participants
    ]


def _humanize(label: str) -> str:
    return label.replace("_", " ").lower()


def _evidence_submitted(event: EvidenceSubmitted, _parties: CaseParties | None) -> list[NotificationDraft]:
    return _participant_drafts(
        event.participants,
        case_id=event.case_id,
        title="New Evidence Submitted",
        message=(
            f'New {_humanize(event.evidence_type)} "{event.title}" has been submitted '
            f"in case {event.case_number}"
        ),
        type=NotificationType.EVIDENCE_SUBMITTED,
        metadata={
            "case_number": event.case_number,
            "evidence_type": event.evidence_type,
            "title": event.title,
            "submitted_by": event.submitted_by,
            "submitted_by_role": event.submitted_by_role,
        },
        priority=NotificationPriority.NORMAL,
    )


def _document_filed(event: DocumentFiled, _parties: CaseParties | None) -> list[NotificationDraft]:
    return _participant_drafts(
        event.participants,
        case_id=event.case_id,
        title="New Document Filed",
        message=(
            f'New {_humanize(event.document_type)} "{event.title}" has been filed '
            f"in case {event.case_number}"
        ),
        type=NotificationType.DOCUMENT_FILED,
        metadata={
            "case_number": event.case_number,
            "document_type": event.document_type,
            "title": event.title,
            "submitted_by": event.submitted_by,
            "submitted_by_role": event.submitted_by_role,
        },
        priority=NotificationPriority.NORMAL,
    )


def _status_changed(event: StatusChanged, _parties: CaseParties | None) -> list[NotificationDraft]:
    return _participant_drafts(
        event.participants,
        case_id=event.case_id,
        title="Case Status Updated",
        message=(
            f"Case {event.case_number} status changed from {event.old_status} "
            f"to {event.new_status}"
        ),
        type=NotificationType.STATUS_CHANGED,
        metadata={
            "case_number": event.case_number,
            "old_status": event.old_status,
            "new_status": event.new_status,
            "changed_by": event.changed_by,
            "changed_by_role": event.changed_by_role,
        },
        priority=NotificationPriority.NORMAL,
    )


_ORDER_TYPES = {
    OrderType.ORDER: (NotificationType.ORDER_PASSED, "Order Passed", "passed"),
    OrderType.JUDGMENT: (NotificationType.JUDGMENT_PASSED, "Judgment Passed", "passed"),
    OrderType.SUMMON: (NotificationType.SUMMON_ISSUED, "Summon Issued", "issued"),
}


def _order_passed(event: OrderPassed, _parties: CaseParties | None) -> list[NotificationDraft]:
    order_type = OrderType(event.order_type)
    notification_type, title, verb = _ORDER_TYPES[order_type]
    return _participant_drafts(
        event.participants,
        case_id=event.case_id,
        title=title,
        message=(
            f'New {order_type.value.lower()} "{event.order_title}" has been {verb} '
            f"in case {event.case_number}"
        ),
        type=notification_type,
        metadata={
            "case_number": event.case_number,
            "order_type": order_type.value,
            "order_title": event.order_title,
        },
        priority=NotificationPriority.HIGH,
    )


_BUILDERS: dict[type[CaseEvent], Callable[[Any, CaseParties | None], list[NotificationDraft]]] = {
    CaseCreated: _case_created,
    CaseClosed: _case_closed,
    CaseUpdate: _case_update,
    ComplaintSubmitted: _complaint_submitted,
    FIRRegistered: _fir_registered,
    FIRRejected: _fir_rejected,
    HearingScheduled: _hearing_scheduled,
    LawyerRequestDecision: _lawyer_request_decision,
    EvidenceSubmitted: _evidence_submitted,
    DocumentFiled: _document_filed,
    StatusChanged: _status_changed,
    OrderPassed: _order_passed,
}


__all__ = [
    "NotificationDraft",
    "case_party_members",
    "resolve_recipients",
]
