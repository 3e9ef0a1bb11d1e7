"""Domain events that fan out into per-recipient notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, ClassVar

from .case_parties import Participant
from .notification import NotificationPriority, NotificationType, RecipientType


class LawyerRequestStatus(str, Enum):
    """Outcome of a citizen's request for legal representation."""

    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    PENDING = "PENDING"


class OrderType(str, Enum):
    """Kinds of court orders that can be passed in a case."""

    ORDER = "ORDER"
    JUDGMENT = "JUDGMENT"
    SUMMON = "SUMMON"


def _freeze_participants(event: Any) -> None:
    object.__setattr__(event, "participants", tuple(event.participants))


@dataclass(frozen=True)
class CaseEvent:
    """Base class for every event accepted by the fan-out resolver.

    Events flagged with ``requires_parties`` are resolved against the case
    party graph; the others carry their audience themselves.
    """

    requires_parties: ClassVar[bool] = False


@dataclass(frozen=True)
class CaseCreated(CaseEvent):
    requires_parties: ClassVar[bool] = True

    case_id: str


@dataclass(frozen=True)
class CaseClosed(CaseEvent):
    requires_parties: ClassVar[bool] = True

    case_id: str
    verdict: str


@dataclass(frozen=True)
class CaseUpdate(CaseEvent):
    """Free-form message sent to every party of a case."""

    requires_parties: ClassVar[bool] = True

    case_id: str
    title: str
    message: str
    type: NotificationType
    metadata: dict[str, Any] | None = None
    priority: NotificationPriority = NotificationPriority.NORMAL


@dataclass(frozen=True)
class ComplaintSubmitted(CaseEvent):
    complaint_id: str
    title: str
    complainant_id: str | None
    assigned_officer_id: str | None = None


@dataclass(frozen=True)
class FIRRegistered(CaseEvent):
    fir_id: str
    fir_number: str
    complainant_id: str | None
    registered_by: str | None = None
    assigned_judge_id: str | None = None
    complaint_id: str | None = None


@dataclass(frozen=True)
class FIRRejected(CaseEvent):
    fir_id: str
    reason: str
    recipient_id: str
    recipient_type: RecipientType = RecipientType.POLICE


@dataclass(frozen=True)
class HearingScheduled(CaseEvent):
    case_id: str
    case_number: str
    hearing_date: date
    hearing_time: str
    courtroom: str
    participants: tuple[Participant, ...] = field(default_factory=tuple)

    __post_init__ = _freeze_participants


@dataclass(frozen=True)
class LawyerRequestDecision(CaseEvent):
    request_id: str
    case_id: str | None
    case_number: str
    complainant_id: str | None
    lawyer_id: str | None
    decision: LawyerRequestStatus


@dataclass(frozen=True)
class EvidenceSubmitted(CaseEvent):
    case_id: str
    case_number: str
    evidence_type: str
    title: str
    submitted_by: str | None = None
    submitted_by_role: str | None = None
    participants: tuple[Participant, ...] = field(default_factory=tuple)

    __post_init__ = _freeze_participants


@dataclass(frozen=True)
class DocumentFiled(CaseEvent):
    case_id: str
    case_number: str
    document_type: str
    title: str
    submitted_by: str | None = None
    submitted_by_role: str | None = None
    participants: tuple[Participant, ...] = field(default_factory=tuple)

    __post_init__ = _freeze_participants


@dataclass(frozen=True)
class StatusChanged(CaseEvent):
    case_id: str
    case_number: str
    old_status: str
    new_status: str
    changed_by: str | None = None
    changed_by_role: str | None = None
    participants: tuple[Participant, ...] = field(default_factory=tuple)

    __post_init__ = _freeze_participants


@dataclass(frozen=True)
class OrderPassed(CaseEvent):
    case_id: str
    case_number: str
    order_type: OrderType
    order_title: str
    participants: tuple[Participant, ...] = field(default_factory=tuple)

    __post_init__ = _freeze_participants


__all__ = [
    "CaseClosed",
    "CaseCreated",
    "CaseEvent",
    "CaseUpdate",
    "ComplaintSubmitted",
    "DocumentFiled",
    "EvidenceSubmitted",
    "FIRRegistered",
    "FIRRejected",
    "HearingScheduled",
    "LawyerRequestDecision",
    "LawyerRequestStatus",
    "OrderPassed",
    "OrderType",
    "StatusChanged",
]
