"""Domain entities exposed by the application."""

from .case_event import (
    CaseClosed,
    CaseCreated,
    CaseEvent,
    CaseUpdate,
    ComplaintSubmitted,
    DocumentFiled,
    EvidenceSubmitted,
    FIRRegistered,
    FIRRejected,
    HearingScheduled,
    LawyerRequestDecision,
    LawyerRequestStatus,
    OrderPassed,
    OrderType,
    StatusChanged,
)
from .case_parties import CaseParties, CasePartyDirectory, Participant
from .notification import (
    Notification,
    NotificationPage,
    NotificationPriority,
    NotificationType,
    Pagination,
    RecipientType,
    validate_notification,
)
from .principal import AuthenticatedUser

__all__ = [
    "AuthenticatedUser",
    "CaseClosed",
    "CaseCreated",
    "CaseEvent",
    "CaseParties",
    "CasePartyDirectory",
    "CaseUpdate",
    "ComplaintSubmitted",
    "DocumentFiled",
    "EvidenceSubmitted",
    "FIRRegistered",
    "FIRRejected",
    "HearingScheduled",
    "LawyerRequestDecision",
    "LawyerRequestStatus",
    "Notification",
    "NotificationPage",
    "NotificationPriority",
    "NotificationType",
    "OrderPassed",
    "OrderType",
    "Pagination",
    "Participant",
    "RecipientType",
    "StatusChanged",
    "validate_notification",
]
