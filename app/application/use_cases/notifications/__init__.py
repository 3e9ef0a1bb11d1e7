"""Notification fan-out, delivery and feed use cases."""

from .dispatcher import DeliveryOutcome, DispatchReport, NotificationDispatcher
from .events import (
    notify_case_closed,
    notify_case_created,
    notify_case_parties,
    notify_complaint_submitted,
    notify_document_filed,
    notify_evidence_submitted,
    notify_fir_registered,
    notify_fir_rejected,
    notify_hearing_scheduled,
    notify_lawyer_request_decision,
    notify_order_passed,
    notify_status_changed,
)
from .fanout import NotificationDraft, resolve_recipients
from .list_notifications import list_notifications
from .list_unread_notifications import (
    count_unread_notifications,
    list_unread_notifications,
)
from .mark_notifications_read import (
    acknowledge_notifications,
    mark_all_notifications_read,
    mark_notification_read,
)

__all__ = [
    "DeliveryOutcome",
    "DispatchReport",
    "NotificationDispatcher",
    "NotificationDraft",
    "acknowledge_notifications",
    "count_unread_notifications",
    "list_notifications",
    "list_unread_notifications",
    "mark_all_notifications_read",
    "mark_notification_read",
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
    "resolve_recipients",
]
