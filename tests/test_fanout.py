"""Tests for the recipient resolution of case events."""

from datetime import date

import pytest

from app.application.use_cases.notifications import resolve_recipients
from app.domain.entities import (
    CaseClosed,
    CaseCreated,
    CaseParties,
    CaseUpdate,
    EvidenceSubmitted,
    FIRRegistered,
    HearingScheduled,
    LawyerRequestDecision,
    LawyerRequestStatus,
    NotificationPriority,
    NotificationType,
    OrderPassed,
    OrderType,
    Participant,
    RecipientType,
)
from app.utils import get_app_timezone


def test_case_created_reaches_every_party_in_order(case_parties):
    drafts = resolve_recipients(CaseCreated(case_id="case-1"), case_parties)

    assert [(d.recipient_id, d.recipient_type) for d in drafts] == [
        ("citizen-1", RecipientType.CITIZEN),
        ("officer-1", RecipientType.POLICE),
        ("officer-2", RecipientType.POLICE),
        ("judge-1", RecipientType.JUDGE),
    ]
    assert [d.type for d in drafts] == [
        NotificationType.CASE_CREATED,
        NotificationType.CASE_ASSIGNED,
        NotificationType.CASE_ASSIGNED,
        NotificationType.CASE_ASSIGNED,
    ]
    assert all(d.priority is NotificationPriority.HIGH for d in drafts)
    assert all(d.case_id == "case-1" and d.fir_id == "fir-1" for d in drafts)
    assert drafts[0].message == (
        "Your case CASE-2025-001 has been created and is now under judicial review"
    )
    assert drafts[1].metadata == {"case_number": "CASE-2025-001", "role": "investigating_officer"}


def test_exclusions_are_applied_last(case_parties):
    drafts = resolve_recipients(
        CaseCreated(case_id="case-1"), case_parties, exclude_recipients=["citizen-1", None]
    )

    assert [d.recipient_id for d in drafts] == ["officer-1", "officer-2", "judge-1"]


def test_missing_party_graph_is_rejected():
    with pytest.raises(ValueError):
        resolve_recipients(CaseCreated(case_id="case-1"))


def test_party_graph_of_another_case_is_rejected(case_parties):
    with pytest.raises(ValueError):
        resolve_recipients(CaseCreated(case_id="case-99"), case_parties)


def test_fir_registration_skips_the_registering_officer():
    event = FIRRegistered(
        fir_id="fir-9",
        fir_number="FIR-2025-001",
        complainant_id="citizen-1",
        registered_by="officer-1",
        assigned_judge_id="officer-1",
    )

    drafts = resolve_recipients(event)

    assert [d.recipient_id for d in drafts] == ["citizen-1"]
    assert drafts[0].type is NotificationType.FIR_REGISTERED


def test_lawyer_request_pending_uses_pending_types():
    event = LawyerRequestDecision(
        request_id="req-1",
        case_id="case-2",
        case_number="CASE-2025-002",
        complainant_id="citizen-1",
        lawyer_id="lawyer-1",
        decision=LawyerRequestStatus.PENDING,
    )

    citizen, lawyer = resolve_recipients(event)

    assert citizen.type is NotificationType.LAWYER_REQUEST_PENDING
    assert citizen.priority is NotificationPriority.NORMAL
    assert lawyer.type is NotificationType.CASE_PENDING
    assert lawyer.priority is NotificationPriority.HIGH
    assert lawyer.metadata["request_type"] == "PENDING"


def test_hearing_notifications_expire_when_the_hearing_starts():
    event = HearingScheduled(
        case_id="case-1",
        case_number="CASE-2025-001",
        hearing_date=date(2025, 3, 14),
        hearing_time="10:30",
        courtroom="Court Room 4",
        participants=[
            Participant("citizen-1", RecipientType.CITIZEN, "complainant"),
            Participant("lawyer-1", "lawyer", "accused_lawyer"),
        ],
    )

    drafts = resolve_recipients(event)

    assert [d.recipient_type for d in drafts] == [RecipientType.CITIZEN, RecipientType.LAWYER]
    assert all(d.priority is NotificationPriority.URGENT for d in drafts)
    expires_at = drafts[0].expires_at
    assert (expires_at.year, expires_at.month, expires_at.day) == (2025, 3, 14)
    assert (expires_at.hour, expires_at.minute) == (10, 30)
    assert expires_at.utcoffset() == get_app_timezone().utcoffset(expires_at)
    assert drafts[1].metadata["role"] == "accused_lawyer"
    assert drafts[0].metadata["hearing_date"] == "2025-03-14"


def test_unparseable_hearing_time_expires_at_end_of_day():
    event = HearingScheduled(
        case_id="case-1",
        case_number="CASE-2025-001",
        hearing_date=date(2025, 3, 14),
        hearing_time="after lunch",
        courtroom="Court Room 4",
        participants=[Participant("citizen-1", RecipientType.CITIZEN)],
    )

    (draft,) = resolve_recipients(event)

    assert (draft.expires_at.hour, draft.expires_at.minute) == (23, 59)


def test_case_closed_skips_the_judge():
    parties = CaseParties(
        case_id="case-1",
        case_number="CASE-2025-001",
        complainant_id="citizen-1",
        investigating_officer_ids=["officer-1"],
        assigned_judge_id="judge-1",
        accused_lawyer_id="lawyer-1",
        prosecutor_lawyer_id="lawyer-2",
    )

    drafts = resolve_recipients(CaseClosed(case_id="case-1", verdict="ACQUITTED"), parties)

    assert [d.recipient_id for d in drafts] == ["citizen-1", "officer-1", "lawyer-1", "lawyer-2"]
    assert drafts[0].message == "Case CASE-2025-001 has been closed with verdict: ACQUITTED"


@pytest.mark.parametrize(
    ("order_type", "expected_type", "expected_title"),
    [
        (OrderType.ORDER, NotificationType.ORDER_PASSED, "Order Passed"),
        (OrderType.JUDGMENT, NotificationType.JUDGMENT_PASSED, "Judgment Passed"),
        (OrderType.SUMMON, NotificationType.SUMMON_ISSUED, "Summon Issued"),
    ],
)
def test_order_types_map_to_notification_types(order_type, expected_type, expected_title):
    event = OrderPassed(
        case_id="case-1",
        case_number="CASE-2025-001",
        order_type=order_type,
        order_title="Interim relief",
        participants=[Participant("citizen-1", RecipientType.CITIZEN, "complainant")],
    )

    (draft,) = resolve_recipients(event)

    assert draft.type is expected_type
    assert draft.title == expected_title
    assert draft.priority is NotificationPriority.HIGH


def test_case_update_reaches_the_judge_with_caller_content(case_parties):
    event = CaseUpdate(
        case_id="case-1",
        title="Hearing adjourned",
        message="The hearing was adjourned",
        type=NotificationType.STATUS_CHANGED,
        metadata={"reason": "holiday"},
        priority=NotificationPriority.LOW,
    )

    drafts = resolve_recipients(event, case_parties)

    assert "judge-1" in [d.recipient_id for d in drafts]
    assert all(d.title == "Hearing adjourned" for d in drafts)
    assert drafts[0].metadata == {"reason": "holiday", "case_number": "CASE-2025-001"}
    assert all(d.priority is NotificationPriority.LOW for d in drafts)


def test_participant_without_an_id_keeps_an_empty_recipient():
    event = EvidenceSubmitted(
        case_id="case-1",
        case_number="CASE-2025-001",
        evidence_type="DOCUMENT",
        title="Bank statement",
        participants=(
            Participant(None, RecipientType.CITIZEN, "complainant"),
            Participant(42, RecipientType.LAWYER, "accused_lawyer"),
        ),
    )

    drafts = resolve_recipients(event)

    assert [d.recipient_id for d in drafts] == [None, "42"]
