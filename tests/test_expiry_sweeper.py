"""Tests for the background removal of expired notifications."""

from datetime import datetime, timedelta

import anyio
import pytest

from app.domain.entities import Notification, NotificationType, RecipientType
from app.infrastructure.database import SessionLocal
from app.infrastructure.notifications import ExpirySweeper
from app.infrastructure.repositories import NotificationRepository
from app.utils import combine_in_app_timezone, now_in_app_timezone


def _expiring(session, expires_at):
    return NotificationRepository(session).create(
        Notification(
            id=None,
            recipient_id="citizen-1",
            recipient_type=RecipientType.CITIZEN,
            title="Hearing Scheduled",
            message="Hearing for case CASE-2025-001",
            type=NotificationType.HEARING_SCHEDULED,
            expires_at=expires_at,
        )
    )


def test_sweep_once_uses_the_injected_clock(session):
    now = now_in_app_timezone()
    _expiring(session, now + timedelta(hours=1))
    sweeper = ExpirySweeper(
        SessionLocal, interval_seconds=60, clock=lambda: now + timedelta(hours=2)
    )

    assert sweeper.sweep_once() == 1
    assert NotificationRepository(session).list_for_recipient("citizen-1").items == []


@pytest.mark.anyio
async def test_run_keeps_sweeping_until_cancelled(session):
    _expiring(session, now_in_app_timezone() - timedelta(minutes=5))
    sweeper = ExpirySweeper(SessionLocal, interval_seconds=0.01)

    with anyio.move_on_after(0.5):
        await sweeper.run()

    assert NotificationRepository(session).count_unread("citizen-1") == 0


@pytest.mark.parametrize(
    ("clock", "expected"),
    [
        ("14:30", (14, 30)),
        ("9", (9, 0)),
        ("10:15 AM", (10, 15)),
        ("12:05 am", (0, 5)),
        ("7:45 PM", (19, 45)),
        ("25:00", (23, 59)),
        (None, (23, 59)),
    ],
)
def test_hearing_clock_parsing(clock, expected):
    value = combine_in_app_timezone(datetime(2025, 3, 14).date(), clock)

    assert (value.hour, value.minute) == expected
    assert value.tzinfo is not None
