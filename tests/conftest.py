"""Shared fixtures for the notification service tests."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

TEST_DB_PATH = Path(tempfile.gettempdir()) / "case_notifications_test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["APP_TIMEZONE"] = "Asia/Kolkata"
os.environ["NOTIFICATION_SWEEP_INTERVAL_SECONDS"] = "0"

from app.config import get_settings  # noqa: E402

get_settings.cache_clear()

from app.domain.entities import CaseParties, RecipientType  # noqa: E402
from app.infrastructure.database import (  # noqa: E402
    Base,
    SessionLocal,
    engine,
    initialize_database,
)
from app.infrastructure.security import create_access_token  # noqa: E402


class RecordingChannel:
    """Channel double that keeps every message written to it."""

    def __init__(self, name: str = "channel") -> None:
        self.name = name
        self.sent: list[dict[str, Any]] = []

    async def send_json(self, data: dict[str, Any]) -> None:
        self.sent.append(data)

    def events(self, event_type: str | None = None) -> list[dict[str, Any]]:
        return [
            message for message in self.sent
            if event_type is None or message["type"] == event_type
        ]


class BrokenChannel(RecordingChannel):
    """Channel double whose transport is already gone."""

    async def send_json(self, data: dict[str, Any]) -> None:
        raise ConnectionResetError("peer closed the connection")


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_database():
    """Ensure the test database starts from a clean state for each test."""

    Base.metadata.drop_all(bind=engine)
    initialize_database()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def channel_factory():
    return RecordingChannel


@pytest.fixture
def broken_channel_factory():
    return BrokenChannel


@pytest.fixture
def case_parties() -> CaseParties:
    """Party graph with one complainant, two officers and a judge."""

    return CaseParties(
        case_id="case-1",
        case_number="CASE-2025-001",
        complainant_id="citizen-1",
        investigating_officer_ids=("officer-1", "officer-2"),
        assigned_judge_id="judge-1",
        fir_id="fir-1",
        complaint_id="complaint-1",
    )


@pytest.fixture
def token_for():
    def _issue(user_id: str, role: RecipientType | str = RecipientType.CITIZEN) -> str:
        value = role.value if isinstance(role, RecipientType) else role
        return create_access_token({"sub": user_id, "role": value})

    return _issue
