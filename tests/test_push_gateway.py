"""Tests for the connection registry and the topic based push gateway."""

import threading

import pytest

from app.domain.entities import AuthenticatedUser, RecipientType
from app.domain.errors import AuthenticationError
from app.infrastructure.notifications import (
    CASE_NOTIFICATION_EVENT,
    NOTIFICATION_EVENT,
    SYSTEM_NOTIFICATION_EVENT,
    DeliveryStatus,
    InMemoryConnectionRegistry,
    PushGateway,
)

CITIZEN = AuthenticatedUser(user_id="citizen-1", role=RecipientType.CITIZEN)
JUDGE = AuthenticatedUser(user_id="judge-1", role=RecipientType.JUDGE)


def _run_in_threads(target, arguments):
    threads = [threading.Thread(target=target, args=(argument,)) for argument in arguments]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()


def test_registry_keeps_the_latest_channel(channel_factory):
    registry = InMemoryConnectionRegistry()
    first, second = channel_factory("first"), channel_factory("second")

    registry.register("citizen-1", RecipientType.CITIZEN, first)
    registry.register("citizen-1", RecipientType.CITIZEN, second)

    assert registry.lookup("citizen-1") is second
    assert registry.is_online("citizen-1")
    assert not registry.is_online("citizen-2")
    assert registry.count() == 1


def test_closing_a_superseded_channel_keeps_the_new_one(channel_factory):
    registry = InMemoryConnectionRegistry()
    first, second = channel_factory("first"), channel_factory("second")
    registry.register("citizen-1", RecipientType.CITIZEN, first)
    registry.register("citizen-1", RecipientType.CITIZEN, second)

    assert registry.unregister("citizen-1", first) is False
    assert registry.lookup("citizen-1") is second
    assert registry.unregister("citizen-1") is True
    assert registry.unregister("citizen-1") is False
    assert registry.lookup("citizen-1") is None


def test_concurrent_register_and_unregister_leave_a_consistent_entry(channel_factory):
    registry = InMemoryConnectionRegistry()
    channels = [channel_factory(f"session-{index}") for index in range(8)]
    start = threading.Barrier(len(channels))

    def churn(channel):
        start.wait()
        for _ in range(200):
            registry.register("citizen-1", RecipientType.CITIZEN, channel)
            registry.unregister("citizen-1", channel)

    def settle(channel):
        start.wait()
        registry.register("citizen-1", RecipientType.CITIZEN, channel)

    _run_in_threads(churn, channels)
    # Every session closed after its own registration.
    assert registry.count() == 0

    _run_in_threads(settle, channels)

    assert registry.count() == 1
    assert registry.lookup("citizen-1") in channels
    assert registry.members_of_role(RecipientType.CITIZEN) == {"citizen-1"}


def test_registry_lists_members_of_a_role(channel_factory):
    registry = InMemoryConnectionRegistry()
    registry.register("citizen-1", RecipientType.CITIZEN, channel_factory())
    registry.register("judge-1", RecipientType.JUDGE, channel_factory())

    assert registry.members_of_role("judge") == {"judge-1"}
    assert registry.members_of_role(RecipientType.POLICE) == set()


def test_authenticate_rejects_missing_and_forged_tokens(token_for):
    with pytest.raises(AuthenticationError, match="No token provided"):
        PushGateway.authenticate(None)
    with pytest.raises(AuthenticationError, match="Invalid token"):
        PushGateway.authenticate("not-a-jwt")
    with pytest.raises(AuthenticationError, match="Unsupported role"):
        PushGateway.authenticate(token_for("admin-1", "ADMIN"))

    user = PushGateway.authenticate(f"Bearer {token_for('judge-1', 'judge')}")

    assert user == JUDGE


@pytest.mark.anyio
async def test_send_to_user_delivers_the_payload_unchanged(channel_factory):
    gateway = PushGateway()
    channel = channel_factory()
    gateway.connect(CITIZEN, channel)
    payload = {"id": 7, "title": "Case Created", "metadata": {"case_number": "CASE-1"}}

    status = await gateway.send_to_user("citizen-1", payload)

    assert status is DeliveryStatus.DELIVERED
    assert channel.sent == [{"type": NOTIFICATION_EVENT, "data": payload}]
    assert channel.sent[0]["data"] is not payload


@pytest.mark.anyio
async def test_send_to_offline_user_is_not_an_error():
    gateway = PushGateway()

    status = await gateway.send_to_user("citizen-1", {"title": "Case Created"})

    assert status is DeliveryStatus.OFFLINE


@pytest.mark.anyio
async def test_failed_write_drops_the_channel(broken_channel_factory):
    gateway = PushGateway()
    gateway.connect(CITIZEN, broken_channel_factory())

    status = await gateway.send_to_user("citizen-1", {"title": "Case Created"})

    assert status is DeliveryStatus.FAILED
    assert gateway.is_online("citizen-1") is False


@pytest.mark.anyio
async def test_every_open_session_of_a_user_receives_personal_events(channel_factory):
    gateway = PushGateway()
    laptop, phone = channel_factory("laptop"), channel_factory("phone")
    gateway.connect(CITIZEN, laptop)
    gateway.connect(CITIZEN, phone)

    await gateway.send_to_user("citizen-1", {"title": "Case Created"})
    gateway.disconnect("citizen-1", phone)

    assert len(laptop.events(NOTIFICATION_EVENT)) == 1
    assert len(phone.events(NOTIFICATION_EVENT)) == 1
    assert gateway.registry.lookup("citizen-1") is laptop


@pytest.mark.anyio
async def test_case_topic_membership(channel_factory):
    gateway = PushGateway()
    citizen_channel, judge_channel = channel_factory(), channel_factory()
    gateway.connect(CITIZEN, citizen_channel)
    gateway.connect(JUDGE, judge_channel)

    assert gateway.join_case(citizen_channel, "case-1") is True
    assert gateway.join_case(channel_factory(), "case-1") is False
    reached = await gateway.send_to_case("case-1", {"title": "Hearing moved"})
    assert gateway.leave_case(citizen_channel, "case-1") is True
    assert gateway.leave_case(citizen_channel, "case-1") is False
    after_leave = await gateway.send_to_case("case-1", {"title": "Hearing moved"})

    assert reached == 1
    assert after_leave == 0
    assert citizen_channel.events(CASE_NOTIFICATION_EVENT)[0]["data"] == {"title": "Hearing moved"}
    assert judge_channel.sent == []


@pytest.mark.anyio
async def test_role_and_global_broadcasts(channel_factory):
    gateway = PushGateway()
    citizen_channel, judge_channel = channel_factory(), channel_factory()
    gateway.connect(CITIZEN, citizen_channel)
    gateway.connect(JUDGE, judge_channel)

    judges = await gateway.send_to_role(RecipientType.JUDGE, {"title": "Roster"})
    everyone = await gateway.broadcast_to_all({"title": "Maintenance"})

    assert (judges, everyone) == (1, 2)
    assert [m["type"] for m in judge_channel.sent] == [NOTIFICATION_EVENT, SYSTEM_NOTIFICATION_EVENT]
    assert [m["type"] for m in citizen_channel.sent] == [SYSTEM_NOTIFICATION_EVENT]
