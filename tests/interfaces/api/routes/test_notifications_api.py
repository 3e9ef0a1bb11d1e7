"""Integration tests for the notification REST endpoints and websocket."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from app.domain.entities import CaseCreated, Notification, NotificationType, RecipientType
from app.infrastructure.database import SessionLocal
from app.infrastructure.repositories import NotificationRepository
from main import create_app


@pytest.fixture()
def client():
    """Return a test client bound to a clean application instance."""

    with TestClient(create_app()) as test_client:
        yield test_client


def _store(recipient_id: str = "citizen-1", count: int = 1) -> list[Notification]:
    session = SessionLocal()
    try:
        repository = NotificationRepository(session)
        return [
            repository.create(
                Notification(
                    id=None,
                    recipient_id=recipient_id,
                    recipient_type=RecipientType.CITIZEN,
                    title=f"Notification {index}",
                    message="Your case CASE-2025-001 has been created",
                    type=NotificationType.CASE_CREATED,
                    case_id="case-1",
                )
            )
            for index in range(count)
        ]
    finally:
        session.close()


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def test_rest_endpoints_require_a_valid_token(client: TestClient) -> None:
    assert client.get("/notifications/").status_code == 401
    response = client.get("/notifications/", headers=_auth("forged"))
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_list_returns_a_page_with_pagination(client: TestClient, token_for) -> None:
    _store(count=25)
    _store(recipient_id="citizen-2")

    response = client.get(
        "/notifications/", params={"page": 2, "limit": 20}, headers=_auth(token_for("citizen-1"))
    )

    assert response.status_code == 200
    body = response.json()
    assert [item["title"] for item in body["items"]] == [f"Notification {i}" for i in range(4, -1, -1)]
    assert body["pagination"] == {
        "current_page": 2,
        "total_pages": 2,
        "total_items": 25,
        "has_next": False,
        "has_prev": True,
    }
    assert body["items"][0]["recipient_type"] == "CITIZEN"
    assert body["items"][0]["priority"] == "normal"


def test_page_size_is_capped(client: TestClient, token_for) -> None:
    _store(count=3)

    response = client.get(
        "/notifications/", params={"limit": 5000}, headers=_auth(token_for("citizen-1"))
    )

    assert response.status_code == 200
    assert response.json()["pagination"]["total_pages"] == 1
    assert client.get(
        "/notifications/", params={"page": 0}, headers=_auth(token_for("citizen-1"))
    ).status_code == 422


def test_mark_read_and_unread_count(client: TestClient, token_for) -> None:
    first, _second = _store(count=2)
    headers = _auth(token_for("citizen-1"))

    for _ in range(2):
        response = client.put(f"/notifications/{first.id}/read", headers=headers)
        assert response.status_code == 200
        assert response.json()["is_read"] is True

    assert client.get("/notifications/unread-count", headers=headers).json() == {"unread": 1}
    unread = client.get("/notifications/", params={"unread_only": True}, headers=headers).json()
    assert len(unread["items"]) == 1


def test_mark_read_of_another_users_notification_is_404(client: TestClient, token_for) -> None:
    (notification,) = _store(recipient_id="citizen-2")

    response = client.put(
        f"/notifications/{notification.id}/read", headers=_auth(token_for("citizen-1"))
    )

    assert response.status_code == 404


def test_read_all(client: TestClient, token_for) -> None:
    _store(count=3)
    headers = _auth(token_for("citizen-1"))

    assert client.put("/notifications/read-all", headers=headers).json() == {"modified_count": 3}
    assert client.put("/notifications/read-all", headers=headers).json() == {"modified_count": 0}
    empty = client.put("/notifications/read-all", headers=_auth(token_for("citizen-9")))
    assert empty.status_code == 404


def test_websocket_rejects_invalid_tokens(client: TestClient) -> None:
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/notifications/ws?token=forged"):
            pass

    assert exc_info.value.code == 1008


def test_websocket_sends_unread_backlog_and_handles_messages(client: TestClient, token_for) -> None:
    stored = _store(count=2)

    with client.websocket_connect(f"/notifications/ws?token={token_for('citizen-1')}") as websocket:
        init = websocket.receive_json()
        assert init["type"] == "init"
        assert {item["id"] for item in init["data"]} == {item.id for item in stored}

        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}

        websocket.send_json({"type": "ack", "ids": [stored[0].id, "bogus"]})
        assert websocket.receive_json() == {"type": "ack", "data": {"updated": 1}}

        websocket.send_json({"type": "shout"})
        assert websocket.receive_json()["type"] == "error"

        session = SessionLocal()
        try:
            assert NotificationRepository(session).count_unread("citizen-1") == 1
        finally:
            session.close()


def test_websocket_ignores_binary_frames_and_non_integer_ack_ids(client: TestClient, token_for) -> None:
    (stored,) = _store()

    with client.websocket_connect(f"/notifications/ws?token={token_for('citizen-1')}") as websocket:
        websocket.receive_json()

        websocket.send_bytes(b"\x00\x01")
        websocket.send_json({"type": "ack", "ids": [str(stored.id), True, 1.0]})
        assert websocket.receive_json() == {"type": "ack", "data": {"updated": 0}}

        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}


def test_websocket_accepts_the_authorization_header(client: TestClient, token_for) -> None:
    headers = _auth(token_for("judge-1", RecipientType.JUDGE))

    with client.websocket_connect("/notifications/ws", headers=headers) as websocket:
        assert websocket.receive_json() == {"type": "init", "data": []}
        assert client.app.state.push_gateway.is_online("judge-1")


def test_dispatched_notification_reaches_the_open_websocket(
    client: TestClient, token_for, case_parties
) -> None:
    dispatcher = client.app.state.notification_dispatcher

    with client.websocket_connect(f"/notifications/ws?token={token_for('citizen-1')}") as websocket:
        assert websocket.receive_json()["type"] == "init"

        report = client.portal.call(dispatcher.dispatch, CaseCreated(case_id="case-1"), case_parties)
        message = websocket.receive_json()

    assert message["type"] == "notification"
    assert message["data"]["id"] == report.notifications[0].id
    assert message["data"]["type"] == "CASE_CREATED"
    assert message["data"]["metadata"] == {"case_number": "CASE-2025-001", "status": "PENDING"}


def test_case_room_messages_are_scoped_to_members(client: TestClient, token_for) -> None:
    gateway = client.app.state.push_gateway

    with client.websocket_connect(f"/notifications/ws?token={token_for('lawyer-1', 'LAWYER')}") as websocket:
        websocket.receive_json()
        websocket.send_json({"type": "join_case_room", "case_id": "case-7"})
        assert websocket.receive_json() == {"type": "case_room_joined", "data": {"case_id": "case-7"}}

        reached = client.portal.call(gateway.send_to_case, "case-7", {"title": "Adjourned"})
        assert websocket.receive_json() == {"type": "case_notification", "data": {"title": "Adjourned"}}

        websocket.send_json({"type": "leave_case_room", "data": {"case_id": "case-7"}})
        assert websocket.receive_json() == {"type": "case_room_left", "data": {"case_id": "case-7"}}
        after_leave = client.portal.call(gateway.send_to_case, "case-7", {"title": "Adjourned"})

    assert (reached, after_leave) == (1, 0)
