"""Endpoints and websocket handler for realtime notifications."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from anyio import to_thread
from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from app.application.use_cases.notifications import (
    acknowledge_notifications,
    count_unread_notifications,
    list_notifications,
    list_unread_notifications,
    mark_all_notifications_read,
    mark_notification_read,
)
from app.config import get_settings
from app.domain.entities import AuthenticatedUser
from app.domain.errors import AuthenticationError, NotFoundError, StoreUnavailableError
from app.infrastructure.database import get_db
from app.infrastructure.notifications import PushGateway, serialize_notification
from app.interfaces.api.dependencies import get_current_principal, get_push_gateway
from app.interfaces.api.schemas import (
    MarkAllReadResponse,
    NotificationPageRead,
    NotificationRead,
    PaginationRead,
    UnreadCountRead,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])

WS_POLICY_VIOLATION = 1008


def _store_unavailable(exc: StoreUnavailableError) -> HTTPException:
    logger.error("Notification store unavailable: %s", exc)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Notification store unavailable",
    )


@router.get("/", response_model=NotificationPageRead)
def list_my_notifications(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, description="Notifications per page"),
    unread_only: bool = Query(False),
    db: Session = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_principal),
) -> NotificationPageRead:
    """Return one page of the caller's notifications, newest first."""

    settings = get_settings()
    page_size = min(
        limit or settings.notification_page_size, settings.notification_page_size_max
    )
    try:
        result = list_notifications(
            db,
            recipient_id=current_user.user_id,
            page=page,
            page_size=page_size,
            unread_only=unread_only,
        )
    except StoreUnavailableError as exc:
        raise _store_unavailable(exc) from exc
    return NotificationPageRead(
        items=[NotificationRead.model_validate(item) for item in result.items],
        pagination=PaginationRead.model_validate(result.pagination),
    )


@router.get("/unread-count", response_model=UnreadCountRead)
def get_unread_count(
    db: Session = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_principal),
) -> UnreadCountRead:
    try:
        unread = count_unread_notifications(db, recipient_id=current_user.user_id)
    except StoreUnavailableError as exc:
        raise _store_unavailable(exc) from exc
    return UnreadCountRead(unread=unread)


@router.put("/read-all", response_model=MarkAllReadResponse)
def mark_all_as_read(
    db: Session = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_principal),
) -> MarkAllReadResponse:
    try:
        modified = mark_all_notifications_read(db, recipient_id=current_user.user_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StoreUnavailableError as exc:
        raise _store_unavailable(exc) from exc
    return MarkAllReadResponse(modified_count=modified)


@router.put("/{notification_id}/read", response_model=NotificationRead)
def mark_as_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_principal),
) -> NotificationRead:
    try:
        notification = mark_notification_read(
            db, notification_id=notification_id, recipient_id=current_user.user_id
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StoreUnavailableError as exc:
        raise _store_unavailable(exc) from exc
    return NotificationRead.model_validate(notification)


class _ClientSession:
    """State of one authenticated websocket while its message loop runs."""

    def __init__(
        self, websocket: WebSocket, user: AuthenticatedUser, gateway: PushGateway
    ) -> None:
        self.websocket = websocket
        self.user = user
        self.gateway = gateway
        self.session_factory = websocket.app.state.session_factory

    def _with_session(self, operation: Callable[..., Any], **kwargs: Any) -> Any:
        session = self.session_factory()
        try:
            return operation(session, **kwargs)
        finally:
            session.close()

    async def send_backlog(self) -> None:
        pending = await to_thread.run_sync(
            lambda: self._with_session(
                list_unread_notifications, recipient_id=self.user.user_id
            )
        )
        await self.websocket.send_json(
            {"type": "init", "data": [serialize_notification(item) for item in pending]}
        )

    async def on_ping(self, _message: dict[str, Any]) -> None:
        await self.websocket.send_json({"type": "pong"})

    async def on_ack(self, message: dict[str, Any]) -> None:
        ids = message.get("ids", [])
        if not isinstance(ids, list) or not ids:
            return
        updated = await to_thread.run_sync(
            lambda: self._with_session(
                acknowledge_notifications,
                notification_ids=ids,
                recipient_id=self.user.user_id,
            )
        )
        await self.websocket.send_json({"type": "ack", "data": {"updated": updated}})

    async def on_join_case_room(self, message: dict[str, Any]) -> None:
        case_id = _case_id_of(message)
        if case_id is None:
            await self.send_error("case_id is required")
            return
        self.gateway.join_case(self.websocket, case_id)
        await self.websocket.send_json({"type": "case_room_joined", "data": {"case_id": case_id}})

    async def on_leave_case_room(self, message: dict[str, Any]) -> None:
        case_id = _case_id_of(message)
        if case_id is None:
            await self.send_error("case_id is required")
            return
        self.gateway.leave_case(self.websocket, case_id)
        await self.websocket.send_json({"type": "case_room_left", "data": {"case_id": case_id}})

    async def send_error(self, detail: str) -> None:
        await self.websocket.send_json({"type": "error", "data": {"message": detail}})


def _case_id_of(message: dict[str, Any]) -> str | None:
    case_id = message.get("case_id")
    if case_id is None and isinstance(message.get("data"), dict):
        case_id = message["data"].get("case_id")
    if case_id in (None, ""):
        return None
    return str(case_id)


_MESSAGE_HANDLERS: dict[str, Callable[[_ClientSession, dict[str, Any]], Awaitable[None]]] = {
    "ping": _ClientSession.on_ping,
    "ack": _ClientSession.on_ack,
    "join_case_room": _ClientSession.on_join_case_room,
    "leave_case_room": _ClientSession.on_leave_case_room,
}


def _handshake_token(websocket: WebSocket) -> str | None:
    return websocket.query_params.get("token") or websocket.headers.get("authorization")


@router.websocket("/ws")
async def notifications_websocket(
    websocket: WebSocket,
    gateway: PushGateway = Depends(get_push_gateway),
) -> None:
    """Websocket endpoint that streams notifications to the authenticated user."""

    try:
        user = gateway.authenticate(_handshake_token(websocket))
    except AuthenticationError as exc:
        logger.info("Rejected websocket handshake: %s", exc)
        await websocket.close(code=WS_POLICY_VIOLATION)
        return

    await websocket.accept()
    gateway.connect(user, websocket)
    client = _ClientSession(websocket, user, gateway)
    try:
        await client.send_backlog()
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except (KeyError, ValueError):
                # Binary frames and malformed JSON are ignored.
                continue

            if not isinstance(message, dict):
                continue

            handler = _MESSAGE_HANDLERS.get(message.get("type"))
            if handler is None:
                await client.send_error(f"Unsupported message type: {message.get('type')}")
                continue
            await handler(client, message)
    except WebSocketDisconnect:
        pass
    finally:
        gateway.disconnect(user.user_id, websocket)
