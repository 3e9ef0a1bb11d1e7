"""Background task removing notifications whose expiry date has passed."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

import anyio
from anyio import to_thread
from sqlalchemy.orm import Session

from app.infrastructure.repositories import NotificationRepository
from app.utils import now_in_app_timezone

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Periodically delete expired notifications from the store."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        interval_seconds: float,
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        self._session_factory = session_factory
        self._interval = interval_seconds
        self._clock = clock

    def sweep_once(self) -> int:
        """Run a single sweep synchronously and return the rows deleted."""

        session = self._session_factory()
        try:
            deleted = NotificationRepository(session).sweep_expired(self._clock())
        finally:
            session.close()
        if deleted:
            logger.info("Expired notifications removed: %s", deleted)
        return deleted

    async def run(self) -> None:
        """Sweep every ``interval_seconds`` until cancelled."""

        while True:
            try:
                await to_thread.run_sync(self.sweep_once)
            except Exception:
                logger.exception("Notification expiry sweep failed")
            await anyio.sleep(self._interval)


__all__ = ["ExpirySweeper"]
