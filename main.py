import logging
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.application.use_cases.notifications import NotificationDispatcher
from app.config import get_settings
from app.domain.entities import CasePartyDirectory
from app.infrastructure.database import SessionLocal, engine, initialize_database
from app.infrastructure.notifications import (
    ExpirySweeper,
    InMemoryConnectionRegistry,
    PushGateway,
)
from app.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the tables, run the expiry sweeper and release resources on shutdown."""

    initialize_database()
    interval = get_settings().notification_sweep_interval_seconds
    async with anyio.create_task_group() as task_group:
        if interval > 0:
            sweeper = ExpirySweeper(app.state.session_factory, interval_seconds=interval)
            task_group.start_soon(sweeper.run)
            logger.info("Notification expiry sweeper started (every %ss)", interval)
        yield
        task_group.cancel_scope.cancel()
    engine.dispose()


def create_app(party_directory: CasePartyDirectory | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()
    app = FastAPI(lifespan=lifespan)

    gateway = PushGateway(InMemoryConnectionRegistry())
    app.state.session_factory = SessionLocal
    app.state.push_gateway = gateway
    app.state.notification_dispatcher = NotificationDispatcher(
        SessionLocal, gateway, party_directory=party_directory
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
