# backend/certifyone/main.py
import logging
import os
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import sessionmaker

from .apps.accounts.router import router as accounts_router
from .apps.accounts.services import AuthStore
from .apps.events.broker import EventBroker, StoreEvent
from .apps.events.router import router as events_router
from .apps.preferences.router import router as preferences_router
from .apps.preferences.services import PreferencesStore
from .apps.storage.services import SlotStore
from .apps.training.persistence import TrainingRepository
from .apps.training.router import router as training_router
from .apps.training.services import TrainingStore
from .apps.users.router import router as users_router
from .apps.users.services import UserStore
from .database import SessionLocal

logger = logging.getLogger(__name__)


def _allowed_origins() -> List[str]:
    """
    Parse CORS_ALLOWED_ORIGINS from env.

    Accepts comma-separated origins. If unset, defaults to local dev ports.
    """
    raw = os.getenv("CORS_ALLOWED_ORIGINS", "")
    if raw:
        origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
        if origins:
            return origins
    return [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
        "http://localhost:4173",
    ]


def _log_store_event(event: StoreEvent) -> None:
    level = logging.INFO if event.ok else logging.WARNING
    logger.log(level, event.message, extra={"event_type": event.type, "entity_id": event.entityId})


def read_root():
    return {"status": "ok", "message": "CertifyOne backend is running"}


def health(request: Request):
    return {"status": "ok", "trainings": len(request.app.state.training_store)}


def create_app(
    session_factory: Optional[sessionmaker] = None,
    *,
    training_store: Optional[TrainingStore] = None,
) -> FastAPI:
    """
    Build the API with its stores wired in explicitly.

    Stores hang off `app.state`; routers reach them through small
    dependency functions, never through module globals.
    """
    slots = SlotStore(session_factory or SessionLocal)
    slots.create_schema()

    broker = EventBroker()
    broker.subscribe(_log_store_event)

    auth_store = AuthStore(slots)
    auth_store.restore()

    app = FastAPI(title="CertifyOne Training API", version="1.0.0")
    app.state.slot_store = slots
    app.state.event_broker = broker
    app.state.auth_store = auth_store
    app.state.preferences_store = PreferencesStore(slots)
    app.state.training_store = training_store or TrainingStore(TrainingRepository(slots), broker=broker)
    app.state.user_store = UserStore(slots, broker=broker)

    cors_origins = _allowed_origins()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials="*" not in cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_api_route("/", read_root, methods=["GET"], tags=["health"])
    app.add_api_route("/health", health, methods=["GET"], tags=["health"])

    app.include_router(accounts_router)
    app.include_router(training_router)
    app.include_router(preferences_router)
    app.include_router(users_router)
    app.include_router(events_router)
    return app


app = create_app()
