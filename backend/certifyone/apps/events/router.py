from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel

from ...security import get_current_user
from ..accounts.schemas import SessionUser
from .broker import EventBroker

router = APIRouter(prefix="/events", tags=["events"])


class StoreEventRead(BaseModel):
    id: str
    type: str
    entityId: Optional[str] = None
    action: str
    ok: bool
    message: str
    timestamp: str
    metadata: Dict[str, Any] = {}


class EventHistoryResponse(BaseModel):
    items: List[StoreEventRead]
    reset: bool = False


def get_event_broker(request: Request) -> EventBroker:
    return request.app.state.event_broker


@router.get("", response_model=EventHistoryResponse)
def list_events(
    since: Optional[str] = Query(None, description="Last event id the client has seen."),
    broker: EventBroker = Depends(get_event_broker),
    current_user: SessionUser = Depends(get_current_user),
) -> EventHistoryResponse:
    """
    Recent store notifications.

    With `since`, only later events are returned. If that id has already
    dropped out of the buffer the whole buffer is returned with
    `reset=True`, and the client should reload its records.
    """
    if since:
        events, reset = broker.replay_since(last_event_id=since)
        if reset:
            events = broker.history()
    else:
        events, reset = broker.history(), False
    return EventHistoryResponse(
        items=[StoreEventRead.model_validate(asdict(event)) for event in events],
        reset=reset,
    )
