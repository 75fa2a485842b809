from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from .schemas import Preferences, PreferencesUpdate
from .services import PreferencesStore

router = APIRouter(prefix="/preferences", tags=["preferences"])


def get_preferences_store(request: Request) -> PreferencesStore:
    return request.app.state.preferences_store


@router.get("", response_model=Preferences)
def read_preferences(store: PreferencesStore = Depends(get_preferences_store)) -> Preferences:
    return store.load()


@router.put("", response_model=Preferences)
def update_preferences(
    payload: PreferencesUpdate,
    store: PreferencesStore = Depends(get_preferences_store),
) -> Preferences:
    return store.apply(payload)


@router.post("/theme/toggle", response_model=Preferences)
def toggle_theme(store: PreferencesStore = Depends(get_preferences_store)) -> Preferences:
    return store.toggle_theme()
