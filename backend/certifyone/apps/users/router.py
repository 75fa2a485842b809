from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from ...security import require_admin
from ..accounts.schemas import SessionUser
from ..storage.services import SlotStorageError
from .schemas import User, UserCreate
from .services import DuplicateEmailError, UserStore

router = APIRouter(prefix="/users", tags=["users"])


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store


def _not_found(user_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User {user_id} not found.")


def _found(user: Optional[User], user_id: str) -> User:
    if user is None:
        raise _not_found(user_id)
    return user


def _storage_unavailable() -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Failed to save users.")


@router.get("", response_model=List[User], summary="List users (admin only)")
def list_users(
    search: Optional[str] = Query(None, description="Matches first/last name, email or department."),
    user_status: Optional[str] = Query(None, alias="status"),
    store: UserStore = Depends(get_user_store),
    current_user: SessionUser = Depends(require_admin),
) -> List[User]:
    return store.list_users(search=search, status=user_status)


@router.get("/{user_id}", response_model=User)
def get_user(
    user_id: str,
    store: UserStore = Depends(get_user_store),
    current_user: SessionUser = Depends(require_admin),
) -> User:
    return _found(store.get(user_id), user_id)


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    store: UserStore = Depends(get_user_store),
    current_user: SessionUser = Depends(require_admin),
) -> User:
    try:
        return store.add(payload)
    except DuplicateEmailError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except SlotStorageError:
        raise _storage_unavailable()


@router.put("/{user_id}", response_model=User)
def update_user(
    user_id: str,
    payload: UserCreate,
    store: UserStore = Depends(get_user_store),
    current_user: SessionUser = Depends(require_admin),
) -> User:
    try:
        return _found(store.update(user_id, payload), user_id)
    except DuplicateEmailError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except SlotStorageError:
        raise _storage_unavailable()


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    store: UserStore = Depends(get_user_store),
    current_user: SessionUser = Depends(require_admin),
) -> None:
    try:
        _found(store.delete(user_id), user_id)
    except SlotStorageError:
        raise _storage_unavailable()


@router.post("/{user_id}/toggle-status", response_model=User)
def toggle_user_status(
    user_id: str,
    store: UserStore = Depends(get_user_store),
    current_user: SessionUser = Depends(require_admin),
) -> User:
    try:
        return _found(store.toggle_status(user_id), user_id)
    except SlotStorageError:
        raise _storage_unavailable()
