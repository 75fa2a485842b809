from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ...security import get_current_user
from .schemas import LoginRequest, SessionUser, TokenResponse
from .services import AuthStore, InvalidCredentialsError

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_store(request: Request) -> AuthStore:
    return request.app.state.auth_store


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest, auth_store: AuthStore = Depends(get_auth_store)) -> TokenResponse:
    try:
        user, token = await auth_store.login(payload.username, payload.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.detail,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return TokenResponse(access_token=token, user=user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(auth_store: AuthStore = Depends(get_auth_store)) -> None:
    auth_store.logout()


@router.get("/me", response_model=SessionUser)
def me(current_user: SessionUser = Depends(get_current_user)) -> SessionUser:
    return current_user
