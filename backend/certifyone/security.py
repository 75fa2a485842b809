# backend/certifyone/security.py

"""
Authentication plumbing for certifyone.

- Argon2id hashes for the demo account passwords
- Signed JWT bearer tokens (python-jose)
- FastAPI dependencies resolving the caller and checking the admin role

Authorization is a role comparison only; the training store itself does
not check who is calling.
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from .apps.accounts.schemas import SessionUser

# ---------------------------------------------------------------------------
# CONFIG
# ---------------------------------------------------------------------------

# Override both in any shared deployment.
SECRET_KEY = os.getenv("SECRET_KEY", "certifyone-dev-secret")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

try:
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "480"))
except ValueError:
    ACCESS_TOKEN_EXPIRE_MINUTES = 480

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


# ---------------------------------------------------------------------------
# PASSWORDS
# ---------------------------------------------------------------------------


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


_password_hasher = PasswordHasher(
    time_cost=_env_int("ARGON2_TIME_COST", 3),
    memory_cost=_env_int("ARGON2_MEMORY_COST", 64 * 1024),  # KiB
    parallelism=_env_int("ARGON2_PARALLELISM", 2),
)


def get_password_hash(password: str) -> str:
    return _password_hasher.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """False for empty input, a mismatch or a hash argon2 cannot read."""
    if not (plain_password and hashed_password):
        return False
    try:
        return _password_hasher.verify(hashed_password, plain_password)
    except (VerifyMismatchError, VerificationError, InvalidHash):
        return False


# ---------------------------------------------------------------------------
# TOKENS
# ---------------------------------------------------------------------------


def create_access_token(*, data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign `data` (normally `{"sub": <account id>, "role": <role>}`) with an
    `exp` claim added.
    """
    lifetime = expires_delta if expires_delta is not None else timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {**data, "exp": datetime.now(timezone.utc) + lifetime}
    return jwt.encode(claims, SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Raise JWTError when the token is malformed, forged or expired."""
    return jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])


# ---------------------------------------------------------------------------
# DEPENDENCIES
# ---------------------------------------------------------------------------


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(request: Request, token: str = Depends(oauth2_scheme)) -> SessionUser:
    """
    Resolve the bearer token to a demo account.

    The account id travels in `sub`; the lookup goes through the
    AuthStore attached to `app.state`.
    """
    try:
        claims = decode_access_token(token)
    except JWTError:
        raise _unauthorized()

    account_id = claims.get("sub")
    account = request.app.state.auth_store.get_account(str(account_id)) if account_id else None
    if account is None:
        raise _unauthorized()
    return account


def require_admin(current_user: SessionUser = Depends(get_current_user)) -> SessionUser:
    """Admin and owner roles only."""
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient privileges")
    return current_user
