from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Optional, Tuple

from pydantic import ValidationError

from ...security import create_access_token, get_password_hash, verify_password
from ..storage.services import SlotStore
from .schemas import AccountRole, SessionUser

logger = logging.getLogger(__name__)

TOKEN_SLOT = "auth-token"
USER_SLOT = "user-data"

try:
    LOGIN_DELAY_SECONDS = int(os.getenv("AUTH_LOGIN_DELAY_MS", "1000")) / 1000.0
except ValueError:
    LOGIN_DELAY_SECONDS = 1.0


@dataclass
class InvalidCredentialsError(Exception):
    code: str = "invalid_credentials"
    detail: str = "Invalid credentials"

    def __str__(self) -> str:
        return self.detail


# ---------------------------------------------------------------------------
# DEMO ACCOUNTS
# ---------------------------------------------------------------------------

_DEMO_USERS: Dict[str, SessionUser] = {
    "admin": SessionUser(
        id="1",
        username="admin",
        email="admin@certifyone.com",
        role=AccountRole.ADMIN,
        first_name="System",
        last_name="Administrator",
        department="IT",
    ),
    "employee": SessionUser(
        id="2",
        username="employee",
        email="john.doe@certifyone.com",
        role=AccountRole.EMPLOYEE,
        first_name="John",
        last_name="Doe",
        department="Engineering",
    ),
}

# Demo passwords equal the usernames.
_DEMO_PASSWORDS: Dict[str, str] = {"admin": "admin", "employee": "employee"}


@lru_cache(maxsize=1)
def _demo_password_hashes() -> Dict[str, str]:
    return {username: get_password_hash(password) for username, password in _DEMO_PASSWORDS.items()}


def _check_password(username: str, password: str) -> bool:
    hashed = _demo_password_hashes().get(username)
    return hashed is not None and verify_password(password, hashed)


def demo_accounts() -> Tuple[SessionUser, ...]:
    return tuple(_DEMO_USERS.values())


# ---------------------------------------------------------------------------
# SESSION STORE
# ---------------------------------------------------------------------------


class AuthStore:
    """
    Current signed-in user, mirrored to the `auth-token` / `user-data` slots.

    Credential checks run against the built-in demo accounts. A stored
    session is trusted on presence alone; a user blob that does not parse
    clears both slots.
    """

    def __init__(self, slots: SlotStore, *, login_delay: float = LOGIN_DELAY_SECONDS) -> None:
        self._slots = slots
        self._login_delay = login_delay
        self.user: Optional[SessionUser] = None
        self.token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def get_account(self, user_id: str) -> Optional[SessionUser]:
        for user in _DEMO_USERS.values():
            if user.id == user_id:
                return user
        return None

    def restore(self) -> Optional[SessionUser]:
        token = self._slots.get(TOKEN_SLOT)
        raw_user = self._slots.get(USER_SLOT)
        if not token or not raw_user:
            return None
        try:
            user = SessionUser.model_validate(json.loads(raw_user))
        except (ValueError, ValidationError):
            logger.warning("Stored session is corrupt; clearing it", extra={"slot": USER_SLOT})
            self._clear_slots()
            return None
        self.user = user
        self.token = token
        return user

    async def login(self, username: str, password: str) -> Tuple[SessionUser, str]:
        if self._login_delay > 0:
            await asyncio.sleep(self._login_delay)

        user = _DEMO_USERS.get(username)
        # Argon2 verification blocks; run it on a worker thread.
        if user is None or not await asyncio.to_thread(_check_password, username, password):
            logger.info("Login rejected", extra={"username": username})
            raise InvalidCredentialsError()

        token = create_access_token(data={"sub": user.id, "role": user.role.value})
        await asyncio.to_thread(self._store_session, user, token)
        self.user = user
        self.token = token
        logger.info("User logged in", extra={"user_id": user.id, "role": user.role.value})
        return user, token

    def logout(self) -> None:
        self._clear_slots()
        if self.user is not None:
            logger.info("User logged out", extra={"user_id": self.user.id})
        self.user = None
        self.token = None

    def _store_session(self, user: SessionUser, token: str) -> None:
        self._slots.set(TOKEN_SLOT, token)
        self._slots.set(USER_SLOT, user.model_dump_json(by_alias=True))

    def _clear_slots(self) -> None:
        self._slots.remove(TOKEN_SLOT)
        self._slots.remove(USER_SLOT)
