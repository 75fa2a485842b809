# backend/certifyone/apps/accounts/schemas.py

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AccountRole(str, enum.Enum):
    ADMIN = "admin"
    EMPLOYEE = "employee"
    OWNER = "owner"


ADMIN_ROLES = {AccountRole.ADMIN, AccountRole.OWNER}


class SessionUser(BaseModel):
    """
    The signed-in user as the rest of the app sees it.

    Stored as a JSON blob in the `user-data` slot.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    username: str
    email: str
    role: AccountRole
    first_name: str
    last_name: str
    department: Optional[str] = None
    avatar: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


class LoginRequest(BaseModel):
    username: str = Field(..., description="Demo login name, e.g. 'admin' or 'employee'.")
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: SessionUser
