# backend/certifyone/apps/users/schemas.py

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    EMPLOYEE = "employee"


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class EmploymentType(str, enum.Enum):
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    INTERN = "intern"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EmergencyContact(_CamelModel):
    name: str = ""
    relationship: str = ""
    phone: str = ""


class Address(_CamelModel):
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""


class EmploymentDetails(_CamelModel):
    employee_id: str = ""
    start_date: str = ""
    manager: str = ""
    salary: float = Field(0, ge=0)
    employment_type: EmploymentType = EmploymentType.FULL_TIME


class UserCreate(_CamelModel):
    """
    Everything an admin enters for an employee; the store assigns
    id and timestamps.
    """

    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    role: UserRole = UserRole.EMPLOYEE
    department: str = ""
    position: str = ""
    phone: str = ""
    emergency_contact: EmergencyContact = Field(default_factory=EmergencyContact)
    address: Address = Field(default_factory=Address)
    employment_details: EmploymentDetails = Field(default_factory=EmploymentDetails)
    status: UserStatus = UserStatus.ACTIVE
    avatar: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def _strip_names(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class User(UserCreate):
    id: str
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
