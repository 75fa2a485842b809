# backend/certifyone/apps/training/models.py

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# ENUMS
# ---------------------------------------------------------------------------


class TrainingKind(str, enum.Enum):
    SESSION = "session"
    COURSE = "course"
    CERTIFICATION = "certification"


class TrainingStatus(str, enum.Enum):
    COMPLETED = "completed"
    IN_PROGRESS = "in-progress"
    SCHEDULED = "scheduled"
    PENDING = "pending"


class SessionLocation(str, enum.Enum):
    ONLINE = "online"
    ON_SITE = "on-site"


class CertificationLevel(str, enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


# ---------------------------------------------------------------------------
# RECORDS
# ---------------------------------------------------------------------------


class TrainingBase(BaseModel):
    """
    Fields shared by every training record.

    Attribute names are snake_case; the stored / wire names are camelCase
    (employeeName, createdAt, ...).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    employee_name: str = ""
    role: str = ""
    department: str = ""
    category: str = ""
    status: TrainingStatus = TrainingStatus.PENDING
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Timestamps without an offset were written as UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class SessionTraining(TrainingBase):
    kind: Literal["session"] = "session"

    instructor_name: str = ""
    topic: str = ""
    session_date: str = Field("", alias="date")
    start_time: str = ""
    end_time: str = ""
    duration: str = ""
    location: SessionLocation = SessionLocation.ONLINE
    agenda: str = ""
    learned_outcome: str = ""

    @property
    def display_name(self) -> str:
        return self.topic

    @property
    def primary_date(self) -> str:
        return self.session_date


class CourseTraining(TrainingBase):
    kind: Literal["course"] = "course"

    title: str = ""
    platform: str = ""
    start_date: str = ""
    completion_date: Optional[str] = None
    course_duration: str = ""
    certificate_link: Optional[str] = None
    description: str = ""
    skills_learned: List[str] = Field(default_factory=list)
    outcomes_learned: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.title

    @property
    def primary_date(self) -> str:
        return self.start_date


class CertificationTraining(TrainingBase):
    kind: Literal["certification"] = "certification"

    name: str = ""
    issuing_organization: str = ""
    issue_date: str = ""
    expiration_date: Optional[str] = None
    credential_id: Optional[str] = None
    credential_url: Optional[str] = None
    description: str = ""
    skills_learned: List[str] = Field(default_factory=list)
    level: CertificationLevel = CertificationLevel.BEGINNER

    @property
    def display_name(self) -> str:
        return self.name

    @property
    def primary_date(self) -> str:
        return self.issue_date


TrainingRecord = Annotated[
    Union[SessionTraining, CourseTraining, CertificationTraining],
    Field(discriminator="kind"),
]

training_collection_adapter: TypeAdapter[List[TrainingRecord]] = TypeAdapter(List[TrainingRecord])
