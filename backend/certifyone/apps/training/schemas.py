# backend/certifyone/apps/training/schemas.py

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import CertificationLevel, SessionLocation, TrainingKind, TrainingStatus


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# FORM INPUT
# ---------------------------------------------------------------------------


class TrainingFormData(_CamelModel):
    """
    Untyped form payload for all three record kinds.

    Only the fields of the selected `kind` are used when the record is
    built; the rest are ignored. The older form names (`type`,
    `sessionTopic`, `courseTitle`, ...) are accepted as input aliases.
    """

    kind: TrainingKind = Field(..., validation_alias=AliasChoices("kind", "type"))

    employee_name: str = ""
    role: str = ""
    department: str = ""
    category: str = ""
    status: TrainingStatus = TrainingStatus.PENDING

    # Session
    instructor_name: Optional[str] = None
    topic: Optional[str] = Field(None, validation_alias=AliasChoices("topic", "sessionTopic"))
    session_date: Optional[str] = Field(
        None, validation_alias=AliasChoices("date", "sessionDate", "session_date")
    )
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    duration: Optional[str] = None
    location: Optional[SessionLocation] = None
    agenda: Optional[str] = None
    learned_outcome: Optional[str] = None

    # Course
    title: Optional[str] = Field(None, validation_alias=AliasChoices("title", "courseTitle"))
    platform: Optional[str] = None
    start_date: Optional[str] = None
    completion_date: Optional[str] = None
    course_duration: Optional[str] = None
    certificate_link: Optional[str] = None
    outcomes_learned: Optional[str] = None

    # Certification
    name: Optional[str] = Field(None, validation_alias=AliasChoices("name", "certificationName"))
    issuing_organization: Optional[str] = None
    issue_date: Optional[str] = None
    expiration_date: Optional[str] = None
    credential_id: Optional[str] = None
    credential_url: Optional[str] = None
    level: Optional[CertificationLevel] = None

    # Course and certification
    description: Optional[str] = Field(
        None, validation_alias=AliasChoices("description", "courseDescription")
    )
    skills_learned: Optional[List[str]] = None

    @field_validator("location", "level", mode="before")
    @classmethod
    def _blank_enum_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


# ---------------------------------------------------------------------------
# QUERIES / REPORTS
# ---------------------------------------------------------------------------


class TrainingFilters(_CamelModel):
    """
    List filters. "all" (or no value) disables a filter.
    Dates are ISO strings compared against the record's primary date.
    """

    search: Optional[str] = None
    kind: Optional[str] = None
    status: Optional[str] = None
    department: Optional[str] = None
    category: Optional[str] = None
    employee: Optional[str] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None


class TrainingSummary(_CamelModel):
    total_trainings: int
    completed_trainings: int
    in_progress_trainings: int
    scheduled_trainings: int
    pending_trainings: int
    certifications: int
    courses: int
    sessions: int
    completion_rate: int = Field(..., description="Whole percent of records with status completed.")
    department_stats: Dict[str, int] = Field(default_factory=dict)


class CertificationOverview(_CamelModel):
    total: int
    expired: int
    expiring_soon: int
    active: int
    advanced_or_expert: int


# ---------------------------------------------------------------------------
# BULK OPERATIONS
# ---------------------------------------------------------------------------


class TrainingIdList(_CamelModel):
    ids: List[str] = Field(default_factory=list)


class BulkDeleteResult(_CamelModel):
    deleted: List[str] = Field(default_factory=list)
    not_found: List[str] = Field(default_factory=list)
    failed: List[str] = Field(default_factory=list)
