"""
Form-to-record conversion for training records.

`build_record` narrows a `TrainingFormData` into the record class of its
kind and fills every variant field with the submitted value or its
default. It is pure: ids and timestamps are passed in by the store.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from .models import (
    CertificationLevel,
    CertificationTraining,
    CourseTraining,
    SessionLocation,
    SessionTraining,
    TrainingKind,
    TrainingRecord,
)
from .schemas import TrainingFormData


def _parse_clock(value: str) -> int:
    """Minutes since midnight for 'HH:MM' or 'HH:MM:SS'."""
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time {value!r}; expected HH:MM")
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise ValueError(f"Invalid time {value!r}; expected HH:MM") from exc
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f"Invalid time {value!r}; out of range")
    return hours * 60 + minutes


def derive_duration(start_time: str, end_time: str) -> str:
    """
    Same-day duration between two wall-clock times.

    '09:00' -> '11:00' gives '2h 0m'; '09:15' -> '09:45' gives '30m'.
    An end before the start is rejected.
    """
    total = _parse_clock(end_time) - _parse_clock(start_time)
    if total < 0:
        raise ValueError(f"End time {end_time} is before start time {start_time}")
    hours, minutes = divmod(total, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def normalize_skills(skills: Optional[Iterable[str]]) -> List[str]:
    """
    Trim each entry, then drop blanks and exact (case-sensitive) duplicates;
    first occurrence wins. Trimming happens before the duplicate check, so
    " React" and "React" are the same skill.
    """
    result: List[str] = []
    for skill in skills or []:
        cleaned = skill.strip()
        if cleaned and cleaned not in result:
            result.append(cleaned)
    return result


def _text(value: Optional[str]) -> str:
    return value or ""


def _optional_text(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value


def build_record(
    form: TrainingFormData,
    *,
    record_id: str,
    created_at: datetime,
    updated_at: datetime,
) -> TrainingRecord:
    common = {
        "id": record_id,
        "employee_name": form.employee_name,
        "role": form.role,
        "department": form.department,
        "category": form.category,
        "status": form.status,
        "created_at": created_at,
        "updated_at": updated_at,
    }

    if form.kind == TrainingKind.SESSION:
        duration = _text(form.duration)
        if form.start_time and form.end_time:
            duration = derive_duration(form.start_time, form.end_time)
        return SessionTraining(
            **common,
            instructor_name=_text(form.instructor_name),
            topic=_text(form.topic),
            session_date=_text(form.session_date),
            start_time=_text(form.start_time),
            end_time=_text(form.end_time),
            duration=duration,
            location=form.location or SessionLocation.ONLINE,
            agenda=_text(form.agenda),
            learned_outcome=_text(form.learned_outcome),
        )

    if form.kind == TrainingKind.COURSE:
        return CourseTraining(
            **common,
            title=_text(form.title),
            platform=_text(form.platform),
            start_date=_text(form.start_date),
            completion_date=_optional_text(form.completion_date),
            course_duration=_text(form.course_duration),
            certificate_link=_optional_text(form.certificate_link),
            description=_text(form.description),
            skills_learned=normalize_skills(form.skills_learned),
            outcomes_learned=_optional_text(form.outcomes_learned),
        )

    if form.kind == TrainingKind.CERTIFICATION:
        return CertificationTraining(
            **common,
            name=_text(form.name),
            issuing_organization=_text(form.issuing_organization),
            issue_date=_text(form.issue_date),
            expiration_date=_optional_text(form.expiration_date),
            credential_id=_optional_text(form.credential_id),
            credential_url=_optional_text(form.credential_url),
            description=_text(form.description),
            skills_learned=normalize_skills(form.skills_learned),
            level=form.level or CertificationLevel.BEGINNER,
        )

    raise ValueError(f"Unsupported training kind: {form.kind}")
