"""Built-in example records used when the stored collection cannot be read."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List

from .models import (
    CertificationLevel,
    CertificationTraining,
    CourseTraining,
    SessionLocation,
    SessionTraining,
    TrainingRecord,
    TrainingStatus,
)


def _ts(year: int, month: int, day: int, hour: int) -> datetime:
    return datetime(year, month, day, hour, 0, 0, tzinfo=timezone.utc)


def seed_records() -> List[TrainingRecord]:
    """A fresh copy of the three example records (certification, course, session)."""
    return [
        CertificationTraining(
            id="1",
            employee_name="John Doe",
            role="Software Engineer",
            department="Engineering",
            category="Technical",
            status=TrainingStatus.COMPLETED,
            name="React Professional Certification",
            issuing_organization="Meta",
            issue_date="2024-01-15",
            description="Advanced React development certification",
            skills_learned=["React", "Redux", "TypeScript"],
            level=CertificationLevel.ADVANCED,
            credential_id="REACT-PRO-2024-001",
            credential_url="https://certification.meta.com/verify/REACT-PRO-2024-001",
            created_at=_ts(2024, 1, 15, 10),
            updated_at=_ts(2024, 1, 15, 10),
        ),
        CourseTraining(
            id="2",
            employee_name="John Doe",
            role="Software Engineer",
            department="Engineering",
            category="Technical",
            status=TrainingStatus.IN_PROGRESS,
            title="Advanced Node.js Development",
            platform="Udemy",
            start_date="2024-01-10",
            course_duration="12 hours",
            description="Deep dive into Node.js backend development",
            skills_learned=["Node.js", "Express", "MongoDB"],
            created_at=_ts(2024, 1, 10, 9),
            updated_at=_ts(2024, 1, 10, 9),
        ),
        SessionTraining(
            id="3",
            employee_name="John Doe",
            role="Software Engineer",
            department="Engineering",
            category="Soft Skills",
            status=TrainingStatus.COMPLETED,
            instructor_name="Sarah Wilson",
            topic="Effective Communication in Teams",
            session_date="2024-01-08",
            start_time="09:00",
            end_time="11:00",
            duration="2 hours",
            location=SessionLocation.ON_SITE,
            agenda="Communication styles, active listening, conflict resolution",
            learned_outcome="Improved team communication skills",
            created_at=_ts(2024, 1, 8, 9),
            updated_at=_ts(2024, 1, 8, 9),
        ),
    ]
