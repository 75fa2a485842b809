"""
Read-side helpers over a list of training records: filtering, dashboard
counts and certification expiry. Nothing here touches the store.
"""

from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Iterable, List, Optional, Sequence

from .models import CertificationLevel, CertificationTraining, TrainingKind, TrainingRecord, TrainingStatus
from .schemas import CertificationOverview, TrainingFilters, TrainingSummary

EXPIRING_SOON_DAYS = 90


def _active(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value or value.lower() == "all":
        return None
    return value


def _matches_search(record: TrainingRecord, term: str) -> bool:
    needle = term.lower()
    fields = [record.employee_name, record.display_name]
    return any(needle in field.lower() for field in fields if field)


def filter_records(records: Iterable[TrainingRecord], filters: TrainingFilters) -> List[TrainingRecord]:
    search = _active(filters.search)
    kind = _active(filters.kind)
    status = _active(filters.status)
    department = _active(filters.department)
    category = _active(filters.category)
    employee = _active(filters.employee)
    date_from = _active(filters.date_from)
    date_to = _active(filters.date_to)

    result: List[TrainingRecord] = []
    for record in records:
        if search and not _matches_search(record, search):
            continue
        if kind and record.kind != kind:
            continue
        if status and record.status.value != status:
            continue
        if department and record.department != department:
            continue
        if category and record.category != category:
            continue
        if employee and record.employee_name != employee:
            continue
        # ISO dates compare correctly as strings; undated records drop out
        # of any date-bounded query.
        primary = record.primary_date[:10]
        if date_from and (not primary or primary < date_from[:10]):
            continue
        if date_to and (not primary or primary > date_to[:10]):
            continue
        result.append(record)
    return result


def summarize(records: Sequence[TrainingRecord]) -> TrainingSummary:
    statuses = Counter(record.status for record in records)
    kinds = Counter(record.kind for record in records)
    departments = Counter((record.department or "").strip() or "Unknown" for record in records)

    total = len(records)
    completed = statuses[TrainingStatus.COMPLETED]
    return TrainingSummary(
        total_trainings=total,
        completed_trainings=completed,
        in_progress_trainings=statuses[TrainingStatus.IN_PROGRESS],
        scheduled_trainings=statuses[TrainingStatus.SCHEDULED],
        pending_trainings=statuses[TrainingStatus.PENDING],
        certifications=kinds[TrainingKind.CERTIFICATION.value],
        courses=kinds[TrainingKind.COURSE.value],
        sessions=kinds[TrainingKind.SESSION.value],
        completion_rate=round(completed / total * 100) if total else 0,
        department_stats=dict(departments),
    )


def _expiry(cert: CertificationTraining) -> Optional[date]:
    if not cert.expiration_date:
        return None
    try:
        return date.fromisoformat(cert.expiration_date[:10])
    except ValueError:
        return None


def is_expired(cert: CertificationTraining, today: date) -> bool:
    expiry = _expiry(cert)
    return expiry is not None and expiry < today


def is_expiring_soon(cert: CertificationTraining, today: date, *, within_days: int = EXPIRING_SOON_DAYS) -> bool:
    expiry = _expiry(cert)
    if expiry is None:
        return False
    days_left = (expiry - today).days
    return 0 < days_left <= within_days


def certification_overview(records: Iterable[TrainingRecord], today: date) -> CertificationOverview:
    certs = [record for record in records if isinstance(record, CertificationTraining)]
    return CertificationOverview(
        total=len(certs),
        expired=sum(1 for cert in certs if is_expired(cert, today)),
        expiring_soon=sum(1 for cert in certs if is_expiring_soon(cert, today)),
        active=sum(1 for cert in certs if not is_expired(cert, today)),
        advanced_or_expert=sum(
            1 for cert in certs if cert.level in (CertificationLevel.ADVANCED, CertificationLevel.EXPERT)
        ),
    )
