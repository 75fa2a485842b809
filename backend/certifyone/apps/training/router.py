from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import StreamingResponse

from ...security import get_current_user, require_admin
from ..accounts.schemas import SessionUser
from ..exports import csv_export
from . import reports
from .models import TrainingRecord
from .schemas import (
    BulkDeleteResult,
    CertificationOverview,
    TrainingFilters,
    TrainingFormData,
    TrainingIdList,
    TrainingSummary,
)
from .services import StoreErrorCode, StoreResult, TrainingStore

router = APIRouter(prefix="/training", tags=["training"])

_ERROR_STATUS = {
    StoreErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    StoreErrorCode.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    StoreErrorCode.PERSISTENCE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


# ---------------------------------------------------------------------------
# HELPERS
# ---------------------------------------------------------------------------


def get_training_store(request: Request) -> TrainingStore:
    return request.app.state.training_store


def _unwrap(result: StoreResult) -> TrainingRecord:
    """
    Translate a store result into the HTTP response convention.
    """
    if result.ok:
        return result.record
    error = result.error
    detail = {"code": error.code.value, "message": error.message}
    if error.detail:
        detail["errors"] = error.detail
    raise HTTPException(status_code=_ERROR_STATUS[error.code], detail=detail)


def _apply_user_defaults(
    form: TrainingFormData,
    user: SessionUser,
    current: Optional[TrainingRecord] = None,
) -> TrainingFormData:
    """
    Fill blank identity fields, from the record being edited when there is
    one, otherwise from the signed-in user.
    """
    fallback = {
        "employee_name": current.employee_name if current is not None else user.full_name,
        "department": current.department if current is not None else (user.department or ""),
        "role": current.role if current is not None else user.role.value,
    }
    defaults = {
        name: value
        for name, value in fallback.items()
        if value and not getattr(form, name).strip()
    }
    return form.model_copy(update=defaults) if defaults else form


def _filters(
    search: Optional[str] = Query(None),
    kind: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    department: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    employee: Optional[str] = Query(None),
    date_from: Optional[str] = Query(None, alias="dateFrom"),
    date_to: Optional[str] = Query(None, alias="dateTo"),
) -> TrainingFilters:
    return TrainingFilters(
        search=search,
        kind=kind,
        status=status_filter,
        department=department,
        category=category,
        employee=employee,
        date_from=date_from,
        date_to=date_to,
    )


# ---------------------------------------------------------------------------
# RECORDS
# ---------------------------------------------------------------------------


@router.get("/records", response_model=List[TrainingRecord], response_model_exclude_none=True)
def list_records(
    filters: TrainingFilters = Depends(_filters),
    store: TrainingStore = Depends(get_training_store),
    current_user: SessionUser = Depends(get_current_user),
) -> List[TrainingRecord]:
    return reports.filter_records(store.records, filters)


@router.get("/records/mine", response_model=List[TrainingRecord], response_model_exclude_none=True)
def list_my_records(
    store: TrainingStore = Depends(get_training_store),
    current_user: SessionUser = Depends(get_current_user),
) -> List[TrainingRecord]:
    return store.list_for_employee(current_user.full_name)


@router.post(
    "/records",
    response_model=TrainingRecord,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_record(
    payload: TrainingFormData,
    store: TrainingStore = Depends(get_training_store),
    current_user: SessionUser = Depends(get_current_user),
) -> TrainingRecord:
    result = await store.add(_apply_user_defaults(payload, current_user))
    return _unwrap(result)


@router.get("/records/{record_id}", response_model=TrainingRecord, response_model_exclude_none=True)
def get_record(
    record_id: str,
    store: TrainingStore = Depends(get_training_store),
    current_user: SessionUser = Depends(get_current_user),
) -> TrainingRecord:
    record = store.get_by_id(record_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": StoreErrorCode.NOT_FOUND.value, "message": f"Training {record_id} not found"},
        )
    return record


@router.put("/records/{record_id}", response_model=TrainingRecord, response_model_exclude_none=True)
async def update_record(
    record_id: str,
    payload: TrainingFormData,
    store: TrainingStore = Depends(get_training_store),
    current_user: SessionUser = Depends(get_current_user),
) -> TrainingRecord:
    form = _apply_user_defaults(payload, current_user, store.get_by_id(record_id))
    result = await store.update(record_id, form)
    return _unwrap(result)


@router.delete("/records/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_record(
    record_id: str,
    store: TrainingStore = Depends(get_training_store),
    current_user: SessionUser = Depends(get_current_user),
) -> None:
    _unwrap(await store.delete(record_id))


@router.post("/records/bulk-delete", response_model=BulkDeleteResult)
async def bulk_delete_records(
    payload: TrainingIdList,
    store: TrainingStore = Depends(get_training_store),
    current_user: SessionUser = Depends(require_admin),
) -> BulkDeleteResult:
    return await store.delete_many(payload.ids)


# ---------------------------------------------------------------------------
# TYPED LISTS
# ---------------------------------------------------------------------------


@router.get("/certifications", response_model=List[TrainingRecord], response_model_exclude_none=True)
def list_certifications(
    store: TrainingStore = Depends(get_training_store),
    current_user: SessionUser = Depends(get_current_user),
) -> List[TrainingRecord]:
    return store.list_certifications()


@router.get("/courses", response_model=List[TrainingRecord], response_model_exclude_none=True)
def list_courses(
    store: TrainingStore = Depends(get_training_store),
    current_user: SessionUser = Depends(get_current_user),
) -> List[TrainingRecord]:
    return store.list_courses()


@router.get("/sessions", response_model=List[TrainingRecord], response_model_exclude_none=True)
def list_sessions(
    store: TrainingStore = Depends(get_training_store),
    current_user: SessionUser = Depends(get_current_user),
) -> List[TrainingRecord]:
    return store.list_sessions()


# ---------------------------------------------------------------------------
# ADMIN: EXPORT / REPORTS
# ---------------------------------------------------------------------------


@router.post("/export")
def export_records(
    payload: TrainingIdList,
    store: TrainingStore = Depends(get_training_store),
    current_user: SessionUser = Depends(require_admin),
) -> StreamingResponse:
    """
    CSV download of the selected records (all records when `ids` is empty).
    """
    selected = csv_export.select_records(store.records, payload.ids or None)
    return csv_export.build_csv_response(selected, today=date.today())


@router.get("/reports/summary", response_model=TrainingSummary)
def report_summary(
    store: TrainingStore = Depends(get_training_store),
    current_user: SessionUser = Depends(require_admin),
) -> TrainingSummary:
    return reports.summarize(store.records)


@router.get("/reports/certifications", response_model=CertificationOverview)
def report_certifications(
    store: TrainingStore = Depends(get_training_store),
    current_user: SessionUser = Depends(require_admin),
) -> CertificationOverview:
    return reports.certification_overview(store.records, date.today())
