from __future__ import annotations

import csv
import io
from datetime import date
from typing import Iterable, List, Optional, Sequence

from fastapi.responses import StreamingResponse

from ..training.models import TrainingRecord

CSV_HEADERS = [
    "Employee Name",
    "Role",
    "Department",
    "Training Type",
    "Training Name",
    "Status",
    "Category",
    "Date",
]
MISSING_DATE = "N/A"


def _row(record: TrainingRecord) -> List[str]:
    return [
        record.employee_name,
        record.role,
        record.department,
        record.kind,
        record.display_name,
        record.status.value,
        record.category,
        record.primary_date or MISSING_DATE,
    ]


def select_records(records: Iterable[TrainingRecord], ids: Optional[Sequence[str]]) -> List[TrainingRecord]:
    """Records whose id is in `ids`, in collection order; all records when `ids` is None."""
    if ids is None:
        return list(records)
    wanted = set(ids)
    return [record for record in records if record.id in wanted]


def render_csv(records: Iterable[TrainingRecord]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for record in records:
        writer.writerow(_row(record))
    return buffer.getvalue()


def export_filename(today: date) -> str:
    return f"training_records_{today.isoformat()}.csv"


def build_csv_response(records: Iterable[TrainingRecord], *, today: date) -> StreamingResponse:
    payload = render_csv(records).encode("utf-8")
    headers = {"Content-Disposition": f'attachment; filename="{export_filename(today)}"'}
    return StreamingResponse(iter([payload]), media_type="text/csv; charset=utf-8", headers=headers)
