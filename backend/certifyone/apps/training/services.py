from __future__ import annotations

import asyncio
import enum
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from ...utils.identifiers import generate_record_id, generate_uuid7
from ..events.broker import EventBroker, StoreEvent
from .models import TrainingKind, TrainingRecord
from .persistence import PersistenceError, TrainingRepository
from .records import build_record
from .schemas import BulkDeleteResult, TrainingFormData

logger = logging.getLogger(__name__)


def _delay_from_env(name: str, default_ms: int) -> float:
    try:
        return int(os.getenv(name, str(default_ms))) / 1000.0
    except ValueError:
        return default_ms / 1000.0


WRITE_DELAY_SECONDS = _delay_from_env("TRAINING_WRITE_DELAY_MS", 500)
DELETE_DELAY_SECONDS = _delay_from_env("TRAINING_DELETE_DELAY_MS", 300)

FormInput = Union[TrainingFormData, Mapping[str, Any]]


# ---------------------------------------------------------------------------
# RESULTS
# ---------------------------------------------------------------------------


class StoreErrorCode(str, enum.Enum):
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    PERSISTENCE = "persistence"


@dataclass
class StoreError:
    code: StoreErrorCode
    message: str
    detail: List[Dict[str, str]] = field(default_factory=list)


@dataclass
class StoreResult:
    record: Optional[TrainingRecord] = None
    error: Optional[StoreError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _validation_detail(exc: ValidationError) -> List[Dict[str, str]]:
    return [
        {"field": ".".join(str(part) for part in err.get("loc", ())), "reason": err.get("msg", "")}
        for err in exc.errors()
    ]


# ---------------------------------------------------------------------------
# STORE
# ---------------------------------------------------------------------------


class TrainingStore:
    """
    In-memory collection of training records bound to a durable slot.

    - Mutations are serialized: one add/update/delete in flight at a time.
    - The collection in memory is replaced only after the durable write
      succeeded, so memory and slot never disagree.
    - Outcomes are returned as `StoreResult`; nothing is raised for
      not-found, invalid input or storage failures.
    - Every outcome is also published to the broker for notifications.
    """

    def __init__(
        self,
        repository: TrainingRepository,
        *,
        broker: Optional[EventBroker] = None,
        write_delay: float = WRITE_DELAY_SECONDS,
        delete_delay: float = DELETE_DELAY_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repository = repository
        self._broker = broker
        self._write_delay = write_delay
        self._delete_delay = delete_delay
        self._clock = clock
        self._lock = asyncio.Lock()
        self._records: List[TrainingRecord] = repository.load()

    # -- reads --------------------------------------------------------------

    @property
    def records(self) -> List[TrainingRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def get_by_id(self, record_id: str) -> Optional[TrainingRecord]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def _by_kind(self, kind: TrainingKind) -> List[TrainingRecord]:
        return [record for record in self._records if record.kind == kind]

    def list_certifications(self) -> List[TrainingRecord]:
        return self._by_kind(TrainingKind.CERTIFICATION)

    def list_courses(self) -> List[TrainingRecord]:
        return self._by_kind(TrainingKind.COURSE)

    def list_sessions(self) -> List[TrainingRecord]:
        return self._by_kind(TrainingKind.SESSION)

    def list_for_employee(self, employee_name: str) -> List[TrainingRecord]:
        wanted = employee_name.strip().lower()
        return [record for record in self._records if record.employee_name.strip().lower() == wanted]

    # -- mutations ----------------------------------------------------------

    async def add(self, data: FormInput) -> StoreResult:
        return await self._mutate("create", self._write_delay, lambda: self._add(data))

    async def update(self, record_id: str, data: FormInput) -> StoreResult:
        return await self._mutate("update", self._write_delay, lambda: self._update(record_id, data))

    async def delete(self, record_id: str) -> StoreResult:
        return await self._mutate("delete", self._delete_delay, lambda: self._delete(record_id))

    async def delete_many(self, record_ids: Iterable[str]) -> BulkDeleteResult:
        outcome = BulkDeleteResult()
        for record_id in record_ids:
            result = await self.delete(record_id)
            if result.ok:
                outcome.deleted.append(record_id)
            elif result.error.code == StoreErrorCode.NOT_FOUND:
                outcome.not_found.append(record_id)
            else:
                outcome.failed.append(record_id)
        return outcome

    async def _mutate(
        self,
        action: str,
        delay: float,
        operation: Callable[[], Awaitable[StoreResult]],
    ) -> StoreResult:
        async def run() -> StoreResult:
            async with self._lock:
                if delay > 0:
                    await asyncio.sleep(delay)
                result = await operation()
            self._notify(action, result)
            return result

        # A started mutation always completes, even if the caller goes away.
        task: Awaitable[StoreResult] = asyncio.ensure_future(run())
        return await asyncio.shield(task)

    def _coerce_form(self, data: FormInput) -> TrainingFormData:
        if isinstance(data, TrainingFormData):
            return data
        return TrainingFormData.model_validate(dict(data))

    async def _add(self, data: FormInput) -> StoreResult:
        now = self._clock()
        try:
            form = self._coerce_form(data)
            record = build_record(
                form,
                record_id=generate_record_id({r.id for r in self._records}),
                created_at=now,
                updated_at=now,
            )
        except ValidationError as exc:
            return StoreResult(
                error=StoreError(StoreErrorCode.VALIDATION, "Invalid training data", _validation_detail(exc))
            )
        except ValueError as exc:
            return StoreResult(error=StoreError(StoreErrorCode.VALIDATION, str(exc)))

        return await self._commit([record, *self._records], record)

    async def _update(self, record_id: str, data: FormInput) -> StoreResult:
        index = next((i for i, r in enumerate(self._records) if r.id == record_id), None)
        if index is None:
            return StoreResult(error=StoreError(StoreErrorCode.NOT_FOUND, f"Training {record_id} not found"))

        current = self._records[index]
        now = self._clock()
        if now <= current.updated_at:
            now = current.updated_at + timedelta(microseconds=1)
        try:
            form = self._coerce_form(data)
            record = build_record(form, record_id=current.id, created_at=current.created_at, updated_at=now)
        except ValidationError as exc:
            return StoreResult(
                error=StoreError(StoreErrorCode.VALIDATION, "Invalid training data", _validation_detail(exc))
            )
        except ValueError as exc:
            return StoreResult(error=StoreError(StoreErrorCode.VALIDATION, str(exc)))

        updated = list(self._records)
        updated[index] = record
        return await self._commit(updated, record)

    async def _delete(self, record_id: str) -> StoreResult:
        current = self.get_by_id(record_id)
        if current is None:
            return StoreResult(error=StoreError(StoreErrorCode.NOT_FOUND, f"Training {record_id} not found"))
        remaining = [r for r in self._records if r.id != record_id]
        return await self._commit(remaining, current)

    async def _commit(self, records: List[TrainingRecord], record: TrainingRecord) -> StoreResult:
        try:
            # Slot writes block; run them on a worker thread.
            await asyncio.to_thread(self._repository.save, records)
        except PersistenceError as exc:
            logger.error(
                "Failed to persist trainings",
                extra={"record_id": record.id, "code": exc.code, "error": exc.reason},
            )
            return StoreResult(error=StoreError(StoreErrorCode.PERSISTENCE, "Failed to save trainings"))
        self._records = records
        return StoreResult(record=record)

    # -- notifications ------------------------------------------------------

    def _notify(self, action: str, result: StoreResult) -> None:
        record = result.record
        kind = record.kind if record is not None else None
        label = kind.capitalize() if isinstance(kind, str) else "Training"

        if result.ok:
            messages = {
                "create": f"New {kind} has been successfully added.",
                "update": f"{label} has been successfully updated.",
                "delete": f"{label} has been successfully deleted.",
            }
            event_type = {"create": "training.created", "update": "training.updated", "delete": "training.deleted"}[action]
            message = messages[action]
            logger.info(message, extra={"record_id": record.id, "action": action})
        else:
            event_type = f"training.{action}_failed"
            message = result.error.message
            logger.info(
                "Training mutation rejected",
                extra={"action": action, "code": result.error.code.value, "error": message},
            )

        if self._broker is None:
            return
        self._broker.publish(
            StoreEvent(
                id=generate_uuid7(),
                type=event_type,
                entityId=record.id if record is not None else None,
                action=action,
                ok=result.ok,
                message=message,
                timestamp=self._clock().isoformat(),
                metadata={"kind": kind} if kind else {},
            )
        )
