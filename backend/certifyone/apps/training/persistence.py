from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import List, Sequence

from pydantic import ValidationError

from ..storage.services import SlotStorageError, SlotStore
from .models import TrainingRecord, training_collection_adapter
from .seed import seed_records

logger = logging.getLogger(__name__)

TRAININGS_SLOT = os.getenv("TRAININGS_SLOT_NAME", "certify-one-trainings")


@dataclass
class PersistenceError(Exception):
    code: str
    reason: str

    def __str__(self) -> str:
        return f"{self.code}: {self.reason}"


def dump_records(records: Sequence[TrainingRecord]) -> str:
    """JSON array of records; unset optional fields are omitted."""
    payload = training_collection_adapter.dump_python(
        list(records), mode="json", by_alias=True, exclude_none=True
    )
    return json.dumps(payload)


def load_records(raw: str) -> List[TrainingRecord]:
    return training_collection_adapter.validate_python(json.loads(raw))


class TrainingRepository:
    """
    Whole-collection persistence of training records in one durable slot.

    Reads never fail: an absent, unreadable or invalid slot yields the
    built-in seed collection. Writes always store the full snapshot.
    """

    def __init__(self, slots: SlotStore, slot_name: str = TRAININGS_SLOT) -> None:
        self._slots = slots
        self.slot_name = slot_name

    def load(self) -> List[TrainingRecord]:
        try:
            raw = self._slots.get(self.slot_name)
        except SlotStorageError as exc:
            logger.warning(
                "Training slot unreadable; using seed records",
                extra={"slot": self.slot_name, "error": str(exc)},
            )
            return seed_records()

        if raw is None:
            logger.info("No stored trainings; using seed records", extra={"slot": self.slot_name})
            return seed_records()

        try:
            records = load_records(raw)
        except (ValueError, ValidationError) as exc:
            logger.warning(
                "Stored trainings are corrupt; using seed records",
                extra={"slot": self.slot_name, "error": str(exc)[:200]},
            )
            return seed_records()
        return records

    def save(self, records: Sequence[TrainingRecord]) -> None:
        try:
            raw = dump_records(records)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(code="serialization_failed", reason=str(exc)) from exc
        try:
            self._slots.set(self.slot_name, raw)
        except SlotStorageError as exc:
            raise PersistenceError(code="write_failed", reason=str(exc)) from exc
