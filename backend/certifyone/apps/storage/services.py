from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ...database import Base
from . import models

logger = logging.getLogger(__name__)


@dataclass
class SlotStorageError(Exception):
    code: str
    slot: str
    reason: str

    def __str__(self) -> str:
        return f"{self.code} on slot {self.slot!r}: {self.reason}"


class SlotStore:
    """
    Name/value store backed by the `durable_slots` table.

    Every call runs in its own short transaction, so a value returned by
    `get` is always what the last successful `set` wrote.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def create_schema(self) -> None:
        engine = self._session_factory.kw["bind"]
        Base.metadata.create_all(bind=engine, tables=[models.DurableSlot.__table__])

    @contextmanager
    def _session(self, slot: str, op: str) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.warning(
                "Durable slot operation failed",
                extra={"slot": slot, "op": op, "error": str(exc)},
            )
            raise SlotStorageError(code=f"{op}_failed", slot=slot, reason=str(exc)) from exc
        finally:
            db.close()

    def get(self, name: str) -> Optional[str]:
        with self._session(name, "read") as db:
            row = db.get(models.DurableSlot, name)
            return row.value if row is not None else None

    def set(self, name: str, value: str) -> None:
        with self._session(name, "write") as db:
            row = db.get(models.DurableSlot, name)
            if row is None:
                db.add(models.DurableSlot(name=name, value=value))
            else:
                row.value = value

    def remove(self, name: str) -> None:
        with self._session(name, "remove") as db:
            row = db.get(models.DurableSlot, name)
            if row is not None:
                db.delete(row)
