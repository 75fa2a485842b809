# backend/certifyone/apps/storage/models.py

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text

from ...database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DurableSlot(Base):
    """
    One named value that survives restarts.

    Values are opaque text: JSON for the trainings / user blobs, plain
    strings for the token and the UI preferences.
    """

    __tablename__ = "durable_slots"

    name = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
