from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent
sys.path.append(str(ROOT))

os.environ["CERTIFYONE_DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["TRAINING_WRITE_DELAY_MS"] = "0"
os.environ["TRAINING_DELETE_DELAY_MS"] = "0"
os.environ["AUTH_LOGIN_DELAY_MS"] = "0"
# Cheap hashing parameters keep the auth tests fast.
os.environ["ARGON2_TIME_COST"] = "1"
os.environ["ARGON2_MEMORY_COST"] = "8"
os.environ["ARGON2_PARALLELISM"] = "1"

from certifyone.database import build_engine, build_session_factory  # noqa: E402
from certifyone.apps.storage.services import SlotStore  # noqa: E402
from certifyone.apps.training.persistence import TrainingRepository  # noqa: E402
from certifyone.apps.training.services import TrainingStore  # noqa: E402


@pytest.fixture()
def session_factory():
    engine = build_engine("sqlite+pysqlite:///:memory:")
    factory = build_session_factory(engine)
    try:
        yield factory
    finally:
        engine.dispose()


@pytest.fixture()
def slot_store(session_factory) -> SlotStore:
    slots = SlotStore(session_factory)
    slots.create_schema()
    return slots


@pytest.fixture()
def empty_store(slot_store) -> TrainingStore:
    """A store that starts with no records (the slot holds an empty array)."""
    slot_store.set("certify-one-trainings", "[]")
    return TrainingStore(TrainingRepository(slot_store), write_delay=0, delete_delay=0)
