from __future__ import annotations

import asyncio
import threading
from datetime import datetime, timedelta, timezone

from certifyone.apps.events.broker import EventBroker
from certifyone.apps.storage.services import SlotStorageError
from certifyone.apps.training.models import TrainingStatus
from certifyone.apps.training.persistence import TRAININGS_SLOT, TrainingRepository
from certifyone.apps.training.services import StoreErrorCode, TrainingStore


def _session_form(**overrides):
    form = {
        "kind": "session",
        "employeeName": "Jane Doe",
        "department": "Design",
        "status": "scheduled",
        "topic": "Design systems",
        "date": "2024-05-01",
        "startTime": "09:00",
        "endTime": "10:30",
    }
    form.update(overrides)
    return form


def _course_form(**overrides):
    form = {"kind": "course", "employeeName": "Ali Khan", "title": "Kubernetes", "startDate": "2024-02-01"}
    form.update(overrides)
    return form


def _cert_form(**overrides):
    form = {"kind": "certification", "employeeName": "Ali Khan", "name": "CKA", "issueDate": "2024-03-01"}
    form.update(overrides)
    return form


class _FlakySlots:
    """Wraps a SlotStore; writes fail while `fail_writes` is set."""

    def __init__(self, inner):
        self.inner = inner
        self.fail_writes = False

    def get(self, name):
        return self.inner.get(name)

    def set(self, name, value):
        if self.fail_writes:
            raise SlotStorageError(code="write_failed", slot=name, reason="quota exceeded")
        self.inner.set(name, value)


class _SteppingClock:
    def __init__(self, start: datetime, step: timedelta = timedelta(0)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


def test_adds_produce_unique_ids_and_matching_size(empty_store):
    async def scenario():
        return [await empty_store.add(_course_form(title=f"Course {i}")) for i in range(25)]

    results = asyncio.run(scenario())

    assert all(result.ok for result in results)
    assert len(empty_store) == 25
    assert len({result.record.id for result in results}) == 25


def test_add_prepends_newest_first(empty_store):
    async def scenario():
        first = await empty_store.add(_course_form(title="First"))
        second = await empty_store.add(_course_form(title="Second"))
        return first, second

    first, second = asyncio.run(scenario())

    assert [record.id for record in empty_store.records] == [second.record.id, first.record.id]


def test_session_lifecycle_scenario(empty_store):
    async def scenario():
        added = await empty_store.add(_session_form())
        assert added.ok
        record_id = added.record.id

        assert len(empty_store) == 1
        created = empty_store.get_by_id(record_id)
        assert created.kind == "session"
        assert created.status == TrainingStatus.SCHEDULED

        updated = await empty_store.update(record_id, _session_form(status="completed"))
        assert updated.ok
        after_update = empty_store.get_by_id(record_id)
        assert after_update.status == TrainingStatus.COMPLETED
        assert after_update.updated_at > created.updated_at
        assert after_update.created_at == created.created_at
        assert after_update.id == record_id

        deleted = await empty_store.delete(record_id)
        assert deleted.ok
        assert empty_store.get_by_id(record_id) is None
        assert empty_store.list_certifications() == []
        assert len(empty_store) == 0

    asyncio.run(scenario())


def test_update_refreshes_updated_at_even_with_a_frozen_clock(slot_store):
    slot_store.set(TRAININGS_SLOT, "[]")
    frozen = datetime(2024, 6, 1, 8, 0, tzinfo=timezone.utc)
    store = TrainingStore(
        TrainingRepository(slot_store),
        write_delay=0,
        delete_delay=0,
        clock=_SteppingClock(frozen),
    )

    async def scenario():
        added = await store.add(_course_form())
        updated = await store.update(added.record.id, _course_form(status="completed"))
        return added.record, updated.record

    before, after = asyncio.run(scenario())

    assert after.updated_at > before.updated_at
    assert after.created_at == before.created_at == frozen


def test_update_can_change_kind_and_keeps_identity(empty_store):
    async def scenario():
        added = await empty_store.add(_course_form())
        return added.record, await empty_store.update(added.record.id, _cert_form(level="expert"))

    original, result = asyncio.run(scenario())

    assert result.ok
    assert result.record.kind == "certification"
    assert result.record.id == original.id
    assert result.record.created_at == original.created_at


def test_update_unknown_id_is_not_found_and_leaves_collection(empty_store):
    async def scenario():
        await empty_store.add(_course_form())
        snapshot = empty_store.records
        result = await empty_store.update("missing", _course_form(title="Other"))
        return snapshot, result

    snapshot, result = asyncio.run(scenario())

    assert not result.ok
    assert result.error.code == StoreErrorCode.NOT_FOUND
    assert empty_store.records == snapshot


def test_delete_unknown_id_is_not_found_and_leaves_collection(empty_store):
    async def scenario():
        await empty_store.add(_course_form())
        snapshot = empty_store.records
        return snapshot, await empty_store.delete("missing")

    snapshot, result = asyncio.run(scenario())

    assert result.error.code == StoreErrorCode.NOT_FOUND
    assert empty_store.records == snapshot


def test_invalid_form_is_a_validation_error(empty_store):
    async def scenario():
        bad_status = await empty_store.add(_course_form(status="archived"))
        bad_times = await empty_store.add(_session_form(startTime="11:00", endTime="09:00"))
        return bad_status, bad_times

    bad_status, bad_times = asyncio.run(scenario())

    assert bad_status.error.code == StoreErrorCode.VALIDATION
    assert any(item["field"] == "status" for item in bad_status.error.detail)
    assert bad_times.error.code == StoreErrorCode.VALIDATION
    assert len(empty_store) == 0


def test_typed_lists_follow_collection_order(empty_store):
    async def scenario():
        await empty_store.add(_cert_form(name="A"))
        await empty_store.add(_course_form())
        await empty_store.add(_cert_form(name="B"))
        await empty_store.add(_session_form())

    asyncio.run(scenario())

    certs = empty_store.list_certifications()
    assert [cert.name for cert in certs] == ["B", "A"]
    assert [record.id for record in certs] == [
        record.id for record in empty_store.records if record.kind == "certification"
    ]
    assert len(empty_store.list_courses()) == 1
    assert len(empty_store.list_sessions()) == 1


def test_list_for_employee_matches_name_case_insensitively(empty_store):
    async def scenario():
        await empty_store.add(_course_form(employeeName="John Doe"))
        await empty_store.add(_course_form(employeeName="Someone Else"))

    asyncio.run(scenario())

    assert len(empty_store.list_for_employee("john doe")) == 1


def test_mutations_are_persisted_as_full_snapshot(slot_store, empty_store):
    async def scenario():
        await empty_store.add(_course_form())
        await empty_store.add(_cert_form())

    asyncio.run(scenario())

    reloaded = TrainingStore(TrainingRepository(slot_store), write_delay=0, delete_delay=0)
    assert reloaded.records == empty_store.records


def test_store_starts_from_seed_when_slot_is_corrupt(slot_store):
    slot_store.set(TRAININGS_SLOT, "not-json")
    store = TrainingStore(TrainingRepository(slot_store), write_delay=0, delete_delay=0)

    assert [record.kind for record in store.records] == ["certification", "course", "session"]


def test_persistence_failure_keeps_memory_unchanged(slot_store):
    slot_store.set(TRAININGS_SLOT, "[]")
    slots = _FlakySlots(slot_store)
    store = TrainingStore(TrainingRepository(slots), write_delay=0, delete_delay=0)

    async def scenario():
        kept = await store.add(_course_form())
        slots.fail_writes = True
        failed_add = await store.add(_cert_form())
        failed_delete = await store.delete(kept.record.id)
        return kept, failed_add, failed_delete

    kept, failed_add, failed_delete = asyncio.run(scenario())

    assert failed_add.error.code == StoreErrorCode.PERSISTENCE
    assert failed_delete.error.code == StoreErrorCode.PERSISTENCE
    assert [record.id for record in store.records] == [kept.record.id]


def test_concurrent_mutations_are_serialized(slot_store):
    slot_store.set(TRAININGS_SLOT, "[]")
    store = TrainingStore(TrainingRepository(slot_store), write_delay=0.01, delete_delay=0.01)

    async def scenario():
        added = await store.add(_course_form())
        record_id = added.record.id
        await asyncio.gather(
            *(store.update(record_id, _course_form(title=f"Rev {i}")) for i in range(5)),
            *(store.add(_cert_form(name=f"Cert {i}")) for i in range(5)),
        )

    asyncio.run(scenario())

    assert len(store) == 6
    reloaded = TrainingStore(TrainingRepository(slot_store), write_delay=0, delete_delay=0)
    assert reloaded.records == store.records


def test_cancelled_caller_does_not_abort_started_mutation(slot_store):
    slot_store.set(TRAININGS_SLOT, "[]")
    store = TrainingStore(TrainingRepository(slot_store), write_delay=0.05, delete_delay=0)

    async def scenario():
        task = asyncio.create_task(store.add(_course_form()))
        await asyncio.sleep(0.01)
        task.cancel()
        await asyncio.sleep(0.1)

    asyncio.run(scenario())

    assert len(store) == 1


def test_delete_many_reports_each_id(empty_store):
    async def scenario():
        first = await empty_store.add(_course_form())
        second = await empty_store.add(_cert_form())
        return await empty_store.delete_many([first.record.id, "missing", second.record.id])

    outcome = asyncio.run(scenario())

    assert len(outcome.deleted) == 2
    assert outcome.not_found == ["missing"]
    assert len(empty_store) == 0


def test_outcomes_are_published_to_the_broker(slot_store):
    slot_store.set(TRAININGS_SLOT, "[]")
    broker = EventBroker()
    seen = []
    broker.subscribe(seen.append)
    store = TrainingStore(TrainingRepository(slot_store), broker=broker, write_delay=0, delete_delay=0)

    async def scenario():
        added = await store.add(_session_form())
        await store.delete(added.record.id)
        await store.delete("missing")

    asyncio.run(scenario())

    assert [event.type for event in seen] == ["training.created", "training.deleted", "training.delete_failed"]
    assert seen[0].message == "New session has been successfully added."
    assert seen[0].metadata == {"kind": "session"}
    assert seen[2].ok is False


def test_timestamps_without_offset_load_as_utc_and_stay_updatable(slot_store):
    slot_store.set(
        TRAININGS_SLOT,
        '[{"kind": "course", "id": "c1", "createdAt": "2024-01-10T09:00:00", "updatedAt": "2024-01-10T09:00:00"}]',
    )
    store = TrainingStore(TrainingRepository(slot_store), write_delay=0, delete_delay=0)
    loaded = store.get_by_id("c1")
    assert loaded.updated_at == datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)

    result = asyncio.run(store.update("c1", _course_form(title="X")))

    assert result.ok
    assert result.record.updated_at > loaded.updated_at
    assert result.record.created_at == loaded.created_at


class _ThreadRecordingSlots:
    def __init__(self, inner):
        self.inner = inner
        self.writer_threads = []

    def get(self, name):
        return self.inner.get(name)

    def set(self, name, value):
        self.writer_threads.append(threading.get_ident())
        self.inner.set(name, value)


def test_slot_writes_run_off_the_event_loop_thread(slot_store):
    slot_store.set(TRAININGS_SLOT, "[]")
    slots = _ThreadRecordingSlots(slot_store)
    store = TrainingStore(TrainingRepository(slots), write_delay=0, delete_delay=0)

    async def scenario():
        loop_thread = threading.get_ident()
        await store.add(_course_form())
        return loop_thread

    loop_thread = asyncio.run(scenario())

    assert slots.writer_threads
    assert loop_thread not in slots.writer_threads
