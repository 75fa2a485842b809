from __future__ import annotations

import uuid

import pytest

from certifyone.utils.identifiers import generate_record_id, generate_uuid7


def test_uuid7_has_version_and_timestamp_prefix():
    value = uuid.UUID(generate_uuid7(now_ms=1_700_000_000_000))
    assert value.version == 7
    assert int.from_bytes(value.bytes[:6], "big") == 1_700_000_000_000


def test_uuid7_values_are_distinct():
    ids = {generate_uuid7() for _ in range(500)}
    assert len(ids) == 500


def test_generate_record_id_skips_existing_values():
    candidates = iter(["taken", "taken", "fresh"])
    assert generate_record_id({"taken"}, factory=lambda: next(candidates)) == "fresh"


def test_generate_record_id_gives_up_after_repeated_collisions():
    with pytest.raises(RuntimeError):
        generate_record_id({"same"}, factory=lambda: "same")
