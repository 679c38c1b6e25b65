from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

from rribndb.utils.identifiers import generate_uuid7, uuid7_time


def test_generate_uuid7_sets_version_and_variant():
    value = uuid.UUID(generate_uuid7())

    assert value.version == 7
    assert value.variant == uuid.RFC_4122


def test_generate_uuid7_embeds_given_time():
    at = datetime(2025, 10, 8, 9, 30, 15, 123000, tzinfo=timezone.utc)

    assert uuid7_time(generate_uuid7(at)) == at


def test_ids_sort_by_time():
    at = datetime(2025, 10, 8, tzinfo=timezone.utc)
    earlier = generate_uuid7(at)
    later = generate_uuid7(at + timedelta(milliseconds=1))

    assert earlier < later
