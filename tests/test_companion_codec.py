from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from lms_companion.companion import (
    ASSIGNMENTS_KEY,
    GRADES_KEY,
    SCHEDULE_KEY,
    PayloadDecodeError,
    WatchAssignment,
    WatchGrade,
    WatchScheduleEntry,
    decode_collection,
    encode_collection,
    encode_context,
)

NOW = datetime(2025, 3, 10, 9, 30, tzinfo=timezone.utc)


def make_assignment(**overrides) -> WatchAssignment:
    values = {
        "id": uuid4(),
        "title": "Lab Report",
        "course_name": "Biology",
        "due_date": NOW + timedelta(days=2),
        "points": 20,
        "is_submitted": False,
        "grade": None,
    }
    values.update(overrides)
    return WatchAssignment(**values)


def make_entry(start: datetime, minutes: int = 50) -> WatchScheduleEntry:
    return WatchScheduleEntry(
        id=uuid4(),
        course_name="Algebra II",
        start_time=start,
        end_time=start + timedelta(minutes=minutes),
        room_number="204",
    )


def make_grade(**overrides) -> WatchGrade:
    values = {
        "id": uuid4(),
        "course_name": "English 10",
        "letter_grade": "A-",
        "numeric_grade": 91.5,
        "course_color": "purple",
        "course_icon": "book.fill",
    }
    values.update(overrides)
    return WatchGrade(**values)


def test_context_round_trip_preserves_counts_and_fields() -> None:
    assignments = [make_assignment(), make_assignment(title="Essay", grade=88.0, is_submitted=True)]
    schedule = [make_entry(NOW), make_entry(NOW + timedelta(hours=1)), make_entry(NOW + timedelta(hours=2))]
    grades = [make_grade()]

    context = encode_context(assignments, schedule, grades)

    assert set(context) == {ASSIGNMENTS_KEY, SCHEDULE_KEY, GRADES_KEY}
    assert decode_collection(WatchAssignment, context[ASSIGNMENTS_KEY]) == assignments
    assert decode_collection(WatchScheduleEntry, context[SCHEDULE_KEY]) == schedule
    assert decode_collection(WatchGrade, context[GRADES_KEY]) == grades


def test_wire_format_uses_camel_case() -> None:
    payload = json.loads(encode_collection([make_grade()]))

    assert {"courseName", "letterGrade", "numericGrade", "courseColor", "courseIcon"} <= set(payload[0])


def test_empty_collection_encodes_as_empty_array() -> None:
    assert encode_collection([]) == b"[]"
    assert decode_collection(WatchGrade, b"[]") == []


def test_decode_accepts_parsed_lists() -> None:
    grade = make_grade()
    raw = json.loads(encode_collection([grade]))

    assert decode_collection(WatchGrade, raw) == [grade]


@pytest.mark.parametrize("raw", [b"not json", b'{"grades": []}', b'[{"courseName": "x"}]', 42])
def test_decode_rejects_malformed_payloads(raw) -> None:
    with pytest.raises(PayloadDecodeError):
        decode_collection(WatchGrade, raw)


def test_assignment_due_helpers() -> None:
    today = make_assignment(due_date=NOW.replace(hour=23))
    tomorrow = make_assignment(due_date=NOW + timedelta(days=1))
    overdue = make_assignment(due_date=NOW - timedelta(days=3))
    submitted = make_assignment(due_date=NOW - timedelta(days=3), is_submitted=True)

    assert today.is_due_today(NOW)
    assert tomorrow.is_due_tomorrow(NOW)
    assert overdue.is_overdue(NOW)
    assert overdue.days_until_due(NOW) == -3
    assert not submitted.is_overdue(NOW)


def test_schedule_entry_helpers() -> None:
    current = make_entry(NOW - timedelta(minutes=10))
    upcoming = make_entry(NOW + timedelta(minutes=30))

    assert current.is_currently_active(NOW)
    assert not current.is_upcoming(NOW)
    assert current.seconds_until_start(NOW) == 0
    assert upcoming.is_upcoming(NOW)
    assert upcoming.seconds_until_start(NOW) == 30 * 60
