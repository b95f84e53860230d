from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import pytest

from lms_companion.catalog import Assignment, Course, GradeEntry
from lms_companion.companion import (
    ActivationState,
    CompanionSender,
    CompanionSession,
    CompanionSyncReceiver,
    WatchAssignment,
    decode_collection,
)

NOW = datetime(2025, 2, 3, 6, 0, tzinfo=timezone.utc)


class MemoryStore:
    def __init__(self) -> None:
        self.values: dict[str, Any] = {}

    def get(self, key: str) -> Any | None:
        return self.values.get(key)

    def set(self, key: str, value: Any) -> None:
        self.values[key] = value

    def update(self, values: dict[str, Any]) -> None:
        self.values.update(values)

    def remove(self, key: str) -> None:
        self.values.pop(key, None)


def make_assignments(count: int) -> list[Assignment]:
    return [
        Assignment(
            id=uuid4(),
            title=f"Problem set {index}",
            course_name="Algebra II",
            due_date=NOW + timedelta(days=count - index),
            points=10,
            is_submitted=index % 2 == 0,
        )
        for index in range(count)
    ]


def make_courses() -> list[Course]:
    return [
        Course(id=uuid4(), title="English 10", teacher_name="Ms. Rivera"),
        Course(id=uuid4(), title="Biology", teacher_name="Mr. Chen", room="Lab 2"),
    ]


def make_grades() -> list[GradeEntry]:
    return [GradeEntry(id=uuid4(), course_name="Biology", letter_grade="B+", numeric_grade=88)]


def active_session() -> CompanionSession:
    session = CompanionSession()
    session.activate()
    return session


def test_assignments_filtered_sorted_and_capped() -> None:
    sender = CompanionSender(active_session(), clock=lambda: NOW, assignment_limit=3)

    projected = sender.project_assignments(make_assignments(10))

    assert len(projected) == 3
    assert all(not item.is_submitted for item in projected)
    due_dates = [item.due_date for item in projected]
    assert due_dates == sorted(due_dates)


def test_schedule_uses_hourly_slots() -> None:
    sender = CompanionSender(active_session(), clock=lambda: NOW)

    schedule = sender.project_schedule(make_courses())

    assert schedule[0].start_time == NOW.replace(hour=8)
    assert schedule[0].end_time - schedule[0].start_time == timedelta(minutes=50)
    assert schedule[1].start_time == NOW.replace(hour=9)
    assert schedule[0].room_number == "101"
    assert schedule[1].room_number == "Lab 2"


def test_send_delivers_latest_context_to_receiver() -> None:
    session = active_session()
    receiver = CompanionSyncReceiver(MemoryStore(), clock=lambda: NOW)
    session.connect_receiver(receiver)
    sender = CompanionSender(session, clock=lambda: NOW)

    assert sender.send(make_assignments(4), make_courses(), make_grades()) is True

    assert sender.last_error is None
    assert sender.last_send == NOW
    assert len(receiver.assignments) == 2
    assert len(receiver.schedule) == 2
    assert receiver.grades[0].letter_grade == "B+"
    assert receiver.last_sync == NOW


def test_context_waits_until_receiver_activates() -> None:
    session = active_session()
    sender = CompanionSender(session, clock=lambda: NOW)
    sender.send(make_assignments(2), [], [])
    sender.send(make_assignments(6), make_courses(), make_grades())

    waiting = decode_collection(WatchAssignment, session.received_application_context["assignments"])
    assert len(waiting) == 3

    receiver = CompanionSyncReceiver(MemoryStore(), clock=lambda: NOW)
    session.connect_receiver(receiver)

    assert len(receiver.assignments) == 3
    assert len(receiver.grades) == 1


@pytest.mark.parametrize(
    ("session_kwargs", "activate", "expected_error"),
    [
        ({}, False, "Watch session not activated"),
        ({"is_paired": False}, True, "No watch paired"),
        ({"is_companion_installed": False}, True, "Watch app not installed"),
    ],
)
def test_send_guards(session_kwargs, activate, expected_error) -> None:
    session = CompanionSession(**session_kwargs)
    if activate:
        session.activate()
    sender = CompanionSender(session, clock=lambda: NOW)

    assert sender.send([], [], []) is False
    assert sender.last_error == expected_error
    assert session.update_count == 0


def test_unsupported_transport_is_silent() -> None:
    sender = CompanionSender(CompanionSession(is_supported=False), clock=lambda: NOW)

    assert sender.send([], [], []) is False
    assert sender.last_error is None


def test_transport_failure_is_recorded() -> None:
    class FailingTransport:
        is_supported = True
        is_paired = True
        is_companion_installed = True
        activation_state = ActivationState.ACTIVATED

        def update_application_context(self, context):
            raise RuntimeError("payload too large")

    sender = CompanionSender(FailingTransport(), clock=lambda: NOW)

    assert sender.send(make_assignments(1), [], []) is False
    assert sender.last_error == "Failed to send: payload too large"
    assert sender.last_send is None


def test_receiver_activation_failure_reported() -> None:
    session = active_session()
    receiver = CompanionSyncReceiver(MemoryStore(), clock=lambda: NOW)

    session.connect_receiver(receiver, error="bluetooth off")

    assert receiver.sync_error == "Activation failed: bluetooth off"
    assert session.is_reachable is False
