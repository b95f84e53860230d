from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace
from typing import Any
from uuid import uuid4

import pytest

from lms_companion.app import AppController
from lms_companion.catalog import Assignment, Catalog, Course, GradeEntry
from lms_companion.companion import CompanionSender, CompanionSession, CompanionSyncReceiver, encode_collection
from lms_companion.companion.models import WatchGrade
from lms_companion.config import CompanionSettings
from lms_companion.tools import register_tools

NOW = datetime(2025, 5, 12, 7, 0, tzinfo=timezone.utc)


class StubTool:
    def __init__(self, fn, name):
        self.fn = fn
        self.name = name


class StubServer:
    def __init__(self) -> None:
        self._tools: dict[str, StubTool] = {}

    def tool(self, *args, **kwargs):
        provided_name = None
        if args and isinstance(args[0], str):
            provided_name = args[0]
        provided_name = kwargs.get("name", provided_name)

        def decorator(fn):
            tool_name = provided_name or fn.__name__
            tool = StubTool(fn, tool_name)
            self._tools[tool_name] = tool
            return tool

        return decorator


class StubCatalogLoader:
    def __init__(self, catalog: Catalog) -> None:
        self._catalog = catalog

    def load(self) -> Catalog:
        return self._catalog


class StubSearchIndex:
    def __init__(self) -> None:
        self.items: list[Any] = []
        self.deindexed: list[str] = []

    def search(self, query, *, limit=None):
        return [
            SimpleNamespace(
                identifier=item.identifier,
                to_dict=lambda item=item: {"identifier": item.identifier, "title": item.title},
            )
            for item in self.items
            if query.lower() in item.title.lower()
        ][:limit]

    def reindex(self, items, domains):
        self.deindexed.extend(domains)
        self.items = list(items)
        return len(self.items)

    def deindex_all(self, domains):
        self.deindexed.extend(domains)
        self.items = []


class MemoryStore:
    def __init__(self) -> None:
        self.values: dict[str, Any] = {}

    def get(self, key):
        return self.values.get(key)

    def set(self, key, value):
        self.values[key] = value

    def update(self, values):
        self.values.update(values)

    def remove(self, key):
        self.values.pop(key, None)


def make_catalog() -> Catalog:
    return Catalog(
        courses=[Course(id=uuid4(), title="Chemistry", teacher_name="Dr. Patel")],
        assignments=[
            Assignment(
                id=uuid4(),
                title="Titration Lab",
                course_name="Chemistry",
                due_date=NOW + timedelta(days=1),
                points=25,
            )
        ],
        grades=[GradeEntry(id=uuid4(), course_name="Chemistry", letter_grade="A", numeric_grade=96)],
    )


@pytest.fixture()
def harness(tmp_path: Path):
    settings = CompanionSettings(LMS_DEFAULTS_PATH=str(tmp_path / "defaults.json"))
    server = StubServer()
    app = AppController(scheme=settings.url_scheme)
    receiver = CompanionSyncReceiver(MemoryStore(), clock=lambda: NOW)
    session = CompanionSession()
    session.activate()
    session.connect_receiver(receiver)
    sender = CompanionSender(session, clock=lambda: NOW)
    index = StubSearchIndex()
    catalog = make_catalog()
    handles = register_tools(
        server,
        settings=settings,
        app=app,
        receiver=receiver,
        sender=sender,
        catalog_loader=StubCatalogLoader(catalog),
        search_index=index,
    )
    return SimpleNamespace(
        server=server,
        app=app,
        receiver=receiver,
        index=index,
        catalog=catalog,
        handles=handles,
    )


def test_all_tools_registered(harness) -> None:
    assert set(harness.server._tools) == {
        "open_url",
        "open_search_result",
        "open_destination",
        "sign_in",
        "sign_out",
        "navigation_state",
        "receive_companion_context",
        "companion_status",
        "push_companion_context",
        "search_content",
        "reindex_content",
    }


def test_open_url_defers_until_sign_in(harness) -> None:
    result = harness.handles.open_url.fn("app://grades")

    assert result["handled"] is True
    assert result["deferred"] is True
    assert result["pending_url"] == "app://grades"

    signed_in = harness.handles.sign_in.fn("student-42")
    assert signed_in["replayed_pending"] is True
    assert signed_in["state"]["deep_link_grade_id"] is not None
    assert signed_in["pending_url"] is None


def test_open_destination_builds_url(harness) -> None:
    harness.handles.sign_in.fn("student-42")
    course_id = harness.catalog.courses[0].id

    result = harness.handles.open_destination.fn("course", str(course_id))

    assert result["url"] == f"app://course/{course_id}"
    assert result["state"]["deep_link_course_id"] == str(course_id)


@pytest.mark.parametrize(("kind", "identifier"), [("calendar", None), ("quiz", None), ("quiz", "nope")])
def test_open_destination_rejects_bad_input(harness, kind, identifier) -> None:
    with pytest.raises(ValueError):
        harness.handles.open_destination.fn(kind, identifier)


def test_search_result_dropped_when_signed_out(harness) -> None:
    identifier = f"assignment:{harness.catalog.assignments[0].id}"

    assert harness.handles.open_search_result.fn(identifier)["handled"] is False

    harness.handles.sign_in.fn("student-42")
    result = harness.handles.open_search_result.fn(identifier)
    assert result["handled"] is True
    assert result["state"]["deep_link_assignment_id"] == str(harness.catalog.assignments[0].id)


def test_search_result_with_trailing_newline_not_handled(harness) -> None:
    harness.handles.sign_in.fn("student-42")

    result = harness.handles.open_search_result.fn(f"quiz:{uuid4()}\n")

    assert result["handled"] is False


def test_navigation_state_drains_events(harness) -> None:
    harness.handles.sign_in.fn("student-42")
    harness.handles.open_url.fn("app://assignments")
    harness.handles.open_url.fn("app://assignments")

    assert harness.handles.navigation_state.fn()["pending_events"] == 2
    drained = harness.handles.navigation_state.fn(drain=True)["events"]
    assert len({event["value"] for event in drained}) == 2
    assert harness.handles.navigation_state.fn()["pending_events"] == 0


def test_receive_companion_context(harness) -> None:
    grade = WatchGrade(id=uuid4(), course_name="Art", letter_grade="A", numeric_grade=97)

    result = harness.handles.receive_companion_context.fn(
        {"grades": encode_collection([grade]).decode("utf-8"), "schedule": "garbage"}
    )

    assert result["applied_keys"] == ["grades"]
    assert result["grades"] == 1
    assert harness.handles.companion_status.fn()["last_sync"] == NOW.isoformat()


def test_push_companion_context(harness) -> None:
    result = harness.handles.push_companion_context.fn()

    assert result["sent"] is True
    assert result["error"] is None
    assert result["companion"]["assignments"] == 1
    assert harness.receiver.grades[0].course_name == "Chemistry"


def test_reindex_and_search(harness) -> None:
    summary = harness.handles.reindex_content.fn()
    assert summary["indexed"] == 2

    results = harness.handles.search_content.fn("titration")
    assignment_id = harness.catalog.assignments[0].id
    assert results == [
        {
            "identifier": f"assignment:{assignment_id}",
            "title": "Titration Lab",
            "url": f"app://assignment/{assignment_id}",
        }
    ]


def test_sign_out_clears_index(harness) -> None:
    harness.handles.reindex_content.fn()
    harness.handles.sign_in.fn("student-42")

    payload = harness.handles.sign_out.fn()

    assert payload["authenticated"] is False
    assert harness.index.items == []


def test_search_requires_index(tmp_path: Path) -> None:
    server = StubServer()
    handles = register_tools(
        server,
        settings=CompanionSettings(),
        app=AppController(),
        receiver=CompanionSyncReceiver(MemoryStore()),
        sender=None,
        catalog_loader=StubCatalogLoader(Catalog()),
        search_index=None,
    )

    with pytest.raises(RuntimeError):
        handles.search_content.fn("anything")
    with pytest.raises(RuntimeError):
        handles.push_companion_context.fn()
