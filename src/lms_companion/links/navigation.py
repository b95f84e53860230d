"""Shared navigation state observed by the app's screens."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable
from uuid import UUID, uuid4

from .destinations import Destination, DestinationKind

logger = logging.getLogger(__name__)

_FIELD_FOR_KIND: dict[DestinationKind, str] = {
    DestinationKind.ASSIGNMENTS: "deep_link_assignment_id",
    DestinationKind.GRADES: "deep_link_grade_id",
    # the schedule is shown on the home tab, which watches the assignment field
    DestinationKind.SCHEDULE: "deep_link_assignment_id",
    DestinationKind.COURSE: "deep_link_course_id",
    DestinationKind.ASSIGNMENT: "deep_link_assignment_id",
    DestinationKind.QUIZ: "deep_link_quiz_id",
    DestinationKind.TOOLS: "show_tools",
    DestinationKind.WELLNESS: "show_wellness",
    DestinationKind.SHARE_PLAY: "show_share_play",
    DestinationKind.RECOMMENDATIONS: "show_recommendations",
}

_TOKEN_KINDS = frozenset(
    {DestinationKind.ASSIGNMENTS, DestinationKind.GRADES, DestinationKind.SCHEDULE}
)


@dataclass(frozen=True, slots=True)
class NavigationEvent:
    """One navigation request, distinguishable from every other by its nonce."""

    destination: Destination
    field: str
    value: Any
    nonce: UUID
    occurred_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "destination": self.destination.to_dict(),
            "field": self.field,
            "value": str(self.value) if isinstance(self.value, UUID) else self.value,
            "nonce": str(self.nonce),
            "occurred_at": self.occurred_at.isoformat(),
        }


NavigationObserver = Callable[[NavigationEvent], None]


class NavigationState:
    """Mutable view state that tabs observe to react to deep links.

    Screen-level destinations store a freshly generated token so that
    observers keyed on value changes fire even when the same screen is
    requested twice. Each application is also published as a
    :class:`NavigationEvent` carrying its own nonce.
    """

    def __init__(
        self,
        *,
        history_size: int = 50,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._events: deque[NavigationEvent] = deque(maxlen=history_size)
        self._observers: list[NavigationObserver] = []
        self.reset()

    def reset(self) -> None:
        self.deep_link_assignment_id: UUID | None = None
        self.deep_link_grade_id: UUID | None = None
        self.deep_link_course_id: UUID | None = None
        self.deep_link_quiz_id: UUID | None = None
        self.show_tools = False
        self.show_wellness = False
        self.show_share_play = False
        self.show_recommendations = False

    def subscribe(self, observer: NavigationObserver) -> Callable[[], None]:
        """Register an observer; returns a callable that unsubscribes it."""

        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def apply(self, destination: Destination) -> NavigationEvent:
        field_name = _FIELD_FOR_KIND[destination.kind]
        value: Any
        if destination.kind in _TOKEN_KINDS:
            value = uuid4()
        elif destination.identifier is not None:
            value = destination.identifier
        else:
            value = True
        setattr(self, field_name, value)

        event = NavigationEvent(
            destination=destination,
            field=field_name,
            value=value,
            nonce=uuid4(),
            occurred_at=self._clock(),
        )
        self._events.append(event)
        logger.debug(
            "Applied navigation destination",
            extra={"kind": destination.kind.value, "field": field_name},
        )
        for observer in list(self._observers):
            observer(event)
        return event

    def drain_events(self) -> list[NavigationEvent]:
        events = list(self._events)
        self._events.clear()
        return events

    @property
    def pending_event_count(self) -> int:
        return len(self._events)

    def snapshot(self) -> dict[str, Any]:
        def _fmt(value: UUID | None) -> str | None:
            return str(value) if value is not None else None

        return {
            "deep_link_assignment_id": _fmt(self.deep_link_assignment_id),
            "deep_link_grade_id": _fmt(self.deep_link_grade_id),
            "deep_link_course_id": _fmt(self.deep_link_course_id),
            "deep_link_quiz_id": _fmt(self.deep_link_quiz_id),
            "show_tools": self.show_tools,
            "show_wellness": self.show_wellness,
            "show_share_play": self.show_share_play,
            "show_recommendations": self.show_recommendations,
        }


__all__ = ["NavigationEvent", "NavigationObserver", "NavigationState"]
