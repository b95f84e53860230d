"""Companion-side receiver for application-context payloads.

Data flow::

    phone CompanionSender --[application context]--> CompanionSyncReceiver

Each payload carries up to three serialized collections (``assignments``,
``schedule`` and ``grades``). Every key that decodes replaces its collection
wholesale; the full state is then written to the local defaults store so the
companion can show data on a cold start without its phone nearby.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Mapping

from ..storage import DefaultsStore
from .codec import (
    ASSIGNMENTS_KEY,
    GRADES_KEY,
    SCHEDULE_KEY,
    PayloadDecodeError,
    decode_collection,
    decode_context,
    encode_collection,
)
from .models import WatchAssignment, WatchGrade, WatchScheduleEntry

logger = logging.getLogger(__name__)

ASSIGNMENTS_STORAGE_KEY = "watch_assignments"
SCHEDULE_STORAGE_KEY = "watch_schedule"
GRADES_STORAGE_KEY = "watch_grades"
LAST_SYNC_STORAGE_KEY = "watch_last_sync"

Dispatch = Callable[[Callable[[], None]], None]


class ActivationState(str, Enum):
    NOT_ACTIVATED = "not_activated"
    INACTIVE = "inactive"
    ACTIVATED = "activated"


def run_inline(callback: Callable[[], None]) -> None:
    """Dispatch that runs the callback immediately on the calling thread."""

    callback()


def loop_dispatcher(loop: asyncio.AbstractEventLoop) -> Dispatch:
    """Dispatch that hops onto ``loop`` from any thread.

    Each call schedules independently; two payloads racing across the hop are
    applied in whichever order the loop runs them.
    """

    def _dispatch(callback: Callable[[], None]) -> None:
        loop.call_soon_threadsafe(callback)

    return _dispatch


class CompanionSyncReceiver:
    """Hold the companion's read-only copy of assignments, schedule and grades."""

    def __init__(
        self,
        store: DefaultsStore,
        *,
        clock: Callable[[], datetime] | None = None,
        dispatch: Dispatch | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._dispatch = dispatch or run_inline

        self.assignments: list[WatchAssignment] = []
        self.schedule: list[WatchScheduleEntry] = []
        self.grades: list[WatchGrade] = []
        self.last_sync: datetime | None = None
        self.sync_error: str | None = None

        self.load_from_storage()

    # persistence

    def load_from_storage(self) -> None:
        """Restore previously persisted collections; bad entries are left empty."""

        self.assignments = self._load_collection(ASSIGNMENTS_STORAGE_KEY, WatchAssignment)
        self.schedule = self._load_collection(SCHEDULE_STORAGE_KEY, WatchScheduleEntry)
        self.grades = self._load_collection(GRADES_STORAGE_KEY, WatchGrade)

        raw_timestamp = self._store.get(LAST_SYNC_STORAGE_KEY)
        if isinstance(raw_timestamp, (int, float)) and raw_timestamp > 0:
            self.last_sync = datetime.fromtimestamp(raw_timestamp, tz=timezone.utc)

    def _load_collection(self, key: str, model):
        raw = self._store.get(key)
        if raw is None:
            return []
        try:
            return decode_collection(model, raw)
        except PayloadDecodeError as exc:
            logger.warning("Discarding unreadable stored collection", extra={"key": key, "error": str(exc)})
            return []

    def save_to_storage(self) -> None:
        values: dict[str, Any] = {
            ASSIGNMENTS_STORAGE_KEY: encode_collection(self.assignments).decode("utf-8"),
            SCHEDULE_STORAGE_KEY: encode_collection(self.schedule).decode("utf-8"),
            GRADES_STORAGE_KEY: encode_collection(self.grades).decode("utf-8"),
        }
        if self.last_sync is not None:
            values[LAST_SYNC_STORAGE_KEY] = self.last_sync.timestamp()
        self._store.update(values)

    # context processing

    def receive_context(self, context: Mapping[str, Any]) -> None:
        """Entry point for transport callbacks; hops before touching state."""

        payload = dict(context)
        self._dispatch(lambda: self.apply_context(payload))

    def apply_context(self, context: Mapping[str, Any]) -> set[str]:
        """Apply a payload and return the keys that decoded.

        An empty or fully malformed payload changes nothing and persists
        nothing.
        """

        decoded = decode_context(context)
        if not decoded:
            logger.debug("Companion payload carried no decodable collections", extra={"keys": sorted(context)})
            return set()

        if ASSIGNMENTS_KEY in decoded:
            self.assignments = decoded[ASSIGNMENTS_KEY]  # type: ignore[assignment]
        if SCHEDULE_KEY in decoded:
            self.schedule = decoded[SCHEDULE_KEY]  # type: ignore[assignment]
        if GRADES_KEY in decoded:
            self.grades = decoded[GRADES_KEY]  # type: ignore[assignment]

        self.last_sync = self._clock()
        self.sync_error = None
        self.save_to_storage()

        logger.info(
            "Applied companion payload",
            extra={
                "keys": sorted(decoded),
                "assignments": len(self.assignments),
                "schedule": len(self.schedule),
                "grades": len(self.grades),
            },
        )
        return set(decoded)

    # session lifecycle

    def activation_completed(
        self,
        state: ActivationState,
        error: str | Exception | None = None,
        received_context: Mapping[str, Any] | None = None,
    ) -> None:
        """Handle the transport's activation callback.

        A failure is recorded as an advisory string; previously loaded data
        stays in place. A context that arrived while inactive is processed
        once the session is active.
        """

        if error is not None:
            message = f"Activation failed: {error}"
            self._dispatch(lambda: self._set_error(message))

        if state is ActivationState.ACTIVATED and received_context:
            self.receive_context(received_context)

    def activation_unsupported(self) -> None:
        self._dispatch(lambda: self._set_error("Companion link is not supported on this device"))

    def _set_error(self, message: str) -> None:
        logger.warning("Companion session error", extra={"error": message})
        self.sync_error = message

    def status(self) -> dict[str, Any]:
        return {
            "assignments": len(self.assignments),
            "schedule": len(self.schedule),
            "grades": len(self.grades),
            "last_sync": self.last_sync.isoformat() if self.last_sync else None,
            "sync_error": self.sync_error,
        }


__all__ = [
    "ASSIGNMENTS_STORAGE_KEY",
    "ActivationState",
    "CompanionSyncReceiver",
    "Dispatch",
    "GRADES_STORAGE_KEY",
    "LAST_SYNC_STORAGE_KEY",
    "SCHEDULE_STORAGE_KEY",
    "loop_dispatcher",
    "run_inline",
]
