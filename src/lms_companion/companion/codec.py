"""Encoding of companion collections for the application-context payload."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Iterable, Mapping, Sequence, TypeVar

from pydantic import TypeAdapter, ValidationError

from .models import CompanionRecord, WatchAssignment, WatchGrade, WatchScheduleEntry

ASSIGNMENTS_KEY = "assignments"
SCHEDULE_KEY = "schedule"
GRADES_KEY = "grades"

CONTEXT_MODELS: dict[str, type[CompanionRecord]] = {
    ASSIGNMENTS_KEY: WatchAssignment,
    SCHEDULE_KEY: WatchScheduleEntry,
    GRADES_KEY: WatchGrade,
}

RecordT = TypeVar("RecordT", bound=CompanionRecord)

logger = logging.getLogger(__name__)


class PayloadDecodeError(ValueError):
    """Raised when a serialized collection cannot be decoded."""


@lru_cache(maxsize=None)
def _adapter(model: type[CompanionRecord]) -> TypeAdapter:
    return TypeAdapter(list[model])  # type: ignore[valid-type]


def encode_collection(records: Iterable[CompanionRecord]) -> bytes:
    """Serialize records to a UTF-8 JSON array using wire (camelCase) names."""

    items = list(records)
    if not items:
        return b"[]"
    return _adapter(type(items[0])).dump_json(items, by_alias=True)


def decode_collection(model: type[RecordT], raw: Any) -> list[RecordT]:
    """Decode a serialized collection of ``model`` records.

    ``raw`` may be JSON bytes/str or an already-parsed list.
    """

    adapter = _adapter(model)
    try:
        if isinstance(raw, (bytes, bytearray, str)):
            return adapter.validate_json(raw)
        if isinstance(raw, Sequence):
            return adapter.validate_python(list(raw))
    except ValidationError as exc:
        raise PayloadDecodeError(
            f"Malformed {model.__name__} collection: {exc.error_count()} error(s)"
        ) from exc
    raise PayloadDecodeError(f"Unsupported payload type {type(raw).__name__} for {model.__name__}")


def encode_context(
    assignments: Iterable[WatchAssignment],
    schedule: Iterable[WatchScheduleEntry],
    grades: Iterable[WatchGrade],
) -> dict[str, bytes]:
    """Build the three-key payload delivered to the companion device."""

    return {
        ASSIGNMENTS_KEY: encode_collection(assignments),
        SCHEDULE_KEY: encode_collection(schedule),
        GRADES_KEY: encode_collection(grades),
    }


def decode_context(context: Mapping[str, Any]) -> dict[str, list[CompanionRecord]]:
    """Decode every known key that is present and well formed; skip the rest."""

    decoded: dict[str, list[CompanionRecord]] = {}
    for key, model in CONTEXT_MODELS.items():
        if key not in context:
            continue
        try:
            decoded[key] = decode_collection(model, context[key])
        except PayloadDecodeError as exc:
            logger.debug("Skipping undecodable companion key", extra={"key": key, "error": str(exc)})
            continue
    return decoded


__all__ = [
    "ASSIGNMENTS_KEY",
    "CONTEXT_MODELS",
    "GRADES_KEY",
    "PayloadDecodeError",
    "SCHEDULE_KEY",
    "decode_collection",
    "decode_context",
    "encode_collection",
    "encode_context",
]
