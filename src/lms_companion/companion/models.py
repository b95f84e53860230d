"""Companion-side records mirrored from the phone's domain entities."""

from __future__ import annotations

from datetime import datetime, timedelta
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _now() -> datetime:
    return datetime.now().astimezone()


def _align(value: datetime, now: datetime) -> tuple[datetime, datetime]:
    """Make ``value`` and ``now`` comparable, expressing ``value`` in now's zone."""

    if value.tzinfo is None and now.tzinfo is not None:
        return value, now.replace(tzinfo=None)
    if value.tzinfo is not None and now.tzinfo is None:
        return value.astimezone().replace(tzinfo=None), now
    if value.tzinfo is not None:
        return value.astimezone(now.tzinfo), now
    return value, now


class CompanionRecord(BaseModel):
    """Base for records sent over the companion channel (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class WatchAssignment(CompanionRecord):
    id: UUID
    title: str
    course_name: str
    due_date: datetime
    points: int
    is_submitted: bool = False
    grade: float | None = None

    def days_until_due(self, now: datetime | None = None) -> int:
        """Calendar days from today to the due day; negative when overdue."""

        due, current = _align(self.due_date, now or _now())
        return (due.date() - current.date()).days

    def is_due_today(self, now: datetime | None = None) -> bool:
        return self.days_until_due(now) == 0

    def is_due_tomorrow(self, now: datetime | None = None) -> bool:
        return self.days_until_due(now) == 1

    def is_overdue(self, now: datetime | None = None) -> bool:
        due, current = _align(self.due_date, now or _now())
        return not self.is_submitted and due < current


class WatchScheduleEntry(CompanionRecord):
    id: UUID
    course_name: str
    start_time: datetime
    end_time: datetime
    room_number: str

    def is_currently_active(self, now: datetime | None = None) -> bool:
        current = now or _now()
        start, at = _align(self.start_time, current)
        end, _ = _align(self.end_time, current)
        return start <= at <= end

    def is_upcoming(self, now: datetime | None = None) -> bool:
        start, current = _align(self.start_time, now or _now())
        return current < start

    def seconds_until_start(self, now: datetime | None = None) -> float:
        start, current = _align(self.start_time, now or _now())
        return max(timedelta(0), start - current).total_seconds()


class WatchGrade(CompanionRecord):
    id: UUID
    course_name: str
    letter_grade: str
    numeric_grade: float = Field(..., description="Percentage score for the course.")
    course_color: str = ""
    course_icon: str = ""


__all__ = ["CompanionRecord", "WatchAssignment", "WatchGrade", "WatchScheduleEntry"]
