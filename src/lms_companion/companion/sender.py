"""Phone-side packaging of LMS data for the companion device."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Sequence

from ..catalog import Assignment, Course, GradeEntry
from .codec import encode_context
from .models import WatchAssignment, WatchGrade, WatchScheduleEntry
from .receiver import ActivationState
from .transport import ContextTransport

logger = logging.getLogger(__name__)


class CompanionSender:
    """Project catalog entities to companion records and push them.

    Only the latest context matters to the transport, so every send carries
    the full projection of all three collections.
    """

    def __init__(
        self,
        transport: ContextTransport,
        *,
        clock: Callable[[], datetime] | None = None,
        assignment_limit: int = 20,
        first_period_hour: int = 8,
        period_minutes: int = 50,
    ) -> None:
        self._transport = transport
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._assignment_limit = assignment_limit
        self._first_period_hour = first_period_hour
        self._period_minutes = period_minutes
        self.last_error: str | None = None
        self.last_send: datetime | None = None

    def project_assignments(self, assignments: Sequence[Assignment]) -> list[WatchAssignment]:
        """Unsubmitted assignments, soonest due first, capped at the limit."""

        pending = sorted(
            (item for item in assignments if not item.is_submitted),
            key=lambda item: item.due_date,
        )
        return [
            WatchAssignment(
                id=item.id,
                title=item.title,
                course_name=item.course_name,
                due_date=item.due_date,
                points=item.points,
                is_submitted=item.is_submitted,
                grade=item.grade,
            )
            for item in pending[: self._assignment_limit]
        ]

    def project_schedule(self, courses: Sequence[Course]) -> list[WatchScheduleEntry]:
        """Build one period per course starting at the first period of today.

        Courses have no timetable of their own, so each course gets an hourly
        slot in catalog order.
        """

        today = self._clock().replace(hour=0, minute=0, second=0, microsecond=0)
        entries: list[WatchScheduleEntry] = []
        for index, course in enumerate(courses):
            start = today + timedelta(hours=self._first_period_hour + index)
            entries.append(
                WatchScheduleEntry(
                    id=course.id,
                    course_name=course.title,
                    start_time=start,
                    end_time=start + timedelta(minutes=self._period_minutes),
                    room_number=course.room or str(100 + index * 10 + 1),
                )
            )
        return entries

    def project_grades(self, grades: Sequence[GradeEntry]) -> list[WatchGrade]:
        return [
            WatchGrade(
                id=grade.id,
                course_name=grade.course_name,
                letter_grade=grade.letter_grade,
                numeric_grade=grade.numeric_grade,
                course_color=grade.course_color,
                course_icon=grade.course_icon,
            )
            for grade in grades
        ]

    def send(
        self,
        assignments: Sequence[Assignment],
        courses: Sequence[Course],
        grades: Sequence[GradeEntry],
    ) -> bool:
        """Push a fresh context. Returns ``True`` when the transport accepted it."""

        transport = self._transport
        if not transport.is_supported:
            return False
        if transport.activation_state is not ActivationState.ACTIVATED:
            self.last_error = "Watch session not activated"
            return False
        if not transport.is_paired:
            self.last_error = "No watch paired"
            return False
        if not transport.is_companion_installed:
            self.last_error = "Watch app not installed"
            return False

        context = encode_context(
            self.project_assignments(assignments),
            self.project_schedule(courses),
            self.project_grades(grades),
        )

        try:
            transport.update_application_context(context)
        except Exception as exc:
            self.last_error = f"Failed to send: {exc}"
            logger.error("Error sending context to companion", extra={"error": str(exc)})
            return False

        self.last_send = self._clock()
        self.last_error = None
        logger.debug("Sent companion context", extra={"keys": sorted(context)})
        return True


__all__ = ["CompanionSender"]
