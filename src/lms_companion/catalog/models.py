"""Phone-side domain entities fetched from the LMS backend."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class Course(BaseModel):
    """A course the signed-in user is enrolled in or teaches."""

    id: UUID
    title: str = Field(..., description="Display title of the course.")
    teacher_name: str = ""
    description: str = ""
    modules: list[str] = Field(default_factory=list, description="Module titles in order.")
    enrolled_student_count: int = 0
    progress: float = Field(default=0.0, ge=0.0, le=1.0)
    icon_system_name: str = "book"
    room: str | None = None

    @field_validator("title")
    @classmethod
    def _normalize_title(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Course title must not be empty")
        return normalized

    @field_validator("modules", mode="before")
    @classmethod
    def _ensure_list(cls, value: Any):  # type: ignore[override]
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return list(value)
        raise TypeError("Course modules must be a sequence of titles")


class Assignment(BaseModel):
    id: UUID
    title: str
    course_name: str
    due_date: datetime
    points: int = 0
    is_submitted: bool = False
    grade: float | None = None
    instructions: str = ""

    def is_overdue(self, now: datetime) -> bool:
        return not self.is_submitted and self.due_date < now


class Quiz(BaseModel):
    id: UUID
    title: str
    course_name: str
    due_date: datetime
    question_count: int = 0
    time_limit: int = Field(default=0, description="Time limit in minutes.")
    is_completed: bool = False
    score: float | None = None


class GradeEntry(BaseModel):
    id: UUID
    course_name: str
    letter_grade: str
    numeric_grade: float
    course_color: str = "blue"
    course_icon: str = "book"


class Catalog(BaseModel):
    """Everything the phone has loaded for the current user."""

    courses: list[Course] = Field(default_factory=list)
    assignments: list[Assignment] = Field(default_factory=list)
    quizzes: list[Quiz] = Field(default_factory=list)
    grades: list[GradeEntry] = Field(default_factory=list)

    def merge(self, other: "Catalog") -> "Catalog":
        """Combine two catalogs; entries from ``other`` win on id collisions."""

        def _merge(left: list, right: list) -> list:
            by_id = {item.id: item for item in left}
            by_id.update({item.id: item for item in right})
            return list(by_id.values())

        return Catalog(
            courses=_merge(self.courses, other.courses),
            assignments=_merge(self.assignments, other.assignments),
            quizzes=_merge(self.quizzes, other.quizzes),
            grades=_merge(self.grades, other.grades),
        )

    def summary(self) -> dict[str, int]:
        return {
            "courses": len(self.courses),
            "assignments": len(self.assignments),
            "quizzes": len(self.quizzes),
            "grades": len(self.grades),
        }


__all__ = ["Assignment", "Catalog", "Course", "GradeEntry", "Quiz"]
