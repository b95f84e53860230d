"""Builders for search-index entries describing catalog content."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Iterable

from ..catalog import Assignment, Catalog, Course, Quiz
from ..links import Destination, search_identifier_for

DESCRIPTION_LIMIT = 200


@dataclass(slots=True)
class SearchableItem:
    """A single entry in the system search index."""

    identifier: str
    domain: str
    title: str
    description: str
    subject: str
    keywords: list[str] = field(default_factory=list)
    expires_at: datetime | None = None
    due_date: datetime | None = None


def kind_domain(domain: str, kind: str) -> str:
    return f"{domain}.{kind}"


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


def _format_due(value: datetime) -> str:
    return value.strftime("%b %d, %Y %I:%M %p")


def course_item(course: Course, *, domain: str, now: datetime) -> SearchableItem:
    parts = [f"Taught by {course.teacher_name}" if course.teacher_name else "Course"]
    if course.description:
        parts.append(course.description)
    parts.append(_plural(len(course.modules), "module"))
    parts.append(f"{_plural(course.enrolled_student_count, 'student')} enrolled")
    if course.progress > 0:
        parts.append(f"{int(course.progress * 100)}% complete")

    keywords = ["course", "class", course.title, "LMS", "learning"]
    if course.teacher_name:
        keywords.append(course.teacher_name)
    keywords.extend(course.modules)
    keywords.extend(course.title.split())

    return SearchableItem(
        identifier=search_identifier_for(Destination.course(course.id)),
        domain=kind_domain(domain, "course"),
        title=course.title,
        description=" - ".join(parts),
        subject="Course",
        keywords=keywords,
        expires_at=now + timedelta(days=365),
    )


def assignment_item(assignment: Assignment, *, domain: str, now: datetime) -> SearchableItem:
    parts = [
        assignment.course_name,
        f"Due: {_format_due(assignment.due_date)}",
        _plural(assignment.points, "point"),
    ]
    if assignment.instructions:
        parts.append(assignment.instructions[:DESCRIPTION_LIMIT])
    if assignment.is_submitted:
        parts.append("Submitted")

    keywords = ["assignment", "homework", assignment.title, assignment.course_name, "LMS", "due"]
    if assignment.is_submitted:
        keywords.append("submitted")
    if assignment.is_overdue(now):
        keywords.append("overdue")
    keywords.extend(assignment.title.split())

    return SearchableItem(
        identifier=search_identifier_for(Destination.assignment(assignment.id)),
        domain=kind_domain(domain, "assignment"),
        title=assignment.title,
        description=" - ".join(parts),
        subject="Assignment",
        keywords=keywords,
        expires_at=assignment.due_date + timedelta(days=30),
        due_date=assignment.due_date,
    )


def quiz_item(quiz: Quiz, *, domain: str) -> SearchableItem:
    parts = [
        quiz.course_name,
        f"Due: {_format_due(quiz.due_date)}",
        _plural(quiz.question_count, "question"),
        f"{quiz.time_limit} min time limit",
    ]
    if quiz.is_completed:
        parts.append(f"Score: {int(quiz.score)}%" if quiz.score is not None else "Completed")

    keywords = ["quiz", "test", "exam", quiz.title, quiz.course_name, "LMS"]
    if quiz.is_completed:
        keywords.append("completed")
    keywords.extend(quiz.title.split())

    return SearchableItem(
        identifier=search_identifier_for(Destination.quiz(quiz.id)),
        domain=kind_domain(domain, "quiz"),
        title=quiz.title,
        description=" - ".join(parts),
        subject="Quiz",
        keywords=keywords,
        expires_at=quiz.due_date + timedelta(days=30),
        due_date=quiz.due_date,
    )


def build_items(catalog: Catalog, *, domain: str, now: datetime | None = None) -> list[SearchableItem]:
    current = now or datetime.now(timezone.utc)
    items: list[SearchableItem] = []
    items.extend(course_item(course, domain=domain, now=current) for course in catalog.courses)
    items.extend(
        assignment_item(assignment, domain=domain, now=current) for assignment in catalog.assignments
    )
    items.extend(quiz_item(quiz, domain=domain) for quiz in catalog.quizzes)
    return items


def content_domains(domain: str) -> Iterable[str]:
    return tuple(kind_domain(domain, kind) for kind in ("course", "assignment", "quiz"))


__all__ = [
    "SearchableItem",
    "assignment_item",
    "build_items",
    "content_domains",
    "course_item",
    "kind_domain",
    "quiz_item",
]
