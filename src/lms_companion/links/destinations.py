"""Typed navigation targets resolved from deep links."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class DestinationKind(str, Enum):
    """Destination families addressable by a deep link."""

    ASSIGNMENTS = "assignments"
    GRADES = "grades"
    SCHEDULE = "schedule"
    TOOLS = "tools"
    WELLNESS = "wellness"
    SHARE_PLAY = "shareplay"
    RECOMMENDATIONS = "recommendations"
    COURSE = "course"
    ASSIGNMENT = "assignment"
    QUIZ = "quiz"

    @property
    def requires_identifier(self) -> bool:
        return self in IDENTIFIER_KINDS


IDENTIFIER_KINDS = frozenset(
    {DestinationKind.COURSE, DestinationKind.ASSIGNMENT, DestinationKind.QUIZ}
)


@dataclass(frozen=True, slots=True)
class Destination:
    """A single navigation target.

    Course, assignment and quiz destinations carry the entity identifier; every
    other kind is a screen-level target without payload.
    """

    kind: DestinationKind
    identifier: UUID | None = None

    def __post_init__(self) -> None:
        kind = DestinationKind(self.kind)
        object.__setattr__(self, "kind", kind)
        if kind.requires_identifier and self.identifier is None:
            raise ValueError(f"Destination '{kind.value}' requires an identifier")
        if not kind.requires_identifier and self.identifier is not None:
            raise ValueError(f"Destination '{kind.value}' does not take an identifier")
        if self.identifier is not None and not isinstance(self.identifier, UUID):
            raise TypeError("Destination identifier must be a UUID")

    @classmethod
    def assignments(cls) -> "Destination":
        return cls(DestinationKind.ASSIGNMENTS)

    @classmethod
    def grades(cls) -> "Destination":
        return cls(DestinationKind.GRADES)

    @classmethod
    def schedule(cls) -> "Destination":
        return cls(DestinationKind.SCHEDULE)

    @classmethod
    def tools(cls) -> "Destination":
        return cls(DestinationKind.TOOLS)

    @classmethod
    def wellness(cls) -> "Destination":
        return cls(DestinationKind.WELLNESS)

    @classmethod
    def share_play(cls) -> "Destination":
        return cls(DestinationKind.SHARE_PLAY)

    @classmethod
    def recommendations(cls) -> "Destination":
        return cls(DestinationKind.RECOMMENDATIONS)

    @classmethod
    def course(cls, identifier: UUID) -> "Destination":
        return cls(DestinationKind.COURSE, identifier)

    @classmethod
    def assignment(cls, identifier: UUID) -> "Destination":
        return cls(DestinationKind.ASSIGNMENT, identifier)

    @classmethod
    def quiz(cls, identifier: UUID) -> "Destination":
        return cls(DestinationKind.QUIZ, identifier)

    def to_dict(self) -> dict[str, str | None]:
        return {
            "kind": self.kind.value,
            "identifier": str(self.identifier) if self.identifier is not None else None,
        }


__all__ = ["Destination", "DestinationKind", "IDENTIFIER_KINDS"]
