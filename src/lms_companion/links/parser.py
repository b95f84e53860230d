"""Parsers turning deep-link URLs and search activities into destinations."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import SplitResult, urlsplit
from uuid import UUID

from .destinations import Destination, DestinationKind

DEFAULT_SCHEME = "app"

SEARCHABLE_ITEM_ACTION_TYPE = "search.item.open"
SEARCHABLE_ITEM_IDENTIFIER_KEY = "searchable_item_identifier"

_UUID_PATTERN = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)

_SEARCH_KINDS = {
    "course": DestinationKind.COURSE,
    "assignment": DestinationKind.ASSIGNMENT,
    "quiz": DestinationKind.QUIZ,
}


@dataclass(slots=True)
class SearchActivity:
    """A search-result continuation delivered by the platform."""

    activity_type: str
    user_info: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def for_identifier(cls, identifier: str) -> "SearchActivity":
        return cls(
            activity_type=SEARCHABLE_ITEM_ACTION_TYPE,
            user_info={SEARCHABLE_ITEM_IDENTIFIER_KEY: identifier},
        )


def parse_uuid(text: str) -> UUID | None:
    """Return a UUID for the canonical hyphenated form, otherwise ``None``."""

    if not isinstance(text, str) or not _UUID_PATTERN.fullmatch(text):
        return None
    return UUID(text)


def destination_from_url(url: str | SplitResult, *, scheme: str = DEFAULT_SCHEME) -> Destination | None:
    """Parse ``scheme://family[/uuid]`` into a destination.

    Returns ``None`` for a foreign scheme, an unknown family, or an
    identifier family whose first path segment is not a UUID. Trailing path
    segments are ignored for families without identifier.
    """

    try:
        parts = url if isinstance(url, SplitResult) else urlsplit(url)
    except (TypeError, ValueError):
        return None

    if parts.scheme.lower() != scheme.lower():
        return None

    host = parts.hostname or ""
    try:
        kind = DestinationKind(host)
    except ValueError:
        return None

    if not kind.requires_identifier:
        return Destination(kind)

    segments = [segment for segment in parts.path.split("/") if segment]
    if not segments:
        return None
    identifier = parse_uuid(segments[0])
    if identifier is None:
        return None
    return Destination(kind, identifier)


def destination_from_search_identifier(identifier: str) -> Destination | None:
    """Parse a search-index identifier of the form ``kind:uuid``."""

    if not isinstance(identifier, str):
        return None
    components = identifier.split(":", 1)
    if len(components) != 2:
        return None
    kind_text, id_part = components
    uuid_value = parse_uuid(id_part)
    if uuid_value is None:
        return None
    kind = _SEARCH_KINDS.get(kind_text)
    if kind is None:
        return None
    return Destination(kind, uuid_value)


def destination_from_activity(activity: SearchActivity) -> Destination | None:
    """Parse a search activity; non-search activities never match."""

    if activity.activity_type != SEARCHABLE_ITEM_ACTION_TYPE:
        return None
    identifier = activity.user_info.get(SEARCHABLE_ITEM_IDENTIFIER_KEY)
    if not isinstance(identifier, str):
        return None
    return destination_from_search_identifier(identifier)


def url_for(destination: Destination, *, scheme: str = DEFAULT_SCHEME) -> str:
    """Build the canonical deep-link URL for a destination."""

    base = f"{scheme}://{destination.kind.value}"
    if destination.identifier is None:
        return base
    return f"{base}/{destination.identifier}"


def search_identifier_for(destination: Destination) -> str:
    """Build the ``kind:uuid`` search identifier for an entity destination."""

    if destination.identifier is None:
        raise ValueError(f"Destination '{destination.kind.value}' has no search identifier")
    return f"{destination.kind.value}:{destination.identifier}"


__all__ = [
    "DEFAULT_SCHEME",
    "SEARCHABLE_ITEM_ACTION_TYPE",
    "SEARCHABLE_ITEM_IDENTIFIER_KEY",
    "SearchActivity",
    "destination_from_activity",
    "destination_from_search_identifier",
    "destination_from_url",
    "parse_uuid",
    "search_identifier_for",
    "url_for",
]
