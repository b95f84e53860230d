"""Deep-link parsing, deferral and navigation."""

from .destinations import Destination, DestinationKind
from .navigation import NavigationEvent, NavigationState
from .parser import (
    SearchActivity,
    destination_from_activity,
    destination_from_search_identifier,
    destination_from_url,
    parse_uuid,
    search_identifier_for,
    url_for,
)
from .pending import PendingDeepLinkSlot
from .router import DeepLinkRouter

__all__ = [
    "DeepLinkRouter",
    "Destination",
    "DestinationKind",
    "NavigationEvent",
    "NavigationState",
    "PendingDeepLinkSlot",
    "SearchActivity",
    "destination_from_activity",
    "destination_from_search_identifier",
    "destination_from_url",
    "parse_uuid",
    "search_identifier_for",
    "url_for",
]
