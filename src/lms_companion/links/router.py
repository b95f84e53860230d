"""Dispatch of deep links onto the navigation state, gated on sign-in."""

from __future__ import annotations

import logging
from typing import Callable

from .destinations import Destination
from .navigation import NavigationEvent, NavigationState
from .parser import DEFAULT_SCHEME, SearchActivity, destination_from_activity, destination_from_url
from .pending import PendingDeepLinkSlot

logger = logging.getLogger(__name__)


class DeepLinkRouter:
    """Resolve URLs and search activities and apply them to navigation state.

    URLs that arrive while signed out are parked in the pending slot and
    replayed by :meth:`process_pending`. Search activities have no URL form to
    park, so they are dropped while signed out.
    """

    def __init__(
        self,
        navigation: NavigationState,
        *,
        is_authenticated: Callable[[], bool],
        scheme: str = DEFAULT_SCHEME,
        pending: PendingDeepLinkSlot | None = None,
    ) -> None:
        self._navigation = navigation
        self._is_authenticated = is_authenticated
        self._scheme = scheme
        self._pending = pending or PendingDeepLinkSlot()

    @property
    def pending(self) -> PendingDeepLinkSlot:
        return self._pending

    @property
    def scheme(self) -> str:
        return self._scheme

    def navigate(self, destination: Destination) -> NavigationEvent:
        return self._navigation.apply(destination)

    def handle_url(self, url: str) -> bool:
        """Return ``True`` when the URL was applied or deferred."""

        destination = destination_from_url(url, scheme=self._scheme)
        if destination is None:
            logger.debug("Ignoring unrecognized deep link", extra={"url": url})
            return False

        if not self._is_authenticated():
            self._pending.store(url)
            return True

        self.navigate(destination)
        logger.info("Handled deep link", extra={"url": url, "kind": destination.kind.value})
        return True

    def handle_activity(self, activity: SearchActivity) -> bool:
        destination = destination_from_activity(activity)
        if destination is None:
            return False

        if not self._is_authenticated():
            logger.info(
                "Dropping search activity received while signed out",
                extra={"kind": destination.kind.value},
            )
            return False

        self.navigate(destination)
        return True

    def process_pending(self) -> bool:
        """Replay the deferred URL, if any. Returns whether one was replayed."""

        url = self._pending.consume()
        if url is None:
            return False
        logger.debug("Replaying deferred deep link", extra={"url": url})
        self.handle_url(url)
        return True


__all__ = ["DeepLinkRouter"]
