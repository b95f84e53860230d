"""Single-slot holder for a deep link deferred until sign-in."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class PendingDeepLinkSlot:
    """Remembers at most one deferred deep-link URL.

    A later ``store`` overwrites the earlier link; there is no expiry. All
    access happens on the navigation context, so no locking is done here.
    """

    def __init__(self) -> None:
        self._url: str | None = None

    @property
    def has_pending(self) -> bool:
        return self._url is not None

    def peek(self) -> str | None:
        return self._url

    def store(self, url: str) -> None:
        if self._url is not None and self._url != url:
            logger.debug("Replacing pending deep link", extra={"discarded_url": self._url})
        self._url = url
        logger.debug("Deferred deep link until sign-in", extra={"url": url})

    def consume(self) -> str | None:
        """Return the pending URL and clear the slot."""

        url, self._url = self._url, None
        return url

    def clear(self) -> None:
        self._url = None


__all__ = ["PendingDeepLinkSlot"]
