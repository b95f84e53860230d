"""Root controller owning sign-in state and the deep-link router."""

from __future__ import annotations

import logging

from .links import DeepLinkRouter, NavigationState, PendingDeepLinkSlot, SearchActivity
from .links.parser import DEFAULT_SCHEME

logger = logging.getLogger(__name__)


class AppController:
    """Application root: ties the router's lifetime to the signed-in session."""

    def __init__(self, *, scheme: str = DEFAULT_SCHEME, navigation: NavigationState | None = None) -> None:
        self.navigation = navigation or NavigationState()
        self.user_id: str | None = None
        self.router = DeepLinkRouter(
            self.navigation,
            is_authenticated=lambda: self.is_authenticated,
            scheme=scheme,
            pending=PendingDeepLinkSlot(),
        )

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def sign_in(self, user_id: str) -> bool:
        """Mark the session signed in and replay any deferred deep link."""

        if not user_id or not user_id.strip():
            raise ValueError("user_id must not be empty")
        self.user_id = user_id.strip()
        logger.info("Signed in", extra={"user_id": self.user_id})
        return self.router.process_pending()

    def sign_out(self) -> None:
        logger.info("Signed out", extra={"user_id": self.user_id})
        self.user_id = None
        self.router.pending.clear()
        self.navigation.reset()

    def open_url(self, url: str) -> bool:
        return self.router.handle_url(url)

    def continue_activity(self, activity: SearchActivity) -> bool:
        return self.router.handle_activity(activity)


__all__ = ["AppController"]
