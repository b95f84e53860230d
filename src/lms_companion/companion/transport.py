"""In-process application-context channel between phone and companion."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

from .receiver import ActivationState, CompanionSyncReceiver

logger = logging.getLogger(__name__)


class CompanionTransportError(RuntimeError):
    """Raised when the transport refuses a context update."""


class ContextTransport(Protocol):
    """Protocol for the phone-side transport used by the sender."""

    is_supported: bool
    is_paired: bool
    is_companion_installed: bool
    activation_state: ActivationState

    def update_application_context(self, context: Mapping[str, Any]) -> None:
        ...


class CompanionSession:
    """Latest-value store-and-forward channel.

    Only the most recent context is kept. While no companion is connected the
    context waits in :attr:`received_application_context` and is handed over
    when the companion activates; intermediate updates are coalesced.
    """

    def __init__(
        self,
        *,
        is_supported: bool = True,
        is_paired: bool = True,
        is_companion_installed: bool = True,
    ) -> None:
        self.is_supported = is_supported
        self.is_paired = is_paired
        self.is_companion_installed = is_companion_installed
        self.activation_state = ActivationState.NOT_ACTIVATED
        self.received_application_context: dict[str, Any] = {}
        self._receiver: CompanionSyncReceiver | None = None
        self._updates = 0

    @property
    def update_count(self) -> int:
        return self._updates

    @property
    def is_reachable(self) -> bool:
        return self._receiver is not None

    def activate(self, *, error: str | Exception | None = None) -> ActivationState:
        """Activate the phone side of the session."""

        if not self.is_supported:
            return self.activation_state
        if error is not None:
            logger.warning("Companion session activation failed", extra={"error": str(error)})
            self.activation_state = ActivationState.NOT_ACTIVATED
        else:
            self.activation_state = ActivationState.ACTIVATED
        return self.activation_state

    def deactivate(self) -> None:
        self.activation_state = ActivationState.INACTIVE

    def connect_receiver(
        self,
        receiver: CompanionSyncReceiver,
        *,
        error: str | Exception | None = None,
    ) -> None:
        """Activate the companion side and deliver any context waiting for it."""

        if not self.is_supported:
            receiver.activation_unsupported()
            return
        if error is not None:
            receiver.activation_completed(ActivationState.NOT_ACTIVATED, error=error)
            return
        self._receiver = receiver
        receiver.activation_completed(
            ActivationState.ACTIVATED,
            received_context=dict(self.received_application_context),
        )

    def disconnect_receiver(self) -> None:
        self._receiver = None

    def update_application_context(self, context: Mapping[str, Any]) -> None:
        if self.activation_state is not ActivationState.ACTIVATED:
            raise CompanionTransportError("session is not activated")
        self.received_application_context = dict(context)
        self._updates += 1
        if self._receiver is not None:
            self._receiver.receive_context(self.received_application_context)


__all__ = ["CompanionSession", "CompanionTransportError", "ContextTransport"]
