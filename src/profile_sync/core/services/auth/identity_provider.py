"""Identity provider interface and session-change subscriptions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from src.profile_sync.core.models.identity import (
    AuthEvent,
    Identity,
    ProviderSession,
    ProviderSignUp,
)
from src.profile_sync.core.reporting import ErrorReporter, LoguruErrorReporter

SessionChangeHandler = Callable[[AuthEvent, ProviderSession | None], None]


class Subscription:
    """Handle returned by ``on_session_change``; unsubscribing is idempotent."""

    def __init__(self, emitter: SessionEventEmitter, handler: SessionChangeHandler):
        self._emitter = emitter
        self._handler = handler
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._emitter._remove(self._handler)


class SessionEventEmitter:
    """Delivers session transitions to subscribed handlers.

    A failing handler is reported and skipped; it never stops delivery to the
    remaining handlers or to later events.
    """

    def __init__(self, reporter: ErrorReporter | None = None) -> None:
        self._handlers: list[SessionChangeHandler] = []
        self._reporter = reporter or LoguruErrorReporter()

    def on_session_change(self, handler: SessionChangeHandler) -> Subscription:
        self._handlers.append(handler)
        return Subscription(self, handler)

    def _remove(self, handler: SessionChangeHandler) -> None:
        try:
            self._handlers.remove(handler)
        except ValueError:
            pass

    def emit(self, event: AuthEvent, session: ProviderSession | None) -> None:
        for handler in list(self._handlers):
            try:
                handler(event, session)
            except Exception as e:
                self._reporter.report(
                    e, operation="session_event.handler", event=str(event)
                )


class IdentityProvider(SessionEventEmitter, ABC):
    """External authentication service the profiles are reconciled against."""

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> ProviderSignUp:
        """Create an identity.

        Returns:
            The identity and, unless confirmation is required, its session
        """

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> Identity | None:
        """Authenticate with email and password.

        Returns:
            The identity, or None when the provider requires a further step

        Raises:
            AuthError: If the provider rejects the credentials
        """

    @abstractmethod
    async def sign_out(self) -> None:
        """End the current session."""
