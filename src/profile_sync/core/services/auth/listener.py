"""Reconciles profiles as the identity provider reports session changes."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from enum import StrEnum

from loguru import logger

from src.profile_sync.core.models.identity import AuthEvent, Identity, ProviderSession
from src.profile_sync.core.reporting import ErrorReporter, LoguruErrorReporter
from src.profile_sync.core.services.auth.identity_provider import (
    IdentityProvider,
    Subscription,
)
from src.profile_sync.core.services.profile.profile_store import ProfileStoreAdapter
from src.profile_sync.core.services.profile.reconciler import ProfileReconciler


class ListenerState(StrEnum):
    NO_SESSION = "NoSession"
    SESSION_ACTIVE = "SessionActive"


class AuthEventListener:
    """Subscribes to session changes and reconciles on every active session.

    Work triggered by an event runs in a background task so the provider's
    event delivery never waits on the profile store. Failures inside that
    task are reported and never escape.

    Usage:
        listener = AuthEventListener(provider, reconciler, store).start()
        ...
        await listener.stop()
    """

    def __init__(
        self,
        provider: IdentityProvider,
        reconciler: ProfileReconciler,
        store: ProfileStoreAdapter,
        reporter: ErrorReporter | None = None,
    ) -> None:
        self._provider = provider
        self._reconciler = reconciler
        self._store = store
        self._reporter = reporter or LoguruErrorReporter()
        self._subscription: Subscription | None = None
        self._tasks: set[asyncio.Task] = set()
        self.state = ListenerState.NO_SESSION

    @property
    def running(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def start(self) -> AuthEventListener:
        """Subscribe to the provider; a listener can only be started once."""
        if self._subscription is not None:
            raise RuntimeError("Auth event listener already started")

        self._subscription = self._provider.on_session_change(self._on_session_change)
        logger.info("Auth event listener started")
        return self

    async def stop(self) -> None:
        """Unsubscribe and wait for in-flight reconciliations to finish."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
        await self.drain()
        logger.info("Auth event listener stopped")

    async def drain(self) -> None:
        """Wait for all reconciliations scheduled so far."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _on_session_change(self, event: AuthEvent, session: ProviderSession | None) -> None:
        try:
            if session is None or session.user is None:
                self.state = ListenerState.NO_SESSION
                logger.debug("Ignoring session-less event {}", event)
                return

            self.state = ListenerState.SESSION_ACTIVE
            task = asyncio.get_running_loop().create_task(
                self._handle_session(event, session.user)
            )
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        except Exception as e:
            self._reporter.report(e, operation="auth_listener.dispatch", event=str(event))

    async def _handle_session(self, event: AuthEvent, identity: Identity) -> None:
        try:
            await self._reconciler.reconcile(identity)
            logger.info("Profile reconciled for {} after {}", identity.id, event)
        except Exception as e:
            self._reporter.report(
                e, operation="auth_listener.reconcile", event=str(event), identity_id=identity.id
            )

        await self._store.update_last_active(identity.id, datetime.now(UTC))
