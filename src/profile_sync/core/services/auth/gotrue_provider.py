"""Supabase Auth (GoTrue) identity provider over HTTP."""

from typing import Any

import httpx
from loguru import logger

from src.profile_sync.core.errors import AuthError
from src.profile_sync.core.models.identity import (
    AuthEvent,
    Identity,
    ProviderSession,
    ProviderSignUp,
)
from src.profile_sync.core.reporting import ErrorReporter
from src.profile_sync.core.services.auth.identity_provider import IdentityProvider
from src.profile_sync.runtime.context import get_config


class GoTrueIdentityProvider(IdentityProvider):
    """Talks to the ``/auth/v1`` endpoints and tracks the current session.

    Session transitions (sign-in, sign-up with an immediate session, sign-out)
    are emitted to ``on_session_change`` subscribers after the request
    completes.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        reporter: ErrorReporter | None = None,
    ):
        provider_config = get_config().identity_provider
        self._base_url = provider_config.url.rstrip("/")
        self._api_key = provider_config.api_key
        self._client = client or httpx.AsyncClient(timeout=provider_config.timeout_seconds)
        self._session: ProviderSession | None = None
        super().__init__(reporter)

    @property
    def current_session(self) -> ProviderSession | None:
        return self._session

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        headers = {"apikey": self._api_key, "Content-Type": "application/json"}
        headers["Authorization"] = f"Bearer {access_token or self._api_key}"
        return headers

    async def _post(
        self,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
        access_token: str | None = None,
    ) -> dict[str, Any]:
        try:
            response = await self._client.post(
                f"{self._base_url}/auth/v1{path}",
                json=json,
                params=params,
                headers=self._headers(access_token),
            )
        except httpx.HTTPError as e:
            raise AuthError(f"Auth request to {path} failed: {e}") from e

        if response.is_error:
            raise _auth_error(response)

        if not response.content:
            return {}
        return response.json()

    async def sign_up(self, email: str, password: str) -> ProviderSignUp:
        payload = await self._post("/signup", json={"email": email, "password": password})

        if payload.get("access_token"):
            session = ProviderSession.from_provider(payload)
            self._set_session(AuthEvent.SIGNED_IN, session)
            return ProviderSignUp(identity=session.user, session=session)

        # Confirmation required: the provider answers with the bare user
        user = payload.get("user") or payload
        identity = Identity.from_provider(user) if user.get("id") else None
        logger.info("Sign-up for {} awaits confirmation", email)
        return ProviderSignUp(identity=identity, session=None)

    async def sign_in_with_password(self, email: str, password: str) -> Identity | None:
        payload = await self._post(
            "/token",
            json={"email": email, "password": password},
            params={"grant_type": "password"},
        )
        if not payload.get("access_token"):
            return None

        session = ProviderSession.from_provider(payload)
        self._set_session(AuthEvent.SIGNED_IN, session)
        return session.user

    async def sign_out(self) -> None:
        session = self._session
        if session is not None:
            await self._post("/logout", access_token=session.access_token)
        self._session = None
        self.emit(AuthEvent.SIGNED_OUT, None)

    async def refresh_session(self) -> ProviderSession:
        """Exchange the refresh token for a new session."""
        if self._session is None or not self._session.refresh_token:
            raise AuthError("No refresh token available")

        payload = await self._post(
            "/token",
            json={"refresh_token": self._session.refresh_token},
            params={"grant_type": "refresh_token"},
        )
        session = ProviderSession.from_provider(payload)
        self._set_session(AuthEvent.TOKEN_REFRESHED, session)
        return session

    def _set_session(self, event: AuthEvent, session: ProviderSession) -> None:
        self._session = session
        self.emit(event, session)

    async def aclose(self) -> None:
        await self._client.aclose()


def _auth_error(response: httpx.Response) -> AuthError:
    try:
        body = response.json()
    except ValueError:
        body = {}

    message = (
        body.get("error_description")
        or body.get("msg")
        or body.get("message")
        or response.reason_phrase
    )
    code = body.get("error_code") or body.get("error")
    return AuthError(message, status_code=response.status_code, code=code)
