"""Identity provider models: identities, sessions, auth events and flow results."""

import time
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from src.profile_sync.entities.profile import Profile


class AuthEvent(StrEnum):
    """Session state transitions reported by the identity provider."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"


class Identity(BaseModel):
    """Authenticated principal issued by the identity provider."""

    id: str = Field(description="Opaque, stable identity id")
    email: str = Field(default="", description="Email address known to the provider")

    @classmethod
    def from_provider(cls, payload: dict[str, Any]) -> "Identity":
        return cls(id=payload["id"], email=payload.get("email") or "")


class ProviderSession(BaseModel):
    """A provider-issued session carrying the signed-in identity."""

    access_token: str = Field(description="Bearer token for the session")
    refresh_token: str | None = Field(default=None, description="Refresh token")
    expires_at: int | None = Field(default=None, description="Absolute expiry timestamp")
    user: Identity | None = Field(default=None, description="Identity owning the session")

    @classmethod
    def from_provider(cls, payload: dict[str, Any]) -> "ProviderSession":
        expires_at = payload.get("expires_at")
        if expires_at is None and payload.get("expires_in") is not None:
            expires_at = int(time.time()) + int(payload["expires_in"])
        user = payload.get("user")
        return cls(
            access_token=payload["access_token"],
            refresh_token=payload.get("refresh_token"),
            expires_at=expires_at,
            user=Identity.from_provider(user) if user else None,
        )


class SignUpResult(BaseModel):
    """Outcome of a sign-up: either a reconciled profile or a pending confirmation."""

    identity: Identity | None = None
    profile: Profile | None = None
    needs_confirmation: bool = False


class SignInResult(BaseModel):
    """Outcome of a password sign-in."""

    identity: Identity | None = None
    profile: Profile | None = None
    needs_action: bool = False


class ProviderSignUp(BaseModel):
    """Raw provider answer to a sign-up request."""

    identity: Identity | None = None
    session: ProviderSession | None = None

    @property
    def needs_confirmation(self) -> bool:
        return self.session is None
