"""Identity and registration models."""

from .identity import (
    AuthEvent,
    Identity,
    ProviderSession,
    ProviderSignUp,
    SignInResult,
    SignUpResult,
)
from .registration import PendingRegistration, RegistrationFields

__all__ = [
    "AuthEvent",
    "Identity",
    "ProviderSession",
    "ProviderSignUp",
    "SignInResult",
    "SignUpResult",
    "PendingRegistration",
    "RegistrationFields",
]
