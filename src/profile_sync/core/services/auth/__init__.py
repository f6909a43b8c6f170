from .account_service import AccountService
from .gotrue_provider import GoTrueIdentityProvider
from .identity_provider import IdentityProvider, SessionEventEmitter, Subscription
from .listener import AuthEventListener, ListenerState

__all__ = [
    "AccountService",
    "AuthEventListener",
    "GoTrueIdentityProvider",
    "IdentityProvider",
    "ListenerState",
    "SessionEventEmitter",
    "Subscription",
]
