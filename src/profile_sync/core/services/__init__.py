"""Core services exports."""

from .auth import AccountService, AuthEventListener, GoTrueIdentityProvider
from .database.db_session import DbSessionService
from .profile import ProfileReconciler, ProfileStoreAdapter

__all__ = [
    "AccountService",
    "AuthEventListener",
    "DbSessionService",
    "GoTrueIdentityProvider",
    "ProfileReconciler",
    "ProfileStoreAdapter",
]
