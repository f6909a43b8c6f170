from .profile_store import ProfileStoreAdapter
from .reconciler import ProfileReconciler

__all__ = ["ProfileStoreAdapter", "ProfileReconciler"]
