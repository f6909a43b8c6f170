"""Profile reconciliation for externally authenticated identities.

Keeps exactly one profile row per identity issued by the auth provider,
created at sign-up or when a session first appears, and merges registration
fields collected before the identity was confirmed.
"""

__version__ = "0.1.0"
