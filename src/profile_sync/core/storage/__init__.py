"""Client-scoped storage for pending registrations."""

from .kv_storage import (
    InMemoryKeyValueStorage,
    KeyValueStorage,
    RedisKeyValueStorage,
    get_kv_storage,
)
from .pending_registration import PendingRegistrationCache

__all__ = [
    "KeyValueStorage",
    "InMemoryKeyValueStorage",
    "RedisKeyValueStorage",
    "get_kv_storage",
    "PendingRegistrationCache",
]
